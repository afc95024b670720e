# stagepass/domain/state_machine.py

from enum import Enum
from typing import Dict, Set

from stagepass.domain.exceptions import InvalidStateTransitionError


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingAttemptState(str, Enum):
    REQUESTED = "REQUESTED"
    VALIDATING = "VALIDATING"
    RESERVING = "RESERVING"
    RECORDING = "RECORDING"
    COMPENSATING = "COMPENSATING"
    COMMITTED = "COMMITTED"
    REJECTED = "REJECTED"


class BookingAttemptStateMachine:
    """
    Lifecycle controller for a single booking attempt.
    Defines the legal state transitions.
    """

    _ALLOWED_TRANSITIONS: Dict[BookingAttemptState, Set[BookingAttemptState]] = {
        BookingAttemptState.REQUESTED: {
            BookingAttemptState.VALIDATING,
        },
        BookingAttemptState.VALIDATING: {
            BookingAttemptState.RESERVING,
            BookingAttemptState.COMMITTED,
            BookingAttemptState.REJECTED,
        },
        BookingAttemptState.RESERVING: {
            BookingAttemptState.RECORDING,
            BookingAttemptState.REJECTED,
        },
        BookingAttemptState.RECORDING: {
            BookingAttemptState.COMMITTED,
            BookingAttemptState.COMPENSATING,
        },
        BookingAttemptState.COMPENSATING: {
            BookingAttemptState.COMMITTED,
            BookingAttemptState.REJECTED,
        },
        BookingAttemptState.COMMITTED: set(),
        BookingAttemptState.REJECTED: set(),
    }

    @classmethod
    def can_transition(
        cls,
        from_state: BookingAttemptState,
        to_state: BookingAttemptState,
    ) -> bool:
        """
        Returns True if transition is allowed.
        """
        cls._ensure_valid_state(from_state)
        cls._ensure_valid_state(to_state)

        return to_state in cls._ALLOWED_TRANSITIONS.get(from_state, set())

    @classmethod
    def validate_transition(
        cls,
        from_state: BookingAttemptState,
        to_state: BookingAttemptState,
    ) -> None:
        """
        Raises InvalidStateTransitionError if transition is illegal.
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(
                from_state=from_state.value,
                to_state=to_state.value,
            )

    @classmethod
    def is_terminal(cls, state: BookingAttemptState) -> bool:
        cls._ensure_valid_state(state)
        return len(cls._ALLOWED_TRANSITIONS.get(state, set())) == 0

    @classmethod
    def get_allowed_transitions(
        cls, state: BookingAttemptState
    ) -> Set[BookingAttemptState]:
        cls._ensure_valid_state(state)
        return cls._ALLOWED_TRANSITIONS.get(state, set())

    @staticmethod
    def _ensure_valid_state(state: BookingAttemptState) -> None:
        if not isinstance(state, BookingAttemptState):
            raise TypeError(
                f"Expected BookingAttemptState, got {type(state)}"
            )
