# tests/unit/test_state_machine.py

import pytest

from stagepass.domain.state_machine import BookingAttemptStateMachine, BookingAttemptState
from stagepass.domain.exceptions import InvalidStateTransitionError


# ---------------------
# VALID TRANSITIONS
# ---------------------

def test_valid_happy_path():
    path = [
        BookingAttemptState.REQUESTED,
        BookingAttemptState.VALIDATING,
        BookingAttemptState.RESERVING,
        BookingAttemptState.RECORDING,
        BookingAttemptState.COMMITTED,
    ]
    for from_state, to_state in zip(path, path[1:]):
        assert BookingAttemptStateMachine.can_transition(from_state, to_state)


def test_rejection_exits():
    assert BookingAttemptStateMachine.can_transition(
        BookingAttemptState.VALIDATING,
        BookingAttemptState.REJECTED,
    )
    assert BookingAttemptStateMachine.can_transition(
        BookingAttemptState.RESERVING,
        BookingAttemptState.REJECTED,
    )


def test_recording_failure_goes_through_compensation():
    assert BookingAttemptStateMachine.get_allowed_transitions(
        BookingAttemptState.RECORDING
    ) == {BookingAttemptState.COMMITTED, BookingAttemptState.COMPENSATING}

    assert BookingAttemptStateMachine.can_transition(
        BookingAttemptState.COMPENSATING,
        BookingAttemptState.REJECTED,
    )


# ---------------------
# INVALID TRANSITIONS
# ---------------------

def test_cannot_skip_reservation():
    with pytest.raises(InvalidStateTransitionError):
        BookingAttemptStateMachine.validate_transition(
            BookingAttemptState.VALIDATING,
            BookingAttemptState.RECORDING,
        )


def test_recording_cannot_be_rejected_without_compensation():
    with pytest.raises(InvalidStateTransitionError):
        BookingAttemptStateMachine.validate_transition(
            BookingAttemptState.RECORDING,
            BookingAttemptState.REJECTED,
        )


def test_terminal_state_committed():
    assert BookingAttemptStateMachine.is_terminal(BookingAttemptState.COMMITTED)

    with pytest.raises(InvalidStateTransitionError):
        BookingAttemptStateMachine.validate_transition(
            BookingAttemptState.COMMITTED,
            BookingAttemptState.REJECTED,
        )


def test_terminal_state_rejected():
    assert BookingAttemptStateMachine.is_terminal(BookingAttemptState.REJECTED)

    with pytest.raises(InvalidStateTransitionError):
        BookingAttemptStateMachine.validate_transition(
            BookingAttemptState.REJECTED,
            BookingAttemptState.RESERVING,
        )


def test_invalid_type_guard():
    with pytest.raises(TypeError):
        BookingAttemptStateMachine.validate_transition(
            "REQUESTED",  # invalid type
            BookingAttemptState.VALIDATING,
        )
