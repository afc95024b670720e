import logging
import os
import time

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from stagepass.api.routes.routes import router
from stagepass.infrastructure.db.session import BOOKING_LOCK_TIMEOUT_SECONDS, engine
from stagepass.infrastructure.db.models import Base

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DB_CONNECT_MAX_RETRIES = int(os.getenv("DB_CONNECT_MAX_RETRIES", "30"))
DB_CONNECT_RETRY_DELAY = float(os.getenv("DB_CONNECT_RETRY_DELAY", "1.5"))

app = FastAPI(title="Stagepass Booking Engine")
app.include_router(router)


def _wait_for_db(max_retries: int, retry_delay_seconds: float) -> None:
    # The API container usually starts before Postgres accepts connections.
    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError:
            if attempt == max_retries:
                logger.exception(
                    "Database not reachable after %s attempts. Check DATABASE_URL.",
                    max_retries,
                )
                raise
            logger.warning(
                "Database not ready (attempt %s/%s). Retrying in %.1f seconds...",
                attempt,
                max_retries,
                retry_delay_seconds,
            )
            time.sleep(retry_delay_seconds)
        else:
            logger.info("Database is reachable.")
            return


@app.on_event("startup")
def on_startup() -> None:
    _wait_for_db(DB_CONNECT_MAX_RETRIES, DB_CONNECT_RETRY_DELAY)
    Base.metadata.create_all(bind=engine)
    logger.info(
        "Booking engine ready. backend=%s lock_timeout=%.1fs",
        engine.dialect.name,
        BOOKING_LOCK_TIMEOUT_SECONDS,
    )
