import logging
import os
import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

logger = logging.getLogger("wait_for_db")


def wait_for_db(url: str, timeout_s: int | None = None) -> None:
    """Block until ``url`` accepts connections or ``timeout_s`` elapses."""
    if timeout_s is None:
        timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
    engine = create_engine(url, pool_pre_ping=True)
    safe_url = engine.url.render_as_string(hide_password=True)
    start = time.time()
    logger.info("waiting for database at %s (timeout=%ss)", safe_url, timeout_s)
    try:
        while True:
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                logger.info("database is ready")
                return
            except OperationalError as e:
                if time.time() - start > timeout_s:
                    logger.error("timed out waiting for database: %s", e)
                    raise
                time.sleep(1)
    finally:
        engine.dispose()


if __name__ == "__main__":
    from bookit.core.config import settings
    from bookit.core.logging_config import configure_logging

    configure_logging()
    wait_for_db(settings.DATABASE_URL)
