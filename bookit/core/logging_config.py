import logging

from bookit.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once; uvicorn keeps its own handlers."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    # SQL echo is noisy; only surface warnings
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
