import logging

from backend.app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
    # SQL echo only on demand
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
