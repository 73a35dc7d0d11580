import logging

from app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure the root logger once at application startup.

    *level* defaults to ``settings.LOG_LEVEL``.  Unknown level names fall
    back to INFO rather than failing startup.
    """
    name = (level or settings.LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)

    # SQL echo is controlled by DEBUG on the engine, not by the root level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
