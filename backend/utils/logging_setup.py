# utils/logging_setup.py
import logging

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Configure the root logger once at startup; modules use logging.getLogger(__name__)
def configure_logging(level: str = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # SQL echo stays off unless explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
