import logging
import sys

from teamflow.core.config import settings


def setup_logging():
    """
    Configure logging for the application.

    Logs go to stdout with timestamps, levels and logger names so they
    can be collected by Docker or any log shipper.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce SQLAlchemy noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("teamflow")


# Create global logger instance
logger = setup_logging()
