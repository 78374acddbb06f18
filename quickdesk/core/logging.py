"""Process-wide logging setup."""

import logging
import sys

from quickdesk.core.config import Settings


def setup_logging(settings: Settings) -> None:
    """
    Configures the root logger for the application.
    Call once at startup from create_app().
    """
    logging.basicConfig(
        level=settings.logging.level.upper(),
        format=settings.logging.format,
        stream=sys.stdout,
    )
    # Silence noisy libraries
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    if not (settings.database.echo or settings.debug):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
