"""Centralized logging configuration."""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Sets the root logger level and suppresses noisy third-party
    loggers to WARNING.  ``httpx`` logs full request URLs at INFO, and
    those carry pagination cursors, so it stays quiet too.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, level.upper()),
        force=True,
    )

    # Suppress noisy third-party loggers
    for name in (
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "httpx",
        "httpcore",
        "urllib3",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
