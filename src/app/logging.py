import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging for the application."""
    # Configure root logger to capture all logs
    logging.basicConfig(
        level=level,
        format="%(levelname)s - %(asctime)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )

    # Set specific log levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger that writes through the root handler set up by configure_logging.

    Args:
        name: The name of the logger (e.g., __name__)
    """
    return logging.getLogger(name)
