import logging

from src.app.logging import configure_logging, get_logger


def test_module_loggers_write_only_through_the_root_handler():
    configure_logging()

    logger = get_logger("src.app.api.v1.clients")

    assert logger is logging.getLogger("src.app.api.v1.clients")
    assert logger.handlers == []
    assert logger.propagate is True
    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_quiets_noisy_libraries():
    configure_logging(level=logging.DEBUG)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
