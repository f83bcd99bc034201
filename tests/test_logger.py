import logging

from selfupgrade.utils.logger import LOG_FILE_NAME, configure_logging


def test_configure_logging_writes_log_file(tmp_path):
    logger = configure_logging(False, log_dir=tmp_path)
    logging.getLogger("selfupgrade.test").info("info-from-test")

    for handler in logger.handlers:
        handler.flush()
    log_file = tmp_path / LOG_FILE_NAME
    assert log_file.exists()
    assert "info-from-test" in log_file.read_text(encoding="utf-8")

    # keep root logger clean for other tests
    logging.getLogger().handlers.clear()


def test_configure_logging_debug_level_console_only():
    logger = configure_logging(True)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0], logging.FileHandler)

    logging.getLogger().handlers.clear()
