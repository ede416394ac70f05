import logging

from rapflow.core.logging_config import default_log_file, setup_logging


def test_setup_logging_configures_package_logger(tmp_path):
    log_file = tmp_path / "logs" / "rapflow.log"
    logger = setup_logging("debug", log_file=log_file)

    assert logger.name == "rapflow"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("rapflow.core.sync").debug("line 3 active")
    for handler in logger.handlers:
        handler.flush()
    assert "line 3 active" in log_file.read_text(encoding="utf-8")

    setup_logging()
    assert len(logger.handlers) == 1
    logger.handlers.clear()


def test_log_file_lives_under_app_data(tmp_path):
    assert default_log_file(tmp_path) == tmp_path / "logs" / "rapflow.log"


def test_log_file_keeps_timestamps_when_console_is_terse(tmp_path):
    log_file = default_log_file(tmp_path)
    logger = setup_logging("info", log_file=log_file, verbose=False)

    logging.getLogger("rapflow.main").info("started")
    for handler in logger.handlers:
        handler.flush()

    line = log_file.read_text(encoding="utf-8").strip()
    assert line.endswith("rapflow.main INFO: started")
    assert line[:4].isdigit()

    setup_logging()
    logger.handlers.clear()


def test_repeated_setup_does_not_stack_handlers():
    setup_logging()
    logger = setup_logging(verbose=True)
    assert len(logger.handlers) == 1
    logger.handlers.clear()
