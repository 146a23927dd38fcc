"""
Logging setup: JSON lines on every handler, optional daily file, and
clean replacement of handlers when the app is built more than once.
"""
import json
import logging

from blog_api.logger import LOGGER_NAME, setup_logging


def _file_handlers(logger: logging.Logger) -> list[logging.FileHandler]:
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def test_log_dir_adds_daily_file(tmp_path):
    logger = setup_logging("INFO", str(tmp_path))
    logging.getLogger(f"{LOGGER_NAME}.tests").info("hello", extra={"user_id": 7})
    for handler in logger.handlers:
        handler.flush()

    [log_file] = list(tmp_path.glob("*.log"))
    record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert record["message"] == "hello"
    assert record["user_id"] == 7
    assert record["level"] == "INFO"

    setup_logging("WARNING")


def test_repeated_setup_closes_previous_handlers(tmp_path):
    logger = setup_logging("INFO", str(tmp_path))
    [first] = _file_handlers(logger)

    logger = setup_logging("INFO", str(tmp_path))
    [second] = _file_handlers(logger)

    assert first is not second
    assert first not in logger.handlers
    assert first.stream is None
    assert len(logger.handlers) == 2

    setup_logging("WARNING")
    assert second.stream is None
    assert _file_handlers(logging.getLogger(LOGGER_NAME)) == []
