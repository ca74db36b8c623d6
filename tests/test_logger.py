import json
import logging
import sys

from rich.logging import RichHandler

from clmatbench.logger import JSONFormatter, get_logger, log_stage_complete, setup_logging


def test_plain_console_handler_when_not_tty():
    setup_logging(level="DEBUG", use_rich=False)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0], RichHandler)


def test_rich_console_handler():
    setup_logging(level="WARNING", use_rich=True)
    root = logging.getLogger()
    assert isinstance(root.handlers[0], RichHandler)
    assert root.handlers[0].level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    setup_logging(level="chatty", use_rich=False)
    assert logging.getLogger().level == logging.INFO


def test_json_file_handler(tmp_path):
    log_file = tmp_path / "nested" / "harness.log"
    setup_logging(level="INFO", log_file=log_file, log_format="json", use_rich=False)
    log_stage_complete(get_logger("clmatbench.test"), "reference", 12.3456)
    for handler in logging.getLogger().handlers:
        handler.flush()
    entry = json.loads(log_file.read_text().splitlines()[-1])
    assert entry["logger"] == "clmatbench.test"
    assert entry["message"] == "Completed reference - 12.346 ms"


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    payload = json.loads(JSONFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert "ValueError: bad" in payload["exception"]
