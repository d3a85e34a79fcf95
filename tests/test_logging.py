import json
import logging

from cinenova.logger import REQUEST_ID, JSONFormatter, RequestIdFilter, logger, setup_logging


def _record(msg="hello"):
    return logging.LogRecord("cinenova.test", logging.INFO, __file__, 1, msg, None, None)


def test_text_format_carries_request_id():
    setup_logging("INFO", json_logs=False)
    handler = logger.handlers[0]
    record = _record()

    token = REQUEST_ID.set("abc123")
    try:
        handler.filter(record)
        line = handler.format(record)
    finally:
        REQUEST_ID.reset(token)

    assert "[INFO] [cinenova.test] [rid=abc123] hello" in line


def test_request_id_placeholder_outside_requests():
    record = _record()
    RequestIdFilter().filter(record)
    assert record.rid == "-"


def test_json_format():
    token = REQUEST_ID.set("r1")
    try:
        payload = json.loads(JSONFormatter().format(_record("served")))
    finally:
        REQUEST_ID.reset(token)

    assert payload["msg"] == "served"
    assert payload["level"] == "INFO"
    assert payload["rid"] == "r1"


def test_setup_logging_replaces_handler():
    setup_logging("DEBUG", json_logs=True)
    setup_logging("DEBUG", json_logs=True)

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)
    assert logger.level == logging.DEBUG
    setup_logging("INFO", json_logs=False)
