import json
import logging

from corridor_backend.core.logging import (
    FileLogger,
    TransactionIdFilter,
    get_logger,
    set_transaction_id,
)
from corridor_backend.core.logging.structured_logger import (
    SERVICE_NAME,
    build_formatter,
)


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "corridor_backend.trust", logging.WARNING, __file__, 10, message, None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_is_namespaced():
    assert get_logger("occupancy").name == "corridor_backend.occupancy"
    assert get_logger().name == "corridor_backend"


def test_structured_formatter_emits_json_with_context():
    set_transaction_id("abc12345")
    record = make_record("Audit triggered", unit_id=7)
    TransactionIdFilter().filter(record)

    payload = json.loads(build_formatter(True).format(record))

    assert payload["message"] == "Audit triggered"
    assert payload["transaction_id"] == "abc12345"
    assert payload["level"] == "WARNING"
    assert payload["unit_id"] == 7
    assert payload["service"]["name"] == SERVICE_NAME


def test_file_logger_writes_through_queue(tmp_path):
    log_path = tmp_path / "logs" / "app.log"
    file_logger = FileLogger(log_file_path=str(log_path), log_level="INFO")
    file_logger.start_queue_listener([file_logger.setup_file_handler()])

    logger = logging.getLogger("corridor_backend.tests.file")
    logger.propagate = False
    handler = file_logger.get_queue_handler()
    handler.addFilter(TransactionIdFilter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        logger.info("Student checked in", extra={"occupancy_id": 3})
    finally:
        file_logger.stop()
        logger.removeHandler(handler)

    lines = log_path.read_text().splitlines()
    assert json.loads(lines[-1])["occupancy_id"] == 3
