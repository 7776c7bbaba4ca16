import json
import logging

from landing_page_composer.logging_config import StructuredFormatter, get_trace_id, set_trace_id, trace_id_var


def test_structured_formatter_includes_extra_and_trace():
    record = logging.LogRecord("landing_page_composer.patch_engine", logging.INFO, __file__, 10, "Applied patch", (), None)
    record.page_id = "page_1"
    token = trace_id_var.set(None)
    try:
        set_trace_id("trace-123")
        payload = json.loads(StructuredFormatter().format(record))
    finally:
        trace_id_var.reset(token)

    assert payload["severity"] == "INFO"
    assert payload["message"] == "Applied patch"
    assert payload["page_id"] == "page_1"
    assert payload["logging.googleapis.com/trace"] == "trace-123"
    assert payload["timestamp"].endswith("Z")


def test_get_trace_id_reads_current_context():
    token = trace_id_var.set(None)
    try:
        assert get_trace_id() is None
        set_trace_id("trace-456")
        assert get_trace_id() == "trace-456"
    finally:
        trace_id_var.reset(token)
