"""JSONFormatter — structured log records with pipeline extras."""

import json
import logging
import sys

from apiframe.infrastructure.observability import (
    JSONFormatter, PipelineLogAdapter, level_for_status,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="apiframe.services.endpoint_executor", level=logging.WARNING,
        pathname=__file__, lineno=1, msg="Endpoint failed with %s", args=("invalid_argument",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_formats_core_keys():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "apiframe.services.endpoint_executor"
    assert log["message"] == "Endpoint failed with invalid_argument"
    assert "timestamp" in log


def test_includes_known_extras_only():
    log = json.loads(JSONFormatter().format(_record(
        endpoint="users/show", pipeline_state="parsing_arguments", http_status=400,
        unrelated="ignored",
    )))
    assert log["endpoint"] == "users/show"
    assert log["pipeline_state"] == "parsing_arguments"
    assert log["http_status"] == 400
    assert "unrelated" not in log


def test_includes_exception_text():
    try:
        raise ValueError("kaboom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    log = json.loads(JSONFormatter().format(record))
    assert "ValueError: kaboom" in log["exception"]


# ─── Pipeline Adapter ────────────────────────────────────────────

def test_level_for_status_splits_client_and_server_errors():
    assert level_for_status(400) == logging.WARNING
    assert level_for_status(404) == logging.WARNING
    assert level_for_status(500) == logging.ERROR


def test_pipeline_adapter_merges_call_extras(caplog):
    log = PipelineLogAdapter(
        logging.getLogger("apiframe.tests"), {"endpoint": "users/show", "controller": "users"},
    )
    with caplog.at_level(logging.INFO, logger="apiframe.tests"):
        log.info("Pipeline state: done", extra={"pipeline_state": "done"})
    record = caplog.records[-1]
    assert record.endpoint == "users/show"
    assert record.controller == "users"
    assert record.pipeline_state == "done"
    assert json.loads(JSONFormatter().format(record))["endpoint"] == "users/show"
