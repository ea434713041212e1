import json
import logging

import pytest

from helpdesk_sla.shared.infrastructure.logging import (
    CorrelationIdFilter,
    CustomJsonFormatter,
    correlation_id_var,
    get_context_logger,
    log_latency,
)


def make_record(msg="SLA evaluated", **extra):
    record = logging.LogRecord("helpdesk_sla.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCustomJsonFormatter:

    def test_stamps_service_and_environment(self):
        formatter = CustomJsonFormatter(
            "%(name)s %(levelname)s %(message)s", service="sla-test", environment="test"
        )
        line = json.loads(formatter.format(make_record(ticket_id="TKT-1")))

        assert line["message"] == "SLA evaluated"
        assert line["service"] == "sla-test"
        assert line["environment"] == "test"
        assert line["ticket_id"] == "TKT-1"
        assert "timestamp" in line

    def test_correlation_id_included_when_present(self):
        formatter = CustomJsonFormatter("%(message)s")
        line = json.loads(formatter.format(make_record(correlation_id="abc-123")))
        assert line["correlation_id"] == "abc-123"


class TestCorrelationIdFilter:

    def test_copies_context_value(self):
        token = correlation_id_var.set("req-42")
        try:
            record = make_record()
            assert CorrelationIdFilter().filter(record) is True
        finally:
            correlation_id_var.reset(token)
        assert record.correlation_id == "req-42"

    def test_explicit_value_wins(self):
        token = correlation_id_var.set("req-42")
        try:
            record = make_record(correlation_id="explicit")
            CorrelationIdFilter().filter(record)
        finally:
            correlation_id_var.reset(token)
        assert record.correlation_id == "explicit"

    def test_outside_request_leaves_record_alone(self):
        record = make_record()
        CorrelationIdFilter().filter(record)
        assert not hasattr(record, "correlation_id")


class TestContextLogger:

    def test_plain_logger_without_id(self):
        assert isinstance(get_context_logger("helpdesk_sla.test"), logging.Logger)

    def test_adapter_with_id(self):
        adapter = get_context_logger("helpdesk_sla.test", "abc")
        assert isinstance(adapter, logging.LoggerAdapter)
        assert adapter.extra == {"correlation_id": "abc"}


class TestLogLatency:

    def test_logs_completion(self, caplog):
        logger = logging.getLogger("helpdesk_sla.test.latency")
        with caplog.at_level(logging.INFO, logger="helpdesk_sla.test.latency"):
            with log_latency(logger, "sla_batch_evaluation", tickets=3):
                pass

        record = caplog.records[-1]
        assert record.getMessage() == "sla_batch_evaluation completed"
        assert record.tickets == 3
        assert record.latency_ms >= 0

    def test_logs_failure_and_reraises(self, caplog):
        logger = logging.getLogger("helpdesk_sla.test.latency")
        with caplog.at_level(logging.INFO, logger="helpdesk_sla.test.latency"):
            with pytest.raises(RuntimeError):
                with log_latency(logger, "sla_batch_evaluation"):
                    raise RuntimeError("boom")

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "sla_batch_evaluation failed"
