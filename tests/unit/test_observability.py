"""Unit tests for observability module."""

import json
import logging
import sys

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
from prometheus_client import REGISTRY
import pytest

from site_search.observability import (
    SEARCH_LATENCY,
    JsonFormatter,
    configure_logging,
    create_span,
    get_metrics,
    get_trace_context,
    init_tracing,
    record_query_outcome,
    set_trace_context,
    tracing as tracing_module,
    track_latency,
)
from site_search.observability.context import trace_context, update_span_id


def _record(msg="test message", name="test", level=logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def span_exporter(monkeypatch):
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setitem(tracing_module._tracer_holder, "tracer", provider.get_tracer("test"))
    return exporter


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
class TestJsonFormatter:
    """Tests for structured JSON logging."""

    def test_format_includes_trace_context(self):
        set_trace_context("a" * 32, "b" * 16)

        data = json.loads(JsonFormatter().format(_record()))

        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["trace_id"] == "a" * 32
        assert data["span_id"] == "b" * 16
        assert "timestamp" in data

    def test_component_from_logger_name(self):
        data = json.loads(JsonFormatter().format(_record(name="site_search.search.engine")))
        assert data["component"] == "engine"

    def test_format_includes_extra_fields(self):
        data = json.loads(JsonFormatter().format(_record(query="rust", result_count=3)))

        assert data["query"] == "rust"
        assert data["result_count"] == 3

    def test_sensitive_fields_are_redacted(self):
        data = json.loads(JsonFormatter().format(_record(token="s3cret", Password="hunter2")))

        assert data["token"] == "[REDACTED]"
        assert data["Password"] == "[REDACTED]"

    def test_long_values_are_truncated(self):
        data = json.loads(JsonFormatter().format(_record(msg="m" * 3000, payload="p" * 600)))

        assert data["message"] == "m" * 2000 + "..."
        assert data["payload"] == "p" * 500 + "..."

    def test_non_json_values_are_converted(self, tmp_path):
        data = json.loads(JsonFormatter().format(_record(tags={"b", "a"}, path=tmp_path)))

        assert data["tags"] == ["a", "b"]
        assert data["path"] == str(tmp_path)

    def test_exception_is_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError: boom" in data["exception"]


@pytest.mark.unit
class TestConfigureLogging:
    def test_json_output(self, restore_root_logger):
        configure_logging("debug")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_plain_output_and_logger_overrides(self, restore_root_logger):
        name = "site_search.search.fuzzy"
        try:
            configure_logging("warning", json_output=False, logger_levels={name: "error"})

            assert restore_root_logger.level == logging.WARNING
            assert not isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)
            assert logging.getLogger(name).level == logging.ERROR
        finally:
            logging.getLogger(name).setLevel(logging.NOTSET)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("chatty")
        assert restore_root_logger.level == logging.INFO


@pytest.mark.unit
class TestTraceContext:
    def test_generates_ids_when_missing(self):
        trace_context.set(None)

        ctx = get_trace_context()

        assert len(ctx["trace_id"]) == 32
        assert len(ctx["span_id"]) == 16
        assert get_trace_context() is ctx

    def test_update_span_id_keeps_trace_id(self):
        set_trace_context("t" * 32, "s" * 16, site="blog")

        update_span_id("n" * 16)

        assert get_trace_context() == {"trace_id": "t" * 32, "span_id": "n" * 16, "site": "blog"}


@pytest.mark.unit
class TestTracing:
    def test_create_span_sets_attributes_and_span_id(self, span_exporter):
        with create_span("unit.op", attributes={"query": "go"}) as span:
            span_id = format(span.get_span_context().span_id, "016x")
            assert get_trace_context()["span_id"] == span_id

        finished = span_exporter.get_finished_spans()
        assert [s.name for s in finished] == ["unit.op"]
        assert finished[0].attributes["query"] == "go"

    def test_create_span_records_errors(self, span_exporter):
        with pytest.raises(RuntimeError, match="failed"):
            with create_span("unit.fail"):
                raise RuntimeError("failed")

        span = span_exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR
        assert any(event.name == "exception" for event in span.events)

    def test_init_tracing_registers_provider(self, monkeypatch):
        registered = []
        monkeypatch.setattr(tracing_module.trace, "set_tracer_provider", registered.append)
        monkeypatch.setitem(tracing_module._tracer_holder, "tracer", None)

        provider = init_tracing("site-search-test", {"deployment.environment": "test"})

        assert registered == [provider]
        assert provider.resource.attributes["service.name"] == "site-search-test"
        assert provider.resource.attributes["deployment.environment"] == "test"
        assert tracing_module._tracer_holder["tracer"] is not None


@pytest.mark.unit
class TestMetrics:
    def test_track_latency_observes_once(self):
        before = REGISTRY.get_sample_value("search_latency_seconds_count") or 0.0

        with track_latency(SEARCH_LATENCY):
            pass

        assert REGISTRY.get_sample_value("search_latency_seconds_count") == before + 1

    def test_track_latency_observes_on_error(self):
        before = REGISTRY.get_sample_value("search_latency_seconds_count") or 0.0

        with pytest.raises(KeyError):
            with track_latency(SEARCH_LATENCY):
                raise KeyError("missing")

        assert REGISTRY.get_sample_value("search_latency_seconds_count") == before + 1

    def test_record_query_outcome(self):
        before = REGISTRY.get_sample_value("search_queries_total", {"outcome": "empty"}) or 0.0
        record_query_outcome(0)
        assert REGISTRY.get_sample_value("search_queries_total", {"outcome": "empty"}) == before + 1

    def test_exposition(self):
        record_query_outcome(1)

        body = get_metrics()

        assert b"search_queries_total" in body
        assert b"index_document_count" in body
