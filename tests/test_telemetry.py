"""Tests for telemetry module: OpenTelemetry tracing integration."""

from __future__ import annotations

import pytest

from llm_refine import telemetry
from llm_refine.errors import ConfigurationError
from llm_refine.telemetry import (
    RefineTracer,
    TelemetryConfig,
    configure_tracing,
    record_event,
    trace_external_call,
    trace_refine_run,
)


def test_init_with_none_config_succeeds() -> None:
    tracer = RefineTracer(TelemetryConfig(exporter="none"))
    tracer.init()
    tracer.shutdown()


def test_span_context_manager_works() -> None:
    tracer = RefineTracer(TelemetryConfig(exporter="none"))
    tracer.init()
    with tracer.span("test-span", {"key": "value"}) as s:
        assert s is not None
    tracer.record_event("test-event", {"key": "value"})
    tracer.shutdown()


def test_stdout_exporter_records_spans() -> None:
    tracer = RefineTracer(TelemetryConfig(exporter="stdout"))
    tracer.init()
    with tracer.span("refine/run", {"refine.artifact": "out.rs"}) as s:
        assert s.is_recording()
    tracer.shutdown()


def test_unknown_exporter_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="Unknown trace exporter"):
        RefineTracer(TelemetryConfig(exporter="jaeger")).init()


def test_convenience_functions_do_not_error() -> None:
    with trace_refine_run("out.rs") as s:
        assert s is not None
        record_event("refine/verdict", {"refine.verdict": "ambiguous"})
    with trace_external_call("generate", "stub") as s:
        assert s is not None


def test_configure_tracing_replaces_default(monkeypatch) -> None:
    monkeypatch.setattr(telemetry, "_DEFAULT_TRACER", None)
    tracer = configure_tracing(TelemetryConfig(exporter="none"))
    assert telemetry._get_default_tracer() is tracer


def test_config_defaults_are_correct() -> None:
    config = TelemetryConfig()
    assert config.service_name == "llm-refine"
    assert config.exporter == "none"
    assert config.otlp_endpoint == "http://localhost:4317"


def test_shutdown_is_safe_to_call_multiple_times() -> None:
    tracer = RefineTracer(TelemetryConfig(exporter="stdout"))
    tracer.init()
    tracer.shutdown()
    tracer.shutdown()


def test_none_exporter_spans_do_not_record() -> None:
    tracer = RefineTracer(TelemetryConfig(exporter="none"))
    tracer.init()
    with tracer.span("refine/run") as s:
        assert not s.is_recording()


def test_unknown_exporter_installs_no_provider() -> None:
    tracer = RefineTracer(TelemetryConfig(exporter="zipkin"))
    with pytest.raises(ConfigurationError, match="Valid values: none, otlp, stdout"):
        tracer.init()
    with tracer.span("refine/run") as s:
        assert not s.is_recording()
