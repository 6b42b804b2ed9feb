"""OpenTelemetry tracing integration for llm-refine.

Provides tracing with support for stdout, OTLP, and noop exporters.
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor, SpanExporter
from opentelemetry.trace import NoOpTracer, Span, Tracer

from .errors import ConfigurationError

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class TelemetryConfig:
    """Configuration for the tracing subsystem."""

    service_name: str = "llm-refine"
    exporter: str = "none"  # "stdout" | "otlp" | "none"
    otlp_endpoint: str = "http://localhost:4317"


# ---------------------------------------------------------------------------
# RefineTracer
# ---------------------------------------------------------------------------


class RefineTracer:
    """Wraps OpenTelemetry ``TracerProvider`` setup and span helpers."""

    def __init__(self, config: TelemetryConfig | None = None) -> None:
        self._config = config or TelemetryConfig()
        self._provider: TracerProvider | None = None
        self._tracer: Tracer = NoOpTracer()

    # -- lifecycle -----------------------------------------------------------

    def init(self) -> None:
        """Install a provider for the configured exporter; ``none`` keeps the no-op tracer."""
        cfg = self._config
        if cfg.exporter == "none":
            return

        exporter = self._exporter()
        provider = TracerProvider(resource=Resource.create({"service.name": cfg.service_name}))
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        self._provider = provider
        self._tracer = provider.get_tracer(cfg.service_name)

    def _exporter(self) -> SpanExporter:
        cfg = self._config
        if cfg.exporter == "stdout":
            return ConsoleSpanExporter()
        if cfg.exporter == "otlp":
            try:
                from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                    OTLPSpanExporter,
                )
            except ImportError as exc:
                msg = "OTLP exporter not installed. Install with: pip install 'llm-refine[otlp]'"
                raise ConfigurationError(msg) from exc
            return OTLPSpanExporter(endpoint=cfg.otlp_endpoint, insecure=True)
        raise ConfigurationError(
            f"Unknown trace exporter '{cfg.exporter}'. Valid values: none, otlp, stdout"
        )

    # -- span helpers --------------------------------------------------------

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, str] | None = None,
    ) -> Generator[Span, None, None]:
        """Create a span as a context manager."""
        with self._tracer.start_as_current_span(name, attributes=attributes) as s:
            yield s

    def record_event(
        self,
        name: str,
        attributes: dict[str, str] | None = None,
    ) -> None:
        """Record a named event on the current active span (if any)."""
        current_span = trace.get_current_span()
        if current_span.is_recording():
            otel_attrs: dict[str, Any] = dict(attributes) if attributes else {}
            current_span.add_event(name, otel_attrs)

    def shutdown(self) -> None:
        """Flush pending spans and shut down the provider.

        Safe to call multiple times.
        """
        if self._provider is not None:
            self._provider.shutdown()
            self._provider = None


# ---------------------------------------------------------------------------
# Module-level default tracer
# ---------------------------------------------------------------------------

_DEFAULT_TRACER: RefineTracer | None = None


def _get_default_tracer() -> RefineTracer:
    global _DEFAULT_TRACER  # noqa: PLW0603
    if _DEFAULT_TRACER is None:
        _DEFAULT_TRACER = RefineTracer()
    return _DEFAULT_TRACER


def configure_tracing(config: TelemetryConfig) -> RefineTracer:
    """Replace the default tracer with one built from *config*."""
    global _DEFAULT_TRACER  # noqa: PLW0603
    if _DEFAULT_TRACER is not None:
        _DEFAULT_TRACER.shutdown()
    tracer = RefineTracer(config)
    tracer.init()
    _DEFAULT_TRACER = tracer
    return tracer


def record_event(name: str, attributes: dict[str, str] | None = None) -> None:
    _get_default_tracer().record_event(name, attributes)


# ---------------------------------------------------------------------------
# Convenience context managers
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def trace_refine_run(artifact: str) -> Generator[Span, None, None]:
    """Trace one refinement run."""
    with _get_default_tracer().span("refine/run", {"refine.artifact": artifact}) as s:
        yield s


@contextlib.contextmanager
def trace_external_call(kind: str, backend: str) -> Generator[Span, None, None]:
    """Trace a generator, judge or verifier call."""
    with _get_default_tracer().span(
        f"refine/{kind}", {"refine.call": kind, "refine.backend": backend}
    ) as s:
        yield s
