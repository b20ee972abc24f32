"""
Observability for the bucket list app.

The store and the UI only talk to an ObservabilitySink. Concrete sinks turn
those calls into structured log lines or OpenTelemetry spans. Nothing in the
app depends on a sink succeeding.
"""

import json
import logging
import random
import string
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)

TRACER_NAME = "bucket-list-app"
TRACER_VERSION = "1.0.0"


def setup_logging(level: str = "INFO"):
    """Send log records to the console through rich."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def setup_tracing(enable: bool = True, otlp_endpoint: str = "http://localhost:4317",
                  service_name: str = TRACER_NAME):
    """
    Set up OpenTelemetry tracing with an OTLP exporter.

    Args:
        enable: Whether to enable tracing
        otlp_endpoint: OTLP collector gRPC endpoint
        service_name: Value of the service.name resource attribute
    """
    if not enable:
        return

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
        trace.set_tracer_provider(provider)
        logger.info(f"Tracing enabled. Sending traces to {otlp_endpoint}")
    except Exception as e:
        logger.warning(f"Failed to set up tracing: {e}. Continuing without tracing.")


def _generate_session_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def _clean_attributes(attributes: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop None values and stringify anything OpenTelemetry can't carry."""
    cleaned = {}
    for key, value in (attributes or {}).items():
        if value is None:
            continue
        if not isinstance(value, (str, bool, int, float)):
            value = str(value)
        cleaned[key] = value
    return cleaned


class ObservabilitySink:
    """Receives user actions, log lines and spans. This base class ignores them all."""

    def event(self, action: str, attributes: Optional[Mapping[str, Any]] = None) -> None:
        pass

    def log(self, level: int, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        pass

    @contextmanager
    def span(self, name: str, attributes: Optional[Mapping[str, Any]] = None) -> Iterator[None]:
        yield


NullSink = ObservabilitySink


class LoggingSink(ObservabilitySink):
    """Structured log lines: message followed by a JSON context."""

    def __init__(self, logger_name: str = "bucket_list.events", session_id: Optional[str] = None):
        self.logger = logging.getLogger(logger_name)
        self.session_id = session_id or _generate_session_id()

    def _emit(self, level: int, message: str, context: Optional[Mapping[str, Any]]):
        payload = {**_clean_attributes(context), "sessionId": self.session_id}
        self.logger.log(level, "%s %s", message, json.dumps(payload, sort_keys=True, default=str))

    def event(self, action, attributes=None):
        context = {**(attributes or {}), "component": "BucketListApp", "action": action}
        self._emit(logging.INFO, f"User action: {action}", context)

    def log(self, level, message, context=None):
        self._emit(level, message, context)

    @contextmanager
    def span(self, name, attributes=None):
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self._emit(logging.ERROR, f"Data operation failed: {name}",
                       {**(attributes or {}), "component": "DataLayer", "error": str(e)})
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self._emit(logging.DEBUG, f"Data operation: {name}",
                   {**(attributes or {}), "component": "DataLayer", "executionTime": f"{elapsed:.2f}ms"})


class TracingSink(ObservabilitySink):
    """OpenTelemetry spans for data operations and user actions."""

    def __init__(self, tracer_provider=None, service_name: str = TRACER_NAME):
        self.service_name = service_name
        self.tracer = trace.get_tracer(TRACER_NAME, TRACER_VERSION, tracer_provider=tracer_provider)

    def _attributes(self, attributes):
        return {"service.name": self.service_name, **_clean_attributes(attributes)}

    def event(self, action, attributes=None):
        span = self.tracer.start_span(
            f"user.{action}", attributes=self._attributes({"user.action": action, **(attributes or {})})
        )
        span.set_status(Status(StatusCode.OK))
        span.end()

    def log(self, level, message, context=None):
        current = trace.get_current_span()
        if current.is_recording():
            current.add_event(message, attributes={"log.level": logging.getLevelName(level),
                                                   **_clean_attributes(context)})

    @contextmanager
    def span(self, name, attributes=None):
        with self.tracer.start_as_current_span(
            name,
            attributes=self._attributes(attributes),
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                yield
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise
            span.set_status(Status(StatusCode.OK))


class CompositeSink(ObservabilitySink):
    """Forwards every call to several sinks."""

    def __init__(self, sinks: Sequence[ObservabilitySink]):
        self.sinks = list(sinks)

    def event(self, action, attributes=None):
        for sink in self.sinks:
            sink.event(action, attributes)

    def log(self, level, message, context=None):
        for sink in self.sinks:
            sink.log(level, message, context)

    @contextmanager
    def span(self, name, attributes=None):
        with _nested_spans(self.sinks, name, attributes):
            yield


@contextmanager
def _nested_spans(sinks, name, attributes):
    if not sinks:
        yield
        return
    with sinks[0].span(name, attributes):
        with _nested_spans(sinks[1:], name, attributes):
            yield


def create_sink(mode: str = "logging", tracer_provider=None, service_name: str = TRACER_NAME) -> ObservabilitySink:
    """Build the sink for an OBSERVABILITY mode: none, logging, tracing or all."""
    mode = (mode or "none").lower()
    if mode == "none":
        return NullSink()
    if mode == "logging":
        return LoggingSink()
    if mode == "tracing":
        return TracingSink(tracer_provider=tracer_provider, service_name=service_name)
    if mode == "all":
        return CompositeSink([
            LoggingSink(),
            TracingSink(tracer_provider=tracer_provider, service_name=service_name),
        ])
    raise ValueError(f"Unknown observability mode: {mode}")
