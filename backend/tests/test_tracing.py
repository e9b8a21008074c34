"""
Unit tests for tracing helpers and the spans emitted by the pipeline.

Spans are captured with an in-memory exporter on a local tracer provider.
"""
import httpx
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

import siska.core.tracing as tracing
from siska.models.requests import ChatRequest
from siska.services.chat.dispatcher import IntentDispatcher
from siska.services.providers.base import ProviderCallError


@pytest.fixture
def exporter(monkeypatch):
    span_exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    monkeypatch.setattr(tracing, "_tracer", provider.get_tracer("test"))
    return span_exporter


def spans_by_name(exporter):
    return {span.name: span for span in exporter.get_finished_spans()}


def test_trace_id_from_context(exporter):
    assert tracing.get_trace_id_from_context() is None

    with tracing.get_tracer().start_as_current_span("outer"):
        trace_id = tracing.get_trace_id_from_context()

    assert trace_id is not None
    assert len(trace_id) == 32


def test_record_exception_marks_span_errored(exporter):
    with tracing.get_tracer().start_as_current_span("failing"):
        tracing.record_exception(ValueError("bad"))

    span = spans_by_name(exporter)["failing"]
    assert span.status.status_code == StatusCode.ERROR
    assert span.events[0].name == "exception"


@pytest.mark.asyncio
async def test_provider_call_span(exporter, mock_client):
    client = mock_client("weather", lambda request: httpx.Response(200, json={"ok": True}))

    await client.request("GET", "https://provider.example/data")

    span = spans_by_name(exporter)["provider.weather"]
    assert span.attributes["provider.name"] == "weather"
    assert span.attributes["provider.outcome"] == "success"


@pytest.mark.asyncio
async def test_failed_provider_call_span(exporter, mock_client):
    client = mock_client("places", lambda request: httpx.Response(503, json={}))

    with pytest.raises(ProviderCallError):
        await client.request("GET", "https://provider.example/data")

    span = spans_by_name(exporter)["provider.places"]
    assert span.attributes["provider.outcome"] == "http_error"
    assert span.status.status_code == StatusCode.ERROR


@pytest.mark.asyncio
async def test_dispatch_span(exporter, settings):
    await IntentDispatcher(settings).dispatch(ChatRequest(intent="terbang"))

    span = spans_by_name(exporter)["chat.dispatch"]
    assert span.attributes["chat.intent"] == "terbang"
    assert span.attributes["chat.status_code"] == 400
