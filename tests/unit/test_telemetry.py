"""
Tests unitaires pour les sinks de télémétrie.
"""
import json
import logging

import httpx
import pytest

from observation_offload.config import TelemetryConfig
from observation_offload.core.exceptions import TelemetryError
from observation_offload.services.telemetry import (
    HttpTelemetrySink,
    LoggingTelemetrySink,
    NullTelemetrySink,
    ObservationMaskingEvent,
    create_telemetry_sink,
)

EVENT = ObservationMaskingEvent(
    tokens_before=80000,
    tokens_after=20500,
    masked_count=2,
    total_prunable_tokens=80000,
)


def test_event_to_dict():
    assert EVENT.to_dict() == {
        "tokens_before": 80000,
        "tokens_after": 20500,
        "masked_count": 2,
        "total_prunable_tokens": 80000,
    }


def test_create_telemetry_sink_variants():
    assert isinstance(create_telemetry_sink(TelemetryConfig(enabled=False, endpoint="http://x")), NullTelemetrySink)
    assert isinstance(create_telemetry_sink(TelemetryConfig(enabled=True)), LoggingTelemetrySink)

    sink = create_telemetry_sink(TelemetryConfig(enabled=True, endpoint="http://collector/events", timeout_ms=500))
    assert isinstance(sink, HttpTelemetrySink)
    assert sink.endpoint == "http://collector/events"
    assert sink.timeout_ms == 500


@pytest.mark.asyncio
async def test_logging_sink_logs_event(caplog):
    with caplog.at_level(logging.INFO, logger="observation_offload.services.telemetry"):
        await LoggingTelemetrySink().emit(EVENT)

    assert "observation_masking" in caplog.text
    assert "'masked_count': 2" in caplog.text


@pytest.mark.asyncio
async def test_http_sink_posts_event_json():
    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        sink = HttpTelemetrySink("http://collector/events", client=client)
        await sink.emit(EVENT)

    assert received == [{"event_name": "observation_masking", "event": EVENT.to_dict()}]


@pytest.mark.asyncio
async def test_http_sink_raises_on_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        sink = HttpTelemetrySink("http://collector/events", client=client)
        with pytest.raises(TelemetryError) as exc_info:
            await sink.emit(EVENT)

    assert exc_info.value.details["status_code"] == 503


@pytest.mark.asyncio
async def test_http_sink_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connexion refusée", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        sink = HttpTelemetrySink("http://collector/events", client=client)
        with pytest.raises(TelemetryError):
            await sink.emit(EVENT)
