"""observation_offload.services.telemetry

Sinks de télémétrie pour les événements d'observation masking.

Le moteur reçoit un sink injecté (jamais de singleton global). Un sink peut
lever une exception: le moteur la journalise et l'ignore, la télémétrie ne
doit jamais casser le chemin principal de la conversation.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Protocol

import httpx

from ..config.loader import TelemetryConfig
from ..core.exceptions import TelemetryError

logger = logging.getLogger(__name__)

OBSERVATION_MASKING_EVENT_NAME = "observation_masking"


@dataclass(frozen=True)
class ObservationMaskingEvent:
    """Résumé d'une passe de masking effective."""

    tokens_before: int
    tokens_after: int
    masked_count: int
    total_prunable_tokens: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class TelemetrySink(Protocol):
    async def emit(self, event: ObservationMaskingEvent) -> None:
        ...


class NullTelemetrySink:
    """Sink inactif (statistiques d'usage désactivées)."""

    async def emit(self, event: ObservationMaskingEvent) -> None:
        return None


class LoggingTelemetrySink:
    """Journalise l'événement via `logging`."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    async def emit(self, event: ObservationMaskingEvent) -> None:
        logger.log(
            self.level,
            f"📊 [TELEMETRY] {OBSERVATION_MASKING_EVENT_NAME}: {event.to_dict()}",
        )


class HttpTelemetrySink:
    """Envoie l'événement en JSON (POST) vers un collecteur HTTP."""

    def __init__(self, endpoint: str, timeout_ms: int = 2000, client: httpx.AsyncClient | None = None):
        self.endpoint = endpoint
        self.timeout_ms = timeout_ms
        self._client = client

    async def emit(self, event: ObservationMaskingEvent) -> None:
        payload = {
            "event_name": OBSERVATION_MASKING_EVENT_NAME,
            "event": event.to_dict(),
        }
        timeout = httpx.Timeout(self.timeout_ms / 1000.0)

        try:
            if self._client is not None:
                response = await self._client.post(self.endpoint, json=payload, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            raise TelemetryError(
                message=f"Envoi télémétrie impossible: {e}",
                endpoint=self.endpoint,
            ) from e

        if response.status_code >= 400:
            raise TelemetryError(
                message="Collecteur télémétrie en erreur",
                endpoint=self.endpoint,
                status_code=response.status_code,
            )


def create_telemetry_sink(config: TelemetryConfig) -> TelemetrySink:
    """
    Construit le sink correspondant à la configuration.

    - télémétrie désactivée => NullTelemetrySink
    - endpoint renseigné => HttpTelemetrySink
    - sinon => LoggingTelemetrySink
    """
    if not config.enabled:
        return NullTelemetrySink()
    if config.endpoint:
        return HttpTelemetrySink(config.endpoint, timeout_ms=config.timeout_ms)
    return LoggingTelemetrySink()
