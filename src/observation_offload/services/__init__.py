"""
Services transverses (télémétrie).
"""

from .telemetry import (
    ObservationMaskingEvent,
    TelemetrySink,
    NullTelemetrySink,
    LoggingTelemetrySink,
    HttpTelemetrySink,
    create_telemetry_sink,
)

__all__ = [
    "ObservationMaskingEvent",
    "TelemetrySink",
    "NullTelemetrySink",
    "LoggingTelemetrySink",
    "HttpTelemetrySink",
    "create_telemetry_sink",
]
