"""
Configuration d'Observation Offload.
"""

from .loader import (
    load_config,
    reload_config,
    get_config,
    ObservationMaskingConfig,
    TelemetryConfig,
    get_observation_masking_config,
    get_telemetry_config,
)
from .settings import Settings

__all__ = [
    "load_config",
    "reload_config",
    "get_config",
    "ObservationMaskingConfig",
    "TelemetryConfig",
    "get_observation_masking_config",
    "get_telemetry_config",
    "Settings",
]
