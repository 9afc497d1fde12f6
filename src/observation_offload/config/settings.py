"""
Dataclasses pour la configuration.
"""
from dataclasses import dataclass, field
from typing import Dict, Any

from .loader import (
    ObservationMaskingConfig,
    TelemetryConfig,
    get_observation_masking_config,
    get_telemetry_config,
)


@dataclass
class Settings:
    """Configuration globale de l'application."""
    observation_masking: ObservationMaskingConfig = field(default_factory=ObservationMaskingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """Crée une instance depuis la configuration chargée."""
        return cls(
            observation_masking=get_observation_masking_config(config),
            telemetry=get_telemetry_config(config),
        )
