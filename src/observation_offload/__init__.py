"""
Observation Offload - Masquage des sorties d'outils volumineuses dans l'historique d'un agent.
"""

__version__ = "1.0.0"

from .core.models import Turn, TextPart, ToolCallPart, ToolObservationPart, OpaquePart
from .core.storage import StaticHistoryDir, SessionHistoryDir
from .features.observation_masking import (
    MaskingPolicy,
    MaskingResult,
    ObservationMaskingService,
    mask_observations,
)

__all__ = [
    "__version__",
    "Turn",
    "TextPart",
    "ToolCallPart",
    "ToolObservationPart",
    "OpaquePart",
    "StaticHistoryDir",
    "SessionHistoryDir",
    "MaskingPolicy",
    "MaskingResult",
    "ObservationMaskingService",
    "mask_observations",
]
