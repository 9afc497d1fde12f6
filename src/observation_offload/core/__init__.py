"""
Core: modèles, exceptions, constantes, tokenization et stockage.
"""

from .exceptions import (
    ObservationOffloadBaseError,
    ConfigurationError,
    TokenizationError,
    ObservationOffloadError,
    TelemetryError,
)
from .models import (
    ConversationHistory,
    OpaquePart,
    Part,
    TextPart,
    ToolCallPart,
    ToolObservationPart,
    Turn,
)
from .storage import HistoryDirResolver, SessionHistoryDir, StaticHistoryDir
from .tokens import TiktokenEstimator, TokenEstimator, count_tokens_text

__all__ = [
    "ObservationOffloadBaseError",
    "ConfigurationError",
    "TokenizationError",
    "ObservationOffloadError",
    "TelemetryError",
    "ConversationHistory",
    "OpaquePart",
    "Part",
    "TextPart",
    "ToolCallPart",
    "ToolObservationPart",
    "Turn",
    "HistoryDirResolver",
    "SessionHistoryDir",
    "StaticHistoryDir",
    "TiktokenEstimator",
    "TokenEstimator",
    "count_tokens_text",
]
