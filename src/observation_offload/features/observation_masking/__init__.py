"""Observation masking (offload + troncature).

But: garder l'historique sous la fenêtre de contexte en déchargeant sur disque
les anciennes sorties d'outils volumineuses et en les remplaçant par un
extrait tête/queue avec un pointeur vers le fichier complet.
"""

from .offload import DefaultIdGenerator, ObservationIdGenerator, ObservationOffloader
from .openai_adapter import chat_messages_from_history, history_from_chat_messages, mask_chat_messages
from .payload import ExtractedObservation, extract_observation, is_already_masked
from .scanner import PrunableRecord, ScanResult, scan_history, should_trigger_masking
from .service import (
    MaskingPolicy,
    MaskingResult,
    ObservationMaskingService,
    create_masking_service,
    mask_observations,
)
from .snippet import format_masked_snippet

__all__ = [
    "DefaultIdGenerator",
    "ObservationIdGenerator",
    "ObservationOffloader",
    "chat_messages_from_history",
    "history_from_chat_messages",
    "mask_chat_messages",
    "ExtractedObservation",
    "extract_observation",
    "is_already_masked",
    "PrunableRecord",
    "ScanResult",
    "scan_history",
    "should_trigger_masking",
    "MaskingPolicy",
    "MaskingResult",
    "ObservationMaskingService",
    "create_masking_service",
    "mask_observations",
    "format_masked_snippet",
]
