"""observation_offload.features.observation_masking.scanner

Scan arrière de l'historique ("Backward FIFO") et porte d'hystérésis.

1. Les observations les plus récentes sont protégées jusqu'à
   `protection_threshold` tokens cumulés.
2. L'observation qui fait franchir le seuil est prunable, ainsi que toutes
   les observations plus anciennes.
3. Le masking n'est déclenché que si le total prunable atteint
   `hysteresis_threshold` (évite les oscillations d'un tour à l'autre).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ...core.constants import HYSTERESIS_THRESHOLD, TOOL_PROTECTION_THRESHOLD
from ...core.models import ConversationHistory, ToolObservationPart
from ...core.tokens import TokenEstimator
from .payload import ExtractedObservation, extract_observation, is_already_masked

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrunableRecord:
    turn_index: int
    part_index: int
    tokens: int
    observation: ExtractedObservation

    @property
    def content(self) -> str:
        return self.observation.text


@dataclass(frozen=True)
class ScanResult:
    """Résultat du scan.

    Attributes:
        records: Observations prunables, de la plus récente (celle qui franchit
            la frontière) vers les plus anciennes.
        total_prunable_tokens: Somme des tokens des records.
        protected_tokens: Tokens d'observations restés dans la fenêtre protégée.
    """

    records: tuple[PrunableRecord, ...] = ()
    total_prunable_tokens: int = 0
    protected_tokens: int = 0


def scan_history(
    history: ConversationHistory,
    estimator: TokenEstimator,
    protection_threshold: int = TOOL_PROTECTION_THRESHOLD,
) -> ScanResult:
    if not history:
        return ScanResult()

    cumulative_tool_tokens = 0
    protection_boundary_reached = False
    total_prunable_tokens = 0
    protected_tokens = 0
    records: list[PrunableRecord] = []

    for turn_index in range(len(history) - 1, -1, -1):
        parts = history[turn_index].parts

        for part_index in range(len(parts) - 1, -1, -1):
            part = parts[part_index]
            if not isinstance(part, ToolObservationPart):
                continue

            observation = extract_observation(part)
            if observation is None or not observation.text:
                continue
            if is_already_masked(observation.text):
                continue

            part_tokens = estimator.estimate([part])

            if not protection_boundary_reached:
                cumulative_tool_tokens += part_tokens
                if cumulative_tool_tokens <= protection_threshold:
                    protected_tokens += part_tokens
                    continue
                # La part qui franchit la frontière est prunable.
                protection_boundary_reached = True

            total_prunable_tokens += part_tokens
            records.append(
                PrunableRecord(
                    turn_index=turn_index,
                    part_index=part_index,
                    tokens=part_tokens,
                    observation=observation,
                )
            )

    logger.debug(
        f"[OBSERVATION_MASKING] Scan: {len(records)} prunable(s), "
        f"{total_prunable_tokens:,} tokens prunables, {protected_tokens:,} protégés"
    )

    return ScanResult(
        records=tuple(records),
        total_prunable_tokens=total_prunable_tokens,
        protected_tokens=protected_tokens,
    )


def should_trigger_masking(total_prunable_tokens: int, hysteresis_threshold: int = HYSTERESIS_THRESHOLD) -> bool:
    return total_prunable_tokens >= hysteresis_threshold
