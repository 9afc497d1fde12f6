"""observation_offload.features.observation_masking.service

Service d'observation masking: orchestre scan, hystérésis, offload et agrégation.

Propriétés:
- Tout ou rien: aucun record touché, ou tous les records prunables traités.
- L'historique de l'appelant n'est jamais modifié: on travaille sur une copie
  superficielle où seuls les tours/parts masqués sont remplacés.
- En cas d'erreur d'offload, aucune copie partielle n'est retournée; l'appelant
  garde son historique non masqué. Les fichiers déjà écrits restent sur disque.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ...config.loader import ObservationMaskingConfig
from ...config.settings import Settings
from ...core.constants import (
    HYSTERESIS_THRESHOLD,
    SMART_TRUNCATION_TOKENS,
    TOOL_PROTECTION_THRESHOLD,
    UNKNOWN_TOOL_NAME,
)
from ...core.models import ConversationHistory, ToolObservationPart
from ...core.storage import HistoryDirResolver
from ...core.tokens import TiktokenEstimator, TokenEstimator
from ...services.telemetry import (
    NullTelemetrySink,
    ObservationMaskingEvent,
    TelemetrySink,
    create_telemetry_sink,
)
from .offload import ObservationIdGenerator, ObservationOffloader
from .payload import get_call_id, replace_observation_text
from .scanner import PrunableRecord, scan_history, should_trigger_masking
from .snippet import format_masked_snippet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaskingPolicy:
    """Politique de masking.

    Attributes:
        enabled: Active/désactive le masking.
        protection_threshold: Tokens d'observations récentes jamais masqués.
        hysteresis_threshold: Total prunable minimum pour déclencher.
        smart_truncation_tokens: Tokens conservés en tête et en queue.
    """

    enabled: bool = True
    protection_threshold: int = TOOL_PROTECTION_THRESHOLD
    hysteresis_threshold: int = HYSTERESIS_THRESHOLD
    smart_truncation_tokens: int = SMART_TRUNCATION_TOKENS

    @classmethod
    def from_config(cls, config: ObservationMaskingConfig) -> "MaskingPolicy":
        return cls(
            enabled=config.enabled,
            protection_threshold=config.protection_threshold,
            hysteresis_threshold=config.hysteresis_threshold,
            smart_truncation_tokens=config.smart_truncation_tokens,
        )


@dataclass
class MaskingResult:
    """Résultat d'une passe de masking."""
    new_history: ConversationHistory
    masked_count: int = 0
    tokens_saved: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "masked_count": self.masked_count,
            "tokens_saved": self.tokens_saved,
            "turns": len(self.new_history),
        }


class ObservationMaskingService:
    """
    Service de gestion de la fenêtre de contexte par masquage des sorties d'outils.

    Algorithme "Backward FIFO":
    1. Protège les 50k tokens d'observations les plus récents.
    2. Identifie les observations prunables au-delà.
    3. Masque si le total prunable atteint 30k tokens.
    """

    def __init__(
        self,
        policy: Optional[MaskingPolicy] = None,
        estimator: Optional[TokenEstimator] = None,
        id_generator: Optional[ObservationIdGenerator] = None,
        telemetry: Optional[TelemetrySink] = None,
    ):
        self.policy = policy or MaskingPolicy()
        self.estimator = estimator or TiktokenEstimator()
        self.id_generator = id_generator
        self.telemetry = telemetry or NullTelemetrySink()

    async def mask(
        self,
        history: ConversationHistory,
        storage: HistoryDirResolver,
        telemetry: Optional[TelemetrySink] = None,
    ) -> MaskingResult:
        """
        Masque les observations prunables de `history`.

        Args:
            history: Historique (plus ancien en premier), non modifié
            storage: Fournit le répertoire d'historique de la session
            telemetry: Sink de télémétrie (défaut: celui du service)

        Returns:
            MaskingResult avec le nouvel historique

        Raises:
            TokenizationError: Si l'estimateur échoue
            ObservationOffloadError: Si l'écriture sur disque échoue
        """
        if not history or not self.policy.enabled:
            return MaskingResult(new_history=history)

        scan = scan_history(history, self.estimator, self.policy.protection_threshold)
        total_prunable_tokens = scan.total_prunable_tokens

        if not should_trigger_masking(total_prunable_tokens, self.policy.hysteresis_threshold):
            return MaskingResult(new_history=history)

        logger.info(
            f"🧹 [OBSERVATION_MASKING] Masking déclenché. Tokens prunables: "
            f"{total_prunable_tokens:,} (>= {self.policy.hysteresis_threshold:,})"
        )

        offloader = ObservationOffloader(storage.get_history_dir(), self.id_generator)
        await offloader.ensure_dir()

        new_history = list(history)
        tokens_saved = 0
        for record in scan.records:
            tokens_saved += await self._mask_record(new_history, record, offloader)

        masked_count = len(scan.records)
        logger.info(
            f"🧹 [OBSERVATION_MASKING] {masked_count} sortie(s) d'outil masquée(s), "
            f"~{tokens_saved:,} tokens économisés"
        )

        result = MaskingResult(
            new_history=new_history,
            masked_count=masked_count,
            tokens_saved=tokens_saved,
        )

        await self._emit_telemetry(
            telemetry or self.telemetry,
            ObservationMaskingEvent(
                tokens_before=total_prunable_tokens,
                tokens_after=total_prunable_tokens - tokens_saved,
                masked_count=masked_count,
                total_prunable_tokens=total_prunable_tokens,
            ),
        )

        return result

    async def _mask_record(
        self,
        new_history: ConversationHistory,
        record: PrunableRecord,
        offloader: ObservationOffloader,
    ) -> int:
        """Décharge un record, remplace sa part dans `new_history`, retourne les tokens économisés."""

        turn = new_history[record.turn_index]
        part: ToolObservationPart = turn.parts[record.part_index]

        # Écrit même si le snippet est identique (contenu trop court pour être tronqué).
        file_path = await offloader.write(part.name, get_call_id(part), record.content)

        snippet = format_masked_snippet(
            record.content,
            str(file_path),
            part.name or UNKNOWN_TOOL_NAME,
            record.tokens,
            self.policy.smart_truncation_tokens,
        )
        new_part = replace_observation_text(part, record.observation, snippet)

        new_parts = list(turn.parts)
        new_parts[record.part_index] = new_part
        new_history[record.turn_index] = replace(turn, parts=tuple(new_parts))

        new_tokens = self.estimator.estimate([new_part])
        return record.tokens - new_tokens

    async def _emit_telemetry(self, sink: TelemetrySink, event: ObservationMaskingEvent) -> None:
        try:
            await sink.emit(event)
        except Exception as e:
            logger.warning(f"⚠️ [OBSERVATION_MASKING] Télémétrie en échec (ignorée): {e}")


def create_masking_service(
    settings: Settings,
    estimator: Optional[TokenEstimator] = None,
    id_generator: Optional[ObservationIdGenerator] = None,
) -> ObservationMaskingService:
    """Construit un service depuis la configuration chargée."""
    return ObservationMaskingService(
        policy=MaskingPolicy.from_config(settings.observation_masking),
        estimator=estimator,
        id_generator=id_generator,
        telemetry=create_telemetry_sink(settings.telemetry),
    )


async def mask_observations(
    history: ConversationHistory,
    storage: HistoryDirResolver,
    *,
    policy: Optional[MaskingPolicy] = None,
    estimator: Optional[TokenEstimator] = None,
    telemetry: Optional[TelemetrySink] = None,
) -> MaskingResult:
    """Fonction utilitaire: une passe de masking avec un service éphémère."""
    service = ObservationMaskingService(policy=policy, estimator=estimator, telemetry=telemetry)
    return await service.mask(history, storage)
