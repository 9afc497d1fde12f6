"""observation_offload.features.observation_masking.offload

Déchargement des observations complètes sur disque.

Fichiers: `<history_dir>/observations/<tool>_<callId-ou-timestamp>_<suffixe>.txt`,
texte brut UTF-8, sans en-tête. Le répertoire est en ajout seul: on n'y lit
ni n'y supprime jamais rien.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from pathlib import Path
from typing import Optional, Protocol

import aiofiles
import aiofiles.os

from ...core.constants import OBSERVATION_DIR, UNKNOWN_TOOL_NAME
from ...core.exceptions import ObservationOffloadError

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ObservationIdGenerator(Protocol):
    """Source des parties non déterministes des noms de fichiers."""

    def timestamp(self) -> str:
        ...

    def suffix(self) -> str:
        ...


class DefaultIdGenerator:
    """Timestamp en millisecondes + suffixe aléatoire de 6 caractères hexa."""

    def timestamp(self) -> str:
        return str(int(time.time() * 1000))

    def suffix(self) -> str:
        return uuid.uuid4().hex[:6]


def _safe_component(value: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", value)


def build_observation_filename(
    tool_name: Optional[str],
    call_id: Optional[str],
    id_generator: ObservationIdGenerator,
) -> str:
    tool = _safe_component(tool_name or UNKNOWN_TOOL_NAME)
    call = _safe_component(call_id) if call_id else id_generator.timestamp()
    return f"{tool}_{call}_{id_generator.suffix()}.txt"


class ObservationOffloader:
    """Écrit le contenu complet des observations dans `<history_dir>/observations`."""

    def __init__(self, history_dir: Path, id_generator: Optional[ObservationIdGenerator] = None):
        self.observation_dir = Path(history_dir) / OBSERVATION_DIR
        self.id_generator = id_generator or DefaultIdGenerator()

    async def ensure_dir(self) -> Path:
        try:
            await aiofiles.os.makedirs(self.observation_dir, exist_ok=True)
        except OSError as e:
            raise ObservationOffloadError(
                message=f"Création du répertoire d'observations impossible: {e}",
                path=str(self.observation_dir),
            ) from e
        return self.observation_dir

    async def write(self, tool_name: Optional[str], call_id: Optional[str], content: str) -> Path:
        """
        Écrit `content` tel quel dans un nouveau fichier.

        Returns:
            Chemin du fichier écrit

        Raises:
            ObservationOffloadError: Si le répertoire ou le fichier ne peut être écrit
        """
        await self.ensure_dir()

        file_path = self.observation_dir / build_observation_filename(
            tool_name, call_id, self.id_generator
        )

        try:
            async with aiofiles.open(file_path, "x", encoding="utf-8", newline="") as f:
                await f.write(content)
        except OSError as e:
            raise ObservationOffloadError(
                message=f"Écriture de l'observation impossible: {e}",
                path=str(file_path),
                tool_name=tool_name,
            ) from e

        logger.debug(f"[OBSERVATION_MASKING] Observation déchargée: {file_path} ({len(content)} chars)")
        return file_path
