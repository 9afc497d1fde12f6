"""observation_offload.features.observation_masking.payload

Extraction et remplacement du texte d'une réponse d'outil.

Une réponse est soit une chaîne brute, soit un mapping contenant une des clés
texte reconnues (`output` > `result` > `stdout` > `content`, seules les valeurs
`str` comptent). L'extraction renvoie aussi la clé d'origine afin que le
remplacement restaure exactement la même forme.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Optional

from ...core.constants import CALL_ID_KEY, MASKED_MARKER, OBSERVATION_TEXT_KEYS
from ...core.models import ToolObservationPart


@dataclass(frozen=True)
class ExtractedObservation:
    """Texte d'une observation et clé d'où il provient (`None` = chaîne brute)."""

    text: str
    key: Optional[str] = None


def extract_observation(part: ToolObservationPart) -> Optional[ExtractedObservation]:
    response = part.response
    if response is None:
        return None

    if isinstance(response, str):
        return ExtractedObservation(text=response, key=None)

    if isinstance(response, Mapping):
        for key in OBSERVATION_TEXT_KEYS:
            value = response.get(key)
            if isinstance(value, str):
                return ExtractedObservation(text=value, key=key)

    return None


def is_already_masked(text: str) -> bool:
    return MASKED_MARKER in text


def get_call_id(part: ToolObservationPart) -> Optional[str]:
    """Lit la clé `callId` de la réponse (mapping uniquement)."""

    response = part.response
    if not isinstance(response, Mapping):
        return None

    call_id_obj = response.get(CALL_ID_KEY)
    if call_id_obj is None:
        return None

    call_id = str(call_id_obj)
    return call_id or None


def replace_observation_text(
    part: ToolObservationPart,
    observation: ExtractedObservation,
    new_text: str,
) -> ToolObservationPart:
    """Retourne une nouvelle part où seul le texte de l'observation change.

    Les autres clés de la réponse et les champs hors réponse sont conservés.
    """

    if observation.key is None or not isinstance(part.response, Mapping):
        return replace(part, response=new_text)

    new_response = dict(part.response)
    new_response[observation.key] = new_text
    return replace(part, response=new_response)
