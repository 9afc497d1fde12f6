"""observation_offload.core.models

Modèle de données de l'historique conversationnel.

Un historique est une liste ordonnée (plus ancien en premier) de `Turn`.
Chaque tour porte un rôle et une séquence de `Part`. Seules les
`ToolObservationPart` intéressent le masking; les autres variantes sont
transportées telles quelles.

Les dataclasses sont gelées: une mutation passe par `dataclasses.replace`,
ce qui laisse intacts les objets de l'appelant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Union


ResponsePayload = Union[str, Mapping[str, object], None]


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ToolCallPart:
    name: str
    args: Mapping[str, object] = field(default_factory=dict)
    call_id: Optional[str] = None


@dataclass(frozen=True)
class ToolObservationPart:
    """Réponse d'exécution d'un outil (une "observation").

    Attributes:
        name: Nom de l'outil (peut être absent selon le provider).
        response: Chaîne brute ou mapping contenant une clé texte
            (`output`, `result`, `stdout`, `content`).
        call_id: Identifiant d'appel côté provider (optionnel).
    """

    name: Optional[str]
    response: ResponsePayload
    call_id: Optional[str] = None


@dataclass(frozen=True)
class OpaquePart:
    """Part non interprétée (image, données provider, etc.)."""

    data: Mapping[str, object] = field(default_factory=dict)


Part = Union[TextPart, ToolCallPart, ToolObservationPart, OpaquePart]


@dataclass(frozen=True)
class Turn:
    role: str
    parts: tuple[Part, ...] = ()


ConversationHistory = list[Turn]
