"""
Tokenization avec Tiktoken - Estimation des tokens des parts d'historique.
"""
import json
from functools import lru_cache
from typing import Protocol, Sequence

import tiktoken

from .constants import TIKTOKEN_ENCODING
from .exceptions import TokenizationError
from .models import OpaquePart, Part, TextPart, ToolCallPart, ToolObservationPart


class TokenEstimator(Protocol):
    """Estimateur de tokens déterministe pour une tranche de parts."""

    def estimate(self, parts: Sequence[Part]) -> int:
        ...


@lru_cache(maxsize=None)
def get_encoding(name: str = TIKTOKEN_ENCODING):
    """Charge l'encodage Tiktoken une seule fois (chargement paresseux)."""
    return tiktoken.get_encoding(name)


def count_tokens_text(text: str) -> int:
    """
    Compte les tokens d'un texte simple.

    Args:
        text: Texte à analyser

    Returns:
        Nombre de tokens
    """
    if not text:
        return 0
    return len(get_encoding().encode(text, disallowed_special=()))


def _part_to_text(part: Part) -> str:
    if isinstance(part, TextPart):
        return part.text
    if isinstance(part, ToolObservationPart):
        return json.dumps(
            {"name": part.name, "response": part.response},
            ensure_ascii=False,
            default=str,
        )
    if isinstance(part, ToolCallPart):
        return json.dumps(
            {"name": part.name, "args": part.args},
            ensure_ascii=False,
            default=str,
        )
    if isinstance(part, OpaquePart):
        return json.dumps(part.data, ensure_ascii=False, default=str)
    raise TypeError(f"Type de part inconnu: {type(part).__name__}")


class TiktokenEstimator:
    """
    Estimateur basé sur Tiktoken (cl100k_base).

    Une observation est comptée sur sa forme JSON `{name, response}`,
    une part texte sur son texte brut.
    """

    def estimate(self, parts: Sequence[Part]) -> int:
        """
        Estime les tokens d'une séquence de parts.

        Raises:
            TokenizationError: Si une erreur survient lors du comptage
        """
        if not parts:
            return 0

        try:
            return sum(count_tokens_text(_part_to_text(part)) for part in parts)
        except Exception as e:
            raise TokenizationError(
                message=f"Erreur lors du comptage des tokens: {e}",
                content_preview=str(parts)[:200]
            ) from e
