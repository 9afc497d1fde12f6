"""
Tests unitaires pour le module de tokenization.
"""
import pytest

from observation_offload.core import tokens
from observation_offload.core.exceptions import TokenizationError
from observation_offload.core.models import TextPart, ToolObservationPart
from observation_offload.core.tokens import TiktokenEstimator


@pytest.fixture
def encoding_available():
    """Ignore le test si l'encodage tiktoken ne peut pas être chargé (hors ligne)."""
    try:
        tokens.get_encoding()
    except Exception as e:
        pytest.skip(f"Encodage tiktoken indisponible: {e}")


def test_count_tokens_text_empty():
    """Test avec texte vide."""
    assert tokens.count_tokens_text("") == 0


def test_estimate_empty_parts():
    assert TiktokenEstimator().estimate([]) == 0


def test_count_tokens_text_simple(encoding_available):
    """Test avec texte simple."""
    assert tokens.count_tokens_text("Bonjour le monde") > 0


def test_estimate_tool_observation_grows_with_content(encoding_available):
    estimator = TiktokenEstimator()
    small = ToolObservationPart(name="read_file", response={"output": "abc"})
    large = ToolObservationPart(name="read_file", response={"output": "abc def " * 500})

    assert estimator.estimate([large]) > estimator.estimate([small]) > 0
    assert estimator.estimate([small]) == estimator.estimate([small])


def test_estimate_sums_parts(encoding_available):
    estimator = TiktokenEstimator()
    a = TextPart(text="premier texte")
    b = TextPart(text="second texte un peu plus long")

    assert estimator.estimate([a, b]) == estimator.estimate([a]) + estimator.estimate([b])


def test_estimate_wraps_errors(monkeypatch):
    def boom(text):
        raise RuntimeError("encodage cassé")

    monkeypatch.setattr(tokens, "count_tokens_text", boom)

    with pytest.raises(TokenizationError) as exc_info:
        TiktokenEstimator().estimate([TextPart(text="x")])

    assert exc_info.value.code == "tokenization_error"
