"""
Configuration des tests pytest.
"""
import pytest
import sys
import os

# Ajoute src au path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from observation_offload.config import loader as config_loader
from observation_offload.features.observation_masking.payload import extract_observation


class CharCountEstimator:
    """Estimateur de test: 1 token par caractère du texte de l'observation."""

    def __init__(self):
        self.calls = 0

    def estimate(self, parts) -> int:
        self.calls += 1
        total = 0
        for part in parts:
            observation = extract_observation(part)
            if observation is not None:
                total += len(observation.text)
        return total


class FixedIdGenerator:
    """Générateur d'identifiants déterministe."""

    def __init__(self, timestamp: str = "1700000000000", suffix: str = "abc123"):
        self._timestamp = timestamp
        self._suffix = suffix

    def timestamp(self) -> str:
        return self._timestamp

    def suffix(self) -> str:
        return self._suffix


class RecordingTelemetrySink:
    """Sink de test qui mémorise les événements reçus."""

    def __init__(self):
        self.events = []

    async def emit(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def estimator():
    return CharCountEstimator()


@pytest.fixture
def id_generator():
    return FixedIdGenerator()


@pytest.fixture
def telemetry_sink():
    return RecordingTelemetrySink()


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Isole le cache de configuration entre les tests."""
    config_loader._clear_config_cache()
    yield
    config_loader._clear_config_cache()
