"""observation_offload.config.loader

Chargement de la configuration TOML.

Note d'architecture:
- Le package `config/` est consommé par la couche Features.
- Il ne doit donc pas dépendre de `features/*` afin d'éviter les imports circulaires
  et de préserver l'isolation des couches.
"""
import os
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional

from ..core.constants import DEFAULT_OBSERVATION_MASKING_CONFIG, DEFAULT_TELEMETRY_CONFIG
from ..core.exceptions import ConfigurationError

# Cache global de configuration
_config_cache: Optional[Dict[str, Any]] = None


def _expand_env_vars(obj: Any) -> Any:
    """
    Récursivement étend les variables d'environnement ${VAR} dans la config.

    Args:
        obj: Valeur à traiter (str, dict, list)

    Returns:
        Valeur avec variables d'environnement expansiées
    """
    if isinstance(obj, str):
        def replace_env_var(match):
            var_name = match.group(1)
            return os.environ.get(var_name, match.group(0))
        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def _clear_config_cache():
    """Vide le cache de configuration."""
    global _config_cache
    _config_cache = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Charge la configuration depuis config.toml.

    Args:
        config_path: Chemin vers le fichier config (optionnel)

    Returns:
        Dictionnaire de configuration

    Raises:
        ConfigurationError: Si le fichier n'existe pas ou est invalide
    """
    global _config_cache

    if _config_cache is not None:
        return _config_cache

    if config_path is None:
        # Structure: project/src/observation_offload/config/loader.py
        current_file = os.path.abspath(__file__)
        project_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(current_file))))
        config_path = os.path.join(project_dir, "config.toml")

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(
            message=f"Fichier de configuration non trouvé: {config_path}",
            config_key="config_path"
        )

    try:
        with open(path, "rb") as f:
            raw_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            message=f"Fichier de configuration invalide: {e}",
            config_key="config_path"
        ) from e

    _config_cache = _expand_env_vars(raw_config)
    return _config_cache


def reload_config(config_path: str = None) -> Dict[str, Any]:
    """
    Recharge la configuration depuis le fichier.

    Returns:
        Nouvelle configuration chargée
    """
    _clear_config_cache()
    return load_config(config_path)


def get_config() -> Dict[str, Any]:
    """
    Retourne la configuration en cache.

    Returns:
        Configuration actuelle
    """
    if _config_cache is None:
        return load_config()
    return _config_cache


def _clamp_int(value: object, *, default: int, min_value: int, max_value: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        v = value
    elif isinstance(value, float):
        v = int(value)
    else:
        return default
    if v < min_value:
        return min_value
    if v > max_value:
        return max_value
    return v


@dataclass(frozen=True)
class ObservationMaskingConfig:
    """Configuration du moteur d'observation masking (offload + troncature)."""

    enabled: bool = DEFAULT_OBSERVATION_MASKING_CONFIG["enabled"]
    protection_threshold: int = DEFAULT_OBSERVATION_MASKING_CONFIG["protection_threshold"]
    hysteresis_threshold: int = DEFAULT_OBSERVATION_MASKING_CONFIG["hysteresis_threshold"]
    smart_truncation_tokens: int = DEFAULT_OBSERVATION_MASKING_CONFIG["smart_truncation_tokens"]
    history_dir: str = DEFAULT_OBSERVATION_MASKING_CONFIG["history_dir"]


def get_observation_masking_config(config: Dict[str, Any]) -> ObservationMaskingConfig:
    """Charge la section `[observation_masking]` depuis le TOML.

    Propriétés:
    - Fallback robuste si section absente/incomplète
    - Validation/clamp des types pour éviter crash runtime
    - Ne dépend pas de la couche Features
    """

    defaults = ObservationMaskingConfig()
    obj = config.get("observation_masking")
    if not isinstance(obj, dict):
        return defaults

    enabled = bool(obj.get("enabled", defaults.enabled))

    protection_threshold = _clamp_int(
        obj.get("protection_threshold", defaults.protection_threshold),
        default=defaults.protection_threshold,
        min_value=0,
        max_value=10_000_000,
    )
    hysteresis_threshold = _clamp_int(
        obj.get("hysteresis_threshold", defaults.hysteresis_threshold),
        default=defaults.hysteresis_threshold,
        min_value=0,
        max_value=10_000_000,
    )
    smart_truncation_tokens = _clamp_int(
        obj.get("smart_truncation_tokens", defaults.smart_truncation_tokens),
        default=defaults.smart_truncation_tokens,
        min_value=1,
        max_value=1_000_000,
    )

    history_dir_obj = obj.get("history_dir", defaults.history_dir)
    if isinstance(history_dir_obj, str) and history_dir_obj.strip():
        history_dir = history_dir_obj.strip()
    else:
        history_dir = defaults.history_dir

    return ObservationMaskingConfig(
        enabled=enabled,
        protection_threshold=protection_threshold,
        hysteresis_threshold=hysteresis_threshold,
        smart_truncation_tokens=smart_truncation_tokens,
        history_dir=history_dir,
    )


@dataclass(frozen=True)
class TelemetryConfig:
    """Configuration de la télémétrie (statistiques d'usage)."""

    enabled: bool = DEFAULT_TELEMETRY_CONFIG["enabled"]
    endpoint: str = DEFAULT_TELEMETRY_CONFIG["endpoint"]
    timeout_ms: int = DEFAULT_TELEMETRY_CONFIG["timeout_ms"]


def get_telemetry_config(config: Dict[str, Any]) -> TelemetryConfig:
    """Charge la section `[telemetry]` depuis le TOML avec fallback robuste."""

    defaults = TelemetryConfig()
    obj = config.get("telemetry")
    if not isinstance(obj, dict):
        return defaults

    endpoint_obj = obj.get("endpoint", defaults.endpoint)
    endpoint = endpoint_obj.strip() if isinstance(endpoint_obj, str) else defaults.endpoint

    timeout_ms = _clamp_int(
        obj.get("timeout_ms", defaults.timeout_ms),
        default=defaults.timeout_ms,
        min_value=1,
        max_value=60_000,
    )

    return TelemetryConfig(
        enabled=bool(obj.get("enabled", defaults.enabled)),
        endpoint=endpoint,
        timeout_ms=timeout_ms,
    )
