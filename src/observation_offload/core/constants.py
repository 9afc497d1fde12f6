"""
Constantes globales pour Observation Offload.
"""

# ============================================================================
# OBSERVATION MASKING
# ============================================================================
TOOL_PROTECTION_THRESHOLD = 50_000  # Tokens d'observations récentes jamais masqués
HYSTERESIS_THRESHOLD = 30_000  # Minimum de tokens prunables avant toute action
SMART_TRUNCATION_TOKENS = 5_000  # Tokens conservés en tête et en queue
CHARS_PER_TOKEN = 4  # Proxy caractères/token pour la troncature

OBSERVATION_DIR = "observations"
MASKED_MARKER = "[Observation Masked]"
UNKNOWN_TOOL_NAME = "unknown_tool"

# Clés texte reconnues dans une réponse d'outil (ordre de priorité)
OBSERVATION_TEXT_KEYS = ("output", "result", "stdout", "content")
CALL_ID_KEY = "callId"

DEFAULT_OBSERVATION_MASKING_CONFIG = {
    "enabled": True,
    "protection_threshold": TOOL_PROTECTION_THRESHOLD,
    "hysteresis_threshold": HYSTERESIS_THRESHOLD,
    "smart_truncation_tokens": SMART_TRUNCATION_TOKENS,
    "history_dir": "~/.observation_offload/history",
}

# ============================================================================
# TELEMETRY
# ============================================================================
DEFAULT_TELEMETRY_CONFIG = {
    "enabled": False,
    "endpoint": "",
    "timeout_ms": 2000,
}

# ============================================================================
# TOKENIZATION
# ============================================================================
TIKTOKEN_ENCODING = "cl100k_base"
