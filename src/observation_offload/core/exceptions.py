"""
Exceptions personnalisées pour Observation Offload.
"""


class ObservationOffloadBaseError(Exception):
    """Exception de base pour toutes les erreurs du package."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or "unknown_error"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} - Détails: {self.details}"
        return f"[{self.code}] {self.message}"


class ConfigurationError(ObservationOffloadBaseError):
    """Erreur de configuration (fichier manquant, valeur invalide)."""

    def __init__(self, message: str, config_key: str = None):
        super().__init__(
            message=message,
            code="config_error",
            details={"key": config_key} if config_key else {}
        )


class TokenizationError(ObservationOffloadBaseError):
    """Erreur lors du comptage de tokens."""

    def __init__(self, message: str, content_preview: str = None):
        details = {}
        if content_preview:
            details["preview"] = content_preview[:100]
        super().__init__(
            message=message,
            code="tokenization_error",
            details=details
        )


class ObservationOffloadError(ObservationOffloadBaseError):
    """Erreur d'écriture d'une observation sur disque (répertoire ou fichier)."""

    def __init__(self, message: str, path: str = None, tool_name: str = None):
        details = {}
        if path:
            details["path"] = path
        if tool_name:
            details["tool"] = tool_name
        super().__init__(
            message=message,
            code="observation_offload_error",
            details=details
        )


class TelemetryError(ObservationOffloadBaseError):
    """Erreur d'émission d'un événement de télémétrie."""

    def __init__(self, message: str, endpoint: str = None, status_code: int = None):
        details = {}
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message=message,
            code="telemetry_error",
            details=details
        )
