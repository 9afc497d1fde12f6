"""
Résolution du répertoire d'historique où sont déchargées les observations.
"""
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol, Union

if TYPE_CHECKING:
    from ..config.loader import ObservationMaskingConfig


class HistoryDirResolver(Protocol):
    """Fournit le répertoire d'historique de la session/projet courant."""

    def get_history_dir(self) -> Path:
        ...


class StaticHistoryDir:
    """Répertoire d'historique fixe (tests, scripts)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def get_history_dir(self) -> Path:
        return self.path


class SessionHistoryDir:
    """Répertoire par session: `<base_dir>/<session_id>`."""

    def __init__(self, base_dir: Union[str, Path], session_id: Union[str, int]):
        self.base_dir = Path(base_dir).expanduser()
        self.session_id = str(session_id)

    def get_history_dir(self) -> Path:
        return self.base_dir / self.session_id


def resolver_from_config(
    masking_config: "ObservationMaskingConfig",
    session_id: Optional[Union[str, int]] = None,
) -> HistoryDirResolver:
    """
    Construit un resolver depuis `ObservationMaskingConfig`.

    Args:
        masking_config: Configuration du masking (champ `history_dir`)
        session_id: Identifiant de session (optionnel)
    """
    if session_id is None:
        return StaticHistoryDir(masking_config.history_dir)
    return SessionHistoryDir(masking_config.history_dir, session_id)
