"""
UI Store — the process-wide loading flag and error banner.
"""

from typing import Optional

from config.log import get_logger
from models.state import UIState

log = get_logger(__name__)


class UIStore:
    """Shared by every domain store; the last write wins."""

    def __init__(self):
        self.state = UIState()

    @property
    def is_global_loading(self) -> bool:
        return self.state.is_global_loading

    @property
    def global_error(self) -> Optional[str]:
        return self.state.global_error

    def set_loading(self, loading: bool) -> None:
        self.state.is_global_loading = loading

    def set_error(self, message: Optional[str]) -> None:
        if message:
            log.error("[Banner] %s", message)
        self.state.global_error = message

    def clear_error(self) -> None:
        self.state.global_error = None

    def reset(self) -> None:
        self.state = UIState()
