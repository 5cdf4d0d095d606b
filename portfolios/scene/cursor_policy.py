"""Cursor visibility/lock policy that follows the focus mode.

FOCUSED -> visible and unlocked (OS desktop)
EXPLORE -> hidden and locked (free-look)

The desired state is re-asserted every frame because the host platform (a
browser in particular) may release the pointer lock on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from portfolios.core.config_manager import ConfigManager, get_config_manager
from portfolios.core.frame_scheduler import FrameContext
from portfolios.core.logging_utils import get_module_logger

from .focus_controller import FocusController, FocusMode


class CursorLockMode(Enum):
    NONE = "none"
    LOCKED = "locked"


@dataclass
class CursorState:
    """The platform cursor. Anything may write to it between frames."""
    visible: bool = True
    lock_mode: CursorLockMode = CursorLockMode.NONE

    def as_tuple(self) -> Tuple[bool, CursorLockMode]:
        return self.visible, self.lock_mode


@dataclass
class CursorSettings:
    hide_in_explore: bool = True
    lock_in_explore: bool = True

    @classmethod
    def from_config(cls, config: Dict[str, str], manager: Optional[ConfigManager] = None) -> "CursorSettings":
        cm = manager or get_config_manager()
        d = cls()
        return cls(
            hide_in_explore=cm.get_bool(config, "cursor.hide_in_explore", d.hide_in_explore),
            lock_in_explore=cm.get_bool(config, "cursor.lock_in_explore", d.lock_in_explore),
        )


class CursorPolicy:

    def __init__(
        self,
        focus_controller: Optional[FocusController],
        cursor: CursorState,
        settings: Optional[CursorSettings] = None,
    ):
        self.logger = get_module_logger("CursorPolicy")
        self.focus_controller = focus_controller
        self.cursor = cursor
        self.settings = settings or CursorSettings()

        self.enabled = True
        self._initialized = False
        self._last_focused = False

    def desired_state(self, mode: FocusMode) -> Tuple[bool, CursorLockMode]:
        if mode is FocusMode.FOCUSED:
            return True, CursorLockMode.NONE
        visible = not self.settings.hide_in_explore
        lock = CursorLockMode.LOCKED if self.settings.lock_in_explore else CursorLockMode.NONE
        return visible, lock

    def start(self) -> None:
        if self.focus_controller is None:
            self.logger.error("No focus controller assigned - cursor policy disabled")
            self.enabled = False
            return

        focused = self.focus_controller.is_focused()
        self._apply_mode(focused)
        self._last_focused = focused
        self._initialized = True

    def update(self, ctx: FrameContext) -> None:
        if not self._ready():
            return
        focused = self.focus_controller.is_focused()
        if focused != self._last_focused:
            self._apply_mode(focused)
            self._last_focused = focused

    def late_update(self, ctx: FrameContext) -> None:
        if not self._ready():
            return

        self.enforce()

        # Pointer activity while nominally in explore mode means the platform
        # dropped the lock; take it back immediately.
        if not self.focus_controller.is_focused() and ctx.input.any_mouse_activity():
            if self.cursor.lock_mode is not CursorLockMode.LOCKED:
                self.cursor.lock_mode = CursorLockMode.LOCKED
                self.cursor.visible = False

    def enforce(self) -> None:
        """Re-assert the state for the current mode without logging."""
        if self.focus_controller.is_focused():
            self.cursor.visible = True
            self.cursor.lock_mode = CursorLockMode.NONE
            return

        if self.settings.hide_in_explore:
            self.cursor.visible = False
        if self.settings.lock_in_explore:
            self.cursor.lock_mode = CursorLockMode.LOCKED

    def _ready(self) -> bool:
        return self.enabled and self._initialized and self.focus_controller is not None

    def _apply_mode(self, focused: bool) -> None:
        mode = FocusMode.FOCUSED if focused else FocusMode.EXPLORE
        self.cursor.visible, self.cursor.lock_mode = self.desired_state(mode)
        if focused:
            self.logger.debug("OS mode - cursor visible & unlocked")
        else:
            self.logger.debug("Explore mode - cursor hidden & locked")

    # ------------------------------------------------------------------
    # Manual overrides

    def set_os_mode(self) -> None:
        self.cursor.visible, self.cursor.lock_mode = self.desired_state(FocusMode.FOCUSED)

    def set_explore_mode(self) -> None:
        self.cursor.visible, self.cursor.lock_mode = self.desired_state(FocusMode.EXPLORE)

    def force_update(self) -> None:
        if self.focus_controller is not None:
            self._apply_mode(self.focus_controller.is_focused())


__all__ = ["CursorLockMode", "CursorState", "CursorSettings", "CursorPolicy"]
