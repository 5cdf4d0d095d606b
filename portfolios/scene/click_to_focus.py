"""Click (or tap) the computer model to enter focused mode."""

from __future__ import annotations

from typing import Callable, Optional

from portfolios.core.frame_scheduler import FrameContext
from portfolios.core.logging_utils import get_module_logger
from portfolios.core.preferences import Preferences

from .camera import SceneObject
from .focus_controller import FocusController
from .input_state import TouchPhase, Vector2

DISABLE_3D_KEY = "Disable3D"

# (screen point, max distance, layer mask) -> first object hit or None.
# A layer mask of 0 means "all layers".
Raycaster = Callable[[Vector2, float, int], Optional[SceneObject]]


class ClickToFocus:

    def __init__(
        self,
        focus_controller: Optional[FocusController],
        target: SceneObject,
        raycaster: Raycaster,
        preferences: Optional[Preferences] = None,
        *,
        max_distance: float = 50.0,
        layer_mask: int = 0,
    ):
        self.logger = get_module_logger("ClickToFocus")
        self.focus_controller = focus_controller
        self.target = target
        self.raycaster = raycaster
        self.preferences = preferences
        self.max_distance = max_distance
        self.layer_mask = layer_mask

        if focus_controller is None:
            self.logger.error("No focus controller assigned - clicks will be ignored")

    def update(self, ctx: FrameContext) -> None:
        if self.focus_controller is None or self.focus_controller.is_focused():
            return

        touch = ctx.input.primary_touch()
        touch_began = touch is not None and touch.phase is TouchPhase.BEGAN
        if not (ctx.input.mouse_button_down(0) or touch_began):
            return

        point = touch.position if touch is not None else ctx.input.mouse_position
        hit = self.raycaster(point, self.max_distance, self.layer_mask)
        if hit is not None and self.is_target_hit(hit):
            self.on_computer_clicked()

    def is_target_hit(self, hit: SceneObject) -> bool:
        return hit is self.target or hit.is_child_of(self.target) or self.target.is_child_of(hit)

    def on_computer_clicked(self) -> bool:
        if self.preferences is not None and self.preferences.get_int(DISABLE_3D_KEY, 0) == 1:
            self.logger.info("Cannot focus - 3D mode is disabled")
            return False

        if self.focus_controller is None or self.focus_controller.is_focused():
            return False

        self.logger.info("Computer clicked - focusing camera")
        return self.focus_controller.toggle_focus()


__all__ = ["ClickToFocus", "Raycaster", "DISABLE_3D_KEY"]
