"""Mouse/touch free-look for EXPLORE mode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from portfolios.core.config_manager import ConfigManager, get_config_manager
from portfolios.core.frame_scheduler import FrameContext
from portfolios.core.logging_utils import get_module_logger

from .camera import CameraRig
from .input_state import TouchPhase, Vector2
from .math3d import clamp, lerp, quat_from_euler, wrap_angle


@dataclass
class LookSettings:
    mouse_sensitivity: float = 100.0
    touch_sensitivity: float = 0.5
    min_vertical_angle: float = -90.0
    max_vertical_angle: float = 90.0
    min_horizontal_angle: float = -180.0
    max_horizontal_angle: float = 180.0
    smooth_look: bool = True
    smooth_speed: float = 10.0

    @classmethod
    def from_config(cls, config: Dict[str, str], manager: Optional[ConfigManager] = None) -> "LookSettings":
        cm = manager or get_config_manager()
        d = cls()
        return cls(
            mouse_sensitivity=cm.get_float(config, "look.mouse_sensitivity", d.mouse_sensitivity),
            touch_sensitivity=cm.get_float(config, "look.touch_sensitivity", d.touch_sensitivity),
            min_vertical_angle=cm.get_float(config, "look.min_vertical", d.min_vertical_angle),
            max_vertical_angle=cm.get_float(config, "look.max_vertical", d.max_vertical_angle),
            min_horizontal_angle=cm.get_float(config, "look.min_horizontal", d.min_horizontal_angle),
            max_horizontal_angle=cm.get_float(config, "look.max_horizontal", d.max_horizontal_angle),
            smooth_look=cm.get_bool(config, "look.smooth", d.smooth_look),
            smooth_speed=cm.get_float(config, "look.smooth_speed", d.smooth_speed),
        )


class CameraLookAround:

    def __init__(self, camera: CameraRig, settings: Optional[LookSettings] = None):
        self.logger = get_module_logger("CameraLookAround")
        self.camera = camera
        self.settings = settings or LookSettings()
        self.enabled = True

        self.x_rotation = 0.0
        self.y_rotation = 0.0
        self.target_x_rotation = 0.0
        self.target_y_rotation = 0.0

        self._last_touch_position: Optional[Vector2] = None
        self._touching = False
        self._started = False

    def start(self) -> None:
        """Seed pitch/yaw from the camera's current orientation.

        Runs on the first enabled update, or the first explicit look
        target, when not called explicitly. A controller that starts disabled
        seeds from the pose it is handed.
        """
        self._started = True
        x, y, _ = self.camera.euler_angles
        self.x_rotation = wrap_angle(float(x))
        self.y_rotation = float(y)
        self.target_x_rotation = self.x_rotation
        self.target_y_rotation = self.y_rotation

    def update(self, ctx: FrameContext) -> None:
        if not self.enabled:
            return
        if not self._started:
            self.start()
        self._handle_input(ctx)
        self._apply_rotation(ctx.delta_time)

    def _handle_input(self, ctx: FrameContext) -> None:
        s = self.settings
        mouse_x = ctx.input.mouse_delta[0] * s.mouse_sensitivity * ctx.delta_time
        mouse_y = ctx.input.mouse_delta[1] * s.mouse_sensitivity * ctx.delta_time

        touch = ctx.input.primary_touch()
        if touch is not None:
            if touch.phase is TouchPhase.BEGAN:
                self._last_touch_position = touch.position
                self._touching = True
            elif touch.phase is TouchPhase.MOVED and self._touching and self._last_touch_position:
                mouse_x = (touch.position[0] - self._last_touch_position[0]) * s.touch_sensitivity
                mouse_y = (touch.position[1] - self._last_touch_position[1]) * s.touch_sensitivity
                self._last_touch_position = touch.position
            elif touch.phase in (TouchPhase.ENDED, TouchPhase.CANCELED):
                self._touching = False

        self.target_y_rotation += mouse_x
        self.target_x_rotation -= mouse_y

        self.target_x_rotation = clamp(self.target_x_rotation, s.min_vertical_angle, s.max_vertical_angle)
        self.target_y_rotation = clamp(self.target_y_rotation, s.min_horizontal_angle, s.max_horizontal_angle)

    def _apply_rotation(self, delta_time: float) -> None:
        if self.settings.smooth_look:
            step = self.settings.smooth_speed * delta_time
            self.x_rotation = lerp(self.x_rotation, self.target_x_rotation, step)
            self.y_rotation = lerp(self.y_rotation, self.target_y_rotation, step)
        else:
            self.x_rotation = self.target_x_rotation
            self.y_rotation = self.target_y_rotation

        self.camera.rotation = quat_from_euler((self.x_rotation, self.y_rotation, 0.0))

    # ------------------------------------------------------------------
    # Public controls

    def set_look_direction(self, horizontal: float, vertical: float) -> None:
        if not self._started:
            self.start()
        s = self.settings
        self.target_y_rotation = clamp(horizontal, s.min_horizontal_angle, s.max_horizontal_angle)
        self.target_x_rotation = clamp(vertical, s.min_vertical_angle, s.max_vertical_angle)

    def reset_look_direction(self) -> None:
        if not self._started:
            self.start()
        self.target_x_rotation = 0.0
        self.target_y_rotation = 0.0

    def set_sensitivity(self, sensitivity: float) -> None:
        self.settings.mouse_sensitivity = sensitivity

    def set_look_limits(self, min_vertical: float, max_vertical: float, min_horizontal: float, max_horizontal: float) -> None:
        self.settings.min_vertical_angle = min_vertical
        self.settings.max_vertical_angle = max_vertical
        self.settings.min_horizontal_angle = min_horizontal
        self.settings.max_horizontal_angle = max_horizontal

    @property
    def look_direction(self) -> Tuple[float, float]:
        return self.y_rotation, self.x_rotation


__all__ = ["LookSettings", "CameraLookAround"]
