"""
Focus Controller - switches the camera between free-look and the OS desktop.

Two modes:
- EXPLORE: free-look camera, look-around enabled, OS panels hidden
- FOCUSED: camera locked on the monitor, OS panels visible

A mode change is a timed transition (rotation slerp + field-of-view lerp
shaped by an easing curve) polled once per frame. Timing of the side effects
is intentionally asymmetric:

- Into FOCUSED: look-around disabled before the tween, panels shown after it
- Into EXPLORE: panels hidden before the tween, look-around enabled after it

``mode`` flips when the transition starts, not when it ends, so UI code that
queries the mode mid-transition sees the destination mode.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Dict, Iterable, List, Optional, Protocol, Tuple

import numpy as np

from portfolios.core.config_manager import ConfigManager, get_config_manager
from portfolios.core.frame_scheduler import FrameContext
from portfolios.core.logging_utils import get_module_logger

from .camera import CameraRig, SceneObject
from .easing import EasingCurve, EasingLike, curve_by_name
from .math3d import clamp01, lerp, quat_from_euler, slerp


class FocusMode(Enum):
    EXPLORE = "explore"
    FOCUSED = "focused"


class Toggleable(Protocol):
    enabled: bool


@dataclass
class FocusSettings:
    """Configuration for the focus transition and its key binding."""

    DEFAULT_NORMAL_FOV: ClassVar[float] = 70.0

    focus_rotation: Tuple[float, float, float] = (0.0, 90.0, 0.0)
    focus_fov: float = 27.0
    normal_fov: float = DEFAULT_NORMAL_FOV
    transition_duration: float = 1.0
    easing: EasingLike = field(default_factory=EasingCurve.ease_in_out)
    toggle_key: str = "f"
    start_focused: bool = True

    @classmethod
    def from_config(
        cls, config: Dict[str, str], manager: Optional[ConfigManager] = None
    ) -> "FocusSettings":
        cm = manager or get_config_manager()
        defaults = cls()

        rotation = defaults.focus_rotation
        raw_rotation = cm.get_list(config, "focus.rotation")
        if raw_rotation:
            try:
                x, y, z = (float(v) for v in raw_rotation)
                rotation = (x, y, z)
            except ValueError:
                get_module_logger("FocusController").warning(
                    "Invalid focus.rotation %r, using default %s", config.get("focus.rotation"), rotation
                )

        easing = defaults.easing
        if "focus.easing" in config:
            try:
                easing = curve_by_name(cm.get_str(config, "focus.easing"))
            except ValueError as exc:
                get_module_logger("FocusController").warning("%s; using ease_in_out", exc)

        return cls(
            focus_rotation=rotation,
            focus_fov=cm.get_float(config, "focus.fov", defaults.focus_fov),
            normal_fov=cm.get_float(config, "focus.normal_fov", defaults.normal_fov),
            transition_duration=cm.get_float(config, "focus.duration", defaults.transition_duration),
            easing=easing,
            toggle_key=cm.get_str(config, "focus.toggle_key", defaults.toggle_key),
            start_focused=cm.get_bool(config, "focus.start_focused", defaults.start_focused),
        )


@dataclass
class FocusTransition:
    """One in-flight interpolation between two camera poses."""

    target_mode: FocusMode
    start_rotation: np.ndarray
    target_rotation: np.ndarray
    start_fov: float
    target_fov: float
    start_time: float
    duration: float
    easing: EasingLike
    complete: bool = False

    def sample(self, now: float) -> Tuple[np.ndarray, float, bool]:
        """Pose at ``now`` and whether the transition has finished."""
        elapsed = now - self.start_time
        if self.duration <= 0.0 or elapsed >= self.duration:
            return self.target_rotation.copy(), self.target_fov, True

        blend = self.easing(clamp01(elapsed / self.duration))
        rotation = slerp(self.start_rotation, self.target_rotation, blend)
        fov = lerp(self.start_fov, self.target_fov, blend)
        return rotation, fov, False

    def step(self, camera: CameraRig, now: float) -> bool:
        rotation, fov, done = self.sample(now)
        camera.rotation = rotation
        camera.field_of_view = fov
        self.complete = done
        return done


class FocusController:
    """Owns camera pose and the EXPLORE/FOCUSED state machine.

    Collaborators are injected: the look-around controller (anything with an
    ``enabled`` flag) and the OS panel objects whose visibility follows the
    mode. Each is optional; a missing reference disables only its step.
    """

    def __init__(
        self,
        camera: Optional[CameraRig],
        *,
        settings: Optional[FocusSettings] = None,
        look_around: Optional[Toggleable] = None,
        panels: Iterable[SceneObject] = (),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.logger = get_module_logger("FocusController")
        self.camera = camera
        self.settings = dataclasses.replace(settings) if settings else FocusSettings()
        self.look_around = look_around
        self.panels: List[SceneObject] = list(panels)
        self._clock = clock

        # Disabling only stops key handling; an active transition still finishes.
        self.enabled = True

        self._mode = FocusMode.EXPLORE
        self._transitioning = False
        self._transition: Optional[FocusTransition] = None
        self.normal_orientation = camera.euler_angles if camera is not None else np.zeros(3)

        if camera is None:
            self.logger.error("No camera assigned - transitions will skip the tween")
        if look_around is None:
            self.logger.warning("No look-around controller assigned")
        if not self.panels:
            self.logger.warning("No OS panels assigned")

        if camera is not None and self.settings.normal_fov == FocusSettings.DEFAULT_NORMAL_FOV:
            self.settings.normal_fov = camera.field_of_view

        if self.settings.start_focused:
            self._set_panels_active(True)
            self._apply_focused_state_immediate()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def mode(self) -> FocusMode:
        return self._mode

    @property
    def transition(self) -> Optional[FocusTransition]:
        return self._transition

    def is_focused(self) -> bool:
        return self._mode is FocusMode.FOCUSED

    def is_transitioning(self) -> bool:
        return self._transitioning

    # =========================================================================
    # Mode changes
    # =========================================================================

    def toggle_focus(self, now: Optional[float] = None) -> bool:
        """Start a transition to the other mode.

        Returns False (and does nothing) while a transition is in flight;
        requests are dropped, not queued.
        """
        if self._transitioning:
            self.logger.debug("Toggle ignored - transition in progress")
            return False

        target = FocusMode.EXPLORE if self.is_focused() else FocusMode.FOCUSED
        self._begin_transition(target, now)
        return True

    def force_unfocus(self, now: Optional[float] = None) -> bool:
        """Return to EXPLORE; no-op unless focused and idle."""
        if not self.is_focused() or self._transitioning:
            return False
        self._begin_transition(FocusMode.EXPLORE, now)
        return True

    def _begin_transition(self, target: FocusMode, now: Optional[float]) -> None:
        self._mode = target
        self.logger.info("Mode -> %s", target.value)

        if target is FocusMode.FOCUSED:
            self._set_look_around_enabled(False)
            if self.camera is not None:
                self.normal_orientation = self.camera.euler_angles
            target_rotation = quat_from_euler(self.settings.focus_rotation)
            target_fov = self.settings.focus_fov
        else:
            self._set_panels_active(False)
            target_rotation = quat_from_euler(self.normal_orientation)
            target_fov = self.settings.normal_fov

        if self.camera is None:
            self._finish(target)
            return

        self._transition = FocusTransition(
            target_mode=target,
            start_rotation=self.camera.rotation.copy(),
            target_rotation=target_rotation,
            start_fov=self.camera.field_of_view,
            target_fov=target_fov,
            start_time=self._clock() if now is None else now,
            duration=self.settings.transition_duration,
            easing=self.settings.easing,
        )
        self._transitioning = True

    def _finish(self, target: FocusMode) -> None:
        self._set_panels_active(target is FocusMode.FOCUSED)
        if target is FocusMode.EXPLORE:
            self._set_look_around_enabled(True)
        self._transition = None
        self._transitioning = False
        self.logger.debug("Transition to %s complete", target.value)

    def _apply_focused_state_immediate(self) -> None:
        if self.camera is not None:
            self.normal_orientation = self.camera.euler_angles
            self.camera.rotation = quat_from_euler(self.settings.focus_rotation)
            self.camera.field_of_view = self.settings.focus_fov
        self._set_look_around_enabled(False)
        self._mode = FocusMode.FOCUSED
        self.logger.info("Started in focused state")

    # =========================================================================
    # Frame handling
    # =========================================================================

    def tick(self, ctx: FrameContext) -> None:
        """Scheduler update handler: key binding plus transition step."""
        if self.enabled and not self._transitioning and ctx.input.key_down(self.settings.toggle_key):
            self.toggle_focus(now=ctx.now)
        self.advance(ctx.now)

    def advance(self, now: float) -> None:
        transition = self._transition
        if transition is None or self.camera is None:
            return
        if transition.step(self.camera, now):
            self._finish(transition.target_mode)

    # =========================================================================
    # Collaborator side effects
    # =========================================================================

    def _set_look_around_enabled(self, enabled: bool) -> None:
        if self.look_around is not None:
            self.look_around.enabled = enabled

    def _set_panels_active(self, active: bool) -> None:
        for panel in self.panels:
            panel.set_active(active)

    # =========================================================================
    # Runtime configuration
    # =========================================================================

    def set_focus_rotation(self, rotation: Tuple[float, float, float]) -> None:
        self.settings.focus_rotation = tuple(float(v) for v in rotation)

    def set_focus_fov(self, fov: float) -> None:
        self.settings.focus_fov = float(fov)

    def set_normal_fov(self, fov: float) -> None:
        self.settings.normal_fov = float(fov)

    def set_transition_duration(self, duration: float) -> None:
        self.settings.transition_duration = float(duration)


__all__ = ["FocusMode", "FocusSettings", "FocusTransition", "FocusController"]
