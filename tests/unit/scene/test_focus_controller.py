"""Unit tests for FocusController."""

from types import SimpleNamespace

import numpy as np
import pytest

from portfolios.scene.camera import CameraRig, SceneObject
from portfolios.scene.easing import EasingCurve
from portfolios.scene.focus_controller import FocusController, FocusMode, FocusSettings
from portfolios.scene.input_state import InputFrame
from portfolios.scene.math3d import IDENTITY, quat_angle, quat_from_euler


FOCUS_ROTATION = quat_from_euler((0.0, 90.0, 0.0))


@pytest.fixture
def camera():
    return CameraRig(field_of_view=60.0)


@pytest.fixture
def look_around():
    return SimpleNamespace(enabled=True)


@pytest.fixture
def panels():
    return [SceneObject("Terminal", active=False), SceneObject("Projects", active=False)]


@pytest.fixture
def make_controller(camera, look_around, panels, clock):
    def _make(**overrides):
        settings = FocusSettings(start_focused=overrides.pop("start_focused", False), **overrides)
        return FocusController(
            camera,
            settings=settings,
            look_around=look_around,
            panels=panels,
            clock=clock,
        )
    return _make


def _panels_active(panels):
    return [panel.active for panel in panels]


class TestInitialState:

    def test_start_focused_snaps_to_focus_pose(self, camera, look_around, panels, clock):
        controller = FocusController(camera, look_around=look_around, panels=panels, clock=clock)

        assert controller.mode is FocusMode.FOCUSED
        assert controller.is_transitioning() is False
        assert np.allclose(camera.rotation, FOCUS_ROTATION)
        assert camera.field_of_view == 27.0
        assert look_around.enabled is False
        assert _panels_active(panels) == [True, True]

    def test_default_normal_fov_taken_from_camera(self, make_controller):
        controller = make_controller()
        assert controller.settings.normal_fov == 60.0

    def test_explicit_normal_fov_kept(self, make_controller):
        controller = make_controller(normal_fov=50.0)
        assert controller.settings.normal_fov == 50.0

    def test_start_in_explore_leaves_camera(self, make_controller, camera, look_around, panels):
        controller = make_controller()

        assert controller.mode is FocusMode.EXPLORE
        assert np.allclose(camera.rotation, IDENTITY)
        assert look_around.enabled is True
        assert _panels_active(panels) == [False, False]

    def test_settings_are_copied(self, camera):
        settings = FocusSettings(start_focused=False)
        controller = FocusController(camera, settings=settings)
        controller.set_focus_fov(10.0)
        assert settings.focus_fov == 27.0


class TestFocusTransition:

    def test_mode_flips_when_transition_starts(self, make_controller, look_around, panels):
        controller = make_controller()

        assert controller.toggle_focus(now=0.0) is True

        assert controller.mode is FocusMode.FOCUSED
        assert controller.is_focused() is True
        assert controller.is_transitioning() is True
        # Look-around off before the tween, panels only after it
        assert look_around.enabled is False
        assert _panels_active(panels) == [False, False]

    def test_eased_interpolation(self, make_controller, camera):
        controller = make_controller()
        controller.toggle_focus(now=0.0)

        controller.advance(0.25)
        assert camera.field_of_view == pytest.approx(60.0 - 33.0 * 0.15625)

        controller.advance(0.5)
        assert camera.field_of_view == pytest.approx(43.5)
        assert quat_angle(camera.rotation, quat_from_euler((0.0, 45.0, 0.0))) < 1e-6

    def test_snaps_exactly_to_target(self, make_controller, camera, panels):
        controller = make_controller()
        controller.toggle_focus(now=0.0)

        controller.advance(0.99)
        assert controller.is_transitioning() is True
        controller.advance(1.0)

        assert controller.is_transitioning() is False
        assert controller.transition is None
        assert camera.field_of_view == 27.0
        assert np.array_equal(camera.rotation, FOCUS_ROTATION)
        assert _panels_active(panels) == [True, True]

    def test_toggle_ignored_while_transitioning(self, make_controller, camera):
        controller = make_controller()
        controller.toggle_focus(now=0.0)
        transition = controller.transition

        assert controller.toggle_focus(now=0.5) is False
        assert controller.transition is transition
        assert controller.mode is FocusMode.FOCUSED

        controller.advance(2.0)
        assert camera.field_of_view == 27.0

    def test_zero_duration_finishes_on_next_advance(self, make_controller, camera):
        controller = make_controller(transition_duration=0.0)
        controller.toggle_focus(now=3.0)
        controller.advance(3.0)

        assert controller.is_transitioning() is False
        assert camera.field_of_view == 27.0

    def test_linear_easing(self, make_controller, camera):
        controller = make_controller(easing=EasingCurve.linear())
        controller.toggle_focus(now=0.0)
        controller.advance(0.25)
        assert camera.field_of_view == pytest.approx(60.0 - 33.0 * 0.25)

    def test_uses_clock_when_now_omitted(self, make_controller, camera, clock):
        controller = make_controller()
        clock.advance(5.0)
        controller.toggle_focus()

        assert controller.transition.start_time == 5.0
        controller.advance(6.0)
        assert camera.field_of_view == 27.0


class TestUnfocusTransition:

    def _focused(self, make_controller):
        controller = make_controller()
        controller.toggle_focus(now=0.0)
        controller.advance(1.0)
        return controller

    def test_panels_hidden_before_tween(self, make_controller, look_around, panels):
        controller = self._focused(make_controller)

        controller.toggle_focus(now=10.0)

        assert controller.mode is FocusMode.EXPLORE
        assert _panels_active(panels) == [False, False]
        assert look_around.enabled is False

        controller.advance(11.0)
        assert look_around.enabled is True

    def test_returns_to_saved_pose(self, make_controller, camera):
        camera.euler_angles = (10.0, 20.0, 0.0)
        saved = camera.rotation.copy()
        controller = self._focused(make_controller)

        controller.toggle_focus(now=10.0)
        controller.advance(11.0)

        assert quat_angle(camera.rotation, saved) < 1e-6
        assert camera.field_of_view == 60.0

    def test_force_unfocus(self, make_controller):
        controller = self._focused(make_controller)

        assert controller.force_unfocus(now=5.0) is True
        assert controller.mode is FocusMode.EXPLORE
        # Already transitioning
        assert controller.force_unfocus(now=5.1) is False

    def test_force_unfocus_noop_in_explore(self, make_controller):
        controller = make_controller()
        assert controller.force_unfocus(now=0.0) is False
        assert controller.transition is None


class TestFrameHandling:

    def test_key_press_toggles(self, make_controller, scheduler, camera):
        controller = make_controller()
        scheduler.add_update(controller.tick)

        scheduler.tick(InputFrame(keys_down=frozenset({"F"})), now=0.0)
        assert controller.is_transitioning() is True

        scheduler.tick(now=0.5)
        scheduler.tick(now=1.0)
        assert controller.is_transitioning() is False
        assert camera.field_of_view == 27.0

    def test_key_held_during_transition_is_ignored(self, make_controller, scheduler):
        controller = make_controller()
        scheduler.add_update(controller.tick)
        press = InputFrame(keys_down=frozenset({"f"}))

        scheduler.tick(press, now=0.0)
        scheduler.tick(press, now=0.5)

        assert controller.mode is FocusMode.FOCUSED

    def test_disabled_still_completes_transition(self, make_controller, scheduler, camera):
        controller = make_controller()
        scheduler.add_update(controller.tick)
        controller.toggle_focus(now=0.0)
        controller.enabled = False

        scheduler.tick(InputFrame(keys_down=frozenset({"f"})), now=2.0)

        assert controller.mode is FocusMode.FOCUSED
        assert controller.is_transitioning() is False
        assert camera.field_of_view == 27.0

    def test_custom_toggle_key(self, make_controller, scheduler):
        controller = make_controller(toggle_key="tab")
        scheduler.add_update(controller.tick)

        scheduler.tick(InputFrame(keys_down=frozenset({"f"})), now=0.0)
        assert controller.mode is FocusMode.EXPLORE
        scheduler.tick(InputFrame(keys_down=frozenset({"tab"})), now=0.1)
        assert controller.mode is FocusMode.FOCUSED


class TestMissingCollaborators:

    def test_without_camera_transition_is_immediate(self, look_around, panels):
        controller = FocusController(
            None,
            settings=FocusSettings(start_focused=False),
            look_around=look_around,
            panels=panels,
        )

        assert controller.toggle_focus() is True
        assert controller.is_transitioning() is False
        assert _panels_active(panels) == [True, True]

        controller.toggle_focus()
        assert controller.mode is FocusMode.EXPLORE
        assert look_around.enabled is True

    def test_without_look_around_or_panels(self, camera):
        controller = FocusController(camera, settings=FocusSettings(start_focused=False))
        controller.toggle_focus(now=0.0)
        controller.advance(1.0)
        assert controller.is_focused() is True


class TestSettings:

    def test_from_config(self):
        settings = FocusSettings.from_config({
            "focus.rotation": "5, 80, 0",
            "focus.fov": "30",
            "focus.duration": "0.5",
            "focus.easing": "linear",
            "focus.toggle_key": "g",
            "focus.start_focused": "false",
        })

        assert settings.focus_rotation == (5.0, 80.0, 0.0)
        assert settings.focus_fov == 30.0
        assert settings.transition_duration == 0.5
        assert settings.easing(0.3) == pytest.approx(0.3)
        assert settings.toggle_key == "g"
        assert settings.start_focused is False

    def test_from_config_invalid_values_fall_back(self):
        settings = FocusSettings.from_config({
            "focus.rotation": "a, b, c",
            "focus.easing": "bounce",
        })

        assert settings.focus_rotation == (0.0, 90.0, 0.0)
        assert settings.easing(0.25) == pytest.approx(0.15625)

    def test_runtime_setters(self, make_controller):
        controller = make_controller()
        controller.set_focus_rotation((0, 45, 0))
        controller.set_focus_fov(35)
        controller.set_normal_fov(65)
        controller.set_transition_duration(2)

        assert controller.settings.focus_rotation == (0.0, 45.0, 0.0)
        assert controller.settings.focus_fov == 35.0
        assert controller.settings.normal_fov == 65.0
        assert controller.settings.transition_duration == 2.0
