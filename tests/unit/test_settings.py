"""Unit tests for SettingsManager and WallpaperSettings."""

from unittest.mock import MagicMock

import pytest

from portfolios.scene.camera import CameraRig, SceneObject
from portfolios.scene.click_to_focus import DISABLE_3D_KEY
from portfolios.scene.focus_controller import FocusController, FocusSettings
from portfolios.settings import (
    DEFAULT_VOLUME,
    SILENCE_DB,
    VOLUME_KEY,
    WALLPAPER_KEY,
    SettingsManager,
    WallpaperSettings,
    volume_to_db,
)


@pytest.fixture
def mixer():
    return MagicMock()


@pytest.fixture
def focus(clock):
    return FocusController(CameraRig(), settings=FocusSettings(start_focused=False), clock=clock)


@pytest.fixture
def computer():
    return SceneObject("Computer")


@pytest.fixture
def settings(preferences, mixer, focus, computer):
    return SettingsManager(
        preferences,
        audio_mixer=mixer,
        focus_controller=focus,
        objects_to_disable=[computer],
    )


class TestVolume:

    @pytest.mark.parametrize("volume, expected", [
        (1.0, 0.0),
        (0.1, -20.0),
        (0.0, SILENCE_DB),
        (0.00005, SILENCE_DB),
    ])
    def test_volume_to_db(self, volume, expected):
        assert volume_to_db(volume) == pytest.approx(expected)

    def test_set_volume_persists_and_applies(self, settings, preferences, mixer):
        settings.set_volume(0.1)

        mixer.set_float.assert_called_with("MasterVolume", pytest.approx(-20.0))
        assert preferences.get_float(VOLUME_KEY) == pytest.approx(0.1)
        assert settings.get_volume() == pytest.approx(0.1)

    def test_load_without_saved_volume_applies_default_only(self, settings, preferences, mixer):
        settings.load_settings()

        mixer.set_float.assert_called_once_with("MasterVolume", pytest.approx(volume_to_db(DEFAULT_VOLUME)))
        assert preferences.has_key(VOLUME_KEY) is False

    def test_load_saved_volume(self, settings, preferences):
        preferences.set_float(VOLUME_KEY, 0.3)
        settings.load_settings()
        assert settings.get_volume() == pytest.approx(0.3)

    def test_without_mixer(self, preferences):
        manager = SettingsManager(preferences)
        manager.set_volume(0.5)
        assert manager.get_volume() == 0.5


class TestDisable3D:

    def test_disable_blocks_focus_and_hides_objects(self, settings, preferences, focus, computer):
        settings.set_disable_3d(True)

        assert settings.is_3d_disabled() is True
        assert focus.enabled is False
        assert computer.active is False
        assert preferences.get_int(DISABLE_3D_KEY) == 1

    def test_load_restores_disabled_state(self, settings, preferences, focus, computer):
        preferences.set_int(DISABLE_3D_KEY, 1)
        settings.load_settings()

        assert settings.is_3d_disabled() is True
        assert computer.active is False

    def test_reset(self, settings, preferences, focus, computer):
        settings.set_volume(0.2)
        settings.set_disable_3d(True)

        settings.reset_settings()

        assert settings.get_volume() == DEFAULT_VOLUME
        assert settings.is_3d_disabled() is False
        assert focus.enabled is True
        assert computer.active is True
        assert preferences.has_key(VOLUME_KEY) is False
        assert preferences.has_key(DISABLE_3D_KEY) is False


class TestWallpaper:

    def test_default(self, preferences):
        assert WallpaperSettings(preferences, count=6).current() == 5

    def test_change(self, preferences):
        seen = []
        wallpaper = WallpaperSettings(preferences, count=6, on_change=seen.append)

        assert wallpaper.change(2) == 2
        assert wallpaper.current() == 2
        assert preferences.get_int(WALLPAPER_KEY) == 2
        assert seen == [2]

    def test_out_of_range_stored_value(self, preferences):
        preferences.set_int(WALLPAPER_KEY, 9)
        assert WallpaperSettings(preferences, count=6).current() == 1

    @pytest.mark.parametrize("index", [0, 7])
    def test_change_rejects_out_of_range(self, preferences, index):
        with pytest.raises(ValueError):
            WallpaperSettings(preferences, count=6).change(index)

    def test_requires_positive_count(self, preferences):
        with pytest.raises(ValueError):
            WallpaperSettings(preferences, count=0)
