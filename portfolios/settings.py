"""User settings: master volume, the "Disable 3D" switch and the wallpaper."""

from __future__ import annotations

import math
from typing import Callable, Iterable, List, Optional, Protocol

from portfolios.core.logging_utils import get_module_logger
from portfolios.core.preferences import Preferences
from portfolios.scene.camera import SceneObject
from portfolios.scene.click_to_focus import DISABLE_3D_KEY
from portfolios.scene.focus_controller import FocusController

VOLUME_KEY = "MasterVolume"
WALLPAPER_KEY = "Wallpaper"

DEFAULT_VOLUME = 0.75
DEFAULT_WALLPAPER = 5
SILENCE_DB = -80.0
_MIN_LINEAR_VOLUME = 0.0001


class AudioMixer(Protocol):
    def set_float(self, name: str, value: float) -> bool: ...


def volume_to_db(volume: float) -> float:
    """Map a 0..1 slider value onto the mixer's -80..0 dB range."""
    return 20.0 * math.log10(volume) if volume > _MIN_LINEAR_VOLUME else SILENCE_DB


class SettingsManager:

    def __init__(
        self,
        preferences: Preferences,
        *,
        audio_mixer: Optional[AudioMixer] = None,
        focus_controller: Optional[FocusController] = None,
        objects_to_disable: Iterable[SceneObject] = (),
        mixer_parameter: str = "MasterVolume",
    ):
        self.logger = get_module_logger("Settings")
        self.preferences = preferences
        self.audio_mixer = audio_mixer
        self.focus_controller = focus_controller
        self.objects_to_disable: List[SceneObject] = list(objects_to_disable)
        self.mixer_parameter = mixer_parameter

        self._volume = DEFAULT_VOLUME
        self._3d_disabled = False

    def load_settings(self) -> None:
        if self.preferences.has_key(VOLUME_KEY):
            self.set_volume(self.preferences.get_float(VOLUME_KEY, DEFAULT_VOLUME))
        else:
            self._apply_volume(self._volume)

        if self.preferences.has_key(DISABLE_3D_KEY):
            self.set_disable_3d(self.preferences.get_int(DISABLE_3D_KEY, 0) == 1)

    def set_volume(self, volume: float) -> None:
        self._volume = float(volume)
        self._apply_volume(self._volume)
        self.preferences.set_float(VOLUME_KEY, self._volume)
        self.preferences.save()

    def _apply_volume(self, volume: float) -> None:
        if self.audio_mixer is not None:
            self.audio_mixer.set_float(self.mixer_parameter, volume_to_db(volume))

    def set_disable_3d(self, disable: bool) -> None:
        self._3d_disabled = bool(disable)

        if self.focus_controller is not None:
            self.focus_controller.enabled = not disable

        for obj in self.objects_to_disable:
            obj.set_active(not disable)

        self.preferences.set_int(DISABLE_3D_KEY, 1 if disable else 0)
        self.preferences.save()
        self.logger.info("3D Mode: %s", "Disabled" if disable else "Enabled")

    def reset_settings(self) -> None:
        self._volume = DEFAULT_VOLUME
        self._apply_volume(self._volume)
        self._3d_disabled = False
        if self.focus_controller is not None:
            self.focus_controller.enabled = True
        for obj in self.objects_to_disable:
            obj.set_active(True)

        self.preferences.delete_key(VOLUME_KEY)
        self.preferences.delete_key(DISABLE_3D_KEY)
        self.preferences.save()
        self.logger.info("Settings reset to default")

    def is_3d_disabled(self) -> bool:
        return self._3d_disabled

    def get_volume(self) -> float:
        return self._volume


class WallpaperSettings:
    """1-based wallpaper selection persisted under ``Wallpaper``."""

    def __init__(
        self,
        preferences: Preferences,
        count: int,
        on_change: Optional[Callable[[int], None]] = None,
    ):
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        self.logger = get_module_logger("Wallpaper")
        self.preferences = preferences
        self.count = count
        self.on_change = on_change

    def current(self) -> int:
        index = self.preferences.get_int(WALLPAPER_KEY, DEFAULT_WALLPAPER)
        if not 1 <= index <= self.count:
            self.logger.warning("Stored wallpaper %d out of range 1..%d, using 1", index, self.count)
            return 1
        return index

    def change(self, index: int) -> int:
        if not 1 <= index <= self.count:
            raise ValueError(f"wallpaper must be in 1..{self.count}, got {index}")
        self.preferences.set_int(WALLPAPER_KEY, index)
        if self.on_change is not None:
            self.on_change(index)
        self.logger.info("Wallpaper -> %d", index)
        return index


__all__ = [
    "VOLUME_KEY",
    "WALLPAPER_KEY",
    "DEFAULT_VOLUME",
    "DEFAULT_WALLPAPER",
    "AudioMixer",
    "volume_to_db",
    "SettingsManager",
    "WallpaperSettings",
]
