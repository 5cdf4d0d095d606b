"""Persisted key-value settings (volume, 3D toggle, wallpaper, terminal history)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Set

from portfolios.core.config_manager import ConfigManager, get_config_manager
from portfolios.core.logging_utils import get_module_logger

logger = get_module_logger(__name__)


@dataclass(slots=True)
class PreferenceChange:
    """Describes which keys were updated or removed in a preference write."""

    updated: Dict[str, Any]
    removed: Set[str]


class Preferences:
    """Typed key-value store backed by a ``key = value`` file.

    Values are cached in memory as strings; every setter writes through to
    disk immediately so ``save()`` only exists for call-site symmetry.
    """

    def __init__(
        self,
        path: Path,
        *,
        config_manager: Optional[ConfigManager] = None,
        on_change: Optional[Callable[[PreferenceChange], None]] = None,
    ) -> None:
        self._path = Path(path)
        self._manager = config_manager or get_config_manager()
        self._on_change = on_change
        self._cache: Dict[str, str] = {}
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    def reload(self) -> Dict[str, str]:
        self._cache = dict(self._manager.read_config(self._path))
        return self.snapshot()

    def snapshot(self) -> Dict[str, str]:
        return dict(self._cache)

    # ------------------------------------------------------------------
    # Readers

    def has_key(self, key: str) -> bool:
        return key in self._cache

    def get_str(self, key: str, default: str = "") -> str:
        return self._cache.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        return self._manager.get_int(self._cache, key, default)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._manager.get_float(self._cache, key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._manager.get_bool(self._cache, key, default)

    # ------------------------------------------------------------------
    # Writers

    def set_str(self, key: str, value: str) -> bool:
        return self.write({key: value})

    def set_int(self, key: str, value: int) -> bool:
        return self.write({key: int(value)})

    def set_float(self, key: str, value: float) -> bool:
        return self.write({key: float(value)})

    def delete_key(self, key: str) -> bool:
        if key not in self._cache:
            return True
        return self.write({}, remove_keys=[key])

    def save(self) -> None:
        """Writes are immediate; kept for parity with callers that flush."""

    def write(self, updates: Dict[str, Any], *, remove_keys: Optional[Iterable[str]] = None) -> bool:
        removals = set(remove_keys or ())
        if not updates and not removals:
            return True

        success = self._manager.write_config(self._path, updates, remove_keys=removals, create=True)
        if success:
            self._apply_cache_updates(updates, removals)
        else:
            logger.warning("Could not persist preferences %s", sorted(set(updates) | removals))
        return success

    async def write_async(self, updates: Dict[str, Any], *, remove_keys: Optional[Iterable[str]] = None) -> bool:
        removals = set(remove_keys or ())
        if not updates and not removals:
            return True

        success = await self._manager.write_config_async(
            self._path, updates, remove_keys=removals, create=True
        )
        if success:
            self._apply_cache_updates(updates, removals)
        return success

    def _apply_cache_updates(self, updates: Dict[str, Any], removed: Set[str]) -> None:
        for key, value in updates.items():
            self._cache[key] = ConfigManager._stringify_value(value)
        for key in removed:
            self._cache.pop(key, None)

        if self._on_change:
            try:
                self._on_change(PreferenceChange(updated=dict(updates), removed=set(removed)))
            except Exception:  # pragma: no cover - listener bugs must not break writes
                logger.debug("Preference change callback failed", exc_info=True)


__all__ = ["Preferences", "PreferenceChange"]
