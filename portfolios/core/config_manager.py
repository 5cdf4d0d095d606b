import asyncio
import concurrent.futures
import errno
import hashlib
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import aiofiles

from portfolios.core.logging_utils import get_module_logger
from .paths import PROJECT_ROOT, USER_CONFIG_OVERRIDES_DIR


logger = get_module_logger("ConfigManager")

# Override-file key listing base-file keys deleted while the base was read-only
REMOVED_KEYS_MARKER = "__removed__"


class ConfigManager:
    """Reads and writes flat ``key = value`` text files.

    The same format backs the project config (``config.txt``) and the
    persisted preference store. Writes that hit a read-only location fall
    back to a per-user override file which is merged on read.
    """

    def __init__(self, overrides_dir: Optional[Path] = None):
        self.lock = asyncio.Lock()
        self._overrides_dir = overrides_dir or USER_CONFIG_OVERRIDES_DIR
        try:
            self._project_root = PROJECT_ROOT.resolve()
        except OSError:  # pragma: no cover - exotic filesystems
            self._project_root = PROJECT_ROOT

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _stringify_value(value: Any) -> str:
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    @staticmethod
    def _strip_inline_comment(value: str) -> str:
        # JSON payloads (terminal history) may legitimately contain '#'.
        if value.startswith(('{', '[')):
            return value
        if '#' in value:
            return value.split('#')[0].strip()
        return value

    def _parse_config_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = self._strip_inline_comment(value.strip())

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]

            config[key] = value

        return config

    def _apply_updates(
        self,
        lines: List[str],
        updates: Dict[str, Any],
        remove_keys: Iterable[str] = (),
    ) -> List[str]:
        removed = set(remove_keys)
        updated_keys = set()
        result: List[str] = []

        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith('#') or '=' not in stripped:
                result.append(line)
                continue

            key = stripped.split('=', 1)[0].strip()
            if key in removed:
                continue
            if key in updates:
                indent = len(line) - len(line.lstrip())
                result.append(' ' * indent + f"{key} = {self._stringify_value(updates[key])}\n")
                updated_keys.add(key)
                continue
            result.append(line)

        for key, value in updates.items():
            if key not in updated_keys:
                result.append(f"{key} = {self._stringify_value(value)}\n")
                logger.debug("Added new config key: %s", key)

        return result

    def _resolve_override_path(self, config_path: Path) -> Path:
        try:
            rel_path = config_path.resolve().relative_to(self._project_root)
        except ValueError:
            digest = hashlib.sha1(str(config_path).encode('utf-8')).hexdigest()[:10]
            safe_name = re.sub(r'[^a-zA-Z0-9._-]+', '_', config_path.stem or 'config')
            rel_path = Path('external') / f"{safe_name}_{digest}{config_path.suffix or '.txt'}"
        return self._overrides_dir / rel_path

    def _load_override_sync(self, config_path: Path) -> Dict[str, str]:
        override_path = self._resolve_override_path(config_path)
        if not override_path.exists():
            return {}

        try:
            with open(override_path, 'r', encoding='utf-8') as fh:
                return self._parse_config_lines(fh)
        except OSError as exc:
            logger.warning("Failed to read override config %s: %s", override_path, exc)
            return {}

    def _write_override_sync(
        self,
        config_path: Path,
        updates: Dict[str, Any],
        remove_keys: Iterable[str] = (),
    ) -> bool:
        removals = set(remove_keys)
        if not updates and not removals:
            return True

        override_path = self._resolve_override_path(config_path)
        try:
            existing = self._load_override_sync(config_path)
            removed = set(self.get_list(existing, REMOVED_KEYS_MARKER))
            for key in removals:
                existing.pop(key, None)
                removed.add(key)
            for key, value in updates.items():
                existing[key] = self._stringify_value(value)
                removed.discard(key)
            existing.pop(REMOVED_KEYS_MARKER, None)
            if removed:
                existing[REMOVED_KEYS_MARKER] = ",".join(sorted(removed))

            override_path.parent.mkdir(parents=True, exist_ok=True)
            with open(override_path, 'w', encoding='utf-8') as fh:
                for key in sorted(existing.keys()):
                    fh.write(f"{key} = {existing[key]}\n")

            logger.debug("Stored config overrides in %s", override_path)
            return True
        except OSError as exc:
            logger.error("Failed to write config override %s: %s", override_path, exc)
            return False

    def _merge_override(self, config: Dict[str, str], overrides: Dict[str, str]) -> None:
        removed = self.get_list(overrides, REMOVED_KEYS_MARKER)
        config.update(overrides)
        config.pop(REMOVED_KEYS_MARKER, None)
        for key in removed:
            config.pop(key, None)

    def _clear_override(self, config_path: Path) -> None:
        override_path = self._resolve_override_path(config_path)
        try:
            override_path.unlink(missing_ok=True)
        except OSError:
            return

    @staticmethod
    def _is_read_only_error(exc: OSError) -> bool:
        return isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EROFS)

    # ------------------------------------------------------------------
    # Reading

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Synchronous read. Safe to call from inside a running loop."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self._read_config_sync(config_path)
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(self._read_config_sync, config_path).result()

    def _read_config_sync(self, config_path: Path) -> Dict[str, str]:
        config: Dict[str, str] = {}

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = self._parse_config_lines(f)
            except OSError as e:
                logger.error("Failed to read config %s: %s", config_path, e)

        self._merge_override(config, self._load_override_sync(config_path))

        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        config: Dict[str, str] = {}

        if await asyncio.to_thread(config_path.exists):
            try:
                async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                    lines = await f.readlines()
                config = self._parse_config_lines(lines)
            except OSError as e:
                logger.error("Failed to read config %s: %s", config_path, e)

        self._merge_override(config, await asyncio.to_thread(self._load_override_sync, config_path))

        return config

    # ------------------------------------------------------------------
    # Writing

    def write_config(
        self,
        config_path: Path,
        updates: Dict[str, Any],
        *,
        remove_keys: Iterable[str] = (),
        create: bool = False,
    ) -> bool:
        """Synchronous write. Safe to call from inside a running loop."""
        removals = tuple(remove_keys)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self._write_config_sync(config_path, updates, removals, create)
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(self._write_config_sync, config_path, updates, removals, create)
            return future.result()

    def _write_config_sync(
        self,
        config_path: Path,
        updates: Dict[str, Any],
        remove_keys: Iterable[str] = (),
        create: bool = False,
    ) -> bool:
        if not config_path.exists():
            if not create:
                logger.error("Config file not found: %s", config_path)
                return False
            try:
                config_path.parent.mkdir(parents=True, exist_ok=True)
                config_path.touch()
            except OSError as e:
                logger.error("Failed to create config %s: %s", config_path, e)
                return False

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()

            lines = self._apply_updates(lines, updates, remove_keys)

            with open(config_path, 'w', encoding='utf-8') as f:
                f.writelines(lines)

            self._clear_override(config_path)
            return True

        except OSError as e:
            if self._is_read_only_error(e):
                logger.warning(
                    "Config %s is not writable (%s). Falling back to override file",
                    config_path,
                    e,
                )
                return self._write_override_sync(config_path, updates, remove_keys)
            logger.error("Failed to write config %s: %s", config_path, e, exc_info=True)
            return False

    async def write_config_async(
        self,
        config_path: Path,
        updates: Dict[str, Any],
        *,
        remove_keys: Iterable[str] = (),
        create: bool = False,
    ) -> bool:
        removals = tuple(remove_keys)
        if not await asyncio.to_thread(config_path.exists):
            if not create:
                logger.error("Config file not found: %s", config_path)
                return False
            return await asyncio.to_thread(self._write_config_sync, config_path, updates, removals, True)

        async with self.lock:
            try:
                async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                    lines = await f.readlines()

                lines = self._apply_updates(lines, updates, removals)

                async with aiofiles.open(config_path, 'w', encoding='utf-8') as f:
                    await f.writelines(lines)

                await asyncio.to_thread(self._clear_override, config_path)
                return True

            except OSError as e:
                if self._is_read_only_error(e):
                    logger.warning(
                        "Config %s is not writable (%s). Falling back to override file",
                        config_path,
                        e,
                    )
                    return await asyncio.to_thread(
                        self._write_override_sync, config_path, updates, removals
                    )
                logger.error("Failed to write config %s: %s", config_path, e, exc_info=True)
                return False

    # ------------------------------------------------------------------
    # Typed getters

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default

        return config[key].strip().lower() in ('true', '1', 'yes', 'on')

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        if key not in config:
            return default

        try:
            return int(config[key])
        except ValueError:
            logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    def get_float(self, config: Dict[str, str], key: str, default: float = 0.0) -> float:
        if key not in config:
            return default

        try:
            return float(config[key])
        except ValueError:
            logger.warning("Invalid float value for %s: %s, using default %f", key, config[key], default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)

    def get_list(self, config: Dict[str, str], key: str, default: Iterable[str] = ()) -> List[str]:
        """Comma separated values, blanks dropped."""
        if key not in config:
            return list(default)
        return [item.strip() for item in config[key].split(',') if item.strip()]


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
