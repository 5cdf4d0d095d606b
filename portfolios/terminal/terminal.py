"""
Terminal session - the command line shown on the simulated desktop.

Input arrives one submitted line at a time (``submit``). The line is echoed
with the prompt, recorded in history, and the lower-cased command is
dispatched. Commands with side effects that take time (exit, reboot,
resume) run as background tasks so the caller's loop keeps ticking;
``wait_for_effects`` awaits them.
"""

from __future__ import annotations

import asyncio
import json
import random
import time
import webbrowser
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from portfolios.core.config_manager import ConfigManager, get_config_manager
from portfolios.core.logging_utils import get_module_logger
from portfolios.core.preferences import Preferences
from portfolios.data.fetch import HttpFetcher
from portfolios.scene.camera import SceneObject
from portfolios.scene.click_to_focus import DISABLE_3D_KEY
from portfolios.scene.focus_controller import FocusController

from . import commands
from .commands import PROMPT

HISTORY_KEY = "TerminalHistory"


@dataclass
class TerminalConfig:
    max_output_lines: int = 100
    max_history: int = 10
    exit_delay: float = 0.5
    reboot_delays: Tuple[float, ...] = (0.5, 0.5, 0.5, 1.0)
    linkedin_url: str = commands.LINKEDIN_URL
    github_url: str = commands.GITHUB_URL
    resume_endpoint: str = commands.RESUME_URL_ENDPOINT

    @classmethod
    def from_config(cls, config: Dict[str, str], manager: Optional[ConfigManager] = None) -> "TerminalConfig":
        cm = manager or get_config_manager()
        d = cls()
        delays = cm.get_list(config, "terminal.reboot_delays")
        try:
            reboot_delays = tuple(float(v) for v in delays) if delays else d.reboot_delays
        except ValueError:
            reboot_delays = d.reboot_delays
        return cls(
            max_output_lines=max(1, cm.get_int(config, "terminal.max_output_lines", d.max_output_lines)),
            max_history=max(1, cm.get_int(config, "terminal.max_history", d.max_history)),
            exit_delay=cm.get_float(config, "terminal.exit_delay", d.exit_delay),
            reboot_delays=reboot_delays,
            linkedin_url=cm.get_str(config, "terminal.linkedin_url", d.linkedin_url),
            github_url=cm.get_str(config, "terminal.github_url", d.github_url),
            resume_endpoint=cm.get_str(config, "terminal.resume_endpoint", d.resume_endpoint),
        )


class TerminalOutput:
    """Scroll-back buffer capped at ``max_lines``.

    An empty buffer plus an empty line is still an empty buffer, so the
    blank separator after ``clear`` does not leave a leading empty line.
    """

    def __init__(self, max_lines: int = 100, on_line: Optional[Callable[[str], None]] = None):
        self.max_lines = max_lines
        self.on_line = on_line
        self._lines: List[str] = []

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def append(self, text: str) -> None:
        if not self.text:
            self._lines = [text]
        else:
            self._lines.append(text)
        if len(self._lines) > self.max_lines:
            del self._lines[:len(self._lines) - self.max_lines]
        if self.on_line is not None:
            self.on_line(text)

    def clear(self) -> None:
        self._lines = []


class TerminalSession:

    def __init__(
        self,
        *,
        output: Optional[TerminalOutput] = None,
        preferences: Optional[Preferences] = None,
        focus_controller: Optional[FocusController] = None,
        terminal_object: Optional[SceneObject] = None,
        url_opener: Callable[[str], object] = webbrowser.open,
        resume_fetcher: Optional[HttpFetcher] = None,
        reload_callback: Optional[Callable[[], object]] = None,
        config: Optional[TerminalConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.logger = get_module_logger("Terminal")
        self.config = config or TerminalConfig()
        self.output = output or TerminalOutput(self.config.max_output_lines)
        self.preferences = preferences
        self.focus_controller = focus_controller
        self.terminal_object = terminal_object
        self.url_opener = url_opener
        self.resume_fetcher = resume_fetcher
        self.reload_callback = reload_callback
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._started_at = clock()
        self._effects: Set[asyncio.Task] = set()

        self.history: List[str] = []
        self.history_index = -1
        self.input_line = PROMPT

        self._handlers: Dict[str, Callable[[], Awaitable[None]]] = {
            "help": self._cmd_help,
            "clear": self._cmd_clear,
            "linkedin": self._cmd_linkedin,
            "github": self._cmd_github,
            "resume": self._cmd_resume,
            "fortune": self._cmd_fortune,
            "reboot": self._cmd_reboot,
            "exit": self._cmd_exit,
            "escape": self._cmd_escape,
            "date": self._cmd_date,
            "uptime": self._cmd_uptime,
        }

        self.load_history()

    def start(self) -> None:
        for line in commands.WELCOME_BANNER:
            self.output.append(line)

    # =========================================================================
    # Input
    # =========================================================================

    async def submit(self, line: str) -> None:
        command = line[len(PROMPT):] if line.startswith(PROMPT) else line
        self.input_line = PROMPT

        if not command.strip():
            return

        self.output.append(PROMPT + command)
        self.add_to_history(command)
        await self.execute(command.strip().lower())
        self.history_index = -1

    async def execute(self, command: str) -> None:
        name = commands.resolve(command)
        if name == "escape":
            # Terminal may be gone afterwards; no trailing separator.
            await self._cmd_escape()
            return

        handler = self._handlers.get(name)
        if handler is not None:
            await handler()
        else:
            lines = commands.canned_output(name)
            if lines is None:
                lines = (commands.UNKNOWN_COMMAND,)
            for text in lines:
                self.output.append(text)

        self.output.append("")

    # =========================================================================
    # History
    # =========================================================================

    def add_to_history(self, command: str) -> None:
        if command in self.history:
            self.history.remove(command)
        self.history.insert(0, command)
        del self.history[self.config.max_history:]
        self.save_history()

    def navigate_history(self, direction: int) -> str:
        """Move through history; index -1 is the bare prompt."""
        if not self.history:
            return self.input_line

        self.history_index = max(-1, min(self.history_index + direction, len(self.history) - 1))
        if self.history_index == -1:
            self.input_line = PROMPT
        else:
            self.input_line = PROMPT + self.history[self.history_index]
        return self.input_line

    def save_history(self) -> None:
        if self.preferences is None:
            return
        self.preferences.set_str(HISTORY_KEY, json.dumps({"history": self.history}))
        self.preferences.save()

    def load_history(self) -> None:
        if self.preferences is None or not self.preferences.has_key(HISTORY_KEY):
            return
        raw = self.preferences.get_str(HISTORY_KEY)
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            self.logger.warning("Ignoring unreadable command history: %s", exc)
            return
        entries = payload.get("history") if isinstance(payload, dict) else None
        if isinstance(entries, list):
            self.history = [str(e) for e in entries if isinstance(e, str)][: self.config.max_history]

    # =========================================================================
    # Effects
    # =========================================================================

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._effects.add(task)
        task.add_done_callback(self._effects.discard)
        return task

    async def wait_for_effects(self) -> None:
        while self._effects:
            await asyncio.gather(*list(self._effects))

    async def cancel_effects(self) -> None:
        tasks = list(self._effects)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def uptime(self) -> float:
        return self._clock() - self._started_at

    def _open_url(self, url: str) -> None:
        self.logger.info("Opening URL: %s", url)
        self.url_opener(url)

    # =========================================================================
    # Commands
    # =========================================================================

    async def _cmd_help(self) -> None:
        for line in commands.help_lines():
            self.output.append(line)

    async def _cmd_clear(self) -> None:
        self.output.clear()

    async def _cmd_linkedin(self) -> None:
        self.output.append("Opening LinkedIn profile...")
        self._open_url(self.config.linkedin_url)

    async def _cmd_github(self) -> None:
        self.output.append("Opening GitHub profile...")
        self._open_url(self.config.github_url)

    async def _cmd_resume(self) -> None:
        self.output.append("Opening resume...")
        self._spawn(self._fetch_and_open_resume())

    async def _fetch_and_open_resume(self) -> None:
        if self.resume_fetcher is None:
            self.logger.warning("No resume fetcher assigned")
            self.output.append("Error: Failed to fetch resume URL.")
            return

        result = await self.resume_fetcher.fetch_text(self.config.resume_endpoint)
        if not result.success:
            self.logger.error("Failed to fetch resume URL: %s", result.error)
            self.output.append("Error: Failed to fetch resume URL.")
            return

        url = result.text.strip()
        if url:
            self._open_url(url)
        else:
            self.output.append("Error: Resume URL not found.")

    async def _cmd_fortune(self) -> None:
        self.output.append(self._rng.choice(commands.FORTUNE_QUOTES))

    async def _cmd_date(self) -> None:
        self.output.append(datetime.now().strftime(commands.DATE_FORMAT))

    async def _cmd_uptime(self) -> None:
        self.output.append(commands.format_uptime(self.uptime()))

    async def _cmd_exit(self) -> None:
        self.output.append("Closing terminal...")
        self.output.append("Goodbye!")
        if self.terminal_object is None:
            self.logger.warning("Terminal object not assigned - cannot close terminal")
            return
        self._spawn(self._close_after(self.config.exit_delay))

    async def _close_after(self, delay: float) -> None:
        await self._sleep(delay)
        self.terminal_object.set_active(False)

    async def _cmd_reboot(self) -> None:
        self.output.clear()
        self.output.append(commands.REBOOT_SEQUENCE[0])
        self._spawn(self._reboot_sequence())

    async def _reboot_sequence(self) -> None:
        # One delay after each line; missing entries count as zero.
        steps = len(commands.REBOOT_SEQUENCE)
        delays = (list(self.config.reboot_delays) + [0.0] * steps)[:steps]
        for line, delay in zip(commands.REBOOT_SEQUENCE[1:], delays):
            await self._sleep(delay)
            self.output.append(line)
        await self._sleep(delays[-1])

        self.logger.info("Reboot sequence complete - reloading")
        if self.reload_callback is None:
            self.logger.warning("No reload callback assigned")
            return
        self.reload_callback()

    async def _cmd_escape(self) -> None:
        if self.preferences is not None and self.preferences.get_int(DISABLE_3D_KEY, 0) == 1:
            self.output.append("Explore mode is disabled.")
            self.output.append("Please uncheck 'Disable 3D' in Settings to use this feature.")
            return

        if self.focus_controller is not None:
            self.focus_controller.force_unfocus()
        else:
            self.logger.warning("No focus controller assigned - cannot leave focused mode")

        if self.terminal_object is not None:
            self.terminal_object.set_active(False)


__all__ = ["HISTORY_KEY", "TerminalConfig", "TerminalOutput", "TerminalSession"]
