"""
PortfoliOS desktop - wiring and entry point.

Modes:
- shell: the full desktop on a frame loop, terminal input read from stdin.
  Lines starting with ``/`` drive the scene instead of the terminal
  (``/focus``, ``/click``, ``/menu``, ``/volume 0.5``, ``/disable3d on``,
  ``/wallpaper 3``, ``/status``, ``/quit``).
- projects: fetch and print the GitHub projects list.
- timeline: fetch and print the hackathon timeline.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from portfolios.cli.common import add_common_cli_arguments, install_exception_handlers, positive_float
from portfolios.core.config_manager import get_config_manager
from portfolios.core.frame_scheduler import FrameScheduler
from portfolios.core.logging_config import configure_logging
from portfolios.core.logging_utils import get_module_logger
from portfolios.core.paths import (
    CONFIG_PATH,
    MASTER_LOG_FILE,
    PREFERENCES_FILE,
    PROJECTS_CACHE_FILE,
    ensure_directories,
)
from portfolios.core.preferences import Preferences
from portfolios.data.fetch import HttpFetcher
from portfolios.data.loaders import (
    ProjectsConfig,
    ProjectsLoader,
    TimelineConfig,
    TimelineLoader,
    load_more_label,
)
from portfolios.data.presenters import describe_event, describe_repo
from portfolios.data.records import GitHubRepo, HackathonEvent
from portfolios.redirects import Redirects
from portfolios.scene.camera import CameraRig, SceneObject
from portfolios.scene.click_to_focus import ClickToFocus, Raycaster
from portfolios.scene.cursor_policy import CursorPolicy, CursorSettings, CursorState
from portfolios.scene.focus_controller import FocusController, FocusSettings
from portfolios.scene.input_state import InputFrame
from portfolios.scene.look_around import CameraLookAround, LookSettings
from portfolios.settings import SettingsManager, WallpaperSettings
from portfolios.terminal.terminal import TerminalConfig, TerminalOutput, TerminalSession

logger = get_module_logger("Desktop")

MODES = ("shell", "projects", "timeline")
WALLPAPER_COUNT = 6


# =============================================================================
# Session wiring
# =============================================================================


def _no_hit(point, max_distance, layer_mask):
    return None


class DesktopSession:
    """One loaded desktop scene.

    Components are built by :meth:`create` (or passed in directly) and only
    talk to each other through the references handed to their constructors.
    """

    def __init__(
        self,
        *,
        preferences: Preferences,
        camera: CameraRig,
        computer: SceneObject,
        os_panel: SceneObject,
        menu: SceneObject,
        focus_controller: FocusController,
        look_around: CameraLookAround,
        cursor: CursorState,
        cursor_policy: CursorPolicy,
        terminal: TerminalSession,
        settings: SettingsManager,
        wallpaper: WallpaperSettings,
        click_to_focus: ClickToFocus,
    ):
        self.preferences = preferences
        self.camera = camera
        self.computer = computer
        self.os_panel = os_panel
        self.menu = menu
        self.focus_controller = focus_controller
        self.look_around = look_around
        self.cursor = cursor
        self.cursor_policy = cursor_policy
        self.terminal = terminal
        self.settings = settings
        self.wallpaper = wallpaper
        self.click_to_focus = click_to_focus

        self._pending_keys: Set[str] = set()

    @classmethod
    def create(
        cls,
        preferences: Preferences,
        config: Dict[str, str],
        *,
        fetcher: Optional[HttpFetcher] = None,
        raycaster: Optional[Raycaster] = None,
        clock: Callable[[], float] = time.monotonic,
        url_opener: Optional[Callable[[str], object]] = None,
        output: Optional[TerminalOutput] = None,
        reload_callback: Optional[Callable[[], object]] = None,
    ) -> "DesktopSession":
        camera = CameraRig("Main Camera")
        computer = SceneObject("Computer")
        computer.add_child(SceneObject("Monitor"))
        os_panel = SceneObject("OS Panel")
        terminal_object = os_panel.add_child(SceneObject("Terminal"))
        menu = os_panel.add_child(SceneObject("Start Menu", active=False))

        look_around = CameraLookAround(camera, LookSettings.from_config(config))
        focus_controller = FocusController(
            camera,
            settings=FocusSettings.from_config(config),
            look_around=look_around,
            panels=[os_panel],
            clock=clock,
        )
        cursor = CursorState()
        cursor_policy = CursorPolicy(focus_controller, cursor, CursorSettings.from_config(config))

        terminal_kwargs = {}
        if url_opener is not None:
            terminal_kwargs["url_opener"] = url_opener
        terminal = TerminalSession(
            output=output,
            preferences=preferences,
            focus_controller=focus_controller,
            terminal_object=terminal_object,
            resume_fetcher=fetcher,
            reload_callback=reload_callback,
            config=TerminalConfig.from_config(config),
            clock=clock,
            **terminal_kwargs,
        )

        click_to_focus = ClickToFocus(focus_controller, computer, raycaster or _no_hit, preferences)

        return cls(
            preferences=preferences,
            camera=camera,
            computer=computer,
            os_panel=os_panel,
            menu=menu,
            focus_controller=focus_controller,
            look_around=look_around,
            cursor=cursor,
            cursor_policy=cursor_policy,
            terminal=terminal,
            settings=SettingsManager(
                preferences,
                focus_controller=focus_controller,
                objects_to_disable=[computer],
            ),
            wallpaper=WallpaperSettings(preferences, WALLPAPER_COUNT),
            click_to_focus=click_to_focus,
        )

    def attach(self, scheduler: FrameScheduler) -> None:
        """Start components and register their frame handlers.

        Look-around seeds itself on its first enabled frame.
        """
        self.cursor_policy.start()
        self.settings.load_settings()
        self.terminal.start()

        for handler in self._update_handlers():
            scheduler.add_update(handler)
        scheduler.add_late_update(self.cursor_policy.late_update)

    def detach(self, scheduler: FrameScheduler) -> None:
        for handler in self._update_handlers():
            scheduler.remove(handler)
        scheduler.remove(self.cursor_policy.late_update)

    def _update_handlers(self):
        return (
            self.focus_controller.tick,
            self.look_around.update,
            self.click_to_focus.update,
            self.cursor_policy.update,
        )

    # ------------------------------------------------------------------
    # Input

    def press_key(self, key: str) -> None:
        """Queue a key press for the next frame."""
        self._pending_keys.add(key)

    def next_input(self) -> InputFrame:
        keys = frozenset(self._pending_keys)
        self._pending_keys.clear()
        return InputFrame(keys_down=keys)

    def toggle_menu(self) -> bool:
        return self.menu.toggle_active()

    def status_lines(self) -> List[str]:
        yaw_pitch = ", ".join(f"{v:.1f}" for v in self.camera.euler_angles)
        return [
            f"Mode: {self.focus_controller.mode.value}"
            + (" (transitioning)" if self.focus_controller.is_transitioning() else ""),
            f"Camera: euler=({yaw_pitch}) fov={self.camera.field_of_view:.1f}",
            f"Cursor: visible={self.cursor.visible} lock={self.cursor.lock_mode.value}",
            f"Look-around: {'enabled' if self.look_around.enabled else 'disabled'}",
            f"OS panel: {'visible' if self.os_panel.active else 'hidden'}",
            f"Terminal: {'open' if self.terminal.terminal_object.active else 'closed'}",
            f"Volume: {self.settings.get_volume():.2f}  3D disabled: {self.settings.is_3d_disabled()}",
            f"Wallpaper: {self.wallpaper.current()}",
        ]


# =============================================================================
# Console list rendering
# =============================================================================


class ConsoleListView:
    """List view that prints records as they are added."""

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write
        self.items: List[object] = []
        self.error: Optional[str] = None
        self.loading = False
        self.load_more_visible = False

    def set_loading(self, loading: bool) -> None:
        self.loading = loading
        if loading:
            self.write("Loading...")

    def show_error(self, message: str) -> None:
        self.error = message
        self.write(f"Error: {message}")

    def hide_error(self) -> None:
        self.error = None

    def clear(self) -> None:
        self.items = []

    def add_item(self, record: object) -> None:
        self.items.append(record)
        if isinstance(record, GitHubRepo):
            caption = describe_repo(record)
            self.write(f"- {caption['title']}")
            self.write(f"    {caption['description']}")
            self.write(f"    {caption['language']} | {caption['stars']} | {caption['forks']}")
            self.write(f"    {caption['url']}")
        elif isinstance(record, HackathonEvent):
            caption = describe_event(record)
            location = f" @ {caption['location']}" if caption["location"] else ""
            self.write(f"- {caption['date']}  {caption['title']}{location}")
            if caption["description"]:
                self.write(f"    {caption['description']}")
            if "github" in caption:
                self.write(f"    GitHub: {caption['github']}")
            if "project_url" in caption:
                self.write(f"    {caption['project_label']}: {caption['project_url']}")
        else:
            self.write(f"- {record}")

    def set_load_more(self, visible: bool, remaining: int = 0) -> None:
        self.load_more_visible = visible
        if visible:
            self.write(f"[{load_more_label(remaining)}]")


# =============================================================================
# Modes
# =============================================================================


async def run_projects(config: Dict[str, str]) -> int:
    projects_config = ProjectsConfig.from_config(config)
    if projects_config.cache_path is None:
        projects_config.cache_path = PROJECTS_CACHE_FILE

    view = ConsoleListView()
    async with HttpFetcher() as fetcher:
        await ProjectsLoader(projects_config, fetcher, view).load()
    return 1 if view.error else 0


async def run_timeline(config: Dict[str, str]) -> int:
    view = ConsoleListView()
    async with HttpFetcher() as fetcher:
        await TimelineLoader(TimelineConfig.from_config(config), fetcher, view).load()
    return 1 if view.error else 0


class DesktopShell:
    """Runs desktop sessions until the user quits; ``reboot`` builds a new one.

    A single stdin reader feeds a queue shared by every session, so a reload
    never leaves a second blocked ``input()`` competing for lines.
    """

    QUIT_LINE = "/quit"

    def __init__(
        self,
        preferences: Preferences,
        config: Dict[str, str],
        fetcher: HttpFetcher,
        *,
        fps: float = 60.0,
        read_line: Optional[Callable[[], str]] = None,
        write: Callable[[str], None] = print,
    ):
        self.logger = get_module_logger("DesktopShell")
        self.preferences = preferences
        self.config = config
        self.fetcher = fetcher
        self.fps = fps
        self.read_line = read_line or input
        self.write = write
        self.redirects = Redirects(fetcher)

        self.running = True
        self.sessions_started = 0
        self._reload_requested = False
        self._stop_event = asyncio.Event()
        self._lines: "asyncio.Queue[Optional[str]]" = asyncio.Queue()

    def _request_reload(self) -> None:
        self._reload_requested = True
        self._stop_event.set()

    async def run(self) -> None:
        pump = asyncio.create_task(self._pump_input())
        try:
            while self.running:
                self._reload_requested = False
                self._stop_event = asyncio.Event()
                await self._run_session()
                if not self._reload_requested:
                    break
                self.logger.info("Reloading desktop scene")
        finally:
            pump.cancel()
            await asyncio.gather(pump, return_exceptions=True)

    async def _pump_input(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            try:
                line = await loop.run_in_executor(None, self.read_line)
            except EOFError:
                await self._lines.put(None)
                return
            await self._lines.put(line)
            if line.strip().lower() == self.QUIT_LINE:
                return

    async def _run_session(self) -> None:
        session = DesktopSession.create(
            self.preferences,
            self.config,
            fetcher=self.fetcher,
            output=TerminalOutput(on_line=self.write),
            reload_callback=self._request_reload,
        )
        scheduler = FrameScheduler()
        session.attach(scheduler)
        self.sessions_started += 1

        frame_task = asyncio.create_task(
            scheduler.run(self.fps, input_source=session.next_input, stop_event=self._stop_event)
        )
        command_task = asyncio.create_task(self._command_loop(session))
        try:
            await self._stop_event.wait()
        finally:
            command_task.cancel()
            await asyncio.gather(command_task, return_exceptions=True)
            await session.terminal.cancel_effects()
            await asyncio.gather(frame_task, return_exceptions=True)
            session.detach(scheduler)

    async def _command_loop(self, session: DesktopSession) -> None:
        while not self._stop_event.is_set():
            line = await self._lines.get()
            if line is None:
                self.write("EOF received, shutting down...")
                self._quit()
                return

            try:
                if line.startswith("/"):
                    await self._control(session, line[1:].split())
                else:
                    await session.terminal.submit(line)
            except Exception as e:
                self.logger.error("Command error: %s", e, exc_info=True)
                self.write(f"Error: {e}")

    def _quit(self) -> None:
        self.running = False
        self._stop_event.set()

    async def _control(self, session: DesktopSession, parts: List[str]) -> None:
        if not parts:
            return
        cmd, args = parts[0].lower(), parts[1:]

        if cmd == "quit":
            self._quit()
        elif cmd == "focus":
            session.press_key(session.focus_controller.settings.toggle_key)
        elif cmd == "click":
            session.click_to_focus.on_computer_clicked()
        elif cmd == "menu":
            self.write(f"Menu {'opened' if session.toggle_menu() else 'closed'}")
        elif cmd == "volume" and args:
            try:
                session.settings.set_volume(float(args[0]))
            except ValueError:
                self.write("Usage: /volume <0..1>")
        elif cmd == "disable3d" and args:
            session.settings.set_disable_3d(args[0].lower() in ("on", "true", "1", "yes"))
        elif cmd == "wallpaper" and args:
            try:
                session.wallpaper.change(int(args[0]))
            except ValueError as exc:
                self.write(f"Error: {exc}")
        elif cmd == "resume":
            await self.redirects.open_resume()
        elif cmd == "status":
            for line in session.status_lines():
                self.write(line)
        else:
            self.write("Controls: /focus /click /menu /volume <v> /disable3d <on|off> "
                       "/wallpaper <n> /resume /status /quit")


# =============================================================================
# Entry point
# =============================================================================


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments with config file defaults."""
    config_manager = get_config_manager()
    config = config_manager.read_config(CONFIG_PATH)

    default_mode = config_manager.get_str(config, "mode", default="shell")
    default_fps = config_manager.get_float(config, "fps", default=60.0)

    parser = argparse.ArgumentParser(
        description="PortfoliOS - desktop simulation with focus camera, terminal and project feeds"
    )

    parser.add_argument(
        "--mode",
        choices=MODES,
        default=default_mode if default_mode in MODES else "shell",
        help="Execution mode: shell (default, interactive desktop), projects, timeline",
    )

    parser.add_argument(
        "--fps",
        type=positive_float,
        default=default_fps if default_fps > 0 else 60.0,
        help="Frame rate of the scene loop in shell mode (default: 60)",
    )

    add_common_cli_arguments(
        parser,
        config,
        manager=config_manager,
        default_log_file=MASTER_LOG_FILE,
        default_config=CONFIG_PATH,
    )

    return parser.parse_args(argv)


async def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    ensure_directories()

    configure_logging(
        args.log_level,
        force=True,
        console=args.console_output,
        log_file=args.log_file,
    )
    install_exception_handlers(logger, asyncio.get_running_loop())

    logger.info("=" * 60)
    logger.info("PortfoliOS starting")
    logger.info("=" * 60)
    logger.info("Mode: %s", args.mode)
    logger.info("Config: %s", args.config)
    logger.info("Log file: %s", args.log_file)

    config_path = Path(args.config)
    config = await get_config_manager().read_config_async(config_path)

    if args.mode == "projects":
        return await run_projects(config)
    if args.mode == "timeline":
        return await run_timeline(config)

    preferences = Preferences(PREFERENCES_FILE)
    async with HttpFetcher() as fetcher:
        shell = DesktopShell(preferences, config, fetcher, fps=args.fps)
        await shell.run()

    logger.info("PortfoliOS stopped")
    return 0


def run(argv: Optional[list[str]] = None) -> int:
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as exc:  # pragma: no cover - fatal guard
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1


__all__ = [
    "DesktopSession",
    "DesktopShell",
    "ConsoleListView",
    "parse_args",
    "main",
    "run",
]
