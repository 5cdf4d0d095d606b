from .desktop import ConsoleListView, DesktopSession, DesktopShell, main, parse_args, run

__all__ = ["ConsoleListView", "DesktopSession", "DesktopShell", "main", "parse_args", "run"]
