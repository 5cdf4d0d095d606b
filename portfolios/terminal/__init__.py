from .commands import PROMPT
from .terminal import HISTORY_KEY, TerminalConfig, TerminalOutput, TerminalSession

__all__ = [
    'PROMPT',
    'HISTORY_KEY',
    'TerminalConfig',
    'TerminalOutput',
    'TerminalSession',
]
