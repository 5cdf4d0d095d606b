"""Per-frame input snapshot consumed by scene components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

Vector2 = Tuple[float, float]


class TouchPhase(Enum):
    BEGAN = "began"
    MOVED = "moved"
    STATIONARY = "stationary"
    ENDED = "ended"
    CANCELED = "canceled"


@dataclass(frozen=True)
class Touch:
    position: Vector2
    phase: TouchPhase


@dataclass(frozen=True)
class InputFrame:
    """Everything the scene reads from the input devices in one frame.

    ``keys_down`` and ``mouse_buttons_down`` hold edges (pressed this frame),
    ``mouse_buttons`` holds buttons currently held.
    """

    keys_down: FrozenSet[str] = field(default_factory=frozenset)
    mouse_delta: Vector2 = (0.0, 0.0)
    mouse_buttons: FrozenSet[int] = field(default_factory=frozenset)
    mouse_buttons_down: FrozenSet[int] = field(default_factory=frozenset)
    mouse_position: Vector2 = (0.0, 0.0)
    touches: Tuple[Touch, ...] = ()

    def key_down(self, key: str) -> bool:
        return key.lower() in {k.lower() for k in self.keys_down}

    def mouse_button_down(self, button: int = 0) -> bool:
        return button in self.mouse_buttons_down

    def any_mouse_activity(self) -> bool:
        dx, dy = self.mouse_delta
        return dx != 0 or dy != 0 or bool(self.mouse_buttons & {0, 1, 2})

    def primary_touch(self) -> Optional[Touch]:
        return self.touches[0] if self.touches else None


NO_INPUT = InputFrame()


__all__ = ["TouchPhase", "Touch", "InputFrame", "NO_INPUT", "Vector2"]
