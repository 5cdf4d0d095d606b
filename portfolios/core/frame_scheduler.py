"""
Frame Scheduler - single-threaded per-frame driver for scene components.

Every frame the scheduler:
1. Fires one-shot callbacks whose due time has passed (``call_later``)
2. Calls update handlers in registration order
3. Calls late-update handlers in registration order

Handlers receive an immutable FrameContext. Nothing here is thread-safe;
all scene state is owned by the thread running the scheduler.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from portfolios.core.logging_utils import get_module_logger
from portfolios.scene.input_state import NO_INPUT, InputFrame


@dataclass(frozen=True)
class FrameContext:
    """Snapshot handed to every handler for one frame."""
    now: float
    delta_time: float
    frame_index: int
    input: InputFrame = NO_INPUT


FrameHandler = Callable[[FrameContext], None]
InputSource = Callable[[], Optional[InputFrame]]


class FrameScheduler:

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.logger = get_module_logger("FrameScheduler")
        self._clock = clock

        self._updates: List[FrameHandler] = []
        self._late_updates: List[FrameHandler] = []

        # (due_time, sequence, callback)
        self._pending: List[Tuple[float, int, Callable[[], None]]] = []
        self._sequence = itertools.count()

        self._last_time: Optional[float] = None
        self.frame_index = 0
        self.running = False

    def now(self) -> float:
        return self._clock()

    # =========================================================================
    # Registration
    # =========================================================================

    def add_update(self, handler: FrameHandler) -> None:
        if handler not in self._updates:
            self._updates.append(handler)

    def add_late_update(self, handler: FrameHandler) -> None:
        if handler not in self._late_updates:
            self._late_updates.append(handler)

    def remove(self, handler: FrameHandler) -> None:
        if handler in self._updates:
            self._updates.remove(handler)
        if handler in self._late_updates:
            self._late_updates.remove(handler)

    def call_later(self, delay: float, callback: Callable[[], None]) -> int:
        """Run ``callback`` on the first frame at or after ``now + delay``."""
        token = next(self._sequence)
        self._pending.append((self._clock() + max(0.0, delay), token, callback))
        return token

    def cancel_call(self, token: int) -> bool:
        for entry in self._pending:
            if entry[1] == token:
                self._pending.remove(entry)
                return True
        return False

    @property
    def pending_calls(self) -> int:
        return len(self._pending)

    # =========================================================================
    # Frame execution
    # =========================================================================

    def tick(self, frame_input: Optional[InputFrame] = None, now: Optional[float] = None) -> FrameContext:
        """Run exactly one frame and return its context."""
        current = self._clock() if now is None else now
        delta = 0.0 if self._last_time is None else max(0.0, current - self._last_time)
        self._last_time = current

        ctx = FrameContext(
            now=current,
            delta_time=delta,
            frame_index=self.frame_index,
            input=frame_input or NO_INPUT,
        )
        self.frame_index += 1

        self._run_due_callbacks(current)

        for handler in list(self._updates):
            self._invoke(handler, ctx)
        for handler in list(self._late_updates):
            self._invoke(handler, ctx)

        return ctx

    def _run_due_callbacks(self, now: float) -> None:
        if not self._pending:
            return
        due = sorted((entry for entry in self._pending if entry[0] <= now), key=lambda e: (e[0], e[1]))
        for entry in due:
            self._pending.remove(entry)
        for _, _, callback in due:
            try:
                callback()
            except Exception:
                self.logger.exception("Scheduled callback %r failed", callback)

    def _invoke(self, handler: FrameHandler, ctx: FrameContext) -> None:
        try:
            handler(ctx)
        except Exception:
            self.logger.exception("Frame handler %r failed on frame %d", handler, ctx.frame_index)

    async def run(
        self,
        target_fps: float = 60.0,
        *,
        input_source: Optional[InputSource] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Drive frames at ``target_fps`` until stopped."""
        if target_fps <= 0:
            raise ValueError("target_fps must be positive")

        interval = 1.0 / target_fps
        self.running = True
        self.logger.info("Frame loop started at %.1f fps", target_fps)
        try:
            while self.running and not (stop_event and stop_event.is_set()):
                frame_start = self._clock()
                frame_input = input_source() if input_source else None
                self.tick(frame_input)
                elapsed = self._clock() - frame_start
                await asyncio.sleep(max(0.0, interval - elapsed))
        finally:
            self.running = False
            self.logger.info("Frame loop stopped after %d frames", self.frame_index)

    def stop(self) -> None:
        self.running = False


__all__ = ["FrameContext", "FrameHandler", "FrameScheduler"]
