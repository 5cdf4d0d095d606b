"""Two-key Hermite easing curves for timed transitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .math3d import clamp

EasingFunction = Callable[[float], float]


@dataclass(frozen=True)
class EasingCurve:
    """Cubic Hermite segment between two keyframes.

    ``ease_in_out`` uses zero tangents (``3t^2 - 2t^3`` on the unit square);
    ``linear`` uses the slope between the keys. Evaluation clamps the input
    to the key range, so values before/after the curve hold the end values.
    """

    start_time: float = 0.0
    start_value: float = 0.0
    end_time: float = 1.0
    end_value: float = 1.0
    out_tangent: float = 0.0
    in_tangent: float = 0.0

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be greater than start_time")

    @classmethod
    def ease_in_out(
        cls,
        start_time: float = 0.0,
        start_value: float = 0.0,
        end_time: float = 1.0,
        end_value: float = 1.0,
    ) -> "EasingCurve":
        return cls(start_time, start_value, end_time, end_value, 0.0, 0.0)

    @classmethod
    def linear(
        cls,
        start_time: float = 0.0,
        start_value: float = 0.0,
        end_time: float = 1.0,
        end_value: float = 1.0,
    ) -> "EasingCurve":
        slope = (end_value - start_value) / (end_time - start_time)
        return cls(start_time, start_value, end_time, end_value, slope, slope)

    def evaluate(self, time: float) -> float:
        span = self.end_time - self.start_time
        u = (clamp(time, self.start_time, self.end_time) - self.start_time) / span
        u2 = u * u
        u3 = u2 * u
        h00 = 2 * u3 - 3 * u2 + 1
        h10 = u3 - 2 * u2 + u
        h01 = -2 * u3 + 3 * u2
        h11 = u3 - u2
        return (
            h00 * self.start_value
            + h10 * span * self.out_tangent
            + h01 * self.end_value
            + h11 * span * self.in_tangent
        )

    def __call__(self, time: float) -> float:
        return self.evaluate(time)


EasingLike = Union[EasingCurve, EasingFunction]

CURVES = {
    "ease_in_out": EasingCurve.ease_in_out,
    "linear": EasingCurve.linear,
}


def curve_by_name(name: str) -> EasingCurve:
    try:
        return CURVES[name.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown easing curve '{name}'. Choose from: {', '.join(sorted(CURVES))}") from None


__all__ = ["EasingCurve", "EasingFunction", "EasingLike", "curve_by_name"]
