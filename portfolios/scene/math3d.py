"""Quaternion and scalar helpers for camera orientation.

Quaternions are numpy arrays ordered ``[x, y, z, w]``. Euler angles are in
degrees and follow the engine convention where a rotation is applied about
Z first, then X, then Y (``q = qy * qx * qz``).
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]

IDENTITY = np.array([0.0, 0.0, 0.0, 1.0])
_AXIS_X = np.array([1.0, 0.0, 0.0])
_AXIS_Y = np.array([0.0, 1.0, 0.0])
_AXIS_Z = np.array([0.0, 0.0, 1.0])

# Above this cosine the arc is short enough that a normalised lerp is exact
# to float precision and avoids dividing by sin(~0).
_SLERP_LINEAR_THRESHOLD = 0.9995


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * clamp01(t)


def move_toward(current: float, target: float, max_delta: float) -> float:
    if abs(target - current) <= max_delta:
        return target
    return current + math.copysign(max_delta, target - current)


def wrap_angle(degrees: float) -> float:
    """Map an angle to ``(-180, 180]``."""
    wrapped = math.fmod(degrees, 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


def as_quaternion(value: ArrayLike) -> np.ndarray:
    q = np.asarray(value, dtype=float)
    if q.shape != (4,):
        raise ValueError(f"Quaternion must have 4 components, got shape {q.shape}")
    return q


def normalize(q: ArrayLike) -> np.ndarray:
    q = as_quaternion(q)
    norm = np.linalg.norm(q)
    if norm == 0.0:
        return IDENTITY.copy()
    return q / norm


def quat_multiply(a: ArrayLike, b: ArrayLike) -> np.ndarray:
    ax, ay, az, aw = as_quaternion(a)
    bx, by, bz, bw = as_quaternion(b)
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_from_axis_angle(axis: ArrayLike, degrees: float) -> np.ndarray:
    axis = np.asarray(axis, dtype=float)
    half = math.radians(degrees) / 2.0
    return np.append(axis * math.sin(half), math.cos(half))


def quat_from_euler(euler_degrees: Iterable[float]) -> np.ndarray:
    x, y, z = (float(v) for v in euler_degrees)
    qx = quat_from_axis_angle(_AXIS_X, x)
    qy = quat_from_axis_angle(_AXIS_Y, y)
    qz = quat_from_axis_angle(_AXIS_Z, z)
    return quat_multiply(quat_multiply(qy, qx), qz)


def rotation_matrix(q: ArrayLike) -> np.ndarray:
    x, y, z, w = normalize(q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def euler_from_quat(q: ArrayLike) -> np.ndarray:
    """Inverse of :func:`quat_from_euler`, each angle in ``[0, 360)``."""
    m = rotation_matrix(q)
    sin_x = clamp(-m[1, 2], -1.0, 1.0)
    x = math.asin(sin_x)
    if abs(sin_x) < 0.9999999:
        y = math.atan2(m[0, 2], m[2, 2])
        z = math.atan2(m[1, 0], m[1, 1])
    else:
        # Gimbal lock: fold the roll into yaw.
        y = math.atan2(-m[2, 0], m[0, 0])
        z = 0.0
    degrees = np.degrees([x, y, z])
    degrees = np.mod(degrees, 360.0)
    return np.where(np.isclose(degrees, 360.0), 0.0, degrees)


def slerp(a: ArrayLike, b: ArrayLike, t: float) -> np.ndarray:
    """Shortest-arc spherical interpolation with ``t`` clamped to [0, 1]."""
    t = clamp01(t)
    qa = normalize(a)
    qb = normalize(b)
    dot = float(np.dot(qa, qb))
    if dot < 0.0:
        qb = -qb
        dot = -dot

    if dot > _SLERP_LINEAR_THRESHOLD:
        return normalize(qa + (qb - qa) * t)

    theta = math.acos(clamp(dot, -1.0, 1.0))
    sin_theta = math.sin(theta)
    wa = math.sin((1.0 - t) * theta) / sin_theta
    wb = math.sin(t * theta) / sin_theta
    return wa * qa + wb * qb


def quat_angle(a: ArrayLike, b: ArrayLike) -> float:
    """Angle in degrees between two orientations."""
    dot = abs(float(np.dot(normalize(a), normalize(b))))
    return math.degrees(2.0 * math.acos(clamp(dot, -1.0, 1.0)))


__all__ = [
    "IDENTITY",
    "clamp",
    "clamp01",
    "lerp",
    "move_toward",
    "wrap_angle",
    "normalize",
    "quat_multiply",
    "quat_from_axis_angle",
    "quat_from_euler",
    "euler_from_quat",
    "rotation_matrix",
    "slerp",
    "quat_angle",
]
