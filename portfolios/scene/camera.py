"""Minimal scene graph: visibility-toggled objects and the camera rig."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np

from .math3d import IDENTITY, ArrayLike, as_quaternion, euler_from_quat, quat_from_euler


class SceneObject:
    """A named node that can be shown/hidden and parented."""

    def __init__(self, name: str, active: bool = True, parent: Optional["SceneObject"] = None):
        self.name = name
        self.active = active
        self.parent: Optional[SceneObject] = None
        self.children: List[SceneObject] = []
        if parent is not None:
            parent.add_child(self)

    def __repr__(self) -> str:
        return f"SceneObject({self.name!r}, active={self.active})"

    def add_child(self, child: "SceneObject") -> "SceneObject":
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def set_active(self, active: bool) -> None:
        self.active = bool(active)

    def toggle_active(self) -> bool:
        self.active = not self.active
        return self.active

    def is_child_of(self, other: "SceneObject") -> bool:
        """True if ``other`` is this node or one of its ancestors."""
        node: Optional[SceneObject] = self
        while node is not None:
            if node is other:
                return True
            node = node.parent
        return False

    def iter_descendants(self) -> Iterable["SceneObject"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()


class CameraRig(SceneObject):
    """Camera orientation (local rotation quaternion) and field of view."""

    def __init__(
        self,
        name: str = "Main Camera",
        *,
        rotation: ArrayLike = IDENTITY,
        field_of_view: float = 60.0,
        parent: Optional[SceneObject] = None,
    ):
        super().__init__(name, parent=parent)
        self._rotation = as_quaternion(rotation).copy()
        self.field_of_view = float(field_of_view)

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation

    @rotation.setter
    def rotation(self, value: ArrayLike) -> None:
        self._rotation = as_quaternion(value).copy()

    @property
    def euler_angles(self) -> np.ndarray:
        return euler_from_quat(self._rotation)

    @euler_angles.setter
    def euler_angles(self, value: ArrayLike) -> None:
        self._rotation = quat_from_euler(value)


__all__ = ["SceneObject", "CameraRig"]
