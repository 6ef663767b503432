"""Free-flying camera and the matrix helpers it needs.

Matrices are 4x4 numpy arrays in ordinary mathematical layout (points are
column vectors, ``m @ p``); upload them to a shader transposed.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable, Sequence

import numpy as np


def _vec3(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).reshape(3)


def _normalize(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)


def look_at(eye: Sequence[float], center: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """Right-handed view matrix looking from eye towards center."""
    eye, center, up = _vec3(eye), _vec3(center), _vec3(up)
    f = _normalize(center - eye)
    s = _normalize(np.cross(f, up))
    u = np.cross(s, f)
    m = np.identity(4)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye)
    m[1, 3] = -np.dot(u, eye)
    m[2, 3] = np.dot(f, eye)
    return m


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection to clip depth -1..1; fovy in radians."""
    if aspect == 0:
        raise ValueError("aspect ratio must be non-zero")
    if near == far:
        raise ValueError("near and far planes must differ")
    tan_half = math.tan(fovy / 2.0)
    m = np.zeros((4, 4))
    m[0, 0] = 1.0 / (aspect * tan_half)
    m[1, 1] = 1.0 / tan_half
    m[2, 2] = -(far + near) / (far - near)
    m[2, 3] = -(2.0 * far * near) / (far - near)
    m[3, 2] = -1.0
    return m


def _rotation3(angle: float, axis: Sequence[float]) -> np.ndarray:
    k = _normalize(_vec3(axis))
    c, s = math.cos(angle), math.sin(angle)
    cross = np.array([[0.0, -k[2], k[1]], [k[2], 0.0, -k[0]], [-k[1], k[0], 0.0]])
    return c * np.identity(3) + s * cross + (1.0 - c) * np.outer(k, k)


def rotate_vector(vector: Sequence[float], angle: float, axis: Sequence[float]) -> np.ndarray:
    """Rotate a 3-vector by angle radians about axis (right-hand rule)."""
    return _rotation3(angle, axis) @ _vec3(vector)


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """Angle in radians between two unit vectors."""
    return math.acos(float(np.clip(np.dot(_vec3(a), _vec3(b)), -1.0, 1.0)))


def translate(matrix: np.ndarray, offset: Sequence[float]) -> np.ndarray:
    """Return matrix followed (in local space) by a translation."""
    t = np.identity(4)
    t[:3, 3] = _vec3(offset)
    return np.asarray(matrix, dtype=np.float64) @ t


def rotate(matrix: np.ndarray, angle: float, axis: Sequence[float]) -> np.ndarray:
    """Return matrix followed (in local space) by a rotation of angle radians."""
    r = np.identity(4)
    r[:3, :3] = _rotation3(angle, axis)
    return np.asarray(matrix, dtype=np.float64) @ r


def scale(matrix: np.ndarray, factors: Sequence[float] | float) -> np.ndarray:
    """Return matrix followed (in local space) by a scale."""
    f = np.broadcast_to(np.asarray(factors, dtype=np.float64), (3,))
    s = np.diag([f[0], f[1], f[2], 1.0])
    return np.asarray(matrix, dtype=np.float64) @ s


class CameraKey(enum.Enum):
    FORWARD = "forward"
    LEFT = "left"
    BACKWARD = "backward"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    FAST = "fast"


FAST_SPEED = 0.01
SLOW_SPEED = 0.0005


class Camera:
    """Position, orientation and the combined projection-view matrix."""

    def __init__(self, width: int, height: int, position: Sequence[float]) -> None:
        self.width = int(width)
        self.height = int(height)
        self.position = _vec3(position).copy()
        self.orientation = np.array([0.0, 0.0, -1.0])
        self.up = np.array([0.0, 1.0, 0.0])
        self.camera_matrix = np.identity(4)
        self.first_click = True
        self.speed = 0.1
        self.sensitivity = 100.0

    def view_matrix(self) -> np.ndarray:
        return look_at(self.position, self.position + self.orientation, self.up)

    def projection_matrix(self, fov_deg: float, near_plane: float, far_plane: float) -> np.ndarray:
        return perspective(math.radians(fov_deg), self.width / self.height, near_plane, far_plane)

    def update_matrix(self, fov_deg: float, near_plane: float, far_plane: float) -> np.ndarray:
        """Recompute and return the projection-view matrix."""
        self.camera_matrix = self.projection_matrix(fov_deg, near_plane, far_plane) @ self.view_matrix()
        return self.camera_matrix

    def move(self, keys: Iterable[CameraKey]) -> None:
        """Move by the current speed for each held key, then pick the next speed."""
        held = set(keys)
        right = _normalize(np.cross(self.orientation, self.up))
        steps = {
            CameraKey.FORWARD: self.orientation,
            CameraKey.LEFT: -right,
            CameraKey.BACKWARD: -self.orientation,
            CameraKey.RIGHT: right,
            CameraKey.UP: self.up,
            CameraKey.DOWN: -self.up,
        }
        for key, direction in steps.items():
            if key in held:
                self.position = self.position + self.speed * direction
        self.speed = FAST_SPEED if CameraKey.FAST in held else SLOW_SPEED

    def look(self, mouse_x: float, mouse_y: float) -> tuple[int, int]:
        """Turn by the cursor offset from the window centre while dragging.

        Returns the centre point the cursor should be moved back to. The first
        call of a drag only recentres, so the view does not jump.
        """
        cx, cy = self.width // 2, self.height // 2
        if self.first_click:
            self.first_click = False
            return cx, cy
        rot_x = self.sensitivity * (mouse_y - cy) / self.height
        rot_y = self.sensitivity * (mouse_x - cx) / self.width
        right = _normalize(np.cross(self.orientation, self.up))
        candidate = rotate_vector(self.orientation, math.radians(-rot_x), right)
        if abs(angle_between(candidate, self.up) - math.radians(90.0)) <= math.radians(85.0):
            self.orientation = candidate
        self.orientation = rotate_vector(self.orientation, math.radians(-rot_y), self.up)
        return cx, cy

    def release_mouse(self) -> None:
        """End a drag so the next one starts without a jump."""
        self.first_click = True