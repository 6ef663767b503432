"""Scene content: the cupboard, its contents, the ground and the door animation."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol

from .geometry import GeometryBuffer
from .mesh import Vertex
from .objloader import ObjModel

LIGHT_VERTICES: tuple[float, ...] = (
    -0.15, -0.001, 0.07,
    -0.15, -0.001, -0.07,
    0.15, -0.001, -0.07,
    0.15, -0.001, 0.07,
    -0.15, 0.001, 0.07,
    -0.15, 0.001, -0.07,
    0.15, 0.001, -0.07,
    0.15, 0.001, 0.07,
)

LIGHT_INDICES: tuple[int, ...] = (
    0, 1, 2, 0, 2, 3, 0, 4, 7, 0, 7, 3, 3, 7, 6, 3, 6, 2,
    2, 6, 5, 2, 5, 1, 1, 5, 4, 1, 4, 0, 4, 5, 6, 4, 6, 7,
)

SKYBOX_VERTICES: tuple[float, ...] = (
    -1.0, 1.0, -1.0, -1.0, -1.0, -1.0, 1.0, -1.0, -1.0,
    1.0, -1.0, -1.0, 1.0, 1.0, -1.0, -1.0, 1.0, -1.0,

    -1.0, -1.0, 1.0, -1.0, -1.0, -1.0, -1.0, 1.0, -1.0,
    -1.0, 1.0, -1.0, -1.0, 1.0, 1.0, -1.0, -1.0, 1.0,

    1.0, -1.0, -1.0, 1.0, -1.0, 1.0, 1.0, 1.0, 1.0,
    1.0, 1.0, 1.0, 1.0, 1.0, -1.0, 1.0, -1.0, -1.0,

    -1.0, -1.0, 1.0, -1.0, 1.0, 1.0, 1.0, 1.0, 1.0,
    1.0, 1.0, 1.0, 1.0, -1.0, 1.0, -1.0, -1.0, 1.0,

    -1.0, 1.0, -1.0, 1.0, 1.0, -1.0, 1.0, 1.0, 1.0,
    1.0, 1.0, 1.0, -1.0, 1.0, 1.0, -1.0, 1.0, -1.0,

    -1.0, -1.0, -1.0, -1.0, -1.0, 1.0, 1.0, -1.0, 1.0,
    1.0, -1.0, 1.0, 1.0, -1.0, -1.0, -1.0, -1.0, -1.0,
)

SKYBOX_FACES: tuple[str, ...] = (
    "Textures/skybox/px.png",
    "Textures/skybox/nx.png",
    "Textures/skybox/py.png",
    "Textures/skybox/ny.png",
    "Textures/skybox/pz.png",
    "Textures/skybox/nz.png",
)

LIGHT_COLOR = (1.0, 1.0, 0.8, 1.0)
LIGHT_POSITION = (1.15, 5.41, 2.5)
CAMERA_START = (3.0, 2.5, 5.0)
LAMP_OFFSET = (-1.0, 0.0, 2.5)
LAMP_SCALE = 0.005
WINDOW_SIZE = (1000, 1000)
FOV_DEG = 45.0
NEAR_PLANE = 0.01
FAR_PLANE = 100.0

CAN_SIZE = 0.15
BEER_HEIGHT = 0.35
MILK_HEIGHT = 0.4
LEG_TEX_SIZE = 0.2
GRASS_EXTENT = 100.0
GRASS_TEX_SIZE = 20.0


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class CupboardDimensions:
    """Placement and size of the cupboard; thickness is that of its boards."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    width: float = 2.0
    height: float = 3.0
    depth: float = 1.0
    thickness: float = 0.1
    leg_height: float = 0.2

    @property
    def door_width(self) -> float:
        return self.width - 2 * self.thickness

    @property
    def door_height(self) -> float:
        return self.height - 2 * self.thickness

    @property
    def door_thickness(self) -> float:
        return self.thickness

    @property
    def center(self) -> tuple[float, float, float]:
        return (
            self.x + self.width / 2,
            self.y + self.height / 2,
            self.z + self.depth / 2,
        )


@dataclass
class SceneGeometry:
    cupboard: GeometryBuffer = field(default_factory=GeometryBuffer)
    floor: GeometryBuffer = field(default_factory=GeometryBuffer)
    grass: GeometryBuffer = field(default_factory=GeometryBuffer)
    door: GeometryBuffer = field(default_factory=GeometryBuffer)
    cans: GeometryBuffer = field(default_factory=GeometryBuffer)
    milk: GeometryBuffer = field(default_factory=GeometryBuffer)


def door_hinge_position(dims: CupboardDimensions) -> tuple[float, float, float]:
    """World position of the door's local origin, about which it swings."""
    return (
        dims.x + dims.width - 0.1,
        dims.y + dims.thickness,
        dims.z + dims.depth - dims.door_thickness,
    )


def _shelf_columns() -> Iterator[float]:
    i = 0.2
    while i < 1.6:
        yield i
        i += 0.2


def _add_item_rows(
    buffer: GeometryBuffer, rng: RandomSource, base_y: float, item_height: float
) -> None:
    for row_start in (0.1, 0.5):
        for column in _shelf_columns():
            z = row_start + rng.random() * 0.3
            buffer.add_cube((1.01 * column, base_y, z), (CAN_SIZE, item_height, CAN_SIZE))


def _add_cupboard(buffer: GeometryBuffer, d: CupboardDimensions) -> None:
    x, y, z = d.x, d.y, d.z
    w, h, dp, t, leg = d.width, d.height, d.depth, d.thickness, d.leg_height
    boards = (
        ((x, y, z), (w, t, dp)),
        ((x, y + h - t, z), (w, t, dp)),
        ((x, y + t, z), (t, h - 2 * t, dp)),
        ((x + w - t, y + t, z), (t, h - 2 * t, dp)),
        ((x + t, y + t, z), (w - 2 * t, h - 2 * t, t)),
        ((x + t, y + h / 2 - t / 2, z + t), (w - 2 * t, t, dp - 2 * t)),
    )
    for origin, size in boards:
        buffer.add_cube(origin, size)
    legs = (
        (x, y - leg, z + dp - t),
        (x + w - t, y - leg, z + dp - t),
        (x, y - leg, z),
        (x + w - t, y - leg, z),
    )
    for origin in legs:
        buffer.add_cube(origin, (t, leg, t), LEG_TEX_SIZE)


def build_scene(dims: CupboardDimensions, rng: RandomSource) -> SceneGeometry:
    """Build all static geometry; rng places the cans and cartons along the shelves."""
    scene = SceneGeometry()

    scene.floor.add_cube(
        (-2.0, -1.0, -2.0), (4.0 + dims.width, 1.0 - dims.leg_height, 4.0 + dims.depth), 1.0
    )
    g = GRASS_EXTENT
    scene.grass.add_plane(
        ((-g, -1.0, -g), (-g, -1.0, g), (g, -1.0, g), (g, -1.0, -g)),
        (0.0, 1.0, 0.0),
        GRASS_TEX_SIZE,
    )

    _add_cupboard(scene.cupboard, dims)

    _add_item_rows(scene.cans, rng, (dims.height + 0.1) / 2, BEER_HEIGHT)
    _add_item_rows(scene.milk, rng, 0.1, MILK_HEIGHT)

    scene.door.add_cube(
        (0.0, 0.0, 0.0), (dims.door_thickness, dims.door_height, dims.door_width)
    )
    return scene


def _normalized(v: tuple[float, float, float]) -> tuple[float, float, float]:
    length = math.sqrt(sum(c * c for c in v))
    if length == 0.0:
        return (0.0, 0.0, 0.0)
    return (v[0] / length, v[1] / length, v[2] / length)


def deduplicate_vertices(model: ObjModel) -> tuple[list[Vertex], list[int]]:
    """Expand indexed positions to vertices, merging those that print identically.

    Normals and UVs are looked up by the same index as the position; when the
    model has none, zeros are used. Normals are normalised and colours are white.
    """
    vertices: list[Vertex] = []
    indices: list[int] = []
    seen: dict[str, int] = {}

    for index in model.indices:
        if index < 0:
            raise ValueError(f"face refers to a missing position (index {index})")
        p = model.vertices[index]
        position = (p.x, p.y, p.z)
        normal = (0.0, 0.0, 0.0)
        if model.normals:
            n = model.normals[index]
            normal = (n.x, n.y, n.z)
        uv = (0.0, 0.0)
        if model.coords:
            c = model.coords[index]
            uv = (c.u, c.v)

        key = "|".join(
            ",".join(f"{value:g}" for value in group) for group in (position, normal, uv)
        )
        if key not in seen:
            vertices.append(
                Vertex(position=position, normal=_normalized(normal),
                       color=(1.0, 1.0, 1.0), tex_uv=uv)
            )
            seen[key] = len(vertices) - 1
        indices.append(seen[key])

    return vertices, indices


@dataclass
class DoorAnimator:
    """Swings the door between closed (0 degrees) and open, at a fixed angular speed."""

    opened: bool = False
    animating: bool = False
    angle: float = 0.0
    last_toggle: float = 0.0
    debounce: float = 0.3
    angular_velocity: float = 120.0
    open_angle: float = -90.0

    def toggle(self, now: float) -> bool:
        """Request the opposite state; ignored within the debounce interval."""
        if now - self.last_toggle > self.debounce:
            self.animating = True
            self.opened = not self.opened
            self.last_toggle = now
            return True
        return False

    def update(self, delta_time: float) -> float:
        """Advance the swing by delta_time seconds and return the angle in degrees."""
        if self.animating:
            target = self.open_angle if self.opened else 0.0
            diff = target - self.angle
            step = self.angular_velocity * delta_time
            if abs(diff) < abs(step):
                self.angle = target
                self.animating = False
            elif diff < 0:
                self.angle -= step
            else:
                self.angle += step
        return self.angle