"""Procedural construction of textured quads and boxes in interleaved vertex form."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

FLOATS_PER_VERTEX = 8
"""Each vertex holds position (3), normal (3) and texture coordinates (2)."""


def _components(values: Iterable[float], count: int, what: str) -> tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if len(result) != count:
        raise ValueError(f"{what} needs {count} components, got {len(result)}")
    return result


@dataclass
class GeometryBuffer:
    """Interleaved vertex data plus triangle indices, ready for upload."""

    vertices: list[float] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)

    def vertex_count(self) -> int:
        """Number of complete vertices stored."""
        return len(self.vertices) // FLOATS_PER_VERTEX

    def add_vertex(
        self,
        position: Sequence[float],
        normal: Sequence[float],
        uv: Sequence[float],
    ) -> None:
        """Append one vertex: position, normal and texture coordinates."""
        self.vertices.extend(
            (
                *_components(position, 3, "position"),
                *_components(normal, 3, "normal"),
                *_components(uv, 2, "uv"),
            )
        )

    def add_plane(
        self,
        corners: Sequence[Sequence[float]],
        normal: Sequence[float],
        tex_size: float,
    ) -> None:
        """Append a quad given by four corners, split into two triangles."""
        corners = list(corners)
        if len(corners) != 4:
            raise ValueError(f"a plane needs 4 corners, got {len(corners)}")
        t = float(tex_size)
        start = self.vertex_count()
        uvs = ((0.0, 0.0), (0.0, t), (t, t), (t, 0.0))
        for corner, uv in zip(corners, uvs):
            self.add_vertex(corner, normal, uv)
        self.indices.extend(start + offset for offset in (0, 1, 2, 0, 2, 3))

    def add_cube(
        self,
        origin: Sequence[float],
        size: Sequence[float],
        tex_size: float = 1.0,
    ) -> None:
        """Append an axis-aligned box with one corner at origin and edge lengths size."""
        x, y, z = _components(origin, 3, "origin")
        a, b, c = _components(size, 3, "size")
        faces = (
            # front (+Z)
            (((x, y, z + c), (x, y + b, z + c), (x + a, y + b, z + c), (x + a, y, z + c)),
             (0.0, 0.0, 1.0)),
            # back (-Z)
            (((x + a, y, z), (x + a, y + b, z), (x, y + b, z), (x, y, z)),
             (0.0, 0.0, -1.0)),
            # left (-X)
            (((x, y, z), (x, y + b, z), (x, y + b, z + c), (x, y, z + c)),
             (-1.0, 0.0, 0.0)),
            # right (+X)
            (((x + a, y, z + c), (x + a, y + b, z + c), (x + a, y + b, z), (x + a, y, z)),
             (1.0, 0.0, 0.0)),
            # top (+Y)
            (((x, y + b, z + c), (x, y + b, z), (x + a, y + b, z), (x + a, y + b, z + c)),
             (0.0, 1.0, 0.0)),
            # bottom (-Y)
            (((x, y, z), (x, y, z + c), (x + a, y, z + c), (x + a, y, z)),
             (0.0, -1.0, 0.0)),
        )
        for corners, normal in faces:
            self.add_plane(corners, normal, tex_size)