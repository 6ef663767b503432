"""Indexed, textured meshes with per-vertex position, normal, colour and UV."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from .buffers import (
    FLOAT_SIZE,
    GL_TRIANGLES,
    GL_UNSIGNED_INT,
    BufferGL,
    ElementBuffer,
    VertexArray,
    VertexBuffer,
)
from .shader import Shader

GL_TEXTURE0 = 0x84C0
MESH_TEXTURE_UNIT = 7
FLOATS_PER_MESH_VERTEX = 11

# (location, components, float offset) for position, normal, colour, UV
_ATTRIBUTES = ((0, 3, 0), (1, 3, 3), (2, 3, 6), (3, 2, 9))


class MeshGL(BufferGL, Protocol):
    """The OpenGL entry points a mesh needs beyond buffers."""

    def active_texture(self, unit: int) -> None: ...

    def uniform3f(self, location: int, x: float, y: float, z: float) -> None: ...

    def draw_elements(self, mode: int, count: int, index_type: int) -> None: ...


class Bindable(Protocol):
    def bind(self) -> None: ...


@dataclass(frozen=True)
class Vertex:
    position: tuple[float, float, float]
    normal: tuple[float, float, float] = (0.0, 0.0, 0.0)
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    tex_uv: tuple[float, float] = (0.0, 0.0)


def pack_vertices(vertices: Iterable[Vertex]) -> np.ndarray:
    """Interleave vertices as float32: position, normal, colour, UV."""
    rows = [
        (*v.position, *v.normal, *v.color, *v.tex_uv)
        for v in vertices
    ]
    for row in rows:
        if len(row) != FLOATS_PER_MESH_VERTEX:
            raise ValueError(
                f"vertex has {len(row)} components, expected {FLOATS_PER_MESH_VERTEX}"
            )
    return np.asarray(rows, dtype=np.float32).reshape(-1)


class Mesh:
    """GPU-resident mesh drawn with one texture on a fixed texture unit."""

    def __init__(
        self,
        vertices: Sequence[Vertex],
        indices: Sequence[int],
        texture: Bindable,
        gl: MeshGL,
    ) -> None:
        self.vertices = list(vertices)
        self.indices = [int(i) for i in indices]
        self.texture = texture
        self._gl = gl

        self.vao = VertexArray(gl)
        self.vao.bind()
        self.vbo = VertexBuffer(pack_vertices(self.vertices), gl)
        self.ebo = ElementBuffer(self.indices, gl)

        stride = FLOATS_PER_MESH_VERTEX * FLOAT_SIZE
        for location, components, offset in _ATTRIBUTES:
            self.vao.link_attrib(self.vbo, location, components, stride, offset * FLOAT_SIZE)

        self.vao.unbind()
        self.vbo.unbind()
        self.ebo.unbind()

    def draw(self, shader: Shader, camera, model) -> None:
        """Draw with the shader, the camera's current matrix and a model matrix."""
        shader.activate()
        self.vao.bind()

        self._gl.active_texture(GL_TEXTURE0 + MESH_TEXTURE_UNIT)
        self.texture.bind()

        x, y, z = (float(c) for c in camera.position)
        self._gl.uniform3f(shader.uniform_location("camPos"), x, y, z)
        shader.set_matrix4("camMatrix", camera.camera_matrix)
        shader.set_matrix4("model", model)

        self._gl.draw_elements(GL_TRIANGLES, len(self.indices), GL_UNSIGNED_INT)

    def delete(self) -> None:
        """Release the vertex array and both buffers."""
        self.vao.delete()
        self.vbo.delete()
        self.ebo.delete()

    def __enter__(self) -> Mesh:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()