"""Shader programs built from a vertex and a fragment source file."""

from __future__ import annotations

from collections.abc import Sequence
from os import PathLike
from typing import Protocol

import numpy as np

GL_FRAGMENT_SHADER = 0x8B30
GL_VERTEX_SHADER = 0x8B31


class ShaderGL(Protocol):
    """The OpenGL entry points shader programs need."""

    def create_shader(self, kind: int) -> int: ...

    def shader_source(self, shader_id: int, source: str) -> None: ...

    def compile_shader(self, shader_id: int) -> None: ...

    def create_program(self) -> int: ...

    def attach_shader(self, program_id: int, shader_id: int) -> None: ...

    def link_program(self, program_id: int) -> None: ...

    def delete_shader(self, shader_id: int) -> None: ...

    def use_program(self, program_id: int) -> None: ...

    def delete_program(self, program_id: int) -> None: ...

    def get_uniform_location(self, program_id: int, name: str) -> int: ...

    def uniform_matrix4fv(self, location: int, values: Sequence[float]) -> None: ...


def read_file_contents(filename: str | PathLike[str]) -> str:
    """Return the whole text of a file; raises OSError if it cannot be read."""
    with open(filename, "rb") as handle:
        return handle.read().decode("utf-8", errors="replace")


class Shader:
    """A linked program of one vertex and one fragment shader."""

    def __init__(
        self,
        vertex_file: str | PathLike[str],
        fragment_file: str | PathLike[str],
        gl: ShaderGL,
    ) -> None:
        vertex_code = read_file_contents(vertex_file)
        fragment_code = read_file_contents(fragment_file)
        self._gl = gl

        vertex_shader = self._compile(GL_VERTEX_SHADER, vertex_code)
        fragment_shader = self._compile(GL_FRAGMENT_SHADER, fragment_code)

        self.id = gl.create_program()
        gl.attach_shader(self.id, vertex_shader)
        gl.attach_shader(self.id, fragment_shader)
        gl.link_program(self.id)

        gl.delete_shader(vertex_shader)
        gl.delete_shader(fragment_shader)

    def _compile(self, kind: int, source: str) -> int:
        shader_id = self._gl.create_shader(kind)
        self._gl.shader_source(shader_id, source)
        self._gl.compile_shader(shader_id)
        return shader_id

    def activate(self) -> None:
        self._gl.use_program(self.id)

    def delete(self) -> None:
        self._gl.delete_program(self.id)

    def uniform_location(self, name: str) -> int:
        return self._gl.get_uniform_location(self.id, name)

    def set_matrix4(self, name: str, matrix) -> None:
        """Upload a 4x4 matrix (mathematical layout) in column-major order."""
        m = np.asarray(matrix, dtype=np.float32)
        if m.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {m.shape}")
        values = tuple(float(v) for v in m.ravel(order="F"))
        self._gl.uniform_matrix4fv(self.uniform_location(name), values)