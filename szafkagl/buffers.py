"""GPU buffer objects: vertex buffers, element buffers and vertex arrays.

Every object talks to OpenGL through an injected ``gl`` object implementing
:class:`BufferGL`, so the same code drives a real context or a recorder.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import numpy as np

GL_FLOAT = 0x1406
GL_UNSIGNED_INT = 0x1405
GL_TRIANGLES = 0x0004
GL_ARRAY_BUFFER = 0x8892
GL_ELEMENT_ARRAY_BUFFER = 0x8893
GL_STATIC_DRAW = 0x88E4

FLOAT_SIZE = 4


class BufferGL(Protocol):
    """The OpenGL entry points buffer objects need."""

    def gen_buffer(self) -> int: ...

    def bind_buffer(self, target: int, buffer_id: int) -> None: ...

    def buffer_data(self, target: int, data: bytes, usage: int) -> None: ...

    def delete_buffer(self, buffer_id: int) -> None: ...

    def gen_vertex_array(self) -> int: ...

    def bind_vertex_array(self, array_id: int) -> None: ...

    def delete_vertex_array(self, array_id: int) -> None: ...

    def vertex_attrib_pointer(
        self, index: int, size: int, type_: int, normalized: bool, stride: int, offset: int
    ) -> None: ...

    def enable_vertex_attrib_array(self, index: int) -> None: ...


class _BoundMixin:
    """Binding as a context manager: bound inside the block, unbound after."""

    def bind(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def unbind(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def __enter__(self):
        self.bind()
        return self

    def __exit__(self, *exc_info) -> None:
        self.unbind()


class VertexBuffer(_BoundMixin):
    """Static array buffer holding 32-bit float vertex data."""

    def __init__(self, data: Iterable[float], gl: BufferGL) -> None:
        self._gl = gl
        payload = np.asarray(list(data) if not isinstance(data, np.ndarray) else data,
                             dtype=np.float32).ravel().tobytes()
        self.size = len(payload)
        self.id = gl.gen_buffer()
        gl.bind_buffer(GL_ARRAY_BUFFER, self.id)
        gl.buffer_data(GL_ARRAY_BUFFER, payload, GL_STATIC_DRAW)

    def bind(self) -> None:
        self._gl.bind_buffer(GL_ARRAY_BUFFER, self.id)

    def unbind(self) -> None:
        self._gl.bind_buffer(GL_ARRAY_BUFFER, 0)

    def delete(self) -> None:
        self._gl.delete_buffer(self.id)


class ElementBuffer(_BoundMixin):
    """Static element buffer holding 32-bit unsigned indices."""

    def __init__(self, indices: Iterable[int], gl: BufferGL) -> None:
        values = [int(i) for i in indices]
        if any(i < 0 for i in values):
            raise ValueError("element indices must be non-negative")
        self._gl = gl
        payload = np.asarray(values, dtype=np.uint32).tobytes()
        self.count = len(values)
        self.size = len(payload)
        self.id = gl.gen_buffer()
        gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, self.id)
        gl.buffer_data(GL_ELEMENT_ARRAY_BUFFER, payload, GL_STATIC_DRAW)

    def bind(self) -> None:
        self._gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, self.id)

    def unbind(self) -> None:
        self._gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, 0)

    def delete(self) -> None:
        self._gl.delete_buffer(self.id)


class VertexArray(_BoundMixin):
    """Vertex array object recording attribute layouts."""

    def __init__(self, gl: BufferGL) -> None:
        self._gl = gl
        self.id = gl.gen_vertex_array()

    def link_vbo(self, vbo: VertexBuffer, layout: int) -> None:
        """Link a position (3 floats) + texture (2 floats) layout at locations 0 and 1.

        ``layout`` is accepted for compatibility but the locations are fixed.
        """
        stride = 5 * FLOAT_SIZE
        vbo.bind()
        self._gl.vertex_attrib_pointer(0, 3, GL_FLOAT, False, stride, 0)
        self._gl.enable_vertex_attrib_array(0)
        self._gl.vertex_attrib_pointer(1, 2, GL_FLOAT, False, stride, 3 * FLOAT_SIZE)
        self._gl.enable_vertex_attrib_array(1)
        vbo.unbind()

    def link_attrib(
        self,
        vbo: VertexBuffer,
        layout: int,
        num_components: int,
        stride: int,
        offset: int,
    ) -> None:
        """Describe one float attribute; stride and offset are in bytes."""
        vbo.bind()
        self._gl.vertex_attrib_pointer(layout, num_components, GL_FLOAT, False, stride, offset)
        self._gl.enable_vertex_attrib_array(layout)
        vbo.unbind()

    def bind(self) -> None:
        self._gl.bind_vertex_array(self.id)

    def unbind(self) -> None:
        self._gl.bind_vertex_array(0)

    def delete(self) -> None:
        self._gl.delete_vertex_array(self.id)