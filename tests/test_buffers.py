import numpy as np
import pytest

from szafkagl.buffers import (
    FLOAT_SIZE,
    GL_ARRAY_BUFFER,
    GL_ELEMENT_ARRAY_BUFFER,
    GL_FLOAT,
    GL_STATIC_DRAW,
    ElementBuffer,
    VertexArray,
    VertexBuffer,
)


class RecordingGL:
    def __init__(self):
        self.calls = []
        self._next_id = 1

    def _new_id(self, name):
        new = self._next_id
        self._next_id += 1
        self.calls.append((name, new))
        return new

    def gen_buffer(self):
        return self._new_id("gen_buffer")

    def gen_vertex_array(self):
        return self._new_id("gen_vertex_array")

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name, *args))

        return record


@pytest.fixture
def gl():
    return RecordingGL()


def test_vertex_buffer_uploads_float32_data(gl):
    data = [1.0, 2.5, -3.0, 0.25]
    vbo = VertexBuffer(data, gl)
    assert gl.calls[0] == ("gen_buffer", vbo.id)
    assert gl.calls[1] == ("bind_buffer", GL_ARRAY_BUFFER, vbo.id)
    name, target, payload, usage = gl.calls[2]
    assert (name, target, usage) == ("buffer_data", GL_ARRAY_BUFFER, GL_STATIC_DRAW)
    assert np.frombuffer(payload, dtype=np.float32).tolist() == data
    assert vbo.size == len(data) * FLOAT_SIZE


def test_vertex_buffer_bind_unbind_delete(gl):
    vbo = VertexBuffer([0.0], gl)
    gl.calls.clear()
    vbo.bind()
    vbo.unbind()
    vbo.delete()
    assert gl.calls == [
        ("bind_buffer", GL_ARRAY_BUFFER, vbo.id),
        ("bind_buffer", GL_ARRAY_BUFFER, 0),
        ("delete_buffer", vbo.id),
    ]


def test_element_buffer_uploads_uint32_indices(gl):
    indices = [0, 1, 2, 0, 2, 3]
    ebo = ElementBuffer(indices, gl)
    assert gl.calls[1] == ("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, ebo.id)
    _, target, payload, usage = gl.calls[2]
    assert target == GL_ELEMENT_ARRAY_BUFFER
    assert usage == GL_STATIC_DRAW
    assert np.frombuffer(payload, dtype=np.uint32).tolist() == indices
    assert ebo.count == len(indices)


def test_element_buffer_rejects_negative_indices(gl):
    with pytest.raises(ValueError):
        ElementBuffer([0, -1, 2], gl)
    assert gl.calls == []


def test_element_buffer_unbind_and_delete(gl):
    ebo = ElementBuffer([0, 1, 2], gl)
    gl.calls.clear()
    ebo.unbind()
    ebo.delete()
    assert gl.calls == [
        ("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, 0),
        ("delete_buffer", ebo.id),
    ]


def test_buffers_get_distinct_ids(gl):
    first = VertexBuffer([1.0], gl)
    second = ElementBuffer([0], gl)
    assert first.id != second.id


def test_link_attrib_sequence(gl):
    vao = VertexArray(gl)
    vbo = VertexBuffer([0.0] * 6, gl)
    gl.calls.clear()
    vao.link_attrib(vbo, 2, 3, 6 * FLOAT_SIZE, 3 * FLOAT_SIZE)
    assert gl.calls == [
        ("bind_buffer", GL_ARRAY_BUFFER, vbo.id),
        ("vertex_attrib_pointer", 2, 3, GL_FLOAT, False, 6 * FLOAT_SIZE, 3 * FLOAT_SIZE),
        ("enable_vertex_attrib_array", 2),
        ("bind_buffer", GL_ARRAY_BUFFER, 0),
    ]


def test_link_vbo_sets_position_and_texture_layout(gl):
    vao = VertexArray(gl)
    vbo = VertexBuffer([0.0] * 5, gl)
    gl.calls.clear()
    vao.link_vbo(vbo, 7)
    pointers = [c for c in gl.calls if c[0] == "vertex_attrib_pointer"]
    assert pointers == [
        ("vertex_attrib_pointer", 0, 3, GL_FLOAT, False, 5 * FLOAT_SIZE, 0),
        ("vertex_attrib_pointer", 1, 2, GL_FLOAT, False, 5 * FLOAT_SIZE, 3 * FLOAT_SIZE),
    ]
    assert gl.calls[-1] == ("bind_buffer", GL_ARRAY_BUFFER, 0)


def test_vertex_array_context_manager_binds_then_unbinds(gl):
    vao = VertexArray(gl)
    gl.calls.clear()
    with vao as bound:
        assert bound is vao
        assert gl.calls == [("bind_vertex_array", vao.id)]
    assert gl.calls[-1] == ("bind_vertex_array", 0)


def test_vertex_array_delete(gl):
    vao = VertexArray(gl)
    vao.delete()
    assert gl.calls[-1] == ("delete_vertex_array", vao.id)