import numpy as np
import pytest

from szafkagl.buffers import FLOAT_SIZE, GL_TRIANGLES, GL_UNSIGNED_INT
from szafkagl.camera import Camera, translate
from szafkagl.mesh import (
    FLOATS_PER_MESH_VERTEX,
    GL_TEXTURE0,
    MESH_TEXTURE_UNIT,
    Mesh,
    Vertex,
    pack_vertices,
)
from szafkagl.shader import Shader


class RecordingGL:
    def __init__(self):
        self.calls = []
        self._next_id = 1
        self.locations = {}

    def _new_id(self, name, *args):
        new = self._next_id
        self._next_id += 1
        self.calls.append((name, *args, new))
        return new

    def gen_buffer(self):
        return self._new_id("gen_buffer")

    def gen_vertex_array(self):
        return self._new_id("gen_vertex_array")

    def create_shader(self, kind):
        return self._new_id("create_shader", kind)

    def create_program(self):
        return self._new_id("create_program")

    def get_uniform_location(self, program_id, name):
        return self.locations.setdefault(name, len(self.locations) + 50)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name, *args))

        return record


class FakeTexture:
    def __init__(self, gl):
        self.gl = gl

    def bind(self):
        self.gl.calls.append(("texture_bind",))


@pytest.fixture
def gl():
    return RecordingGL()


@pytest.fixture
def triangle():
    vertices = [
        Vertex((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (0.0, 0.0)),
        Vertex((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (1.0, 0.0)),
        Vertex((0.0, 1.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 1.0), (0.0, 1.0)),
    ]
    return vertices, [0, 1, 2]


def test_pack_vertices_layout(triangle):
    vertices, _ = triangle
    packed = pack_vertices(vertices)
    assert packed.dtype == np.float32
    assert len(packed) == len(vertices) * FLOATS_PER_MESH_VERTEX
    v = vertices[1]
    expected = [*v.position, *v.normal, *v.color, *v.tex_uv]
    assert packed[FLOATS_PER_MESH_VERTEX:2 * FLOATS_PER_MESH_VERTEX].tolist() == expected


def test_pack_vertices_empty():
    assert len(pack_vertices([])) == 0


def test_pack_vertices_rejects_short_component():
    with pytest.raises(ValueError):
        pack_vertices([Vertex((0.0, 0.0), (0.0, 0.0, 1.0))])


def test_mesh_uploads_vertices_and_indices(gl, triangle):
    vertices, indices = triangle
    mesh = Mesh(vertices, indices, FakeTexture(gl), gl)
    uploads = [c for c in gl.calls if c[0] == "buffer_data"]
    assert len(uploads) == 2
    assert np.allclose(np.frombuffer(uploads[0][2], dtype=np.float32), pack_vertices(vertices))
    assert np.frombuffer(uploads[1][2], dtype=np.uint32).tolist() == indices
    assert mesh.ebo.count == len(indices)


def test_mesh_links_four_attributes(gl, triangle):
    Mesh(*triangle, FakeTexture(gl), gl)
    pointers = [c for c in gl.calls if c[0] == "vertex_attrib_pointer"]
    stride = FLOATS_PER_MESH_VERTEX * FLOAT_SIZE
    assert [(c[1], c[2]) for c in pointers] == [(0, 3), (1, 3), (2, 3), (3, 2)]
    assert {c[5] for c in pointers} == {stride}
    assert [c[6] for c in pointers] == [0, 3 * FLOAT_SIZE, 6 * FLOAT_SIZE, 9 * FLOAT_SIZE]


def test_mesh_leaves_everything_unbound(gl, triangle):
    Mesh(*triangle, FakeTexture(gl), gl)
    tail = gl.calls[-3:]
    assert tail[0] == ("bind_vertex_array", 0)
    assert [c[2] for c in tail[1:]] == [0, 0]


def test_mesh_draw(gl, triangle, tmp_path):
    vert = tmp_path / "lamp.vert"
    frag = tmp_path / "lamp.frag"
    vert.write_text("vertex")
    frag.write_text("fragment")
    shader = Shader(vert, frag, gl)
    camera = Camera(1000, 1000, (3.0, 2.5, 5.0))
    camera.update_matrix(45.0, 0.01, 100.0)
    mesh = Mesh(*triangle, FakeTexture(gl), gl)
    model = translate(np.identity(4), (-1.0, 0.0, 2.5))
    gl.calls.clear()

    mesh.draw(shader, camera, model)

    assert gl.calls[0] == ("use_program", shader.id)
    assert gl.calls[1] == ("bind_vertex_array", mesh.vao.id)
    assert gl.calls[2] == ("active_texture", GL_TEXTURE0 + MESH_TEXTURE_UNIT)
    assert gl.calls[3] == ("texture_bind",)
    assert gl.calls[4] == ("uniform3f", gl.locations["camPos"], 3.0, 2.5, 5.0)
    matrices = {c[1]: c[2] for c in gl.calls if c[0] == "uniform_matrix4fv"}
    assert np.allclose(
        np.array(matrices[gl.locations["camMatrix"]]).reshape(4, 4).T,
        camera.camera_matrix,
        atol=1e-5,
    )
    assert np.allclose(np.array(matrices[gl.locations["model"]]).reshape(4, 4).T, model)
    assert gl.calls[-1] == ("draw_elements", GL_TRIANGLES, 3, GL_UNSIGNED_INT)


def test_mesh_delete_releases_all(gl, triangle):
    mesh = Mesh(*triangle, FakeTexture(gl), gl)
    gl.calls.clear()
    with mesh:
        pass
    assert gl.calls == [
        ("delete_vertex_array", mesh.vao.id),
        ("delete_buffer", mesh.vbo.id),
        ("delete_buffer", mesh.ebo.id),
    ]