"""Interactive window showing the cupboard scene with its swinging door."""

from __future__ import annotations

import argparse
import itertools
import math
import random
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import numpy as np

from .buffers import FLOAT_SIZE, GL_TRIANGLES, GL_UNSIGNED_INT, ElementBuffer, VertexArray, VertexBuffer
from .camera import Camera, CameraKey, rotate, scale, translate
from .geometry import FLOATS_PER_VERTEX, GeometryBuffer
from .mesh import GL_TEXTURE0, MESH_TEXTURE_UNIT, Mesh, MeshGL
from .objloader import load_obj
from .scene import (
    CAMERA_START,
    FAR_PLANE,
    FOV_DEG,
    LAMP_OFFSET,
    LAMP_SCALE,
    LIGHT_COLOR,
    LIGHT_INDICES,
    LIGHT_POSITION,
    LIGHT_VERTICES,
    NEAR_PLANE,
    SKYBOX_FACES,
    SKYBOX_VERTICES,
    WINDOW_SIZE,
    CupboardDimensions,
    DoorAnimator,
    build_scene,
    deduplicate_vertices,
    door_hinge_position,
)
from .shader import Shader, ShaderGL

GL_DEPTH_TEST = 0x0B71
GL_LESS = 0x0201
GL_LEQUAL = 0x0203
GL_COLOR_BUFFER_BIT = 0x4000
GL_DEPTH_BUFFER_BIT = 0x0100
GL_TEXTURE_CUBE_MAP = 0x8513

WINDOW_TITLE = "OpenSzafkaGL"
LAMP_MODEL = "Street_Lamp.obj"
LAMP_TEXTURE = "Textures/metalagh.png"
DOOR_TEXTURE = "Textures/door.jpg"
DOOR_TEXTURE_UNIT = 3
SKYBOX_VERTEX_COUNT = 36

# Objects drawn with the default shader: (geometry name, texture file, texture unit)
_DEFAULT_OBJECTS = (
    ("cupboard", "Textures/wood.jpg", 0),
    ("floor", "Textures/concrete.jpg", 1),
    ("grass", "Textures/grass.jpg", 2),
    ("cans", "Textures/beer.jpg", 4),
    ("milk", "Textures/milk.jpg", 5),
)

# (location, components, float offset) of position, normal and UV
_SCENE_ATTRIBUTES = ((0, 3, 0), (1, 3, 3), (2, 2, 6))


class TextureHandle(Protocol):
    def bind(self) -> None: ...

    def delete(self) -> None: ...


class AppGL(MeshGL, ShaderGL, Protocol):
    """All OpenGL entry points the scene window uses."""

    def uniform1i(self, location: int, value: int) -> None: ...

    def uniform4f(self, location: int, x: float, y: float, z: float, w: float) -> None: ...

    def enable(self, capability: int) -> None: ...

    def depth_func(self, func: int) -> None: ...

    def clear(self, mask: int) -> None: ...

    def draw_arrays(self, mode: int, first: int, count: int) -> None: ...

    def bind_texture(self, target: int, texture_id: int) -> None: ...

    def delete_texture(self, texture_id: int) -> None: ...

    def load_texture(self, path: str, unit: int) -> TextureHandle: ...

    def load_cubemap(self, paths: Sequence[str]) -> int: ...


@dataclass
class _Drawable:
    vao: VertexArray
    vbo: VertexBuffer
    ebo: ElementBuffer

    def draw(self, gl: AppGL) -> None:
        self.vao.bind()
        gl.draw_elements(GL_TRIANGLES, self.ebo.count, GL_UNSIGNED_INT)

    def delete(self) -> None:
        self.vao.delete()
        self.vbo.delete()
        self.ebo.delete()


@dataclass
class _Resources:
    shaders: dict[str, Shader]
    drawables: dict[str, _Drawable]
    textures: dict[str, TextureHandle]
    light: _Drawable
    skybox_vao: VertexArray
    skybox_vbo: VertexBuffer
    cubemap: int
    lamp: Mesh
    extra: list = field(default_factory=list)


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="szafkagl", description="Show the cupboard scene.")
    parser.add_argument(
        "--assets",
        type=Path,
        default=Path("."),
        help="directory holding the shaders, textures and the lamp model",
    )
    return parser.parse_args(argv)


class SceneWindow:
    """Scene state, per-frame update and drawing through an attached GL object."""

    def __init__(self, assets_dir: str | Path) -> None:
        self.assets_dir = Path(assets_dir)
        self.dims = CupboardDimensions()
        self.geometry = build_scene(self.dims, random.Random())

        lamp = load_obj(self.assets_dir / LAMP_MODEL)
        self.lamp_vertices, self.lamp_indices = deduplicate_vertices(lamp)
        if not self.lamp_vertices or not self.lamp_indices:
            raise ValueError(f"lamp model {LAMP_MODEL} holds no faces")

        self.camera = Camera(WINDOW_SIZE[0], WINDOW_SIZE[1], CAMERA_START)
        direction = np.asarray(self.dims.center, dtype=np.float64) - self.camera.position
        self.camera.orientation = direction / np.linalg.norm(direction)

        self.door = DoorAnimator()
        self.hinge = door_hinge_position(self.dims)
        self.light_model = translate(np.identity(4), LIGHT_POSITION)
        self.lamp_model = scale(translate(np.identity(4), LAMP_OFFSET), LAMP_SCALE)

        self.keys: set[CameraKey] = set()
        self.door_key_held = False
        self.mouse: tuple[float, float] | None = None
        self.recenter: tuple[int, int] | None = None
        self.elapsed = 0.0
        self.gl: AppGL | None = None
        self._resources: _Resources | None = None

    def update(self, dt: float) -> None:
        """Advance input handling, the door swing and the camera by dt seconds."""
        self.elapsed += dt
        self.camera.move(self.keys)
        if self.mouse is None:
            self.camera.release_mouse()
            self.recenter = None
        else:
            self.recenter = self.camera.look(*self.mouse)
            self.mouse = self.recenter
        if self.door_key_held:
            self.door.toggle(self.elapsed)
        self.door.update(dt)
        self.camera.update_matrix(FOV_DEG, NEAR_PLANE, FAR_PLANE)

    def _asset(self, relative: str) -> str:
        return str(self.assets_dir / relative)

    def _shader(self, name: str, gl: AppGL) -> Shader:
        return Shader(self.assets_dir / f"{name}.vert", self.assets_dir / f"{name}.frag", gl)

    @staticmethod
    def _upload(buffer: GeometryBuffer, gl: AppGL) -> _Drawable:
        vao = VertexArray(gl)
        vao.bind()
        vbo = VertexBuffer(buffer.vertices, gl)
        ebo = ElementBuffer(buffer.indices, gl)
        stride = FLOATS_PER_VERTEX * FLOAT_SIZE
        for location, components, offset in _SCENE_ATTRIBUTES:
            vao.link_attrib(vbo, location, components, stride, offset * FLOAT_SIZE)
        vao.unbind()
        return _Drawable(vao, vbo, ebo)

    def _set_light(self, shader: Shader, gl: AppGL) -> None:
        shader.activate()
        gl.uniform4f(shader.uniform_location("lightColor"), *LIGHT_COLOR)
        gl.uniform3f(shader.uniform_location("lightPos"), *LIGHT_POSITION)

    def _setup(self, gl: AppGL) -> _Resources:
        default = self._shader("default", gl)
        door = self._shader("door", gl)

        names = ("cupboard", "door", "floor", "grass", "cans", "milk")
        drawables = {name: self._upload(getattr(self.geometry, name), gl) for name in names}

        light_shader = self._shader("light", gl)
        light_vao = VertexArray(gl)
        light_vao.bind()
        light_vbo = VertexBuffer(LIGHT_VERTICES, gl)
        light_ebo = ElementBuffer(LIGHT_INDICES, gl)
        light_vao.link_attrib(light_vbo, 0, 3, 3 * FLOAT_SIZE, 0)
        light_vao.unbind()
        light_vbo.unbind()
        light_ebo.unbind()

        skybox_shader = self._shader("skybox", gl)
        skybox_vao = VertexArray(gl)
        skybox_vao.bind()
        skybox_vbo = VertexBuffer(SKYBOX_VERTICES, gl)
        skybox_vao.link_attrib(skybox_vbo, 0, 3, 3 * FLOAT_SIZE, 0)
        skybox_vao.unbind()

        cubemap = gl.load_cubemap([self._asset(face) for face in SKYBOX_FACES])
        if cubemap == 0:
            print("Failed to load the skybox cubemap!")

        skybox_shader.activate()
        gl.uniform1i(skybox_shader.uniform_location("skybox"), 0)

        self._set_light(default, gl)
        self._set_light(door, gl)

        textures = {name: gl.load_texture(self._asset(path), unit) for name, path, unit in _DEFAULT_OBJECTS}
        textures["door"] = gl.load_texture(self._asset(DOOR_TEXTURE), DOOR_TEXTURE_UNIT)
        textures["lamp"] = gl.load_texture(self._asset(LAMP_TEXTURE), MESH_TEXTURE_UNIT)

        lamp = Mesh(self.lamp_vertices, self.lamp_indices, textures["lamp"], gl)
        lamp_shader = self._shader("lamp", gl)
        lamp_shader.activate()
        gl.uniform1i(lamp_shader.uniform_location("tex0"), MESH_TEXTURE_UNIT)

        default.activate()
        gl.uniform1i(default.uniform_location("tex0"), 0)
        door.activate()
        gl.uniform1i(door.uniform_location("doorTexture"), DOOR_TEXTURE_UNIT)

        gl.enable(GL_DEPTH_TEST)

        if default.uniform_location("tex0") == -1:
            print("WARNING: the default shader has no tex0 uniform")

        return _Resources(
            shaders={
                "default": default,
                "door": door,
                "light": light_shader,
                "skybox": skybox_shader,
                "lamp": lamp_shader,
            },
            drawables=drawables,
            textures=textures,
            light=_Drawable(light_vao, light_vbo, light_ebo),
            skybox_vao=skybox_vao,
            skybox_vbo=skybox_vbo,
            cubemap=cubemap,
            lamp=lamp,
        )

    def on_draw(self) -> None:
        """Draw one frame; GL resources are created on the first call."""
        gl = self.gl
        if gl is None:
            raise RuntimeError("no GL context is attached to the scene window")
        if self._resources is None:
            self._resources = self._setup(gl)
        res = self._resources
        shaders = res.shaders
        camera = self.camera
        cam_pos = tuple(float(c) for c in camera.position)

        gl.clear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)

        light = shaders["light"]
        light.activate()
        light.set_matrix4("model", self.light_model)
        gl.uniform4f(light.uniform_location("lightColor"), *LIGHT_COLOR)
        light.set_matrix4("camMatrix", camera.camera_matrix)
        res.light.draw(gl)

        default = shaders["default"]
        default.activate()
        gl.uniform3f(default.uniform_location("viewPos"), *cam_pos)
        default.set_matrix4("camMatrix", camera.camera_matrix)
        default.set_matrix4("model", np.identity(4))
        for name, _path, unit in _DEFAULT_OBJECTS:
            gl.active_texture(GL_TEXTURE0 + unit)
            res.textures[name].bind()
            gl.uniform1i(default.uniform_location("tex0"), unit)
            res.drawables[name].draw(gl)
        gl.uniform1i(default.uniform_location("tex0"), 0)

        door = shaders["door"]
        door.activate()
        gl.uniform3f(door.uniform_location("viewPos"), *cam_pos)
        door.set_matrix4("camMatrix", camera.camera_matrix)
        door_model = rotate(
            translate(np.identity(4), self.hinge), math.radians(self.door.angle), (0.0, 1.0, 0.0)
        )
        door.set_matrix4("model", door_model)
        gl.active_texture(GL_TEXTURE0 + DOOR_TEXTURE_UNIT)
        res.textures["door"].bind()
        res.drawables["door"].draw(gl)

        gl.active_texture(GL_TEXTURE0 + MESH_TEXTURE_UNIT)
        res.lamp.draw(shaders["lamp"], camera, self.lamp_model)

        gl.depth_func(GL_LEQUAL)
        skybox = shaders["skybox"]
        skybox.activate()
        skybox.set_matrix4("view", camera.view_matrix())
        skybox.set_matrix4("projection", camera.projection_matrix(FOV_DEG, NEAR_PLANE, FAR_PLANE))
        res.skybox_vao.bind()
        gl.active_texture(GL_TEXTURE0)
        gl.bind_texture(GL_TEXTURE_CUBE_MAP, res.cubemap)
        gl.draw_arrays(GL_TRIANGLES, 0, SKYBOX_VERTEX_COUNT)
        res.skybox_vao.unbind()
        gl.bind_texture(GL_TEXTURE_CUBE_MAP, 0)
        gl.depth_func(GL_LESS)

    def _release(self) -> None:
        res, gl = self._resources, self.gl
        if res is None or gl is None:
            return
        res.lamp.delete()
        for drawable in res.drawables.values():
            drawable.delete()
        res.light.delete()
        for texture in res.textures.values():
            texture.delete()
        gl.delete_texture(res.cubemap)
        res.skybox_vao.delete()
        res.skybox_vbo.delete()
        for shader in res.shaders.values():
            shader.delete()
        self._resources = None


@dataclass
class _PygletTexture:
    texture: object
    gl: object

    def bind(self) -> None:
        self.gl.glBindTexture(self.texture.target, self.texture.id)

    def delete(self) -> None:
        self.texture.delete()


class _PygletGL:
    """AppGL implemented on the current pyglet OpenGL context."""

    def __init__(self) -> None:
        from pyglet import gl

        self._gl = gl
        self._handles = itertools.count(1)
        self._shader_kinds: dict[int, int] = {}
        self._shader_sources: dict[int, str] = {}
        self._shaders: dict[int, object] = {}
        self._attached: dict[int, list[int]] = {}
        self._programs: dict[int, object] = {}

    def _gen(self, generator) -> int:
        ids = (self._gl.GLuint * 1)()
        generator(1, ids)
        return int(ids[0])

    def _delete(self, deleter, object_id: int) -> None:
        deleter(1, (self._gl.GLuint * 1)(object_id))

    def gen_buffer(self) -> int:
        return self._gen(self._gl.glGenBuffers)

    def bind_buffer(self, target: int, buffer_id: int) -> None:
        self._gl.glBindBuffer(target, buffer_id)

    def buffer_data(self, target: int, data: bytes, usage: int) -> None:
        self._gl.glBufferData(target, len(data), data, usage)

    def delete_buffer(self, buffer_id: int) -> None:
        self._delete(self._gl.glDeleteBuffers, buffer_id)

    def gen_vertex_array(self) -> int:
        return self._gen(self._gl.glGenVertexArrays)

    def bind_vertex_array(self, array_id: int) -> None:
        self._gl.glBindVertexArray(array_id)

    def delete_vertex_array(self, array_id: int) -> None:
        self._delete(self._gl.glDeleteVertexArrays, array_id)

    def vertex_attrib_pointer(self, index, size, type_, normalized, stride, offset) -> None:
        flag = self._gl.GL_TRUE if normalized else self._gl.GL_FALSE
        self._gl.glVertexAttribPointer(index, size, type_, flag, stride, offset)

    def enable_vertex_attrib_array(self, index: int) -> None:
        self._gl.glEnableVertexAttribArray(index)

    def create_shader(self, kind: int) -> int:
        handle = next(self._handles)
        self._shader_kinds[handle] = kind
        return handle

    def shader_source(self, shader_id: int, source: str) -> None:
        self._shader_sources[shader_id] = source

    def compile_shader(self, shader_id: int) -> None:
        from pyglet.graphics.shader import Shader as GLSLShader

        kind = "vertex" if self._shader_kinds[shader_id] == self._gl.GL_VERTEX_SHADER else "fragment"
        self._shaders[shader_id] = GLSLShader(self._shader_sources[shader_id], kind)

    def create_program(self) -> int:
        handle = next(self._handles)
        self._attached[handle] = []
        return handle

    def attach_shader(self, program_id: int, shader_id: int) -> None:
        self._attached[program_id].append(shader_id)

    def link_program(self, program_id: int) -> None:
        from pyglet.graphics.shader import ShaderProgram

        shaders = [self._shaders[s] for s in self._attached[program_id]]
        self._programs[program_id] = ShaderProgram(*shaders)

    def delete_shader(self, shader_id: int) -> None:
        self._shaders.pop(shader_id, None)
        self._shader_sources.pop(shader_id, None)
        self._shader_kinds.pop(shader_id, None)

    def use_program(self, program_id: int) -> None:
        self._programs[program_id].use()

    def delete_program(self, program_id: int) -> None:
        self._programs.pop(program_id).delete()

    def get_uniform_location(self, program_id: int, name: str) -> int:
        return int(self._gl.glGetUniformLocation(self._programs[program_id].id, name.encode()))

    def uniform_matrix4fv(self, location: int, values: Sequence[float]) -> None:
        self._gl.glUniformMatrix4fv(location, 1, self._gl.GL_FALSE, (self._gl.GLfloat * 16)(*values))

    def uniform1i(self, location: int, value: int) -> None:
        self._gl.glUniform1i(location, value)

    def uniform3f(self, location: int, x: float, y: float, z: float) -> None:
        self._gl.glUniform3f(location, x, y, z)

    def uniform4f(self, location: int, x: float, y: float, z: float, w: float) -> None:
        self._gl.glUniform4f(location, x, y, z, w)

    def active_texture(self, unit: int) -> None:
        self._gl.glActiveTexture(unit)

    def draw_elements(self, mode: int, count: int, index_type: int) -> None:
        self._gl.glDrawElements(mode, count, index_type, 0)

    def draw_arrays(self, mode: int, first: int, count: int) -> None:
        self._gl.glDrawArrays(mode, first, count)

    def enable(self, capability: int) -> None:
        self._gl.glEnable(capability)

    def depth_func(self, func: int) -> None:
        self._gl.glDepthFunc(func)

    def clear(self, mask: int) -> None:
        self._gl.glClear(mask)

    def bind_texture(self, target: int, texture_id: int) -> None:
        self._gl.glBindTexture(target, texture_id)

    def delete_texture(self, texture_id: int) -> None:
        if texture_id:
            self._delete(self._gl.glDeleteTextures, texture_id)

    def load_texture(self, path: str, unit: int) -> TextureHandle:
        import pyglet.image

        texture = pyglet.image.load(path).get_texture()
        self._gl.glActiveTexture(self._gl.GL_TEXTURE0 + unit)
        self._gl.glBindTexture(texture.target, texture.id)
        self._gl.glTexParameteri(texture.target, self._gl.GL_TEXTURE_WRAP_S, self._gl.GL_REPEAT)
        self._gl.glTexParameteri(texture.target, self._gl.GL_TEXTURE_WRAP_T, self._gl.GL_REPEAT)
        self._gl.glBindTexture(texture.target, 0)
        return _PygletTexture(texture, self._gl)

    def load_cubemap(self, paths: Iterable[str]) -> int:
        import pyglet.image
        from pyglet.image.codecs import ImageDecodeException

        gl = self._gl
        texture_id = self._gen(gl.glGenTextures)
        gl.glBindTexture(GL_TEXTURE_CUBE_MAP, texture_id)
        for face, path in enumerate(paths):
            try:
                image = pyglet.image.load(path)
            except (OSError, ImageDecodeException) as exc:
                print(f"Cubemap face failed to load: {path}: {exc}")
                gl.glBindTexture(GL_TEXTURE_CUBE_MAP, 0)
                self.delete_texture(texture_id)
                return 0
            data = image.get_image_data().get_data("RGB", -image.width * 3)
            gl.glTexImage2D(
                gl.GL_TEXTURE_CUBE_MAP_POSITIVE_X + face, 0, gl.GL_RGB,
                image.width, image.height, 0, gl.GL_RGB, gl.GL_UNSIGNED_BYTE, data,
            )
        for parameter, value in (
            (gl.GL_TEXTURE_MIN_FILTER, gl.GL_LINEAR),
            (gl.GL_TEXTURE_MAG_FILTER, gl.GL_LINEAR),
            (gl.GL_TEXTURE_WRAP_S, gl.GL_CLAMP_TO_EDGE),
            (gl.GL_TEXTURE_WRAP_T, gl.GL_CLAMP_TO_EDGE),
            (gl.GL_TEXTURE_WRAP_R, gl.GL_CLAMP_TO_EDGE),
        ):
            gl.glTexParameteri(GL_TEXTURE_CUBE_MAP, parameter, value)
        gl.glBindTexture(GL_TEXTURE_CUBE_MAP, 0)
        return texture_id


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        scene = SceneWindow(args.assets)
    except (OSError, ValueError) as exc:
        print(f"Cannot load the scene: {exc}", file=sys.stderr)
        return 1

    import pyglet
    from pyglet.window import key, mouse

    config = pyglet.gl.Config(
        major_version=3, minor_version=3, forward_compatible=True, double_buffer=True, depth_size=24
    )
    try:
        window = pyglet.window.Window(
            WINDOW_SIZE[0], WINDOW_SIZE[1], caption=WINDOW_TITLE, config=config, vsync=True
        )
    except pyglet.window.NoSuchConfigException:
        print("Failed to create window")
        return -1

    held = key.KeyStateHandler()
    window.push_handlers(held)
    bindings = {
        key.W: CameraKey.FORWARD,
        key.A: CameraKey.LEFT,
        key.S: CameraKey.BACKWARD,
        key.D: CameraKey.RIGHT,
        key.SPACE: CameraKey.UP,
        key.LCTRL: CameraKey.DOWN,
        key.LSHIFT: CameraKey.FAST,
    }

    @window.event
    def on_mouse_press(x, y, button, modifiers):
        if button == mouse.LEFT:
            scene.mouse = (x, window.height - y)
            window.set_mouse_visible(False)

    @window.event
    def on_mouse_drag(x, y, dx, dy, buttons, modifiers):
        if buttons & mouse.LEFT:
            scene.mouse = (x, window.height - y)

    @window.event
    def on_mouse_release(x, y, button, modifiers):
        if button == mouse.LEFT:
            scene.mouse = None
            window.set_mouse_visible(True)

    @window.event
    def on_draw():
        scene.on_draw()

    @window.event
    def on_close():
        scene._release()
        window.close()
        return pyglet.event.EVENT_HANDLED

    def tick(dt: float) -> None:
        scene.keys = {camera_key for k, camera_key in bindings.items() if held[k]}
        scene.door_key_held = bool(held[key.E])
        scene.update(dt)
        if scene.recenter is not None:
            cx, cy = scene.recenter
            window.set_mouse_position(cx, window.height - cy)

    scene.gl = _PygletGL()
    pyglet.clock.schedule_interval(tick, 1 / 60)
    pyglet.app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())