# szafkagl

A small real-time 3D scene: a wooden cupboard standing on a concrete slab
in a field of grass, with a door that swings open on its hinge. Beer cans and
milk cartons are placed at random depths along the shelves, a street lamp
loaded from an OBJ model stands next to it, and a cubemap skybox surrounds it
all. The window is drawn with pyglet on an OpenGL 3.3 context.

## Installation

```
pip install .
```

## Running

```
szafkagl --help
```

shows the options. The scene needs a directory of assets: the shader sources
(`default`, `door`, `light`, `lamp` and `skybox`, each as a `.vert` and a
`.frag` file), the `Street_Lamp.obj` model and a `Textures/` folder with
`wood.jpg`, `concrete.jpg`, `grass.jpg`, `door.jpg`, `beer.jpg`, `milk.jpg`,
`metalagh.png` and the six skybox faces in `Textures/skybox/`
(`px.png`, `nx.png`, `py.png`, `ny.png`, `pz.png`, `nz.png`).
By default the current directory is used; another can be given with
`--assets`:

```
szafkagl --assets path/to/assets
```

If the lamp model cannot be read or holds no faces, the command reports the
problem and exits with status 1.

### Controls

| Input                | Action                                 |
|----------------------|----------------------------------------|
| W / A / S / D        | move forward / left / back / right     |
| Space / Left Ctrl    | move up / down                         |
| Left Shift (held)    | move faster                            |
| Left mouse (held)    | look around                            |
| E                    | open or close the cupboard door        |

## Using the building blocks

The geometry, OBJ parsing, camera maths and scene construction need no window
or OpenGL context:

```python
import random

from szafkagl.geometry import GeometryBuffer
from szafkagl.objloader import parse_obj
from szafkagl.scene import CupboardDimensions, DoorAnimator, build_scene

buf = GeometryBuffer()
buf.add_cube((0.0, 0.0, 0.0), (2.0, 3.0, 1.0), 1.0)
print(buf.vertex_count())        # 24
print(len(buf.indices))          # 36

model = parse_obj([
    "v 0 0 0", "v 1 0 0", "v 1 1 0", "v 0 1 0",
    "f 1 2 3 4",
])
print(model.indices)             # [0, 1, 2, 0, 2, 3]

scene = build_scene(CupboardDimensions(), random.Random(1))
door = DoorAnimator()
door.toggle(1.0)                 # start opening
print(door.update(0.5))          # -60.0 degrees
```

- `szafkagl.geometry.GeometryBuffer` collects interleaved vertices
  (position, normal, UV) and triangle indices, with `add_vertex`, `add_plane`
  and `add_cube`.
- `szafkagl.objloader` reads positions, normals, texture coordinates and
  fan-triangulated faces (`parse_obj`, `load_obj`).
- `szafkagl.camera` provides `look_at`, `perspective`, `rotate_vector`,
  `angle_between`, `translate`, `rotate`, `scale` and the `Camera` class.
- `szafkagl.scene` builds the scene geometry (`build_scene`), merges repeated
  OBJ vertices (`deduplicate_vertices`) and drives the door (`DoorAnimator`).
- `szafkagl.buffers`, `szafkagl.shader` and `szafkagl.mesh` wrap vertex
  buffers, element buffers, vertex arrays, shader programs and meshes; they
  issue their OpenGL calls through an object passed in as `gl`.

## What it does not do

The package ships no shaders, textures or lamp model; the scene cannot start
without an asset directory laid out as above. There are no options beyond
`--assets`: the window size, camera start and scene layout are fixed.

## Tests

```
pip install .[test]
pytest
```