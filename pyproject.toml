[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "szafkagl"
version = "0.1.0"
description = "A small OpenGL scene: a textured cupboard with a swinging door, cans, milk cartons, a street lamp and a skybox."
requires-python = ">=3.10"
keywords = ["opengl", "3d", "rendering", "obj", "camera", "pyglet"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]
dependencies = [
    "numpy",
    "pyglet",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
szafkagl = "szafkagl.app:main"

[tool.hatch.build.targets.wheel]
packages = ["szafkagl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
