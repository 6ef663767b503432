"""A textured cupboard scene rendered with OpenGL, with its geometry, OBJ and camera helpers."""

__version__ = "0.1.0"