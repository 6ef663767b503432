"""Reader for the subset of Wavefront OBJ used by the scene: positions, normals, UVs, faces."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __getitem__(self, idx: int) -> float:
        if not 0 <= idx < 3:
            raise IndexError(f"Vec3 index out of range: {idx}")
        return (self.x, self.y, self.z)[idx]


@dataclass(frozen=True)
class TexCoord:
    u: float = 0.0
    v: float = 0.0

    def __getitem__(self, idx: int) -> float:
        if not 0 <= idx < 2:
            raise IndexError(f"TexCoord index out of range: {idx}")
        return (self.u, self.v)[idx]


@dataclass(frozen=True)
class FaceVertex:
    """Zero-based references of one face corner; -1 where a reference is absent."""

    pos: int = -1
    norm: int = -1
    coord: int = -1


@dataclass
class ObjModel:
    vertices: list[Vec3] = field(default_factory=list)
    normals: list[Vec3] = field(default_factory=list)
    coords: list[TexCoord] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)


def _read_floats(tokens: list[str], count: int) -> list[float]:
    values = [0.0] * count
    for i, token in enumerate(tokens[:count]):
        try:
            values[i] = float(token)
        except ValueError:
            break
    return values


def _parse_index(text: str) -> int:
    if not text:
        return -1
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"invalid face index: {text!r}")
    return int(match.group()) - 1


def _parse_face_vertex(token: str) -> FaceVertex:
    pos_text, _, rest = token.partition("/")
    coord_text, _, norm_text = rest.partition("/")
    return FaceVertex(
        pos=_parse_index(pos_text),
        norm=_parse_index(norm_text),
        coord=_parse_index(coord_text),
    )


def parse_obj(lines: Iterable[str]) -> ObjModel:
    """Parse OBJ text lines; polygon faces are fan-triangulated into position indices."""
    model = ObjModel()
    for line in lines:
        tokens = line.split()
        if not tokens:
            continue
        kind, args = tokens[0], tokens[1:]
        if kind == "v":
            model.vertices.append(Vec3(*_read_floats(args, 3)))
        elif kind == "vn":
            model.normals.append(Vec3(*_read_floats(args, 3)))
        elif kind == "vt":
            model.coords.append(TexCoord(*_read_floats(args, 2)))
        elif kind == "f":
            corners = [_parse_face_vertex(token) for token in args]
            first = corners[0] if corners else None
            for a, b in zip(corners[1:], corners[2:]):
                model.indices.extend((first.pos, a.pos, b.pos))
    return model


def load_obj(path: str | PathLike[str]) -> ObjModel:
    """Read and parse an OBJ file; raises OSError if it cannot be opened."""
    with open(path, encoding="utf-8", errors="replace") as handle:
        return parse_obj(handle)