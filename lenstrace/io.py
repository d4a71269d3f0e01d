"""
io.py - Loading meshes and scene descriptions

Formats:
    - ASCII PLY meshes: header with ``element vertex N``, ``element face M``
      and ``end_header``; N lines ``x y z``; M lines ``3 a b c``
    - YAML scene descriptions:

          lenses:
            - radius: 1.0
              left: Flat
              right: {Convex: 0.2}
          lights:
            - Laser: [[-2, 0, 0], [1, 0, 0]]
            - Point: [[0, 1, 0]]

      Tagged variants (``right: !Convex 0.2``) are accepted as well.

Project: lenstrace
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List

import yaml

from .exceptions import MeshFormatError, SceneFormatError
from .geometry import Triangle
from .lenses import Lens
from .lights import Light

logger = logging.getLogger(__name__)


# =============================================================================
# PLY meshes
# =============================================================================

def parse_ply(lines: Iterable[str]) -> List[Triangle]:
    """
    Parse an ASCII PLY triangle mesh.

    Each face ``3 a b c`` becomes the triangle (v[a], v[c], v[b]).

    Parameters
    ----------
    lines : Iterable[str]
        Lines of the file

    Returns
    -------
    List[Triangle]
        One triangle per face

    Raises
    ------
    MeshFormatError
        If the header or body is malformed
    """
    it = iter(lines)

    def header_count(prefix: str) -> int:
        for line in it:
            if line.startswith(prefix):
                parts = line.split()
                try:
                    return int(parts[2])
                except (IndexError, ValueError):
                    raise MeshFormatError(f"bad header line: {line.strip()!r}") from None
        raise MeshFormatError(f"missing '{prefix}' header line")

    vcount = header_count("element vertex")
    fcount = header_count("element face")

    for line in it:
        if line.startswith("end_header"):
            break
    else:
        raise MeshFormatError("missing 'end_header'")

    def body_line(kind: str, i: int) -> List[str]:
        try:
            return next(it).split()
        except StopIteration:
            raise MeshFormatError(f"file ends before {kind} {i}") from None

    vertices = []
    for i in range(vcount):
        parts = body_line("vertex", i)
        try:
            vertices.append([float(p) for p in parts[:3]])
        except ValueError:
            raise MeshFormatError(f"bad vertex {i}: {parts!r}") from None
        if len(vertices[-1]) != 3:
            raise MeshFormatError(f"vertex {i} needs three coordinates, got {parts!r}")

    triangles = []
    for i in range(fcount):
        parts = body_line("face", i)
        try:
            a, b, c = (int(p) for p in parts[1:4])
        except ValueError:
            raise MeshFormatError(f"bad face {i}: {parts!r}") from None
        if not all(0 <= v < vcount for v in (a, b, c)):
            raise MeshFormatError(f"face {i} refers to a missing vertex: {parts!r}")
        triangles.append(Triangle(vertices[a], vertices[c], vertices[b]))

    return triangles


def load_ply(path: str | Path) -> List[Triangle]:
    """Read an ASCII PLY file into triangles."""
    with open(path, 'r', encoding='utf-8') as f:
        triangles = parse_ply(f)
    logger.info("Loaded %d triangles from %s", len(triangles), path)
    return triangles


# =============================================================================
# Scene descriptions
# =============================================================================

@dataclass
class SceneDescription:
    """Lenses and lights read from a scene file."""
    lenses: List[Lens] = field(default_factory=list)
    lights: List[Light] = field(default_factory=list)


class _SceneLoader(yaml.SafeLoader):
    """Safe loader that reads ``!Tag value`` as ``{Tag: value}``."""


def _construct_tagged(loader: yaml.SafeLoader, suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        value = yaml.safe_load(value) if value != "" else None
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return {suffix: value}


_SceneLoader.add_multi_constructor("!", _construct_tagged)


def parse_scene(data: Any) -> SceneDescription:
    """
    Build a SceneDescription from loaded YAML data.

    Raises
    ------
    SceneFormatError
        If the document or any record is malformed
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SceneFormatError(f"scene must be a mapping, got {type(data).__name__}")

    lenses = data.get("lenses") or []
    lights = data.get("lights") or []
    if not isinstance(lenses, list) or not isinstance(lights, list):
        raise SceneFormatError("'lenses' and 'lights' must be lists")

    return SceneDescription(
        lenses=[Lens.from_record(r) for r in lenses],
        lights=[Light.from_record(r) for r in lights],
    )


def loads_scene(text: str) -> SceneDescription:
    """Parse a YAML scene description from a string."""
    try:
        data = yaml.load(text, Loader=_SceneLoader)
    except yaml.YAMLError as e:
        raise SceneFormatError(f"invalid YAML: {e}") from e
    return parse_scene(data)


def load_scene(path: str | Path) -> SceneDescription:
    """Read a YAML scene description file."""
    with open(path, 'r', encoding='utf-8') as f:
        description = loads_scene(f.read())
    logger.info(
        "Loaded scene %s: %d lenses, %d lights",
        path, len(description.lenses), len(description.lights)
    )
    return description
