"""Tests for PLY mesh and YAML scene loading."""

import textwrap

import pytest
from numpy.testing import assert_allclose

from lenstrace import (
    Lens,
    LensSide,
    LightKind,
    MeshFormatError,
    SceneFormatError,
    load_ply,
    load_scene,
    loads_scene,
    parse_ply,
)


PLY = """\
ply
format ascii 1.0
comment two triangles sharing an edge
element vertex 4
property float x
property float y
property float z
element face 2
property list uchar int vertex_indices
end_header
0 0 0
1 0 0
1 1 0
0 1 0.5
3 0 1 2
3 0 2 3
"""


# =============================================================================
# PLY
# =============================================================================

def test_parse_ply():
    tris = parse_ply(PLY.splitlines())
    assert len(tris) == 2
    assert_allclose(tris[1].v2, [1, 1, 0])


def test_parse_ply_swaps_last_two_indices():
    tri = parse_ply(PLY.splitlines())[0]
    assert_allclose(tri.v0, [0, 0, 0])
    assert_allclose(tri.v1, [1, 1, 0])
    assert_allclose(tri.v2, [1, 0, 0])


def test_load_ply(tmp_path):
    path = tmp_path / "mesh.ply"
    path.write_text(PLY)
    assert len(load_ply(path)) == 2


@pytest.mark.parametrize("text, message", [
    ("ply\nelement face 1\nend_header\n", "element vertex"),
    ("ply\nelement vertex 1\nend_header\n", "element face"),
    ("ply\nelement vertex x\n", "bad header"),
    ("ply\nelement vertex 1\nelement face 0\n0 0 0\n", "end_header"),
    ("ply\nelement vertex 2\nelement face 0\nend_header\n0 0 0\n", "vertex 1"),
    ("ply\nelement vertex 1\nelement face 0\nend_header\n0 zero 0\n", "bad vertex"),
    ("ply\nelement vertex 1\nelement face 0\nend_header\n0 0\n", "three coordinates"),
    ("ply\nelement vertex 1\nelement face 1\nend_header\n0 0 0\n", "face 0"),
    ("ply\nelement vertex 1\nelement face 1\nend_header\n0 0 0\n3 0 0\n", "bad face"),
    ("ply\nelement vertex 1\nelement face 1\nend_header\n0 0 0\n3 0 0 4\n", "missing vertex"),
])
def test_bad_ply(text, message):
    with pytest.raises(MeshFormatError, match=message):
        parse_ply(text.splitlines())


# =============================================================================
# Scenes
# =============================================================================

def test_scene_mapping_form():
    description = loads_scene(textwrap.dedent("""\
        lenses:
          - radius: 1.0
            left: Flat
            right: {Convex: 0.2}
        lights:
          - Laser: [[-2, 0, 0], [1, 0, 0]]
          - Point: [[0, 1, 0]]
    """))

    assert description.lenses == [Lens(1.0, LensSide.flat(), LensSide.convex(0.2))]
    assert [light.kind for light in description.lights] == [LightKind.LASER, LightKind.POINT]
    assert_allclose(description.lights[0].direction, [1, 0, 0])


def test_scene_tagged_form():
    description = loads_scene(textwrap.dedent("""\
        lenses:
          - radius: 2
            left: !Concave 0.3
            right: !Flat
        lights:
          - !Laser [[-2, 0.1, 0], [1, 0, 0]]
          - !Point [0, 1, 0]
    """))

    assert description.lenses == [Lens(2.0, LensSide.concave(0.3), LensSide.flat())]
    assert_allclose(description.lights[1].origin, [0, 1, 0])


def test_empty_scene():
    description = loads_scene("")
    assert description.lenses == []
    assert description.lights == []


@pytest.mark.parametrize("text", [
    "- 1\n- 2\n",
    "lenses: {radius: 1}\n",
    "lenses: [{radius: 1, left: Flat, right: Wobbly}]\n",
    "lights: [{Torch: [[0, 0, 0]]}]\n",
    "lenses: [\n",
])
def test_bad_scene(text):
    with pytest.raises(SceneFormatError):
        loads_scene(text)


def test_load_scene(tmp_path):
    path = tmp_path / "scene.yaml"
    path.write_text("lights:\n  - Point: [[0, 0, 0]]\n")
    assert len(load_scene(path).lights) == 1


def test_load_missing_scene(tmp_path):
    with pytest.raises(OSError):
        load_scene(tmp_path / "missing.yaml")
