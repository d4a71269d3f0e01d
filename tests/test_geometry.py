"""Tests for triangles, bounding boxes and rays."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from lenstrace import AABB, Axis, Ray, Triangle, normalize
from lenstrace.config import RAY_HALF_WIDTH
from lenstrace.geometry import bounding_box


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def unit_triangle():
    """Right triangle in the plane x = 1."""
    return Triangle([1, 0, 0], [1, 1, 0], [1, 0, 1])


@pytest.fixture
def unit_box():
    return AABB([0, 0, 0], [1, 1, 1])


# =============================================================================
# normalize / Axis
# =============================================================================

def test_normalize_unit_length():
    assert_allclose(normalize(np.array([3.0, 4.0, 0.0])), [0.6, 0.8, 0.0])


def test_normalize_zero_raises():
    with pytest.raises(ValueError):
        normalize(np.zeros(3))


def test_axis_cycles():
    assert Axis.X.next() is Axis.Y
    assert Axis.Y.next() is Axis.Z
    assert Axis.Z.next() is Axis.X


# =============================================================================
# Triangle
# =============================================================================

class TestTriangleIntersect:

    def test_front_hit(self, unit_triangle):
        ray = Ray([0, 0.2, 0.2], [1, 0, 0])
        assert unit_triangle.intersect(ray) == pytest.approx(1.0)

    def test_back_face_hit(self, unit_triangle):
        ray = Ray([2, 0.2, 0.2], [-1, 0, 0])
        assert unit_triangle.intersect(ray) == pytest.approx(1.0)

    def test_parallel_ray_misses(self, unit_triangle):
        ray = Ray([1, 0.2, 0.2], [0, 1, 0])
        assert unit_triangle.intersect(ray) is None

    def test_triangle_behind_ray(self, unit_triangle):
        ray = Ray([2, 0.2, 0.2], [1, 0, 0])
        assert unit_triangle.intersect(ray) is None

    def test_outside_barycentric_range(self, unit_triangle):
        ray = Ray([0, 0.8, 0.8], [1, 0, 0])
        assert unit_triangle.intersect(ray) is None

    def test_oblique_distance(self, unit_triangle):
        ray = Ray.from_two_points([0, 0, 0], [1, 0.25, 0.25])
        expected = np.linalg.norm([1, 0.25, 0.25])
        assert unit_triangle.intersect(ray) == pytest.approx(expected)

    def test_degenerate_triangle_never_hits(self):
        tri = Triangle([0, 0, 0], [1, 1, 1], [2, 2, 2])
        assert tri.intersect(Ray([-1, 0, 0], [1, 0.5, 0.5])) is None


def test_normal_follows_winding(unit_triangle):
    assert_allclose(unit_triangle.normal(), [1, 0, 0])
    flipped = Triangle(unit_triangle.v0, unit_triangle.v2, unit_triangle.v1)
    assert_allclose(flipped.normal(), [-1, 0, 0])
    assert_allclose(unit_triangle.render_normal(), [-1, 0, 0])


def test_fit(unit_triangle):
    box = unit_triangle.fit()
    assert_allclose(box.min, [1, 0, 0])
    assert_allclose(box.max, [1, 1, 1])


def test_straddling_triangle_is_on_both_sides():
    tri = Triangle([0, 0, 0], [2, 0, 0], [0, 1, 0])
    assert tri.left_of(Axis.X, 1.0)
    assert tri.right_of(Axis.X, 1.0)
    assert tri.left_of(Axis.Y, 0.5) and tri.right_of(Axis.Y, 0.5)
    assert not tri.right_of(Axis.Z, 0.1)
    assert tri.left_of(Axis.Z, 0.0) and tri.right_of(Axis.Z, 0.0)


def test_translated_and_transformed_are_copies(unit_triangle):
    moved = unit_triangle.translated([1, 2, 3])
    assert_allclose(moved.v0, [2, 2, 3])
    assert_allclose(unit_triangle.v0, [1, 0, 0])

    scaled = unit_triangle.transformed([0, 0, 1], [2, 2, 2])
    assert_allclose(scaled.v1, [2, 2, 1])


def test_bounding_box_of_empty_list_is_origin():
    box = bounding_box([])
    assert_allclose(box.min, 0)
    assert_allclose(box.max, 0)


# =============================================================================
# AABB
# =============================================================================

def test_union():
    a = AABB([0, 0, 0], [1, 1, 1])
    b = AABB([-1, 0.5, 0], [0.5, 2, 0.5])
    u = a.union(b)
    assert_allclose(u.min, [-1, 0, 0])
    assert_allclose(u.max, [1, 2, 1])


@pytest.mark.parametrize("axis", list(Axis))
def test_split_halves(unit_box, axis):
    left, right, mid = unit_box.split(axis)
    assert mid == pytest.approx(0.5)
    assert left.max[axis.value] == pytest.approx(0.5)
    assert right.min[axis.value] == pytest.approx(0.5)
    assert_allclose(left.min, unit_box.min)
    assert_allclose(right.max, unit_box.max)


class TestAABBIntersect:

    def test_through_box(self, unit_box):
        assert unit_box.intersect(Ray([-1, 0.5, 0.5], [1, 0.1, 0.1]))

    def test_miss(self, unit_box):
        assert not unit_box.intersect(Ray([-1, 2, 0.5], [1, 0, 0]))

    def test_axis_parallel_inside_range(self, unit_box):
        assert unit_box.intersect(Ray([0.5, 0.5, -3], [0, 0, 1]))

    def test_axis_parallel_outside_range(self, unit_box):
        assert not unit_box.intersect(Ray([1.5, 0.5, -3], [0, 0, 1]))

    def test_flat_box(self):
        box = AABB([0, -1, -1], [0, 1, 1])
        assert box.intersect(Ray([-1, 0.2, 0.3], [1, 0, 0]))
        assert box.intersect(Ray([-1, 0.2, 0.3], [1, 0.1, 0.0]))

    def test_matches_line_scan(self, rng):
        """Slab result agrees with sampling the ray's line densely."""
        t = np.linspace(-30.0, 30.0, 60001)
        agree = 0
        trials = 300

        for i in range(trials):
            lo = rng.uniform(-3, 3, size=3)
            box = AABB(lo, lo + rng.uniform(0.2, 3, size=3))
            origin = rng.uniform(-6, 6, size=3)
            direction = rng.normal(size=3)
            if i % 3 == 0:
                direction[rng.integers(3)] = 0.0
            ray = Ray(origin, direction)

            points = ray.origin + t[:, None] * ray.direction
            inside = np.all((points >= box.min) & (points <= box.max), axis=1)
            scanned = bool(inside.any())

            if scanned:
                # a sampled point in the box is a certain hit
                assert box.intersect(ray)
            agree += scanned == box.intersect(ray)

        assert agree / trials >= 0.99


# =============================================================================
# Ray
# =============================================================================

def test_ray_direction_normalized():
    ray = Ray([0, 0, 0], [0, 3, 4])
    assert_allclose(ray.direction, [0, 0.6, 0.8])
    assert ray.inside is False


def test_ray_zero_direction_raises():
    with pytest.raises(ValueError):
        Ray([0, 0, 0], [0, 0, 0])


def test_copy_is_independent():
    ray = Ray([0, 0, 0], [1, 0, 0], inside=True)
    other = ray.copy()
    other.origin[0] = 5.0
    assert ray.origin[0] == 0.0
    assert other.inside is True


def test_tesselate_tube():
    ray = Ray([0, 0, 0], [1, 0, 0])
    tris = ray.tesselate(2.0)
    assert len(tris) == 12

    vs = np.concatenate([t.vertices for t in tris])
    assert_allclose(vs[:, 0].min(), 0.0)
    assert_allclose(vs[:, 0].max(), 2.0)
    assert_allclose(np.abs(vs[:, 1]).max(), RAY_HALF_WIDTH)
    assert_allclose(np.abs(vs[:, 2]).max(), RAY_HALF_WIDTH)

    # closed box: every edge is shared by two faces
    edges = {}
    for tri in tris:
        keys = [tuple(np.round(v, 9)) for v in (tri.v0, tri.v1, tri.v2)]
        for a, b in ((0, 1), (1, 2), (2, 0)):
            edge = tuple(sorted((keys[a], keys[b])))
            edges[edge] = edges.get(edge, 0) + 1
    assert set(edges.values()) == {2}
