"""
geometry.py - Triangle and bounding box primitives

Primitives:
    - Axis: coordinate axis used by kd-tree splits (cycles X -> Y -> Z -> X)
    - AABB: axis-aligned bounding box with slab intersection
    - Triangle: three vertices, normal computed on demand from winding

All points and vectors are 3-element float64 numpy arrays.

Project: lenstrace
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

if TYPE_CHECKING:
    from .rays import Ray


def normalize(vector: np.ndarray) -> np.ndarray:
    """
    Normalize a vector to unit length.

    Parameters
    ----------
    vector : np.ndarray
        Input vector of any dimension

    Returns
    -------
    np.ndarray
        Unit vector in same direction

    Raises
    ------
    ValueError
        If vector has zero magnitude
    """
    magnitude = np.linalg.norm(vector)
    if magnitude < 1e-15:
        raise ValueError("Cannot normalize zero vector")
    return vector / magnitude


class Axis(Enum):
    """Coordinate axis; the value is the component index."""
    X = 0
    Y = 1
    Z = 2

    def next(self) -> 'Axis':
        """Axis used one level deeper in the kd-tree."""
        return Axis((self.value + 1) % 3)


class AABB:
    """
    Axis-aligned bounding box.

    Attributes
    ----------
    min : np.ndarray
        Lower corner [x, y, z]
    max : np.ndarray
        Upper corner [x, y, z]
    """

    __slots__ = ("min", "max")

    def __init__(
        self,
        min_corner: List[float] | np.ndarray,
        max_corner: List[float] | np.ndarray
    ):
        self.min = np.array(min_corner, dtype=np.float64)
        self.max = np.array(max_corner, dtype=np.float64)

    def union(self, other: 'AABB') -> 'AABB':
        """Smallest box containing both boxes."""
        return AABB(np.minimum(self.min, other.min), np.maximum(self.max, other.max))

    def split(self, axis: Axis) -> Tuple['AABB', 'AABB', float]:
        """
        Split the box in half along an axis.

        Parameters
        ----------
        axis : Axis
            Axis perpendicular to the split plane

        Returns
        -------
        tuple
            (left box, right box, split coordinate)
        """
        i = axis.value
        mid = (self.min[i] + self.max[i]) / 2.0

        left_max = self.max.copy()
        left_max[i] = mid
        right_min = self.min.copy()
        right_min[i] = mid

        return AABB(self.min, left_max), AABB(right_min, self.max), float(mid)

    def intersect(self, ray: 'Ray') -> bool:
        """
        Slab test of the ray's supporting line against the box.

        An axis where the ray direction is exactly zero is handled as a
        range check of the origin on that axis.

        Parameters
        ----------
        ray : Ray
            Ray to test

        Returns
        -------
        bool
            True if the line through the ray crosses the box
        """
        tmin = -np.inf
        tmax = np.inf

        for i in range(3):
            o = ray.origin[i]
            d = ray.direction[i]

            if d == 0.0:
                if o < self.min[i] or o > self.max[i]:
                    return False
                continue

            t1 = (self.min[i] - o) / d
            t2 = (self.max[i] - o) / d
            if t1 > t2:
                t1, t2 = t2, t1

            tmin = max(tmin, t1)
            tmax = min(tmax, t2)
            if tmin > tmax:
                return False

        return True

    def __repr__(self) -> str:
        return f"AABB(min={self.min}, max={self.max})"


class Triangle:
    """
    A triangle given by three vertices.

    The normal is not stored; it is derived from the edge vectors so that
    its orientation follows the winding order v0 -> v1 -> v2.

    Attributes
    ----------
    v0, v1, v2 : np.ndarray
        Vertex positions [x, y, z]
    """

    __slots__ = ("v0", "v1", "v2")

    def __init__(
        self,
        v0: List[float] | np.ndarray,
        v1: List[float] | np.ndarray,
        v2: List[float] | np.ndarray
    ):
        self.v0 = np.array(v0, dtype=np.float64)
        self.v1 = np.array(v1, dtype=np.float64)
        self.v2 = np.array(v2, dtype=np.float64)

    @property
    def vertices(self) -> np.ndarray:
        """Vertices as a (3, 3) array, one row per vertex."""
        return np.array([self.v0, self.v1, self.v2])

    def intersect(self, ray: 'Ray') -> Optional[float]:
        """
        Ray-triangle intersection using edge vectors.

        Both faces are hit (no backface culling). A ray parallel to the
        triangle's plane never hits.

        Parameters
        ----------
        ray : Ray
            Ray to test

        Returns
        -------
        float or None
            Distance t along the ray, or None if there is no hit
        """
        v1v0 = self.v1 - self.v0
        v2v0 = self.v2 - self.v0
        rov0 = ray.origin - self.v0

        n = np.cross(v1v0, v2v0)
        q = np.cross(rov0, ray.direction)
        ang = np.dot(ray.direction, n)
        if ang == 0.0:
            return None

        d = 1.0 / ang
        u = d * np.dot(-q, v2v0)
        v = d * np.dot(q, v1v0)
        t = d * np.dot(-n, rov0)

        if u < 0.0 or v < 0.0 or (u + v) > 1.0 or t < 0.0:
            return None
        return float(t)

    def normal(self) -> np.ndarray:
        """Unit normal oriented by winding order (right-hand rule)."""
        return normalize(np.cross(self.v1 - self.v0, self.v2 - self.v0))

    def render_normal(self) -> np.ndarray:
        """Flat shading normal used by the render buffers."""
        return -self.normal()

    def area(self) -> float:
        return 0.5 * float(np.linalg.norm(np.cross(self.v1 - self.v0, self.v2 - self.v0)))

    def fit(self) -> AABB:
        """Tight bounding box of the three vertices."""
        vs = self.vertices
        return AABB(vs.min(axis=0), vs.max(axis=0))

    def left_of(self, axis: Axis, value: float) -> bool:
        """True if any vertex lies at or below value on the axis."""
        i = axis.value
        return self.v0[i] <= value or self.v1[i] <= value or self.v2[i] <= value

    def right_of(self, axis: Axis, value: float) -> bool:
        """True if any vertex lies at or above value on the axis."""
        i = axis.value
        return self.v0[i] >= value or self.v1[i] >= value or self.v2[i] >= value

    def translated(self, offset: List[float] | np.ndarray) -> 'Triangle':
        """Copy of the triangle moved by offset."""
        offset = np.asarray(offset, dtype=np.float64)
        return Triangle(self.v0 + offset, self.v1 + offset, self.v2 + offset)

    def transformed(
        self,
        position: List[float] | np.ndarray,
        scale: List[float] | np.ndarray
    ) -> 'Triangle':
        """Copy of the triangle scaled componentwise, then moved."""
        position = np.asarray(position, dtype=np.float64)
        scale = np.asarray(scale, dtype=np.float64)
        return Triangle(
            self.v0 * scale + position,
            self.v1 * scale + position,
            self.v2 * scale + position
        )

    def __repr__(self) -> str:
        return f"Triangle({self.v0.tolist()}, {self.v1.tolist()}, {self.v2.tolist()})"


def bounding_box(triangles: List[Triangle]) -> AABB:
    """
    Union of the bounding boxes of all triangles.

    An empty list yields a degenerate box at the origin.
    """
    if not triangles:
        return AABB([0.0, 0.0, 0.0], [0.0, 0.0, 0.0])

    vs = np.concatenate([t.vertices for t in triangles])
    return AABB(vs.min(axis=0), vs.max(axis=0))
