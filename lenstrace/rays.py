"""
rays.py - Ray class for scene ray tracing

A ray is defined by:
    - Origin point P = (x, y, z)
    - Unit direction D = (L, M, N) where L² + M² + N² = 1
    - An ``inside`` flag recording whether the ray travels through a
      refractive medium (selects the side of Snell's law at the next hit)

Traced rays are drawn as thin rectangular tubes; see ``Ray.tesselate``.

Project: lenstrace
"""

import numpy as np
from typing import List

from .config import RAY_HALF_WIDTH
from .geometry import Triangle, normalize

__all__ = ["Ray", "normalize"]


class Ray:
    """
    Represents a ray travelling through the scene.

    Attributes
    ----------
    origin : np.ndarray
        Start position [x, y, z]
    direction : np.ndarray
        Unit direction vector [L, M, N]; normalized at construction
    inside : bool
        True while the ray travels inside a refractive medium

    Examples
    --------
    >>> ray = Ray(origin=[0, 0, 0], direction=[2, 0, 0])
    >>> ray.direction
    array([1., 0., 0.])
    """

    __slots__ = ("origin", "direction", "inside")

    def __init__(
        self,
        origin: List[float] | np.ndarray,
        direction: List[float] | np.ndarray,
        inside: bool = False
    ):
        """
        Initialize a Ray object.

        Parameters
        ----------
        origin : array-like
            Starting position [x, y, z]
        direction : array-like
            Direction vector; will be normalized to unit length
        inside : bool, optional
            Whether the ray starts inside a refractive medium (default: False)

        Raises
        ------
        ValueError
            If direction has zero magnitude
        """
        self.origin = np.array(origin, dtype=np.float64)
        self.direction = normalize(np.array(direction, dtype=np.float64))
        self.inside = inside

    @property
    def L(self) -> float:
        """Direction cosine with respect to x-axis."""
        return self.direction[0]

    @property
    def M(self) -> float:
        """Direction cosine with respect to y-axis."""
        return self.direction[1]

    @property
    def N(self) -> float:
        """Direction cosine with respect to z-axis."""
        return self.direction[2]

    def point_at(self, t: float) -> np.ndarray:
        """
        Get the point along the ray at parameter t.

        The parametric ray equation is: P(t) = origin + t * direction

        Parameters
        ----------
        t : float
            Parameter value (distance along ray)

        Returns
        -------
        np.ndarray
            Point [x, y, z] at parameter t
        """
        return self.origin + t * self.direction

    def copy(self) -> 'Ray':
        """Independent copy of this ray."""
        return Ray(self.origin.copy(), self.direction.copy(), self.inside)

    def tesselate(self, distance: float) -> List[Triangle]:
        """
        Build a thin box tube along the ray for display.

        The tube runs from the origin to ``point_at(distance)`` and has a
        half-width of ``RAY_HALF_WIDTH`` in y and z.

        Parameters
        ----------
        distance : float
            Length of the drawn segment

        Returns
        -------
        List[Triangle]
            Twelve triangles forming the six faces of the tube
        """
        f = self.origin
        t = self.point_at(distance)
        w = RAY_HALF_WIDTH

        a = [f[0], f[1] + w, f[2] + w]
        b = [f[0], f[1] + w, f[2] - w]
        c = [f[0], f[1] - w, f[2] + w]
        d = [f[0], f[1] - w, f[2] - w]

        e = [t[0], t[1] + w, t[2] + w]
        g = [t[0], t[1] - w, t[2] + w]
        h = [t[0], t[1] - w, t[2] - w]
        k = [t[0], t[1] + w, t[2] - w]

        return [
            # start cap
            Triangle(c, b, a),
            Triangle(d, b, c),
            # end cap
            Triangle(e, k, g),
            Triangle(g, k, h),
            # top
            Triangle(k, e, a),
            Triangle(b, k, a),
            # bottom
            Triangle(c, g, h),
            Triangle(c, h, d),
            # +z side
            Triangle(c, e, g),
            Triangle(c, a, e),
            # -z side
            Triangle(h, k, d),
            Triangle(k, b, d),
        ]

    @classmethod
    def from_two_points(
        cls,
        point1: List[float] | np.ndarray,
        point2: List[float] | np.ndarray
    ) -> 'Ray':
        """
        Create a ray defined by two points.

        Parameters
        ----------
        point1 : array-like
            Starting point [x, y, z]
        point2 : array-like
            Point that ray passes through [x, y, z]

        Returns
        -------
        Ray
            New ray from point1 toward point2
        """
        p1 = np.array(point1, dtype=np.float64)
        p2 = np.array(point2, dtype=np.float64)
        return cls(origin=p1, direction=p2 - p1)

    def __repr__(self) -> str:
        """String representation of the ray."""
        return (
            f"Ray at [{self.origin[0]:.4f}, {self.origin[1]:.4f}, {self.origin[2]:.4f}], "
            f"direction [{self.L:.4f}, {self.M:.4f}, {self.N:.4f}], "
            f"inside={self.inside}"
        )
