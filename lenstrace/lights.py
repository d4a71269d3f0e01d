"""
lights.py - Light sources that spawn rays

Light kinds:
    - Laser(origin, direction): always emits the same ray
    - Point(origin): emits rays in uniformly random directions

Project: lenstrace
"""

from enum import Enum
from typing import Any, List, Optional

import numpy as np

from .exceptions import SceneFormatError
from .rays import Ray


class LightKind(Enum):
    LASER = "Laser"
    POINT = "Point"


def random_unit_vector(rng: np.random.Generator) -> np.ndarray:
    """
    Uniformly distributed direction on the unit sphere.

    Points are drawn in the cube [-1, 1]³ until one falls strictly inside
    the unit ball; its direction is uniform.
    """
    while True:
        p = rng.uniform(-1.0, 1.0, size=3)
        norm2 = np.dot(p, p)
        if 0.0 < norm2 < 1.0:
            return p / np.sqrt(norm2)


class Light:
    """
    A light source.

    Attributes
    ----------
    kind : LightKind
        Laser or point light
    origin : np.ndarray
        Emission point [x, y, z]
    direction : np.ndarray or None
        Beam direction for lasers, None for point lights
    """

    def __init__(
        self,
        kind: LightKind,
        origin: List[float] | np.ndarray,
        direction: Optional[List[float] | np.ndarray] = None
    ):
        self.kind = kind
        self.origin = np.array(origin, dtype=np.float64)

        if kind is LightKind.LASER:
            if direction is None:
                raise ValueError("A laser needs a direction")
            self.direction = np.array(direction, dtype=np.float64)
            if np.linalg.norm(self.direction) < 1e-15:
                raise ValueError("Laser direction cannot be zero")
        else:
            self.direction = None

    @classmethod
    def laser(cls, origin, direction) -> 'Light':
        return cls(LightKind.LASER, origin, direction)

    @classmethod
    def point(cls, origin) -> 'Light':
        return cls(LightKind.POINT, origin)

    @classmethod
    def from_record(cls, record: Any) -> 'Light':
        """
        Parse ``{"Laser": [origin, direction]}`` or ``{"Point": [origin]}``.

        ``{"Point": origin}`` with a bare coordinate triple is accepted too.

        Raises
        ------
        SceneFormatError
            If the record is malformed
        """
        if not isinstance(record, dict) or len(record) != 1:
            raise SceneFormatError(f"light record must be a single-key mapping, got {record!r}")

        (name, value), = record.items()
        try:
            kind = LightKind(name)
        except ValueError:
            raise SceneFormatError(f"unknown light kind: {name!r}") from None

        if kind is LightKind.LASER:
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise SceneFormatError(f"Laser needs [origin, direction], got {value!r}")
            origin, direction = (_vector(v) for v in value)
            try:
                return cls.laser(origin, direction)
            except ValueError as e:
                raise SceneFormatError(str(e)) from e

        if isinstance(value, (list, tuple)) and len(value) == 1:
            value = value[0]
        return cls.point(_vector(value))

    def spawn_from(self, origin: List[float] | np.ndarray, rng: Optional[np.random.Generator] = None) -> Ray:
        """
        Emit a ray from an arbitrary origin.

        Parameters
        ----------
        origin : array-like
            Start point of the ray
        rng : np.random.Generator, optional
            Random source for point lights (default: a fresh generator)

        Returns
        -------
        Ray
            Laser: the stored direction. Point: a uniformly random direction.
        """
        if self.kind is LightKind.LASER:
            return Ray(origin, self.direction)

        if rng is None:
            rng = np.random.default_rng()
        return Ray(origin, random_unit_vector(rng))

    def spawn(self, rng: Optional[np.random.Generator] = None) -> Ray:
        """Emit a ray from the light's own origin."""
        return self.spawn_from(self.origin, rng)

    def __repr__(self) -> str:
        if self.kind is LightKind.LASER:
            return f"Light.laser({self.origin.tolist()}, {self.direction.tolist()})"
        return f"Light.point({self.origin.tolist()})"


def _vector(value: Any) -> List[float]:
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 3
        or any(isinstance(c, bool) or not isinstance(c, (int, float)) for c in value)
    ):
        raise SceneFormatError(f"expected [x, y, z], got {value!r}")
    return [float(c) for c in value]
