"""
lenses.py - Lens descriptors and their triangle meshes

Lens faces:
    - Flat: planar disc
    - Convex(h): spherical cap bulging outward with sagitta height h
    - Concave(h): spherical cap hollowed inward with sagitta height h

A lens is centred on the origin with its optical axis along x. The left
face lies on the +x side, the right face on the -x side. When the faces
do not touch, a cylindrical rim of the lens radius joins them.

Spherical cap from chord (radius r) and sagitta h:
    x = (r² - h²) / (2h)        distance from sphere centre to the chord plane
    R = sqrt(x² + r²)           sphere radius
    θ = acos(x / R)             half-angle subtended by the aperture

Project: lenstrace
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Tuple

import numpy as np

from .config import MIN_LENS_WIDTH, TESSELLATION
from .exceptions import SceneFormatError
from .geometry import Triangle


class SideKind(Enum):
    """Enumeration of lens face shapes."""
    FLAT = "Flat"
    CONCAVE = "Concave"
    CONVEX = "Convex"


@dataclass(frozen=True)
class LensSide:
    """
    One face of a lens.

    Attributes
    ----------
    kind : SideKind
        Face shape
    height : float
        Sagitta height of a curved face (0 for flat)
    """
    kind: SideKind
    height: float = 0.0

    def __post_init__(self) -> None:
        if self.kind is SideKind.FLAT:
            if self.height != 0.0:
                raise ValueError("Flat lens side has no height")
        elif not self.height > 0.0:
            raise ValueError(f"{self.kind.value} lens side needs a positive height, got {self.height}")

    @classmethod
    def flat(cls) -> 'LensSide':
        return cls(SideKind.FLAT)

    @classmethod
    def convex(cls, height: float) -> 'LensSide':
        return cls(SideKind.CONVEX, float(height))

    @classmethod
    def concave(cls, height: float) -> 'LensSide':
        return cls(SideKind.CONCAVE, float(height))

    @classmethod
    def from_record(cls, record: Any) -> 'LensSide':
        """
        Parse a scene-description face record.

        Accepted shapes are ``"Flat"``, ``{"Flat": null}``,
        ``{"Convex": h}`` and ``{"Concave": h}``.

        Raises
        ------
        SceneFormatError
            If the record does not match any accepted shape
        """
        if isinstance(record, str):
            name, value = record, None
        elif isinstance(record, dict) and len(record) == 1:
            (name, value), = record.items()
        else:
            raise SceneFormatError(f"invalid lens side record: {record!r}")

        try:
            kind = SideKind(name)
        except ValueError:
            raise SceneFormatError(f"unknown lens side kind: {name!r}") from None

        if kind is SideKind.FLAT:
            if value is not None:
                raise SceneFormatError(f"Flat lens side takes no value, got {value!r}")
            return cls.flat()

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SceneFormatError(f"{name} lens side needs a numeric height, got {value!r}")
        try:
            return cls(kind, float(value))
        except ValueError as e:
            raise SceneFormatError(str(e)) from e

    def tesselate(
        self,
        lens_radius: float,
        offset: float,
        flipped: bool,
        slices: int = TESSELLATION
    ) -> List[Triangle]:
        """
        Mesh this face.

        Parameters
        ----------
        lens_radius : float
            Aperture radius
        offset : float
            Axial distance of the face edge from the lens centre
        flipped : bool
            True for the right (-x) face
        slices : int, optional
            Fan slices for flat faces, grid steps per angle for caps

        Returns
        -------
        List[Triangle]
            Triangles of the face
        """
        if self.kind is SideKind.FLAT:
            return tesselate_flat(slices, lens_radius, offset, flipped)
        if self.kind is SideKind.CONVEX:
            return tesselate_cap(slices, lens_radius, self.height, offset, flipped, False)
        # A concave face is a convex cap pushed the other way with inverted winding
        return tesselate_cap(slices, lens_radius, self.height, -offset, not flipped, True)

    def __str__(self) -> str:
        if self.kind is SideKind.FLAT:
            return "Flat"
        return f"{self.kind.value}({self.height:g})"


def lens_offset(left: LensSide, right: LensSide, min_width: float = MIN_LENS_WIDTH) -> float:
    """
    Axial distance from the lens centre to each face edge.

    The value keeps the lens at least ``min_width`` thick and stops
    concave faces from crossing each other.

    Parameters
    ----------
    left : LensSide
        Left face
    right : LensSide
        Right face
    min_width : float, optional
        Minimum lens thickness

    Returns
    -------
    float
        Half of the rim length (0 when the faces meet at the edge)
    """
    kinds = {left.kind, right.kind}
    w = min_width

    if left.kind is SideKind.FLAT and right.kind is SideKind.FLAT:
        return w / 2.0

    if kinds == {SideKind.CONVEX, SideKind.FLAT}:
        h = left.height + right.height
        return max(w - h, 0.0) / 2.0

    if left.kind is SideKind.CONVEX and right.kind is SideKind.CONVEX:
        return max(w - (left.height + right.height), 0.0) / 2.0

    if left.kind is SideKind.CONCAVE and right.kind is SideKind.CONCAVE:
        return (left.height + right.height + w) / 2.0

    if kinds == {SideKind.CONCAVE, SideKind.FLAT}:
        h = left.height + right.height
        return (h + w) / 2.0

    # Convex paired with concave
    if left.kind is SideKind.CONVEX:
        convex, concave = left.height, right.height
    else:
        convex, concave = right.height, left.height
    return max(w - (concave - convex), 0.0) / 2.0


@dataclass(frozen=True)
class Lens:
    """
    A lens descriptor: aperture radius plus a shape for each face.

    This is not a mesh; call ``tesselate`` to obtain triangles.
    """
    radius: float
    left: LensSide
    right: LensSide

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ValueError(f"Lens radius must be positive, got {self.radius}")

    @property
    def offset(self) -> float:
        return lens_offset(self.left, self.right)

    @classmethod
    def from_record(cls, record: Any) -> 'Lens':
        """
        Parse ``{radius: float, left: <side>, right: <side>}``.

        Raises
        ------
        SceneFormatError
            If a field is missing or malformed
        """
        if not isinstance(record, dict):
            raise SceneFormatError(f"lens record must be a mapping, got {record!r}")

        missing = [k for k in ("radius", "left", "right") if k not in record]
        if missing:
            raise SceneFormatError(f"lens record missing field(s): {', '.join(missing)}")

        radius = record["radius"]
        if isinstance(radius, bool) or not isinstance(radius, (int, float)):
            raise SceneFormatError(f"lens radius must be a number, got {radius!r}")

        try:
            return cls(
                float(radius),
                LensSide.from_record(record["left"]),
                LensSide.from_record(record["right"]),
            )
        except ValueError as e:
            raise SceneFormatError(str(e)) from e

    def tesselate(self, slices: int = TESSELLATION) -> List[Triangle]:
        """
        Closed triangle mesh of both faces and, if needed, the rim.

        Parameters
        ----------
        slices : int, optional
            Tesselation resolution (default: TESSELLATION)

        Returns
        -------
        List[Triangle]
            Mesh in lens-local coordinates
        """
        offset = self.offset

        triangles = self.left.tesselate(self.radius, offset, False, slices)
        triangles += self.right.tesselate(self.radius, offset, True, slices)

        if offset > 0.0:
            triangles += tesselate_cylinder(slices, self.radius, offset, False)
            triangles += tesselate_cylinder(slices, self.radius, offset, True)

        return triangles

    def __str__(self) -> str:
        return f"Lens(r={self.radius:g}, {self.left} | {self.right})"


# =============================================================================
# Face meshing
# =============================================================================

def tesselate_flat(num: int, radius: float, offset: float, flipped: bool) -> List[Triangle]:
    """
    Disc of ``num`` fan triangles in the plane x = ±offset.

    The winding is reversed for the flipped (right) face.
    """
    tris = []
    x = -offset if flipped else offset
    angle = 2.0 * np.pi / num

    centre = [x, 0.0, 0.0]
    for i in range(num):
        theta = i * angle
        v1 = [x, radius * np.sin(theta), radius * np.cos(theta)]
        v2 = [x, radius * np.sin(theta + angle), radius * np.cos(theta + angle)]

        if flipped:
            tris.append(Triangle(v2, v1, centre))
        else:
            tris.append(Triangle(centre, v1, v2))

    return tris


def lng_lat_to_point(lng: float, lat: float, radius: float) -> np.ndarray:
    """Spherical to Cartesian, with lng = lat = 0 on the +x axis."""
    return np.array([
        radius * np.cos(lat) * np.cos(lng),
        radius * np.cos(lat) * np.sin(lng),
        radius * np.sin(lat),
    ])


def cap_geometry(r: float, h: float) -> Tuple[float, float, float]:
    """
    Sphere parameters of a cap with chord radius r and sagitta h.

    Returns
    -------
    tuple
        (x, R, θ): centre-to-chord distance, sphere radius, half-angle
    """
    x = (r ** 2 - h ** 2) / (2.0 * h)
    sphere_r = np.sqrt(x ** 2 + r ** 2)
    theta = np.arccos(x / sphere_r)
    return x, float(sphere_r), float(theta)


def tesselate_cap(
    num: int,
    r: float,
    h: float,
    offset: float,
    flipped: bool,
    concave: bool
) -> List[Triangle]:
    """
    Spherical cap clipped to the circular aperture.

    A longitude/latitude grid over [-θ, θ]² is laid on the sphere and moved
    so the chord plane sits at x = offset (mirrored when flipped).
    Triangles fully outside the aperture are dropped; vertices of partially
    outside triangles are pushed radially onto the aperture circle at the
    edge depth of the cap.

    Parameters
    ----------
    num : int
        Grid steps per angular direction
    r : float
        Aperture radius
    h : float
        Sagitta height
    offset : float
        Axial position of the cap edge
    flipped : bool
        Mirror the cap to the -x side
    concave : bool
        Reverse the winding for a concave face

    Returns
    -------
    List[Triangle]
        Triangles of the cap
    """
    x, sphere_r, theta = cap_geometry(r, h)
    shift = offset - x

    start = -theta
    delta = 2.0 * theta / num

    edge_x = sphere_r * np.cos(theta) + shift
    if flipped:
        edge_x = -edge_x

    def place(lng: float, lat: float) -> np.ndarray:
        v = lng_lat_to_point(lng, lat, sphere_r)
        v[0] += shift
        if flipped:
            v[0] = -v[0]
        return v

    def in_circle(v: np.ndarray) -> bool:
        return v[1] ** 2 + v[2] ** 2 <= r ** 2

    def to_edge(v: np.ndarray) -> np.ndarray:
        phi = np.arctan2(v[1], v[2])
        return np.array([edge_x, r * np.sin(phi), r * np.cos(phi)])

    reverse = flipped != concave

    tris = []
    for zi in range(num):
        lng = start + zi * delta
        next_lng = start + (zi + 1) * delta

        for yi in range(num):
            lat = start + yi * delta
            next_lat = start + (yi + 1) * delta

            v0 = place(lng, lat)
            v1 = place(lng, next_lat)
            v2 = place(next_lng, lat)
            v3 = place(next_lng, next_lat)

            if reverse:
                quad = [(v2, v1, v0), (v1, v2, v3)]
            else:
                quad = [(v0, v1, v2), (v3, v2, v1)]

            for corners in quad:
                inside = [in_circle(v) for v in corners]
                if not any(inside):
                    continue
                clipped = [v if ok else to_edge(v) for v, ok in zip(corners, inside)]
                tris.append(Triangle(*clipped))

    return tris


def tesselate_cylinder(num: int, radius: float, offset: float, flipped: bool) -> List[Triangle]:
    """
    Half of the lens rim: a band from x = 0 to x = ±offset.

    Two triangles per angular slice; the flipped band covers the -x half.
    """
    tris = []
    angle = 2.0 * np.pi / num

    x0 = -offset if flipped else offset
    x1 = 0.0

    for i in range(num):
        theta = i * angle

        y0 = radius * np.sin(theta)
        y1 = radius * np.sin(theta + angle)
        z0 = radius * np.cos(theta)
        z1 = radius * np.cos(theta + angle)

        if flipped:
            tris.append(Triangle([x0, y0, z0], [x0, y1, z1], [x1, y1, z1]))
            tris.append(Triangle([x0, y0, z0], [x1, y1, z1], [x1, y0, z0]))
        else:
            tris.append(Triangle([x1, y1, z1], [x0, y1, z1], [x0, y0, z0]))
            tris.append(Triangle([x1, y0, z0], [x1, y1, z1], [x0, y0, z0]))

    return tris
