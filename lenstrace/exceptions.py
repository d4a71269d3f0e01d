"""
exceptions.py - Error types raised by the lenstrace kernel

Exception hierarchy:
    - LensTraceError (base)
        - KDTreeNotBuiltError   (query before the spatial index is current)
        - UnownedTriangleError  (triangle id outside every entity range)
        - MeshFormatError       (malformed PLY mesh input)
        - SceneFormatError      (malformed scene description records)

Numerical edge cases (parallel rays, total internal reflection, degenerate
triangles) are not errors; the kernel reports them as "no result".

Project: lenstrace
"""


class LensTraceError(Exception):
    """
    Base class for all lenstrace errors.

    Attributes
    ----------
    message : str
        Human readable description of the failure
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class KDTreeNotBuiltError(LensTraceError):
    """
    Raised when the scene is queried without a current spatial index.

    Either ``Scene.build_kdtree()`` was never called, or an entity was
    added after the last build so the index no longer matches the
    world-space triangle buffer.
    """


class UnownedTriangleError(LensTraceError):
    """Raised when a triangle id cannot be resolved to an owning entity."""

    def __init__(self, triangle: int) -> None:
        self.triangle = triangle
        super().__init__(f"no entity owns triangle {triangle}")


class MeshFormatError(LensTraceError):
    """Raised when a PLY mesh cannot be parsed."""


class SceneFormatError(LensTraceError):
    """Raised when a scene description has missing or unparseable fields."""
