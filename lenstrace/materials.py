"""
materials.py - How a surface responds to a ray

Material kinds:
    - Solid: opaque, terminates the ray
    - Mirror: reflector (terminates unless the trace reflects mirrors)
    - Glass(η): refracts with refractive index η

Project: lenstrace
"""

from dataclasses import dataclass
from enum import Enum


class MaterialKind(Enum):
    SOLID = "solid"
    MIRROR = "mirror"
    GLASS = "glass"


@dataclass(frozen=True)
class Material:
    """
    Surface material of an entity.

    Attributes
    ----------
    kind : MaterialKind
        Response type
    eta : float
        Refractive index; only meaningful for glass
    """
    kind: MaterialKind
    eta: float = 1.0

    def __post_init__(self) -> None:
        if self.kind is MaterialKind.GLASS and not self.eta > 0.0:
            raise ValueError(f"Refractive index must be positive, got {self.eta}")

    @classmethod
    def solid(cls) -> 'Material':
        return cls(MaterialKind.SOLID)

    @classmethod
    def mirror(cls) -> 'Material':
        return cls(MaterialKind.MIRROR)

    @classmethod
    def glass(cls, eta: float) -> 'Material':
        return cls(MaterialKind.GLASS, float(eta))

    @property
    def is_optical(self) -> bool:
        """True for materials that redirect light (glass and mirrors)."""
        return self.kind in (MaterialKind.GLASS, MaterialKind.MIRROR)

    def __str__(self) -> str:
        if self.kind is MaterialKind.GLASS:
            return f"Glass({self.eta:g})"
        return self.kind.value.capitalize()
