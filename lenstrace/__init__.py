"""
lenstrace - Ray tracing of light through lenses and obstacles

Builds triangle meshes for parametric lenses, indexes a scene with a
kd-tree and follows laser and point light rays through refracting glass,
producing tube meshes of every traced segment for display.
"""

from .geometry import AABB, Axis, Triangle, normalize
from .rays import Ray
from .kdtree import KDTree, KDBranch, KDLeaf, build_kdtree

from .lenses import Lens, LensSide, SideKind, lens_offset
from .lights import Light, LightKind
from .materials import Material, MaterialKind
from .optics import refract, reflect

from .config import MirrorPolicy, TraceConfig
from .scene import Model, RenderBuffers, Scene, TraceOutcome, TraceReport
from .io import SceneDescription, load_ply, load_scene, loads_scene, parse_ply

from .exceptions import (
    KDTreeNotBuiltError,
    LensTraceError,
    MeshFormatError,
    SceneFormatError,
    UnownedTriangleError,
)

__version__ = "0.1.0"

__all__ = [
    # Geometry
    "AABB",
    "Axis",
    "Triangle",
    "normalize",
    "Ray",
    # Spatial index
    "KDTree",
    "KDBranch",
    "KDLeaf",
    "build_kdtree",
    # Optics
    "Lens",
    "LensSide",
    "SideKind",
    "lens_offset",
    "Light",
    "LightKind",
    "Material",
    "MaterialKind",
    "refract",
    "reflect",
    # Scene
    "MirrorPolicy",
    "TraceConfig",
    "Model",
    "RenderBuffers",
    "Scene",
    "TraceOutcome",
    "TraceReport",
    # I/O
    "SceneDescription",
    "load_ply",
    "load_scene",
    "loads_scene",
    "parse_ply",
    # Errors
    "LensTraceError",
    "KDTreeNotBuiltError",
    "UnownedTriangleError",
    "MeshFormatError",
    "SceneFormatError",
]
