"""
config.py - Global constants and trace settings

Constants:
    EPSILON         Minimum accepted hit distance (suppresses self-hits)
    MAX_DEPTH       Maximum kd-tree depth
    LEAF_SIZE       Candidate count at or below which a kd-tree leaf is made
    MIN_LENS_WIDTH  Minimum axial thickness of a tesselated lens
    TESSELLATION    Slice count used for lens faces and rims
    RAY_HALF_WIDTH  Half-width of the tube mesh drawn for a traced ray
    POINT_SAMPLES   Rays sampled per point light
    MAX_BOUNCES     Segment budget for a single traced ray

Project: lenstrace
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


EPSILON = 1e-6
MAX_DEPTH = 20
LEAF_SIZE = 1

MIN_LENS_WIDTH = 0.1
TESSELLATION = 20

RAY_HALF_WIDTH = 0.005

POINT_SAMPLES = 1000
MAX_BOUNCES = 64

# Placement used when a scene description is assembled into a Scene
LENS_POSITION: Tuple[float, float, float] = (0.0, -0.1, 0.0)
LENS_ETA = 1.3
LENS_COLOR: Tuple[float, float, float, float] = (0.209, 0.282, 0.686, 0.4)

BOX_SIZE = 5.0
BOX_POSITION: Tuple[float, float, float] = (-2.5, -1.0, -2.5)
BOX_COLOR: Tuple[float, float, float, float] = (0.2, 0.2, 0.2, 1.0)

LINE_COLOR: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)


class MirrorPolicy(Enum):
    """What the tracer does when a ray reaches a Mirror entity."""
    TERMINATE = "terminate"
    REFLECT = "reflect"


@dataclass
class TraceConfig:
    """
    Settings for a trace pass.

    Attributes
    ----------
    point_samples : int
        Number of candidate rays spawned per point light
    max_bounces : int
        Maximum number of segments followed for one ray
    mirror_policy : MirrorPolicy
        Mirror response; TERMINATE stops the ray at the mirror
    apply_scale : bool
        If True, entity scale is applied to the traced geometry as well as
        the rendered geometry
    seed : int, optional
        Seed for the point light sampler
    """
    point_samples: int = POINT_SAMPLES
    max_bounces: int = MAX_BOUNCES
    mirror_policy: MirrorPolicy = MirrorPolicy.TERMINATE
    apply_scale: bool = False
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.point_samples < 0:
            raise ValueError(f"point_samples must be >= 0, got {self.point_samples}")
        if self.max_bounces < 1:
            raise ValueError(f"max_bounces must be >= 1, got {self.max_bounces}")
