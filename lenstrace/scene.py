"""
scene.py - Scene assembly and the refraction tracer

A Scene owns:
    - a shared, append-only triangle buffer of models in local coordinates
    - entities: a model range plus position, scale, material and colour
    - lights
    - a kd-tree over the world-space copy of all entity triangles
    - line models: tube meshes of traced ray segments, for display only

Typical use:

    scene = Scene()
    model = scene.add_model(lens.tesselate())
    scene.add_entity(model, (0, 0, 0), Material.glass(1.5))
    scene.add_light(Light.laser((-3, 0.1, 0), (1, 0, 0)))
    scene.build_kdtree()
    scene.trace()

Project: lenstrace
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from .config import (
    BOX_COLOR,
    BOX_POSITION,
    LENS_COLOR,
    LENS_ETA,
    LENS_POSITION,
    LINE_COLOR,
    MirrorPolicy,
    TraceConfig,
)
from .exceptions import KDTreeNotBuiltError, UnownedTriangleError
from .geometry import Triangle
from .kdtree import KDTree
from .lights import Light, LightKind
from .materials import Material, MaterialKind
from .optics import facing, reflect, refract
from .presets import box_triangles
from .rays import Ray

if TYPE_CHECKING:
    from .io import SceneDescription

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]
Color = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Model:
    """A range [index, index + count) of the scene's triangle buffer."""
    index: int
    count: int


class TraceOutcome(Enum):
    """Terminal state of a traced ray."""
    NO_HIT = "no_hit"
    ABSORBED = "absorbed"
    MIRROR_STOP = "mirror_stop"
    TOTAL_INTERNAL_REFLECTION = "total_internal_reflection"
    MAX_BOUNCES = "max_bounces"


@dataclass
class TraceReport:
    """Summary of a trace pass."""
    rays: int = 0
    segments: int = 0
    outcomes: Counter = field(default_factory=Counter)

    def __str__(self) -> str:
        parts = ", ".join(f"{k.value}={v}" for k, v in sorted(self.outcomes.items(), key=lambda kv: kv[0].value))
        return f"{self.rays} rays, {self.segments} segments ({parts})"


@dataclass
class RenderBuffers:
    """
    Flattened geometry for a renderer.

    Attributes
    ----------
    vertices : np.ndarray
        (3N, 3) float32 positions, three per triangle
    indices : np.ndarray
        (3N,) uint32 sequential indices
    normals : np.ndarray
        (3N, 3) float32 flat normals, repeated per triangle vertex
    """
    vertices: np.ndarray
    indices: np.ndarray
    normals: np.ndarray


class Scene:
    """
    Entities, lights and the spatial index used to trace them.

    Parameters
    ----------
    config : TraceConfig, optional
        Trace settings (default: TraceConfig())
    """

    def __init__(self, config: Optional[TraceConfig] = None):
        self.config = config or TraceConfig()

        # per entity
        self.models: List[Model] = []
        self.positions: List[np.ndarray] = []
        self.scales: List[np.ndarray] = []
        self.materials: List[Material] = []
        self.colors: List[np.ndarray] = []

        # traced ray segments
        self.lines: List[Model] = []

        # per model
        self.model_idx: List[Model] = []
        self.model_data: List[Triangle] = []

        self.lights: List[Light] = []

        self.kdtree: Optional[KDTree] = None
        self._stale = False

        self.rng = np.random.default_rng(self.config.seed)

    # =========================================================================
    # Assembly
    # =========================================================================

    def add_model(self, triangles: List[Triangle]) -> Model:
        """
        Append triangles to the shared buffer.

        Returns
        -------
        Model
            Range of the new triangles; ranges never move
        """
        model = Model(len(self.model_data), len(triangles))
        self.model_data.extend(triangles)
        self.model_idx.append(model)
        return model

    def add_entity(
        self,
        model: Model,
        position: Vec3 | np.ndarray,
        material: Material,
        scale: Vec3 | np.ndarray = (1.0, 1.0, 1.0),
        color: Color | np.ndarray = (1.0, 1.0, 1.0, 1.0)
    ) -> int:
        """
        Place a model in the world.

        Adding an entity after ``build_kdtree`` invalidates the index.

        Returns
        -------
        int
            Entity id
        """
        if model.index < 0 or model.index + model.count > len(self.model_data):
            raise ValueError(f"{model} is outside the triangle buffer")

        self.models.append(model)
        self.positions.append(np.array(position, dtype=np.float64))
        self.scales.append(np.array(scale, dtype=np.float64))
        self.materials.append(material)
        self.colors.append(np.array(color, dtype=np.float64))

        if self.kdtree is not None:
            self.kdtree = None
            self._stale = True

        return len(self.models) - 1

    def add_light(self, light: Light) -> None:
        self.lights.append(light)

    @classmethod
    def from_description(
        cls,
        description: 'SceneDescription',
        config: Optional[TraceConfig] = None
    ) -> 'Scene':
        """
        Assemble a scene from a parsed description.

        A solid box encloses the lenses; each lens becomes a glass entity.
        The kd-tree is not built.
        """
        scene = cls(config)

        box = scene.add_model(box_triangles())
        scene.add_entity(box, BOX_POSITION, Material.solid(), color=BOX_COLOR)

        for light in description.lights:
            scene.add_light(light)

        for lens in description.lenses:
            model = scene.add_model(lens.tesselate())
            scene.add_entity(model, LENS_POSITION, Material.glass(LENS_ETA), color=LENS_COLOR)
            logger.debug("Added %s (%d triangles)", lens, model.count)

        return scene

    # =========================================================================
    # Spatial queries
    # =========================================================================

    def world_tris(self) -> List[Triangle]:
        """
        World-space copy of every entity's triangles, in entity order.

        Only the position is applied unless ``config.apply_scale`` is set.
        """
        tris = []
        for i, model in enumerate(self.models):
            position = self.positions[i]
            scale = self.scales[i]
            for t in self.model_data[model.index:model.index + model.count]:
                if self.config.apply_scale:
                    tris.append(t.transformed(position, scale))
                else:
                    tris.append(t.translated(position))
        return tris

    def build_kdtree(self) -> None:
        """Index the current world-space triangles. Call before tracing."""
        self.kdtree = KDTree(self.world_tris())
        self._stale = False

    def entity_from_triangle(self, triangle: int) -> int:
        """
        Entity owning a world triangle index.

        Raises
        ------
        UnownedTriangleError
            If no entity range contains the index
        """
        start = 0
        for i, model in enumerate(self.models):
            if start <= triangle < start + model.count:
                return i
            start += model.count
        raise UnownedTriangleError(triangle)

    def intersect(self, ray: Ray) -> Optional[Tuple[int, int, float]]:
        """
        Nearest hit of a ray.

        Returns
        -------
        tuple or None
            (entity id, world triangle index, distance)

        Raises
        ------
        KDTreeNotBuiltError
            If the index was never built or the scene changed since
        """
        if self.kdtree is None:
            if self._stale:
                raise KDTreeNotBuiltError("scene changed since build_kdtree(); rebuild before querying")
            raise KDTreeNotBuiltError("build_kdtree() must be called before querying the scene")

        hit = self.kdtree.intersect(ray)
        if hit is None:
            return None

        triangle, distance = hit
        return self.entity_from_triangle(triangle), triangle, distance

    # =========================================================================
    # Tracing
    # =========================================================================

    def trace(self) -> TraceReport:
        """
        Trace every light and add line models for the resulting paths.

        Lasers are always traced. Point lights spawn
        ``config.point_samples`` rays and keep those whose first hit is
        glass or a mirror.

        Returns
        -------
        TraceReport
            Counts of traced rays, added segments and terminal states
        """
        report = TraceReport()
        lines_before = len(self.lines)

        for light in self.lights:
            if light.kind is LightKind.LASER:
                ray = light.spawn(self.rng)
                report.outcomes[self.trace_ray(ray)] += 1
                report.rays += 1
                continue

            for _ in range(self.config.point_samples):
                ray = light.spawn(self.rng)
                hit = self.intersect(ray)
                if hit is None or not self.materials[hit[0]].is_optical:
                    continue
                report.outcomes[self.trace_ray(ray)] += 1
                report.rays += 1

        report.segments = len(self.lines) - lines_before
        logger.info("Traced %s", report)
        return report

    def trace_ray(self, ray: Ray) -> TraceOutcome:
        """
        Follow a ray through the scene, adding a line model per segment.

        Parameters
        ----------
        ray : Ray
            Ray to follow

        Returns
        -------
        TraceOutcome
            Why the path ended
        """
        for _ in range(self.config.max_bounces):
            hit = self.intersect(ray)
            if hit is None:
                return self._finish(TraceOutcome.NO_HIT)

            entity, triangle, distance = hit
            self.add_ray(ray, distance)

            material = self.materials[entity]
            if material.kind is MaterialKind.SOLID:
                return self._finish(TraceOutcome.ABSORBED)

            point = ray.point_at(distance)
            normal = self.kdtree.triangles[triangle].normal()

            if material.kind is MaterialKind.MIRROR:
                if self.config.mirror_policy is MirrorPolicy.TERMINATE:
                    return self._finish(TraceOutcome.MIRROR_STOP)
                n = facing(normal, ray.direction)
                ray = Ray(point, reflect(ray.direction, n), ray.inside)
                continue

            ratio = material.eta if ray.inside else 1.0 / material.eta
            direction = refract(ray.direction, normal, ratio)
            if direction is None:
                return self._finish(TraceOutcome.TOTAL_INTERNAL_REFLECTION)

            ray = Ray(point, direction, not ray.inside)

        return self._finish(TraceOutcome.MAX_BOUNCES)

    @staticmethod
    def _finish(outcome: TraceOutcome) -> TraceOutcome:
        logger.debug("Ray ended: %s", outcome.value)
        return outcome

    def add_ray(self, ray: Ray, distance: float) -> Model:
        """Store the tube mesh of a ray segment as a line model."""
        model = self.add_model(ray.tesselate(distance))
        self.lines.append(model)
        return model

    # =========================================================================
    # Render export
    # =========================================================================

    def render_buffers(self) -> RenderBuffers:
        """
        Vertex, index and flat-normal arrays for the whole triangle buffer.

        Degenerate triangles get a zero normal.
        """
        if not self.model_data:
            empty = np.zeros((0, 3), dtype=np.float32)
            return RenderBuffers(empty, np.zeros(0, dtype=np.uint32), empty.copy())

        tris = np.array([t.vertices for t in self.model_data])
        n = -np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
        norms = np.linalg.norm(n, axis=1, keepdims=True)
        n = np.divide(n, norms, out=np.zeros_like(n), where=norms > 0)

        vertices = tris.reshape(-1, 3).astype(np.float32)
        normals = np.repeat(n, 3, axis=0).astype(np.float32)
        indices = np.arange(len(vertices), dtype=np.uint32)

        return RenderBuffers(vertices, indices, normals)

    def render_transforms(self, rotation: Vec3 = (0.0, 0.0, 0.0)) -> List[np.ndarray]:
        """
        4x4 world matrices in draw order: lines first, then entities.

        Lines only get the view rotation; entities get
        rotation · translation · scale.

        Parameters
        ----------
        rotation : tuple, optional
            Rotation angles (x, y, z) in radians
        """
        r = np.eye(4)
        r[:3, :3] = rotation_matrix(*rotation)

        transforms = [r.copy() for _ in self.lines]
        for position, scale in zip(self.positions, self.scales):
            t = np.eye(4)
            t[:3, 3] = position
            s = np.diag([scale[0], scale[1], scale[2], 1.0])
            transforms.append(r @ t @ s)
        return transforms

    def draw_list(self) -> List[Tuple[Model, np.ndarray]]:
        """(model, colour) pairs in the same order as ``render_transforms``."""
        line_color = np.array(LINE_COLOR)
        return [(m, line_color) for m in self.lines] + list(zip(self.models, self.colors))

    def __repr__(self) -> str:
        return (
            f"Scene({len(self.models)} entities, {len(self.model_data)} triangles, "
            f"{len(self.lights)} lights, {len(self.lines)} lines)"
        )


def rotation_matrix(rx: float, ry: float, rz: float) -> np.ndarray:
    """Rotation about x, then y, then z axes composed as Rx · Ry · Rz."""
    cx, sx = np.cos(rx), np.sin(rx)
    cy, sy = np.cos(ry), np.sin(ry)
    cz, sz = np.cos(rz), np.sin(rz)

    x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    z = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return x @ y @ z
