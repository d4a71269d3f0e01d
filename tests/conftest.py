"""
pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Make the package importable when the tests run from a source checkout
root_path = Path(__file__).parent.parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))

from lenstrace import Lens, LensSide, Material, Scene, TraceConfig, Triangle  # noqa: E402


def random_triangles(rng: np.random.Generator, count: int, spread: float = 5.0, size: float = 1.0):
    """Small random triangles scattered in a cube of half-width spread."""
    tris = []
    for _ in range(count):
        centre = rng.uniform(-spread, spread, size=3)
        corners = centre + rng.uniform(-size, size, size=(3, 3))
        tris.append(Triangle(*corners))
    return tris


@pytest.fixture
def rng():
    return np.random.default_rng(20240611)


@pytest.fixture
def flat_lens():
    """Flat/flat lens of radius 1; faces at x = ±0.05."""
    return Lens(1.0, LensSide.flat(), LensSide.flat())


@pytest.fixture
def lens_scene(flat_lens):
    """Flat/flat glass lens at the origin; the index is not built."""
    scene = Scene(TraceConfig(seed=7))
    model = scene.add_model(flat_lens.tesselate())
    scene.add_entity(model, (0.0, 0.0, 0.0), Material.glass(1.5))
    return scene
