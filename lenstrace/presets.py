"""
presets.py - Built-in meshes

Project: lenstrace
"""

from typing import List

from .config import BOX_SIZE
from .geometry import Triangle


def box_triangles(size: float = BOX_SIZE) -> List[Triangle]:
    """
    The room the lenses are placed in: an axis-aligned cube of the given
    edge length with one corner at the origin, two triangles per wall.
    """
    s = size
    return [
        # left wall (x = 0)
        Triangle([0, 0, 0], [0, 0, s], [0, s, s]),
        Triangle([0, 0, 0], [0, s, s], [0, s, 0]),
        # right wall (x = s)
        Triangle([s, s, s], [s, 0, s], [s, 0, 0]),
        Triangle([s, s, 0], [s, s, s], [s, 0, 0]),
        # floor
        Triangle([s, 0, s], [0, 0, s], [0, 0, 0]),
        Triangle([s, 0, 0], [s, 0, s], [0, 0, 0]),
        # ceiling
        Triangle([0, s, 0], [0, s, s], [s, s, s]),
        Triangle([0, s, 0], [s, s, s], [s, s, 0]),
        # back (z = s)
        Triangle([s, s, s], [0, s, s], [0, 0, s]),
        Triangle([s, 0, s], [s, s, s], [0, 0, s]),
        # front (z = 0)
        Triangle([0, 0, 0], [0, s, 0], [s, s, 0]),
        Triangle([0, 0, 0], [s, s, 0], [s, 0, 0]),
    ]
