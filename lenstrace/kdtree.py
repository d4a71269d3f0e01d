"""
kdtree.py - kd-tree spatial index over a triangle buffer

The tree is built over the bounding boxes of a triangle list and answers
nearest-hit queries for rays. Leaves store indices into the triangle list
the tree was built from, never triangle copies, so a tree is only valid
together with that exact list. ``KDTree`` keeps the two paired.

Splits are made at the midpoint of the node box on an axis that cycles
X -> Y -> Z with depth. A triangle straddling a split plane is placed in
both children.

Project: lenstrace
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .config import EPSILON, LEAF_SIZE, MAX_DEPTH
from .geometry import AABB, Axis, Triangle, bounding_box
from .rays import Ray

logger = logging.getLogger(__name__)

Hit = Tuple[int, float]


@dataclass
class KDLeaf:
    """Terminal node holding indices of candidate triangles."""
    aabb: AABB
    triangles: List[int] = field(default_factory=list)


@dataclass
class KDBranch:
    """Interior node splitting its box at ``split`` along ``axis``."""
    axis: Axis
    split: float
    aabb: AABB
    left: 'KDNode'
    right: 'KDNode'


KDNode = Union[KDBranch, KDLeaf]


# =============================================================================
# Construction
# =============================================================================

def build_kdtree(triangles: List[Triangle]) -> KDNode:
    """
    Build a kd-tree over a triangle list.

    Parameters
    ----------
    triangles : List[Triangle]
        Triangle buffer; leaves refer to it by index

    Returns
    -------
    KDNode
        Root node of the tree
    """
    aabb = bounding_box(triangles)
    candidates = [(i, t) for i, t in enumerate(triangles)]
    return _build(candidates, aabb, Axis.X, 0)


def _build(
    candidates: List[Tuple[int, Triangle]],
    aabb: AABB,
    axis: Axis,
    depth: int
) -> KDNode:
    if depth >= MAX_DEPTH or len(candidates) <= LEAF_SIZE:
        return KDLeaf(aabb, [i for i, _ in candidates])

    left_box, right_box, mid = aabb.split(axis)

    left = [c for c in candidates if c[1].left_of(axis, mid)]
    right = [c for c in candidates if c[1].right_of(axis, mid)]

    # Nothing was separated; splitting again would recurse on the same set
    if len(left) == len(candidates) and len(right) == len(candidates):
        return KDLeaf(aabb, [i for i, _ in candidates])

    next_axis = axis.next()
    return KDBranch(
        axis,
        mid,
        aabb,
        _build(left, left_box, next_axis, depth + 1),
        _build(right, right_box, next_axis, depth + 1),
    )


# =============================================================================
# Queries
# =============================================================================

def intersect(node: KDNode, ray: Ray, triangles: List[Triangle]) -> Optional[Hit]:
    """
    Find the nearest triangle hit by a ray.

    Children of a branch are visited front to back along the ray; the
    first child that reports a hit ends the search.

    Parameters
    ----------
    node : KDNode
        Tree (or subtree) to search
    ray : Ray
        Query ray
    triangles : List[Triangle]
        The triangle buffer the tree was built from

    Returns
    -------
    tuple or None
        (triangle index, distance) of the nearest hit, or None
    """
    if not node.aabb.intersect(ray):
        return None

    if isinstance(node, KDLeaf):
        best = None
        for i in node.triangles:
            d = triangles[i].intersect(ray)
            if d is None or d <= EPSILON:
                continue
            if best is None or d < best[1]:
                best = (i, d)
        return best

    i = node.axis.value
    dist = ray.origin[i] - node.split
    direction = ray.direction[i]

    if dist < 0.0 and direction < 0.0:
        return intersect(node.left, ray, triangles)
    if dist >= 0.0 and direction >= 0.0:
        return intersect(node.right, ray, triangles)

    if dist < 0.0:
        near, far = node.left, node.right
    else:
        near, far = node.right, node.left

    hit = intersect(near, ray, triangles)
    if hit is None:
        hit = intersect(far, ray, triangles)
    return hit


def depth(node: KDNode) -> int:
    """Number of levels below (and including) node."""
    if isinstance(node, KDLeaf):
        return 1
    return 1 + max(depth(node.left), depth(node.right))


def count_nodes(node: KDNode) -> Tuple[int, int]:
    """Return (total nodes, leaves)."""
    if isinstance(node, KDLeaf):
        return 1, 1
    ln, ll = count_nodes(node.left)
    rn, rl = count_nodes(node.right)
    return 1 + ln + rn, ll + rl


class KDTree:
    """
    A kd-tree paired with the triangle snapshot it was built from.

    Parameters
    ----------
    triangles : List[Triangle]
        Triangle buffer to index. The list is copied so later changes to
        the caller's list do not desynchronise the tree.
    """

    def __init__(self, triangles: List[Triangle]):
        self.triangles = list(triangles)
        self.root = build_kdtree(self.triangles)

        nodes, leaves = count_nodes(self.root)
        logger.info(
            "Built kd-tree over %d triangles: %d nodes, %d leaves, depth %d",
            len(self.triangles), nodes, leaves, depth(self.root)
        )

    def intersect(self, ray: Ray) -> Optional[Hit]:
        """Nearest (triangle index, distance) hit of ray, or None."""
        return intersect(self.root, ray, self.triangles)

    def __len__(self) -> int:
        return len(self.triangles)
