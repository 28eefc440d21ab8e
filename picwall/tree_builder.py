"""Random slicing-tree construction and the "smart flip" orientation pass."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from picwall.geometry import combine_aspect, update_aspect_ratio
from picwall.models import ImageRecord, LayoutNode, SplitType


def build_random_tree(
    images: Sequence[ImageRecord], rng: np.random.Generator,
) -> LayoutNode:
    """Partition *images* into a random binary tree, in the order given.

    Every branch splits its run of images at a uniform index in
    ``[1, n - 1]`` and starts with a random orientation. Topology is purely
    positional; image weights are not consulted.

    Args:
        images: Non-empty sequence of images (already shuffled by the caller).
        rng:    Source of the split indices and initial orientations.

    Returns:
        The root node, with every branch ratio computed bottom-up.
    """
    if not images:
        raise ValueError("cannot build a tree from zero images")
    return _build(list(map(LayoutNode.leaf, images)), rng)


def _build(nodes: list[LayoutNode], rng: np.random.Generator) -> LayoutNode:
    if len(nodes) == 1:
        return nodes[0]

    split_index = int(rng.integers(1, len(nodes)))
    left = _build(nodes[:split_index], rng)
    right = _build(nodes[split_index:], rng)

    split_type = SplitType.HORIZONTAL if rng.integers(0, 2) else SplitType.VERTICAL
    parent = LayoutNode.branch(left, right, split_type)
    update_aspect_ratio(parent)
    return parent


def optimize_aspect_ratio(node: LayoutNode, target: float) -> None:
    """Greedily orient every branch toward *target*, children first.

    Each branch keeps whichever orientation brings its own ratio closest
    to the target given its children's (already fixed) ratios. Ties go to
    VERTICAL.
    """
    if node.left is None or node.right is None:
        return

    optimize_aspect_ratio(node.left, target)
    optimize_aspect_ratio(node.right, target)

    a_left = node.left.aspect_ratio
    a_right = node.right.aspect_ratio
    diff_h = abs(combine_aspect(a_left, a_right, SplitType.HORIZONTAL) - target)
    diff_v = abs(combine_aspect(a_left, a_right, SplitType.VERTICAL) - target)

    node.split_type = SplitType.HORIZONTAL if diff_h < diff_v else SplitType.VERTICAL
    update_aspect_ratio(node)
