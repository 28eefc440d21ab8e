"""Aspect-ratio algebra and the geometry passes over a finished tree.

Horizontal splits place children side by side, so they share a height
and their aspect ratios add. Vertical splits stack children, so they
share a width and the *inverse* ratios add.
"""

from __future__ import annotations

from picwall.models import Canvas, LayoutNode, SplitType, Tile

NEUTRAL_ASPECT = 1.0


def combine_aspect(left: float, right: float, split_type: SplitType) -> float:
    """Aspect ratio of two regions joined along *split_type*.

    A vertical join with a non-positive denominator (a degenerate child)
    yields :data:`NEUTRAL_ASPECT` instead of dividing by zero.
    """
    if split_type is SplitType.HORIZONTAL:
        return left + right
    if split_type is SplitType.VERTICAL:
        if left <= 0 or right <= 0:
            return NEUTRAL_ASPECT
        denom = 1 / left + 1 / right
        return 1 / denom if denom > 0 else NEUTRAL_ASPECT
    msg = f"cannot combine regions with split type {split_type}"
    raise ValueError(msg)


def update_aspect_ratio(node: LayoutNode) -> None:
    """Recompute a branch's ratio from its children. Leaves are left alone."""
    if node.left is None or node.right is None:
        return
    node.aspect_ratio = combine_aspect(
        node.left.aspect_ratio, node.right.aspect_ratio, node.split_type,
    )


def assign_coordinates(
    node: LayoutNode, x: float, y: float, width: float, height: float,
) -> None:
    """Top-down pass: give every node its region, splitting by aspect ratio.

    The right child always takes the remainder of the parent's extent so
    the two children tile the parent exactly.
    """
    node.x, node.y, node.width, node.height = x, y, width, height
    if node.left is None or node.right is None:
        return

    a_left = node.left.aspect_ratio
    a_right = node.right.aspect_ratio

    if node.split_type is SplitType.HORIZONTAL:
        total = a_left + a_right
        w_left = width * (a_left / total) if total > 0 else width / 2
        assign_coordinates(node.left, x, y, w_left, height)
        assign_coordinates(node.right, x + w_left, y, width - w_left, height)
    else:
        # Taller child (lower ratio) gets more height
        inv_left = 1 / a_left if a_left > 0 else 0.0
        inv_right = 1 / a_right if a_right > 0 else 0.0
        total = inv_left + inv_right
        h_left = height * (inv_left / total) if total > 0 else height / 2
        assign_coordinates(node.left, x, y, width, h_left)
        assign_coordinates(node.right, x, y + h_left, width, height - h_left)


def fit_to_bounds(root: LayoutNode, canvas: Canvas) -> float:
    """Scale the laid-out tree to fit *canvas* (contain) and centre it.

    Returns:
        The uniform scale factor that was applied.
    """
    scale = min(canvas.width / root.width, canvas.height / root.height)
    offset_x = (canvas.width - root.width * scale) / 2
    offset_y = (canvas.height - root.height * scale) / 2
    _apply_scale(root, scale, offset_x, offset_y)
    return scale


def _apply_scale(
    node: LayoutNode, scale: float, offset_x: float, offset_y: float,
) -> None:
    node.x = node.x * scale + offset_x
    node.y = node.y * scale + offset_y
    node.width *= scale
    node.height *= scale
    for child in node.children():
        _apply_scale(child, scale, offset_x, offset_y)


def flatten(root: LayoutNode) -> list[Tile]:
    """Collect leaves depth-first, left subtree before right subtree."""
    if root.image is not None:
        return [Tile(root.x, root.y, root.width, root.height, root.image)]
    tiles: list[Tile] = []
    for child in root.children():
        tiles.extend(flatten(child))
    return tiles
