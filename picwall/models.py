"""Data model: source images, tree nodes, the canvas and the final layout."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ImageRecord:
    """Immutable description of one source image.

    ``weight`` is an importance hint. It travels with the image into the
    layout but no geometric computation reads it.
    """

    path: str | Path
    width: int
    height: int
    weight: float = 1.0
    aspect_ratio: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            msg = f"image dimensions must be positive, got {self.width}x{self.height}"
            raise ValueError(msg)
        if self.weight <= 0:
            msg = f"image weight must be positive, got {self.weight}"
            raise ValueError(msg)
        object.__setattr__(self, "aspect_ratio", self.width / self.height)


class SplitType(Enum):
    NONE = "none"
    HORIZONTAL = "horizontal"  # side by side, shared height
    VERTICAL = "vertical"  # stacked, shared width


@dataclass(eq=False)
class LayoutNode:
    """Binary slicing-tree node: a single image (leaf) or a composed region.

    A branch owns both children; nodes never point back at their parent,
    so every search attempt builds a tree nothing else can alias.
    """

    left: LayoutNode | None = None
    right: LayoutNode | None = None
    split_type: SplitType = SplitType.NONE
    image: ImageRecord | None = None
    aspect_ratio: float = 1.0

    # Geometry, valid only after the coordinate pass
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def leaf(cls, image: ImageRecord) -> LayoutNode:
        return cls(image=image, aspect_ratio=image.aspect_ratio)

    @classmethod
    def branch(
        cls, left: LayoutNode, right: LayoutNode, split_type: SplitType,
    ) -> LayoutNode:
        if split_type is SplitType.NONE:
            raise ValueError("a branch needs a HORIZONTAL or VERTICAL split")
        return cls(left=left, right=right, split_type=split_type)

    @property
    def is_leaf(self) -> bool:
        return self.image is not None

    def children(self) -> tuple[LayoutNode, ...]:
        if self.left is None or self.right is None:
            return ()
        return (self.left, self.right)

    def leaf_count(self) -> int:
        if self.is_leaf:
            return 1
        return sum(child.leaf_count() for child in self.children())

    def depth(self) -> int:
        kids = self.children()
        return 1 + (max(child.depth() for child in kids) if kids else 0)


@dataclass(frozen=True)
class Canvas:
    """Output surface in pixels; its shape is the search target."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            msg = f"canvas size must be positive, got {self.width}x{self.height}"
            raise ValueError(msg)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @classmethod
    def parse(cls, text: str, base_width: int = 1200) -> Canvas:
        """Parse ``"1200x800"`` (pixels) or ``"3:2"`` (ratio at *base_width*)."""
        s = text.strip().lower()
        if ":" in s:
            a, b = s.split(":", 1)
            ra, rb = float(a), float(b)
            if ra <= 0 or rb <= 0:
                raise ValueError("ratio must be positive")
            return cls(base_width, max(1, round(base_width * rb / ra)))
        parts = s.split("x")
        if len(parts) != 2:
            msg = f"canvas must look like 1200x800 or 3:2, got {text!r}"
            raise ValueError(msg)
        return cls(int(parts[0]), int(parts[1]))


@dataclass(frozen=True)
class Tile:
    """One positioned leaf, in pixels relative to the canvas origin."""

    x: float
    y: float
    width: float
    height: float
    image: ImageRecord

    def inset(self, padding: int) -> tuple[int, int, int, int]:
        """Integer ``(left, top, width, height)`` shrunk by *padding* per side."""
        return (
            int(self.x + padding),
            int(self.y + padding),
            int(self.width - 2 * padding),
            int(self.height - 2 * padding),
        )


@dataclass(frozen=True)
class CollageLayout:
    """Flat, ordered result of a layout search, ready for a renderer.

    Attributes:
        canvas:   Target surface.
        padding:  Per-tile inset in pixels, passed through for renderers.
        tiles:    Leaves in draw order (left subtree before right subtree).
        score:    ``|root aspect ratio - canvas aspect ratio|`` of the winner.
        attempts: Number of Monte Carlo attempts actually performed.
    """

    canvas: Canvas
    padding: int = 0
    tiles: tuple[Tile, ...] = ()
    score: float = math.inf
    attempts: int = 0

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    def bounding_box(self) -> tuple[float, float, float, float] | None:
        """Union of all tiles as ``(x0, y0, x1, y1)``, or None when empty."""
        if not self.tiles:
            return None
        return (
            min(t.x for t in self.tiles),
            min(t.y for t in self.tiles),
            max(t.x + t.width for t in self.tiles),
            max(t.y + t.height for t in self.tiles),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "canvas": {"width": self.canvas.width, "height": self.canvas.height},
            "padding": self.padding,
            "score": self.score if math.isfinite(self.score) else None,
            "attempts": self.attempts,
            "tiles": [
                {
                    "path": str(t.image.path),
                    "x": t.x,
                    "y": t.y,
                    "width": t.width,
                    "height": t.height,
                    "aspect_ratio": t.image.aspect_ratio,
                    "weight": t.image.weight,
                }
                for t in self.tiles
            ],
        }
