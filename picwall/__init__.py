"""
Picwall
=======

Lay out a set of photos on a fixed-size canvas without cropping or
stretching any of them. The layout is a binary slicing tree chosen by a
Monte Carlo search:

- **Random trees** - images are shuffled and recursively split at random
- **Smart flip** - every split is oriented toward the canvas shape
- **Contain fit** - the winner is scaled and centred inside the canvas

Layouts can be rasterised with Pillow or emitted as responsive HTML.
"""

__version__ = "1.0.0"

from picwall.config import CollageConfig, ConfigError
from picwall.engine import generate_best_layout
from picwall.image_io import collect_images, load_image_records, probe_image
from picwall.models import (
    Canvas,
    CollageLayout,
    ImageRecord,
    LayoutNode,
    SplitType,
    Tile,
)
from picwall.render_html import render_to_html
from picwall.render_image import compose, render_to_image

__all__ = [
    "Canvas",
    "CollageConfig",
    "CollageLayout",
    "ConfigError",
    "ImageRecord",
    "LayoutNode",
    "SplitType",
    "Tile",
    "collect_images",
    "compose",
    "generate_best_layout",
    "load_image_records",
    "probe_image",
    "render_to_html",
    "render_to_image",
]
