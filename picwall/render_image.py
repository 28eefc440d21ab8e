"""Raster renderer: composite a layout onto a Pillow canvas."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from picwall.image_io import open_image
from picwall.models import CollageLayout

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


def center_crop_box(
    src_width: int, src_height: int, dst_aspect: float,
) -> tuple[float, float, float, float]:
    """Largest centred box of aspect *dst_aspect* inside the source.

    The longer source axis (relative to the destination shape) is cropped.

    Returns:
        ``(left, top, right, bottom)`` in source pixels.
    """
    if src_width / src_height > dst_aspect:
        crop_w = src_height * dst_aspect
        left = (src_width - crop_w) / 2
        return (left, 0.0, left + crop_w, float(src_height))
    crop_h = src_width / dst_aspect
    top = (src_height - crop_h) / 2
    return (0.0, top, float(src_width), top + crop_h)


def compose(
    layout: CollageLayout,
    background: tuple[int, int, int] = WHITE,
) -> Image.Image:
    """Draw every tile of *layout* and return the canvas image.

    Tiles whose padded size is not positive, and tiles whose source cannot
    be opened, are skipped; the rest of the collage is still drawn.
    """
    canvas = layout.canvas
    out = Image.new("RGB", (canvas.width, canvas.height), background)

    drawn = 0
    for tile in layout.tiles:
        x, y, w, h = tile.inset(layout.padding)
        if w <= 0 or h <= 0:
            logger.debug("Tile for %s vanishes under padding", tile.image.path)
            continue

        try:
            src = open_image(tile.image.path)
        except (OSError, UnidentifiedImageError) as exc:
            logger.warning("Cannot open %s, leaving its tile empty (%s)", tile.image.path, exc)
            continue

        with src:
            box = center_crop_box(src.width, src.height, w / h)
            out.paste(src.resize((w, h), Image.LANCZOS, box=box), (x, y))
        drawn += 1

    logger.info("Composited %d/%d tiles onto %dx%d", drawn, len(layout), canvas.width, canvas.height)
    return out


def render_to_image(
    layout: CollageLayout,
    output_path: str | Path,
    quality: int = 90,
    background: tuple[int, int, int] = WHITE,
) -> Image.Image:
    """Compose *layout* and save it; the format follows the file suffix."""
    output_path = Path(output_path)
    img = compose(layout, background)
    if output_path.suffix.lower() in (".jpg", ".jpeg"):
        img.save(output_path, "JPEG", quality=quality)
    elif output_path.suffix.lower() == ".webp":
        img.save(output_path, "WEBP", quality=quality)
    else:
        img.save(output_path)
    logger.info("Collage saved: %s", output_path)
    return img
