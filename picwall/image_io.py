"""Image discovery, dimension probing and loading."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from picwall.models import ImageRecord

logger = logging.getLogger(__name__)


def collect_images(
    folder: Path, extensions: Iterable[str], recursive: bool = False,
) -> list[Path]:
    """List image files in *folder* (sorted), filtered by suffix."""
    if not folder.exists():
        return []
    exts = {e.lower() for e in extensions}
    walker = folder.rglob("*") if recursive else folder.iterdir()
    return sorted(f for f in walker if f.is_file() and f.suffix.lower() in exts)


def open_image(path: str | Path) -> Image.Image:
    """Open an image upright (EXIF orientation applied) in RGB."""
    img = Image.open(path)
    img = ImageOps.exif_transpose(img)
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def probe_image(path: str | Path, weight: float = 1.0) -> ImageRecord | None:
    """Read an image's upright dimensions without decoding its pixels.

    Returns:
        The record, or None if the file cannot be read as an image.
    """
    try:
        with Image.open(path) as img:
            w, h = img.size
            # Orientations 5-8 swap the axes
            if img.getexif().get(0x0112, 1) in (5, 6, 7, 8):
                w, h = h, w
    except (OSError, UnidentifiedImageError) as exc:
        logger.warning("Skipping unreadable image %s (%s)", path, exc)
        return None
    return ImageRecord(path=path, width=w, height=h, weight=weight)


def load_image_records(
    paths: Sequence[str | Path], workers: int = 1,
) -> list[ImageRecord]:
    """Probe many images, optionally on a thread pool, dropping failures."""
    if workers == 1 or len(paths) <= 8:
        records = [probe_image(p) for p in paths]
    else:
        with ThreadPoolExecutor(max_workers=workers or None) as ex:
            records = list(ex.map(probe_image, paths))
    found = [r for r in records if r is not None]
    logger.info("Probed %d images (%d skipped)", len(found), len(paths) - len(found))
    return found


def save_uploads(
    uploads: Iterable[tuple[str, bytes]], folder: Path,
) -> list[Path]:
    """Write ``(filename, data)`` pairs into *folder*, one file per upload.

    Names are prefixed with the upload index so two uploads sharing a
    filename never overwrite each other.
    """
    paths: list[Path] = []
    for i, (name, data) in enumerate(uploads):
        path = folder / f"{i}_{Path(name).name}"
        path.write_bytes(data)
        paths.append(path)
    return paths
