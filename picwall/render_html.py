"""Markup renderer: percentage-positioned boxes that scale with the page."""

from __future__ import annotations

from collections.abc import Callable
from html import escape

from picwall.models import CollageLayout, ImageRecord


def _pct(value: float, total: int) -> str:
    return f"{value / total * 100:.4f}%"


def render_to_html(
    layout: CollageLayout,
    debug: bool = False,
    image_url: Callable[[ImageRecord], str] | None = None,
) -> str:
    """Render *layout* as a responsive HTML fragment.

    Each tile becomes an absolutely positioned box (in percent of the
    canvas) inset by the layout padding. How the image fills its box is
    left to the ``object-fit`` rule.

    Args:
        layout:    Result of the layout search.
        debug:     Overlay each tile with its aspect ratio and weight.
        image_url: Maps a record to the ``src`` attribute (default: its path).
    """
    canvas = layout.canvas
    url = image_url or (lambda record: str(record.path))

    parts = [
        f"<div style='position:relative; width:100%; max-width:{canvas.width}px; "
        f"aspect-ratio:{canvas.width}/{canvas.height}; "
        "background:#000; overflow:hidden;'>"
    ]
    for tile in layout.tiles:
        parts.append(
            f"<div style='position:absolute; left:{_pct(tile.x, canvas.width)}; "
            f"top:{_pct(tile.y, canvas.height)}; "
            f"width:{_pct(tile.width, canvas.width)}; "
            f"height:{_pct(tile.height, canvas.height)}; "
            f"padding:{layout.padding}px; box-sizing:border-box;'>"
            "<div style='position:relative; width:100%; height:100%; overflow:hidden;'>"
            f"<img src='{escape(url(tile.image), quote=True)}' "
            "style='width:100%; height:100%; object-fit:cover; display:block;'>"
        )
        if debug:
            parts.append(
                "<div style='position:absolute; inset:0; background:rgba(0,0,0,0.6); "
                "color:#fff; font-family:sans-serif; font-size:11px; padding:5px;'>"
                f"AR: {tile.image.aspect_ratio:.2f}<br>W: {tile.image.weight:g}"
                "</div>"
            )
        parts.append("</div></div>")
    parts.append("</div>")
    return "".join(parts)
