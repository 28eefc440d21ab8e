"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from picwall.config import CollageConfig, ConfigError
from picwall.engine import effective_workers, generate_best_layout
from picwall.image_io import collect_images, load_image_records
from picwall.models import Canvas, CollageLayout
from picwall.render_html import render_to_html
from picwall.render_image import render_to_image

app = typer.Typer(
    name="picwall",
    help="Lay out photos on a fixed canvas without cropping or stretching them.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
log_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=log_console, show_path=False, markup=True)],
    )


# Defaults come from CollageConfig - single source of truth
_DEFAULTS = CollageConfig()


def _build_config(**options: object) -> CollageConfig:
    try:
        return CollageConfig.from_dict(options)
    except ConfigError as exc:
        console.print(f"[red]Invalid option {exc.field}:[/red] {exc}")
        raise typer.Exit(2) from exc


def _parse_canvas(size: str) -> Canvas:
    try:
        return Canvas.parse(size)
    except ValueError as exc:
        console.print(f"[red]Invalid --size:[/red] {exc}")
        raise typer.Exit(2) from exc


def _search(
    input_dir: Path, canvas: Canvas, cfg: CollageConfig, recursive: bool = False,
) -> CollageLayout:
    paths = collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS, recursive=recursive)
    if not paths:
        # stderr, so --json output on stdout stays parseable
        log_console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        log_console.print("Place .jpg / .png / ... files there and re-run.\n")
    records = load_image_records(paths, workers=effective_workers(cfg.workers))
    return generate_best_layout(records, canvas, cfg)


# -- render command ----------------------------------------------------

@app.command()
def render(
    input_dir: Path = typer.Argument(
        _DEFAULTS.input_dir, help="Folder with source images",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Collage file (default: OUTPUT_DIR/collage.<format>)",
    ),
    size: str = typer.Option(
        "1200x800", "--size", "-S", help="Canvas as WxH pixels or W:H ratio",
    ),
    attempts: int = typer.Option(
        _DEFAULTS.attempts, "--attempts", "-a", help="Random trees to try",
    ),
    padding: int = typer.Option(
        _DEFAULTS.padding, "--padding", "-p", help="Pixels inset per tile side",
    ),
    quality: int = typer.Option(
        _DEFAULTS.jpeg_quality, "--quality", "-q", help="JPEG quality (1-100)",
    ),
    seed: int | None = typer.Option(
        _DEFAULTS.seed, "--seed", "-s", help="Random seed (None = random)",
    ),
    workers: int = typer.Option(
        _DEFAULTS.workers, "--workers", "-w", help="Search threads (0 = per CPU)",
    ),
    recursive: bool = typer.Option(
        False, "--recursive", "-r", help="Also search subfolders of INPUT_DIR",
    ),
    html: bool = typer.Option(
        False, "--html/--no-html", help="Also write a responsive HTML page",
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Overlay aspect ratio and weight in the HTML",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Search a layout for INPUT_DIR and render it to an image."""
    _setup_logging(verbose)

    cfg = _build_config(
        attempts=attempts,
        padding=padding,
        jpeg_quality=quality,
        seed=seed,
        workers=workers,
        input_dir=input_dir,
    )
    canvas = _parse_canvas(size)

    t0 = time.perf_counter()
    result = _search(input_dir, canvas, cfg, recursive=recursive)
    if not result.tiles:
        raise typer.Exit(0)

    if output is None:
        output = cfg.output_dir / f"collage.{cfg.output_format}"
    output.parent.mkdir(parents=True, exist_ok=True)

    console.print(Panel.fit(
        f"[bold]PICWALL[/bold]\n"
        f"Canvas: {canvas.width}x{canvas.height}  |  Images: {len(result)}\n"
        f"Attempts: {result.attempts}  |  Score: {result.score:.4f}",
        border_style="cyan",
    ))

    render_to_image(result, output, quality=cfg.jpeg_quality, background=cfg.background)

    if html:
        html_path = output.with_suffix(".html")
        html_path.write_text(
            render_to_html(result, debug=debug, image_url=lambda r: Path(r.path).resolve().as_uri()),
            encoding="utf-8",
        )
        console.print(f"  [green]✓[/green] {html_path}")

    console.print(
        f"  [green]✓[/green] {output}  "
        f"[dim]{len(result)} tiles  time={time.perf_counter() - t0:.1f}s[/dim]"
    )


# -- layout command ----------------------------------------------------

@app.command()
def layout(
    input_dir: Path = typer.Argument(
        _DEFAULTS.input_dir, help="Folder with source images",
    ),
    size: str = typer.Option("1200x800", "--size", "-S"),
    attempts: int = typer.Option(_DEFAULTS.attempts, "--attempts", "-a"),
    padding: int = typer.Option(_DEFAULTS.padding, "--padding", "-p"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    recursive: bool = typer.Option(False, "--recursive", "-r"),
    as_json: bool = typer.Option(False, "--json", help="Print the layout as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Print the computed tile positions without rendering."""
    if not as_json:
        _setup_logging(verbose)

    cfg = _build_config(attempts=attempts, padding=padding, seed=seed)
    canvas = _parse_canvas(size)
    result = _search(input_dir, canvas, cfg, recursive=recursive)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    if not result.tiles:
        return

    table = Table(title=f"{canvas.width}x{canvas.height}  score={result.score:.4f}")
    for col in ("#", "image", "x", "y", "w", "h"):
        table.add_column(col, justify="left" if col == "image" else "right")
    for i, tile in enumerate(result, 1):
        table.add_row(
            str(i), Path(tile.image.path).name,
            f"{tile.x:.1f}", f"{tile.y:.1f}",
            f"{tile.width:.1f}", f"{tile.height:.1f}",
        )
    console.print(table)


if __name__ == "__main__":
    app()
