"""Tests for image I/O, both renderers and the CLI."""

from __future__ import annotations

import io
import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from picwall.cli import app
from picwall.config import CollageConfig
from picwall.engine import generate_best_layout
from picwall.image_io import (
    collect_images,
    load_image_records,
    probe_image,
    save_uploads,
)
from picwall.models import Canvas, CollageLayout, ImageRecord, Tile
from picwall.render_html import render_to_html
from picwall.render_image import center_crop_box, compose, render_to_image

RED = (255, 0, 0)
BLUE = (0, 0, 255)

# -- Fixtures ----------------------------------------------------------


def _write(path: Path, size: tuple[int, int], color: tuple[int, int, int]) -> Path:
    Image.new("RGB", size, color).save(path)
    return path


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """Folder with three solid-colour photos of different shapes."""
    folder = tmp_path / "photos"
    folder.mkdir()
    _write(folder / "wide.png", (120, 60), RED)
    _write(folder / "tall.png", (40, 80), BLUE)
    _write(folder / "square.jpg", (50, 50), (0, 200, 0))
    (folder / "notes.txt").write_text("not an image")
    return folder


@pytest.fixture
def red_wide(tmp_path: Path) -> ImageRecord:
    path = _write(tmp_path / "red.png", (200, 100), RED)
    return ImageRecord(path=path, width=200, height=100)


# -- Image I/O ---------------------------------------------------------

class TestImageIO:
    def test_collect_filters_and_sorts(self, photo_dir: Path) -> None:
        files = collect_images(photo_dir, CollageConfig.SUPPORTED_EXTENSIONS)
        assert [f.name for f in files] == ["square.jpg", "tall.png", "wide.png"]

    def test_collect_missing_folder(self, tmp_path: Path) -> None:
        assert collect_images(tmp_path / "nope", {".png"}) == []

    def test_probe_dimensions(self, photo_dir: Path) -> None:
        record = probe_image(photo_dir / "tall.png", weight=2.0)
        assert (record.width, record.height) == (40, 80)
        assert record.aspect_ratio == pytest.approx(0.5)
        assert record.weight == 2.0

    def test_probe_unreadable(self, photo_dir: Path) -> None:
        assert probe_image(photo_dir / "notes.txt") is None

    def test_collect_recursive(self, photo_dir: Path) -> None:
        nested = photo_dir / "2024" / "summer"
        nested.mkdir(parents=True)
        _write(nested / "beach.png", (30, 20), RED)
        flat = collect_images(photo_dir, {".png", ".jpg"})
        deep = collect_images(photo_dir, {".png", ".jpg"}, recursive=True)
        assert len(flat) == 3
        assert len(deep) == 4
        assert nested / "beach.png" in deep

    def test_save_uploads_keeps_duplicate_names(self, tmp_path: Path) -> None:
        wide, tall = io.BytesIO(), io.BytesIO()
        Image.new("RGB", (60, 30), RED).save(wide, format="PNG")
        Image.new("RGB", (30, 60), BLUE).save(tall, format="PNG")
        paths = save_uploads(
            [("photo.png", wide.getvalue()), ("photo.png", tall.getvalue())],
            tmp_path,
        )
        assert len(set(paths)) == 2
        records = load_image_records(paths)
        assert [(r.width, r.height) for r in records] == [(60, 30), (30, 60)]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_load_records_skips_failures(self, photo_dir: Path, workers: int) -> None:
        paths = sorted(photo_dir.iterdir()) * 3
        records = load_image_records(paths, workers=workers)
        assert len(records) == 9


# -- Raster renderer ---------------------------------------------------

class TestRenderImage:
    def test_crop_wider_source(self) -> None:
        assert center_crop_box(400, 200, 1.0) == pytest.approx((100, 0, 300, 200))

    def test_crop_taller_source(self) -> None:
        assert center_crop_box(200, 400, 1.0) == pytest.approx((0, 100, 200, 300))

    def test_crop_matching_shape_is_full(self) -> None:
        assert center_crop_box(300, 200, 1.5) == pytest.approx((0, 0, 300, 200))

    def test_contain_leaves_background(self, red_wide: ImageRecord) -> None:
        layout = generate_best_layout([red_wide], Canvas(100, 100))
        img = compose(layout)
        assert img.size == (100, 100)
        # 2:1 image in a square canvas: bands above and below
        assert img.getpixel((50, 10)) == (255, 255, 255)
        assert img.getpixel((50, 50)) == RED
        assert img.getpixel((50, 90)) == (255, 255, 255)

    def test_padding_insets_tiles(self, red_wide: ImageRecord) -> None:
        layout = CollageLayout(
            canvas=Canvas(100, 50),
            padding=10,
            tiles=(Tile(0, 0, 100, 50, red_wide),),
        )
        img = compose(layout, background=(0, 0, 0))
        assert img.getpixel((5, 25)) == (0, 0, 0)
        assert img.getpixel((50, 25)) == RED

    def test_tile_consumed_by_padding_is_skipped(self, red_wide: ImageRecord) -> None:
        layout = CollageLayout(
            canvas=Canvas(100, 100),
            padding=30,
            tiles=(Tile(0, 0, 50, 50, red_wide), Tile(50, 50, 50, 50, red_wide)),
        )
        img = compose(layout)
        assert img.getextrema() == ((255, 255), (255, 255), (255, 255))

    def test_missing_source_is_skipped(
        self, tmp_path: Path, red_wide: ImageRecord,
    ) -> None:
        ghost = ImageRecord(path=tmp_path / "gone.jpg", width=200, height=100)
        layout = CollageLayout(
            canvas=Canvas(200, 100),
            tiles=(Tile(0, 0, 100, 100, ghost), Tile(100, 0, 100, 100, red_wide)),
        )
        img = compose(layout)
        assert img.getpixel((50, 50)) == (255, 255, 255)
        assert img.getpixel((150, 50)) == RED

    def test_render_jpeg(self, tmp_path: Path, photo_dir: Path) -> None:
        records = load_image_records(
            collect_images(photo_dir, CollageConfig.SUPPORTED_EXTENSIONS),
        )
        layout = generate_best_layout(
            records, Canvas(300, 200), rng=np.random.default_rng(0),
        )
        out = tmp_path / "collage.jpg"
        render_to_image(layout, out, quality=70)
        with Image.open(out) as img:
            assert img.format == "JPEG"
            assert img.size == (300, 200)

    def test_render_png(self, tmp_path: Path, red_wide: ImageRecord) -> None:
        layout = generate_best_layout([red_wide], Canvas(80, 40))
        out = tmp_path / "collage.png"
        render_to_image(layout, out)
        with Image.open(out) as img:
            assert img.format == "PNG"
            assert img.getpixel((40, 20)) == RED


# -- Markup renderer ---------------------------------------------------

class TestRenderHtml:
    def _layout(self) -> CollageLayout:
        return generate_best_layout(
            [
                ImageRecord(path="a.jpg", width=100, height=100),
                ImageRecord(path="b.jpg", width=100, height=100, weight=2.5),
            ],
            Canvas(200, 100),
            CollageConfig(padding=4),
        )

    def test_one_box_per_tile(self) -> None:
        html = render_to_html(self._layout())
        assert html.count("<img ") == 2
        assert html.startswith("<div") and html.endswith("</div>")
        assert "aspect-ratio:200/100" in html
        assert "max-width:200px" in html

    def test_percentages_and_padding(self) -> None:
        html = render_to_html(self._layout())
        assert "left:0.0000%" in html
        assert "left:50.0000%" in html
        assert "width:50.0000%" in html
        assert "height:100.0000%" in html
        assert "padding:4px" in html

    def test_debug_overlay(self) -> None:
        html = render_to_html(self._layout(), debug=True)
        assert html.count("AR: 1.00") == 2
        assert "W: 2.5" in html
        assert "AR:" not in render_to_html(self._layout())

    def test_escapes_paths(self) -> None:
        layout = generate_best_layout(
            [ImageRecord(path="it's <here>.jpg", width=10, height=10)],
            Canvas(10, 10),
        )
        html = render_to_html(layout)
        assert "it&#x27;s &lt;here&gt;.jpg" in html

    def test_custom_url(self) -> None:
        html = render_to_html(
            self._layout(), image_url=lambda r: f"/media/{r.path}",
        )
        assert "src='/media/a.jpg'" in html

    def test_empty_layout(self) -> None:
        html = render_to_html(CollageLayout(canvas=Canvas(10, 10)))
        assert "<img" not in html


# -- CLI ---------------------------------------------------------------

runner = CliRunner()


class TestCli:
    def test_layout_json(self, photo_dir: Path) -> None:
        result = runner.invoke(
            app,
            ["layout", str(photo_dir), "--size", "300x200", "--seed", "1", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["canvas"] == {"width": 300, "height": 200}
        assert len(data["tiles"]) == 3

    def test_render_writes_files(self, photo_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "out" / "wall.jpg"
        result = runner.invoke(
            app,
            [
                "render", str(photo_dir), "-o", str(out),
                "--size", "3:2", "--attempts", "5", "--seed", "2", "--html",
            ],
        )
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert out.with_suffix(".html").read_text().count("<img ") == 3

    def test_zero_attempts_rejected(self, photo_dir: Path) -> None:
        result = runner.invoke(app, ["layout", str(photo_dir), "--attempts", "0"])
        assert result.exit_code == 2

    def test_bad_size_rejected(self, photo_dir: Path) -> None:
        result = runner.invoke(app, ["layout", str(photo_dir), "--size", "wide"])
        assert result.exit_code == 2

    def test_empty_folder(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["layout", str(tmp_path)])
        assert result.exit_code == 0
        assert "No images found" in result.output

    def test_empty_folder_json_is_empty_layout(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["layout", str(tmp_path), "--size", "300x200", "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["tiles"] == []
        assert data["attempts"] == 0
        assert data["canvas"] == {"width": 300, "height": 200}

    def test_render_empty_folder_creates_nothing(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        out = tmp_path / "out" / "wall.jpg"
        result = runner.invoke(app, ["render", str(empty), "-o", str(out)])
        assert result.exit_code == 0
        assert not out.parent.exists()

    def test_recursive_option(self, photo_dir: Path) -> None:
        nested = photo_dir / "more"
        nested.mkdir()
        _write(nested / "extra.png", (80, 40), RED)
        args = ["layout", str(photo_dir), "--seed", "3", "--json"]
        flat = json.loads(runner.invoke(app, args).stdout)
        deep = json.loads(runner.invoke(app, [*args, "--recursive"]).stdout)
        assert len(flat["tiles"]) == 3
        assert len(deep["tiles"]) == 4
