"""Centralised configuration via a frozen, self-validating dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any


class ConfigError(ValueError):
    """Raised when a configuration value is out of range.

    Attributes:
        field: Name of the offending configuration field.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


OUTPUT_FORMATS = frozenset({"jpg", "jpeg", "png", "webp"})


@dataclass(frozen=True)
class CollageConfig:
    """All tuneable parameters for a collage run.

    Instances validate themselves on construction, so an invalid
    configuration never reaches the layout engine.

    Attributes:
        attempts:      Monte Carlo search budget (random trees tried).
        padding:       Pixels inset on every side of each tile (renderers only).
        jpeg_quality:  JPEG encoder quality, 1-100 (raster renderer only).
        seed:          Random seed for the search (None = non-deterministic).
        workers:       Search threads; 1 = sequential, 0 = one per CPU.
        background:    RGB fill for canvas area not covered by tiles.
        output_format: Image format for saved collages.
        input_dir:     Folder to scan for source images.
        output_dir:    Folder for results.
    """

    # Search
    attempts: int = 40
    seed: int | None = None
    workers: int = 1

    # Rendering
    padding: int = 0
    jpeg_quality: int = 90
    background: tuple[int, int, int] = (255, 255, 255)
    output_format: str = "jpg"

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp"}
    )

    def __post_init__(self) -> None:
        if not 1 <= self.jpeg_quality <= 100:
            raise ConfigError("jpeg_quality", "must be between 1 and 100")
        if self.attempts < 1:
            raise ConfigError("attempts", "must be at least 1")
        if self.padding < 0:
            raise ConfigError("padding", "must be non-negative")
        if self.workers < 0:
            raise ConfigError("workers", "must be non-negative (0 = auto)")
        if len(self.background) != 3 or any(
            not 0 <= c <= 255 for c in self.background
        ):
            raise ConfigError("background", "must be three channels in 0-255")
        if self.output_format.lower() not in OUTPUT_FORMATS:
            raise ConfigError(
                "output_format",
                f"must be one of {', '.join(sorted(OUTPUT_FORMATS))}",
            )

    @classmethod
    def from_dict(cls, options: dict[str, Any]) -> CollageConfig:
        """Build a config from a mapping, ignoring keys that are not fields."""
        known = {f.name for f in fields(cls) if f.init}
        return cls(**{k: v for k, v in options.items() if k in known})
