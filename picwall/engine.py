"""Monte Carlo layout search.

Each attempt shuffles the images, builds a random slicing tree, orients
its splits toward the canvas shape and scores how far the root's aspect
ratio lands from the target. The best tree is then laid out at canvas
width, shrunk to fit the canvas and flattened into tiles.
"""

from __future__ import annotations

import logging
import math
import os
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from picwall.config import CollageConfig, ConfigError
from picwall.geometry import assign_coordinates, fit_to_bounds, flatten
from picwall.models import Canvas, CollageLayout, ImageRecord, LayoutNode
from picwall.tree_builder import build_random_tree, optimize_aspect_ratio

logger = logging.getLogger(__name__)


def effective_workers(workers: int) -> int:
    """Thread count for *workers* (0 = one per CPU, capped at 32)."""
    if workers <= 0:
        return min(32, os.cpu_count() or 4)
    return workers


def score_tree(root: LayoutNode, target: float) -> float:
    """Distance between the tree's overall aspect ratio and *target*."""
    return abs(root.aspect_ratio - target)


def _run_attempt(
    images: Sequence[ImageRecord], target: float, rng: np.random.Generator,
) -> tuple[float, LayoutNode]:
    # Own shuffled copy; the shared sequence is never touched
    order = rng.permutation(len(images))
    root = build_random_tree([images[i] for i in order], rng)
    optimize_aspect_ratio(root, target)
    return score_tree(root, target), root


def _keep_best(
    results: Iterable[tuple[float, LayoutNode]],
) -> tuple[float, LayoutNode | None]:
    """Reduce attempts as they arrive; losing trees are dropped immediately.

    Attempts are compared in order with a strict ``<``, so the earliest of
    equal scores wins.
    """
    best_root: LayoutNode | None = None
    best_score = math.inf
    for i, (score, root) in enumerate(results):
        if score < best_score:
            logger.debug("  attempt %d improved score %.6f -> %.6f", i, best_score, score)
            best_score = score
            best_root = root
    return best_score, best_root


def generate_best_layout(
    images: Sequence[ImageRecord],
    canvas: Canvas,
    config: CollageConfig | None = None,
    rng: np.random.Generator | None = None,
    attempts: int | None = None,
) -> CollageLayout:
    """Search random trees and lay out the one closest to the canvas shape.

    Args:
        images:   Source images; an empty sequence gives an empty layout.
        canvas:   Output surface whose aspect ratio is the search target.
        config:   Search budget, seed and worker count (default config if None).
        rng:      Random source; defaults to ``default_rng(config.seed)``.
        attempts: Per-call override of ``config.attempts``.

    Returns:
        The positioned tiles plus the canvas, padding and winning score.
    """
    cfg = config or CollageConfig()
    budget = cfg.attempts if attempts is None else attempts
    if budget < 1:
        raise ConfigError("attempts", "must be at least 1")

    if not images:
        logger.info("No images given, returning an empty layout")
        return CollageLayout(canvas=canvas, padding=cfg.padding)

    if rng is None:
        rng = np.random.default_rng(cfg.seed)
    target = canvas.aspect_ratio
    n_workers = min(effective_workers(cfg.workers), budget)

    logger.info(
        "Search start | images=%d  attempts=%d  target=%.4f  workers=%d",
        len(images), budget, target, n_workers,
    )
    t0 = time.perf_counter()

    # One child generator per attempt keeps results independent of scheduling
    streams = rng.spawn(budget)
    if n_workers > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as ex:
            best_score, best_root = _keep_best(
                ex.map(lambda s: _run_attempt(images, target, s), streams)
            )
    else:
        best_score, best_root = _keep_best(
            _run_attempt(images, target, s) for s in streams
        )

    if best_root is None:
        raise RuntimeError("layout search produced no tree")

    # Natural layout at full canvas width, then contain-fit
    assign_coordinates(
        best_root, 0.0, 0.0, canvas.width, canvas.width / best_root.aspect_ratio,
    )
    scale = fit_to_bounds(best_root, canvas)
    tiles = flatten(best_root)

    logger.info(
        "Search done  | score=%.6f  depth=%d  scale=%.4f  (%.2f s)",
        best_score, best_root.depth(), scale, time.perf_counter() - t0,
    )

    return CollageLayout(
        canvas=canvas,
        padding=cfg.padding,
        tiles=tuple(tiles),
        score=best_score,
        attempts=budget,
    )
