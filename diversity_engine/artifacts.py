"""
artifacts.py
--------------------
Dirt and lens marks: small dark translucent blobs and smears.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image, ImageDraw

from .constants import (
    DIRT_ALPHA_MAX,
    DIRT_CHANNEL_MAX,
    DIRT_CIRCLE_PROBABILITY,
    DIRT_MAX_MARKS,
    DIRT_RECT_ASPECT,
    DIRT_SIZE_DIVISOR,
)
from .params import AugmentationParams
from .utils import composite_over

logger = logging.getLogger(__name__)


def _mark_bounds(x: float, y: float, size: float, circle: bool) -> tuple[float, float, float, float]:
    if circle:
        return x - size, y - size, x + size, y + size
    return x, y, x + size, y + size * DIRT_RECT_ASPECT


def draw_mark(
    buf: np.ndarray,
    x: float,
    y: float,
    size: float,
    rgb: tuple[float, float, float],
    alpha: float,
    circle: bool,
) -> None:
    """Composite one mark onto ``buf`` in place, clipped to the frame."""
    H, W = buf.shape[:2]
    left, top, right, bottom = _mark_bounds(x, y, size, circle)
    x0, y0 = max(0, math.floor(left)), max(0, math.floor(top))
    x1, y1 = min(W, math.ceil(right) + 1), min(H, math.ceil(bottom) + 1)
    if x0 >= x1 or y0 >= y1:
        return

    mask = Image.new("L", (x1 - x0, y1 - y0), 0)
    shape = [(left - x0, top - y0), (right - x0, bottom - y0)]
    if circle:
        ImageDraw.Draw(mask).ellipse(shape, fill=255)
    else:
        ImageDraw.Draw(mask).rectangle(shape, fill=255)

    cover = np.asarray(mask, dtype=np.float32) / 255.0 * alpha
    composite_over(buf, rgb, cover, origin=(x0, y0))


def dirt_marks(
    buf: np.ndarray, params: AugmentationParams, rng: np.random.Generator
) -> tuple[np.ndarray, dict[str, object]]:
    """Artifact stage: up to 30 marks at dirtiness 100."""
    H, W = buf.shape[:2]
    out = buf.copy()
    count = math.floor(params.dirtiness / 100.0 * DIRT_MAX_MARKS * float(rng.random()))

    for _ in range(count):
        x = float(rng.random()) * W
        y = float(rng.random()) * H
        size = 1.0 + float(rng.random()) * (W / DIRT_SIZE_DIVISOR)
        rgb = tuple(float(c) for c in rng.random(3) * DIRT_CHANNEL_MAX)
        alpha = float(rng.random()) * DIRT_ALPHA_MAX
        circle = bool(rng.random() < DIRT_CIRCLE_PROBABILITY)
        draw_mark(out, x, y, size, rgb, alpha, circle)

    logger.debug("Dirt marks: %d", count)
    return out, {"dirt_marks": count}
