"""
overlays.py
--------------------
Environmental overlays composited over the whole frame.

  fog   - vertical grey-to-white haze, strongest at the top
  rain  - short translucent streaks slanted toward the bottom
  glare - warm radial light leak

Each overlay is gated by a knob threshold AND its own coin flip, so zero to
three overlays stack on any sample. The coin is always drawn, even when the
threshold already rules the overlay out.
"""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image, ImageDraw

from .constants import (
    FOG_BOTTOM_RATIO,
    FOG_BOTTOM_RGB,
    FOG_HARSHNESS_GATE,
    FOG_OPACITY_DIVISOR,
    FOG_PROBABILITY,
    FOG_TOP_RGB,
    GLARE_AGING_GATE,
    GLARE_ALPHA,
    GLARE_CENTER_RGB,
    GLARE_EDGE_RGB,
    GLARE_PROBABILITY,
    RAIN_ALPHA,
    RAIN_COUNT_MIN,
    RAIN_COUNT_SPAN,
    RAIN_HARSHNESS_GATE,
    RAIN_LENGTH_MIN,
    RAIN_LENGTH_SPAN,
    RAIN_PROBABILITY,
    RAIN_RGB,
    RAIN_SLANT,
)
from .params import AugmentationParams
from .utils import composite_over

logger = logging.getLogger(__name__)


def fog(buf: np.ndarray, opacity: float) -> np.ndarray:
    """Top-to-bottom haze; opacity fades to 20 % of ``opacity`` at the bottom."""
    out = buf.copy()
    H = buf.shape[0]
    t = ((np.arange(H, dtype=np.float32) + 0.5) / H)[:, np.newaxis]
    top = np.asarray(FOG_TOP_RGB, dtype=np.float32)
    bottom = np.asarray(FOG_BOTTOM_RGB, dtype=np.float32)
    rgb = (top + (bottom - top) * t)[:, np.newaxis, :]
    alpha = opacity + (opacity * FOG_BOTTOM_RATIO - opacity) * t
    return composite_over(out, rgb, alpha)


def rain(buf: np.ndarray, streaks: np.ndarray) -> np.ndarray:
    """Draw 1 px streaks given as rows of (x, y, length)."""
    out = buf.copy()
    H, W = buf.shape[:2]
    mask = Image.new("L", (W, H), 0)
    draw = ImageDraw.Draw(mask)
    for x, y, length in streaks:
        draw.line(
            [(float(x), float(y)), (float(x + length * RAIN_SLANT), float(y + length))],
            fill=255,
            width=1,
        )
    alpha = np.asarray(mask, dtype=np.float32) / 255.0 * RAIN_ALPHA
    return composite_over(out, RAIN_RGB, alpha)


def glare(buf: np.ndarray, cx: float, cy: float, radius: float) -> np.ndarray:
    """Radial warm-white light leak, transparent at and beyond ``radius``."""
    out = buf.copy()
    if radius <= 0.0:
        return out
    H, W = buf.shape[:2]
    yy, xx = np.ogrid[0:H, 0:W]
    dist = np.sqrt((xx + 0.5 - cx) ** 2 + (yy + 0.5 - cy) ** 2).astype(np.float32)
    t = np.clip(dist / radius, 0.0, 1.0)[..., np.newaxis]
    center = np.asarray(GLARE_CENTER_RGB, dtype=np.float32)
    edge = np.asarray(GLARE_EDGE_RGB, dtype=np.float32)
    rgb = center + (edge - center) * t
    alpha = GLARE_ALPHA * (1.0 - t[..., 0])
    return composite_over(out, rgb, alpha)


def environmental_overlays(
    buf: np.ndarray, params: AugmentationParams, rng: np.random.Generator
) -> tuple[np.ndarray, dict[str, object]]:
    """Overlay stage: fog, then rain, then glare."""
    H, W = buf.shape[:2]
    out = buf.copy()
    meta: dict[str, object] = {"fog": False, "rain": False, "glare": False}

    fog_coin = rng.random() < FOG_PROBABILITY
    if params.harshness > FOG_HARSHNESS_GATE and fog_coin:
        opacity = params.harshness / FOG_OPACITY_DIVISOR * float(rng.random())
        out = fog(out, opacity)
        meta.update(fog=True, fog_opacity=opacity)

    rain_coin = rng.random() < RAIN_PROBABILITY
    if params.harshness > RAIN_HARSHNESS_GATE and rain_coin:
        count = int(RAIN_COUNT_MIN + RAIN_COUNT_SPAN * rng.random())
        streaks = np.column_stack([
            rng.random(count) * W,
            rng.random(count) * H,
            RAIN_LENGTH_MIN + rng.random(count) * RAIN_LENGTH_SPAN,
        ])
        out = rain(out, streaks)
        meta.update(rain=True, rain_streaks=count)

    glare_coin = rng.random() < GLARE_PROBABILITY
    if params.light_aging > GLARE_AGING_GATE and glare_coin:
        cx = float(rng.random()) * W
        cy = float(rng.random()) * H
        radius = float(rng.random()) * W
        out = glare(out, cx, cy, radius)
        meta.update(glare=True, glare_center=(cx, cy), glare_radius=radius)

    logger.debug("Overlays: fog=%s rain=%s glare=%s", meta["fog"], meta["rain"], meta["glare"])
    return out, meta
