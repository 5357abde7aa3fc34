"""
photometric.py
--------------------
Pixel-level lighting and sensor effects.

  photometric_adjust - gamma, channel gain, contrast and brightness remap
  salt_and_pepper    - per-pixel dead / hot pixel corruption

Both stages take an (H, W, 4) uint8 RGBA buffer and return a new one; alpha
is never touched. All draws are taken once per sample, so every pixel of a
sample shares the same curve.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

import numpy as np

from .constants import (
    AGING_SPAN_DIVISOR,
    BRIGHTNESS_SPAN,
    CONTRAST_MIN,
    GAIN_MAX,
    GAIN_MIN,
    GAMMA_MIN,
    HUE_ROTATION_MAX_DEG,
    NOISE_DIVISOR,
)
from .params import AugmentationParams
from .utils import _clip

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PhotometricDraw:
    """Per-sample lighting draws.

    ``hue_rotation`` is drawn and reported but not applied to any pixel.
    """

    brightness: float
    contrast: float
    gamma: float
    hue_rotation: float
    r_gain: float
    g_gain: float
    b_gain: float

    @property
    def gains(self) -> np.ndarray:
        return np.array([self.r_gain, self.g_gain, self.b_gain], dtype=np.float32)


def draw_photometric(params: AugmentationParams, rng: np.random.Generator) -> PhotometricDraw:
    t = params.light_aging / 100.0
    span = params.light_aging / AGING_SPAN_DIVISOR
    brightness = t * float(rng.uniform(-0.5, 0.5)) * BRIGHTNESS_SPAN
    contrast = CONTRAST_MIN + float(rng.random()) * span
    gamma = GAMMA_MIN + float(rng.random()) * span
    hue_rotation = t * HUE_ROTATION_MAX_DEG * float(rng.random())
    r_gain, g_gain, b_gain = (float(g) for g in rng.uniform(GAIN_MIN, GAIN_MAX, 3))
    return PhotometricDraw(brightness, contrast, gamma, hue_rotation, r_gain, g_gain, b_gain)


def apply_photometric(buf: np.ndarray, draw: PhotometricDraw) -> np.ndarray:
    """Remap RGB through gamma → gain → contrast / brightness; alpha kept."""
    out = buf.copy()
    val = buf[..., :3].astype(np.float32) / 255.0
    val = np.power(val, draw.gamma)
    val *= draw.gains
    val = (val - 0.5) * draw.contrast + 0.5 + draw.brightness / 255.0
    out[..., :3] = _clip(val * 255.0)
    return out


def photometric_adjust(
    buf: np.ndarray, params: AugmentationParams, rng: np.random.Generator
) -> tuple[np.ndarray, dict[str, object]]:
    """Photometric stage; returns the new buffer and its draws."""
    draw = draw_photometric(params, rng)
    return apply_photometric(buf, draw), asdict(draw)


def noise_probability(params: AugmentationParams) -> float:
    """Per-pixel corruption probability: 2 % at harshness 100."""
    return params.harshness / NOISE_DIVISOR


def salt_and_pepper(
    buf: np.ndarray, params: AugmentationParams, rng: np.random.Generator
) -> tuple[np.ndarray, dict[str, object]]:
    """Noise stage: independent Bernoulli trial per pixel.

    A hit sets R = G = B to 255 or 0 with equal odds.
    """
    p = noise_probability(params)
    out = buf.copy()
    if p <= 0.0:
        return out, {"noise_pixels": 0}

    H, W = buf.shape[:2]
    hit = rng.random((H, W)) < p
    salt = rng.random((H, W)) < 0.5
    n = int(hit.sum())
    if n:
        values = np.where(salt[hit], 255, 0).astype(np.uint8)
        out[..., :3][hit] = values[:, np.newaxis]
    logger.debug("Salt-and-pepper hit %d of %d pixels", n, H * W)
    return out, {"noise_pixels": n}
