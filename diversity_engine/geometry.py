"""
geometry.py
--------------------
Geometric stage: random affine "perspective" jitter.

One rotation, scale, shear pair, translation and horizontal flip are drawn
per sample. The source is painted centred in the transformed frame:

    device = T(centre + offset) · M(scale, shear, flip) · R(rotation) · p

where ``p`` is a source pixel relative to the source centre. Pillow resamples
through the inverse of that mapping. Pixels the source does not cover stay
fully transparent.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass

import numpy as np
from PIL import Image

from .constants import (
    FLIP_PROBABILITY,
    ROTATION_LIMIT_DEG,
    SCALE_MAX,
    SCALE_MIN,
    SKEW_LIMIT,
    TRANSLATE_FRACTION,
)

logger = logging.getLogger(__name__)

BACKGROUND_FILL: tuple[int, int, int, int] = (0, 0, 0, 0)


@dataclass(frozen=True, slots=True)
class GeometryDraw:
    """Random draws of the geometric stage for one sample."""

    rotation: float
    scale: float
    skew_x: float
    skew_y: float
    tx: float
    ty: float
    flip: bool

    def forward_matrix(self, width: int, height: int) -> np.ndarray:
        """3x3 matrix mapping source pixel coords to output pixel coords."""
        theta = math.radians(self.rotation)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        f = -1.0 if self.flip else 1.0

        to_origin = np.array([[1, 0, -width / 2], [0, 1, -height / 2], [0, 0, 1]], dtype=np.float64)
        rotate = np.array([[cos_t, -sin_t, 0], [sin_t, cos_t, 0], [0, 0, 1]], dtype=np.float64)
        # Canvas transform(a, b, c, d) layout: x' = a·x + c·y, y' = b·x + d·y
        shear = np.array(
            [[self.scale * f, self.skew_y, 0], [self.skew_x, self.scale, 0], [0, 0, 1]],
            dtype=np.float64,
        )
        place = np.array(
            [[1, 0, width / 2 + self.tx], [0, 1, height / 2 + self.ty], [0, 0, 1]],
            dtype=np.float64,
        )
        return place @ shear @ rotate @ to_origin


def draw_geometry(rng: np.random.Generator, width: int, height: int, index: int) -> GeometryDraw:
    """Draw the per-sample geometric parameters.

    Index 0 of every batch keeps its rotation at zero so each batch carries
    one upright sample.
    """
    rotation = float(rng.uniform(-ROTATION_LIMIT_DEG, ROTATION_LIMIT_DEG))
    if index == 0:
        rotation = 0.0
    scale = float(rng.uniform(SCALE_MIN, SCALE_MAX))
    skew_x = float(rng.uniform(-SKEW_LIMIT, SKEW_LIMIT))
    skew_y = float(rng.uniform(-SKEW_LIMIT, SKEW_LIMIT))
    tx = float(rng.uniform(-0.5, 0.5)) * width * TRANSLATE_FRACTION
    ty = float(rng.uniform(-0.5, 0.5)) * height * TRANSLATE_FRACTION
    flip = bool(rng.random() < FLIP_PROBABILITY)
    return GeometryDraw(rotation, scale, skew_x, skew_y, tx, ty, flip)


def apply_geometry(pixels: np.ndarray, draw: GeometryDraw) -> np.ndarray:
    """Paint ``pixels`` through the drawn transform onto a fresh buffer."""
    height, width = pixels.shape[:2]
    inverse = np.linalg.inv(draw.forward_matrix(width, height))
    coeffs = tuple(float(v) for v in inverse[:2].ravel())

    src = Image.fromarray(np.array(pixels, dtype=np.uint8, order="C"))
    out = src.transform(
        (width, height),
        Image.Transform.AFFINE,
        coeffs,
        resample=Image.Resampling.BILINEAR,
        fillcolor=BACKGROUND_FILL,
    )
    return np.array(out, dtype=np.uint8)


def geometric_transform(
    pixels: np.ndarray, rng: np.random.Generator, index: int
) -> tuple[np.ndarray, dict[str, object]]:
    """Geometric stage; returns the new buffer and its draws."""
    height, width = pixels.shape[:2]
    draw = draw_geometry(rng, width, height, index)
    logger.debug("Sample %d geometry: %s", index, draw)
    return apply_geometry(pixels, draw), asdict(draw)
