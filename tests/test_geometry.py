"""Tests for diversity_engine/geometry module."""

from __future__ import annotations

import math

import numpy as np
import pytest

from diversity_engine.geometry import (
    GeometryDraw,
    apply_geometry,
    draw_geometry,
    geometric_transform,
)
from diversity_engine.image import SourceImage

IDENTITY = GeometryDraw(rotation=0.0, scale=1.0, skew_x=0.0, skew_y=0.0, tx=0.0, ty=0.0, flip=False)
SKEWED = GeometryDraw(rotation=15.0, scale=1.1, skew_x=0.08, skew_y=-0.05, tx=3.0, ty=-2.0, flip=True)


def _draws(index: int, n: int, width: int = 100, height: int = 80) -> list[GeometryDraw]:
    return [draw_geometry(np.random.default_rng(seed), width, height, index) for seed in range(n)]


class TestDrawGeometry:
    """Test cases for the per-sample geometric draws."""

    def test_first_sample_is_upright(self) -> None:
        assert all(d.rotation == 0.0 for d in _draws(index=0, n=200))

    def test_rotation_spans_full_range(self) -> None:
        rotations = np.array([d.rotation for d in _draws(index=3, n=2000)])
        assert rotations.min() >= -20.0
        assert rotations.max() <= 20.0
        assert rotations.min() < -18.0
        assert rotations.max() > 18.0
        assert abs(rotations.mean()) < 1.5

    def test_other_draws_within_bounds(self) -> None:
        for d in _draws(index=1, n=500):
            assert 0.85 <= d.scale <= 1.15
            assert -0.1 <= d.skew_x <= 0.1
            assert -0.1 <= d.skew_y <= 0.1
            assert abs(d.tx) <= 100 * 0.15 / 2
            assert abs(d.ty) <= 80 * 0.15 / 2

    def test_flip_is_a_fair_coin(self) -> None:
        flips = [d.flip for d in _draws(index=1, n=1000)]
        assert 0.4 < np.mean(flips) < 0.6


class TestApplyGeometry:
    """Test cases for painting the source through a transform."""

    def test_identity_keeps_interior(self, gray_source: SourceImage) -> None:
        out = apply_geometry(gray_source.pixels, IDENTITY)
        assert out.shape == gray_source.pixels.shape
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(out[5:-5, 5:-5], gray_source.pixels[5:-5, 5:-5])

    def test_flip_mirrors_horizontally(self, gradient_source: SourceImage) -> None:
        draw = GeometryDraw(0.0, 1.0, 0.0, 0.0, 0.0, 0.0, flip=True)
        out = apply_geometry(gradient_source.pixels, draw).astype(int)
        mirrored = gradient_source.pixels[:, ::-1].astype(int)
        assert np.abs(out[4:-4, 4:-4] - mirrored[4:-4, 4:-4]).max() <= 1

    def test_uncovered_pixels_are_transparent(self, gray_source: SourceImage) -> None:
        draw = GeometryDraw(0.0, 0.85, 0.0, 0.0, 0.0, 0.0, flip=False)
        out = apply_geometry(gray_source.pixels, draw)
        assert tuple(out[0, 0]) == (0, 0, 0, 0)
        assert tuple(out[50, 50]) == (128, 128, 128, 255)

    def test_translation_moves_content_right(self, gray_source: SourceImage) -> None:
        draw = GeometryDraw(0.0, 1.0, 0.0, 0.0, tx=7.0, ty=0.0, flip=False)
        out = apply_geometry(gray_source.pixels, draw)
        assert (out[:, :6, 3] == 0).all()
        assert (out[10:-10, 10:-10, 3] == 255).all()

    def test_rotation_uncovers_corners(self, gray_source: SourceImage) -> None:
        draw = GeometryDraw(20.0, 1.0, 0.0, 0.0, 0.0, 0.0, flip=False)
        out = apply_geometry(gray_source.pixels, draw)
        assert out[0, 0, 3] == 0
        assert out[50, 50, 3] == 255

    def test_warp_edges_are_hard(self, gray_source: SourceImage) -> None:
        draw = GeometryDraw(10.0, 1.0, 0.0, 0.0, 0.0, 0.0, flip=False)
        alpha = apply_geometry(gray_source.pixels, draw)[..., 3]
        assert set(np.unique(alpha).tolist()) == {0, 255}


class TestGeometricTransform:
    """Test cases for the stage entry point."""

    def test_dimensions_and_metadata(self, gradient_source: SourceImage, rng: np.random.Generator) -> None:
        out, meta = geometric_transform(gradient_source.pixels, rng, index=0)
        assert out.shape == (48, 64, 4)
        assert meta["rotation"] == 0.0
        assert set(meta) == {"rotation", "scale", "skew_x", "skew_y", "tx", "ty", "flip"}

    def test_source_untouched(self, gradient_source: SourceImage, rng: np.random.Generator) -> None:
        before = gradient_source.pixels.copy()
        geometric_transform(gradient_source.pixels, rng, index=5)
        np.testing.assert_array_equal(gradient_source.pixels, before)


def _canvas_point(draw: GeometryDraw, width: int, height: int, u: float, v: float) -> tuple[float, float]:
    """translate(centre + offset), transform(a, b, c, d), rotate, then draw centred."""
    x, y = u - width / 2, v - height / 2
    theta = math.radians(draw.rotation)
    x, y = x * math.cos(theta) - y * math.sin(theta), x * math.sin(theta) + y * math.cos(theta)
    a = draw.scale * (-1.0 if draw.flip else 1.0)
    b, c, d = draw.skew_x, draw.skew_y, draw.scale
    x, y = a * x + c * y, b * x + d * y
    return x + width / 2 + draw.tx, y + height / 2 + draw.ty


class TestForwardMatrix:
    """Test cases for the composed source-to-output mapping."""

    @pytest.mark.parametrize("u, v", [(0.0, 0.0), (80.0, 0.0), (0.0, 60.0), (80.0, 60.0), (13.0, 41.5)])
    def test_matches_canvas_composition(self, u: float, v: float) -> None:
        x, y, w = SKEWED.forward_matrix(80, 60) @ np.array([u, v, 1.0])
        assert w == pytest.approx(1.0)
        assert (x, y) == pytest.approx(_canvas_point(SKEWED, 80, 60, u, v))

    def test_skew_terms_are_not_interchangeable(self) -> None:
        swapped = GeometryDraw(15.0, 1.1, -0.05, 0.08, 3.0, -2.0, True)
        assert not np.allclose(SKEWED.forward_matrix(80, 60), swapped.forward_matrix(80, 60))

    def test_positive_rotation_turns_clockwise_on_screen(self) -> None:
        draw = GeometryDraw(90.0, 1.0, 0.0, 0.0, 0.0, 0.0, flip=False)
        # right of centre goes below centre with y pointing down
        x, y, _ = draw.forward_matrix(100, 100) @ np.array([60.0, 50.0, 1.0])
        assert (x, y) == pytest.approx((50.0, 60.0))

    def test_resampling_follows_the_matrix(self) -> None:
        pixels = np.zeros((60, 80, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        pixels[28:33, 18:23, :3] = 255
        out = apply_geometry(pixels, SKEWED)
        x, y, _ = SKEWED.forward_matrix(80, 60) @ np.array([20.5, 30.5, 1.0])
        assert out[int(y), int(x), 0] > 200
        # flip sends the block to the far side of the frame
        assert out[30, 20, 0] < 50
