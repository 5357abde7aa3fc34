"""Tests for diversity_engine/overlays module."""

from __future__ import annotations

import numpy as np
import pytest

from diversity_engine.overlays import environmental_overlays, fog, glare, rain
from diversity_engine.params import AugmentationParams


def _opaque(value: int, height: int = 40, width: int = 40) -> np.ndarray:
    buf = np.full((height, width, 4), value, dtype=np.uint8)
    buf[..., 3] = 255
    return buf


class TestGates:
    """Test cases for overlay gating."""

    @pytest.mark.parametrize(
        "params",
        [
            AugmentationParams(harshness=0, light_aging=0),
            AugmentationParams(harshness=50, light_aging=60),
        ],
    )
    def test_thresholds_block_every_overlay(self, params: AugmentationParams) -> None:
        buf = _opaque(100)
        for seed in range(100):
            out, meta = environmental_overlays(buf, params, np.random.default_rng(seed))
            assert not (meta["fog"] or meta["rain"] or meta["glare"])
            np.testing.assert_array_equal(out, buf)

    def test_rain_needs_more_than_seventy(self) -> None:
        params = AugmentationParams(harshness=70, light_aging=0)
        metas = [
            environmental_overlays(_opaque(0, 8, 8), params, np.random.default_rng(seed))[1]
            for seed in range(100)
        ]
        assert not any(m["rain"] for m in metas)
        assert any(m["fog"] for m in metas)

    def test_trigger_rates_at_full_intensity(self) -> None:
        params = AugmentationParams(harshness=100, light_aging=100)
        buf = _opaque(100, 12, 12)
        trials = 400
        root = np.random.SeedSequence(99)
        metas = [
            environmental_overlays(buf, params, np.random.default_rng(child))[1]
            for child in root.spawn(trials)
        ]
        assert abs(np.mean([m["fog"] for m in metas]) - 0.5) < 0.08
        assert abs(np.mean([m["rain"] for m in metas]) - 0.6) < 0.08
        assert abs(np.mean([m["glare"] for m in metas]) - 0.7) < 0.08

    def test_fog_opacity_bounded(self) -> None:
        params = AugmentationParams(harshness=100, light_aging=0)
        for seed in range(100):
            _, meta = environmental_overlays(_opaque(0, 4, 4), params, np.random.default_rng(seed))
            if meta["fog"]:
                assert 0.0 <= meta["fog_opacity"] < 0.5

    def test_input_buffer_not_modified(self) -> None:
        buf = _opaque(30)
        before = buf.copy()
        params = AugmentationParams(harshness=100, light_aging=100)
        for seed in range(20):
            environmental_overlays(buf, params, np.random.default_rng(seed))
        np.testing.assert_array_equal(buf, before)


class TestFog:
    """Test cases for the fog gradient."""

    def test_heavier_at_top(self) -> None:
        out = fog(_opaque(0), 0.5)
        assert out[0, 0, 0] > out[-1, 0, 0]
        assert 90 <= out[0, 0, 0] <= 110
        assert (out[..., 3] == 255).all()

    def test_rows_are_uniform(self) -> None:
        out = fog(_opaque(0), 0.4)
        assert (out[10] == out[10, 0]).all()

    def test_zero_opacity_is_noop(self) -> None:
        buf = _opaque(70)
        np.testing.assert_array_equal(fog(buf, 0.0), buf)

    def test_fills_transparent_pixels(self) -> None:
        buf = np.zeros((10, 10, 4), dtype=np.uint8)
        out = fog(buf, 0.5)
        assert out[0, 0, 3] > 0
        assert 200 <= out[0, 0, 0] <= 205


class TestRain:
    """Test cases for rain streaks."""

    def test_streak_is_translucent_white(self) -> None:
        out = rain(_opaque(0), np.array([[10.0, 5.0, 20.0]]))
        assert out[5, 10, 0] == 51
        assert out[5, 30, 0] == 0
        assert (out[..., 3] == 255).all()

    def test_streak_slants_down_and_right(self) -> None:
        out = rain(_opaque(0), np.array([[10.0, 0.0, 30.0]]))
        rows = np.nonzero(out[..., 0].any(axis=1))[0]
        cols = np.nonzero(out[..., 0].any(axis=0))[0]
        assert rows.max() >= 28
        assert cols.min() == 10
        assert cols.max() == 13


class TestGlare:
    """Test cases for the radial light leak."""

    def test_zero_radius_is_noop(self) -> None:
        buf = _opaque(50)
        np.testing.assert_array_equal(glare(buf, 20.0, 20.0, 0.0), buf)

    def test_brightest_at_centre(self) -> None:
        out = glare(_opaque(0), 20.0, 20.0, 15.0)
        assert out[20, 20, 0] > out[20, 30, 0] > 0
        # warm: blue lags red near the centre
        assert out[20, 20, 2] < out[20, 20, 0]

    def test_nothing_beyond_radius(self) -> None:
        out = glare(_opaque(0), 5.0, 5.0, 10.0)
        assert (out[30:, 30:, :3] == 0).all()
