"""Pytest configuration and shared fixtures for the diversity engine."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the repository root to the path for imports
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

from diversity_engine.config import Config  # noqa: E402
from diversity_engine.image import SourceImage  # noqa: E402


@pytest.fixture
def repo_root() -> Path:
    """Return the repository root path."""
    return REPO_ROOT


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the default engine configuration."""
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def gray_source() -> SourceImage:
    """100x100 opaque uniform mid-grey image."""
    return SourceImage(np.full((100, 100, 3), 128, dtype=np.uint8))


@pytest.fixture
def small_source() -> SourceImage:
    """16x16 opaque image, cheap enough for large statistical batches."""
    return SourceImage(np.full((16, 16, 3), 90, dtype=np.uint8))


@pytest.fixture
def gradient_source() -> SourceImage:
    """64x48 opaque RGBA image with a horizontal red ramp."""
    arr = np.zeros((48, 64, 4), dtype=np.uint8)
    arr[..., 0] = np.linspace(0, 255, 64, dtype=np.uint8)[np.newaxis, :]
    arr[..., 1] = 60
    arr[..., 2] = 200
    arr[..., 3] = 255
    return SourceImage(arr)


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for deterministic stage tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Return a temporary output directory for tests."""
    return tmp_path / "output"
