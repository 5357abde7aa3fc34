"""
Engine-level configuration.

Uses a class-based manager so the CLI can override defaults once while tests
inject their own settings and reset afterwards.

Usage:
    from diversity_engine.config import Config

    cfg = Config.get_config()
    cfg.max_workers

    Config.configure(max_workers=2, output_format="webp")
    Config.reset()

Defaults may be seeded from the environment:
    DIVERSITY_MAX_WORKERS  - worker pool size
    DIVERSITY_OUTPUT_DIR   - where the CLI writes samples
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_MAX_WORKERS, DEFAULT_YIELD_EVERY
from .encoder import FORMATS
from .exceptions import EngineError


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration."""

    max_workers: int
    output_format: str
    background: tuple[int, int, int]
    yield_every: int
    output_dir: Path


def _default_max_workers() -> int:
    env = os.environ.get("DIVERSITY_MAX_WORKERS")
    if env:
        try:
            return max(1, int(env))
        except ValueError as exc:
            raise EngineError(f"DIVERSITY_MAX_WORKERS must be an integer, got {env!r}") from exc
    return max(1, min(DEFAULT_MAX_WORKERS, os.cpu_count() or 1))


def _default_output_dir() -> Path:
    return Path(os.environ.get("DIVERSITY_OUTPUT_DIR", "./augmented")).resolve()


class Config:
    """
    Configuration manager.

    Holds optional overrides at class level; anything not overridden falls
    back to the environment or the built-in default.
    """

    _max_workers: int | None = None
    _output_format: str | None = None
    _background: tuple[int, int, int] | None = None
    _yield_every: int | None = None
    _output_dir: Path | None = None

    @classmethod
    def configure(
        cls,
        max_workers: int | None = None,
        output_format: str | None = None,
        background: tuple[int, int, int] | None = None,
        yield_every: int | None = None,
        output_dir: Path | str | None = None,
    ) -> None:
        """
        Override configuration values.

        Args:
            max_workers: Upper bound on concurrently generated samples
            output_format: Encoder format key (``jpeg`` or ``webp``)
            background: RGB used to flatten transparent pixels before encoding
            yield_every: Samples per chunk between driver progress rounds
            output_dir: Default destination for written samples
        """
        if max_workers is not None:
            if max_workers < 1:
                raise EngineError("max_workers must be at least 1")
            cls._max_workers = int(max_workers)
        if output_format is not None:
            if output_format not in FORMATS:
                raise EngineError(f"Unknown output format {output_format!r}")
            cls._output_format = output_format
        if background is not None:
            cls._background = tuple(int(c) for c in background)  # type: ignore[assignment]
        if yield_every is not None:
            if yield_every < 1:
                raise EngineError("yield_every must be at least 1")
            cls._yield_every = int(yield_every)
        if output_dir is not None:
            cls._output_dir = Path(output_dir).resolve()

    @classmethod
    def reset(cls) -> None:
        """Drop every override."""
        cls._max_workers = None
        cls._output_format = None
        cls._background = None
        cls._yield_every = None
        cls._output_dir = None

    @classmethod
    def get_config(cls) -> EngineConfig:
        """Get current configuration as an immutable dataclass."""
        return EngineConfig(
            max_workers=cls._max_workers or _default_max_workers(),
            output_format=cls._output_format or "jpeg",
            background=cls._background or (0, 0, 0),
            yield_every=cls._yield_every or DEFAULT_YIELD_EVERY,
            output_dir=cls._output_dir or _default_output_dir(),
        )
