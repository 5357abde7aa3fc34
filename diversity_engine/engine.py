"""
engine.py
--------------------
Augmentation orchestrator.

Each sample runs the fixed pipeline

    geometry → photometric → noise → overlays → artifacts → encoder

on its own work buffer with its own random stream. Streams are spawned from
one ``SeedSequence`` per batch, so a seeded batch is reproducible no matter
how many workers run it. Samples share nothing but the read-only source,
which makes the batch embarrassingly parallel; a bounded thread pool caps
how many work buffers are alive at once.

Batches are all-or-nothing: if any stage fails, every sample of the call is
discarded and ``BatchGenerationError`` names the failing index.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

import numpy as np

from .artifacts import dirt_marks
from .config import Config
from .constants import DEFAULT_SAMPLE_COUNT
from .encoder import encode_sample, timestamp_ms
from .exceptions import BatchCancelled, BatchGenerationError, InvalidInput
from .geometry import geometric_transform
from .image import GeneratedSample, SourceImage
from .overlays import environmental_overlays
from .params import AugmentationParams, coerce_params
from .photometric import photometric_adjust, salt_and_pepper

logger = logging.getLogger(__name__)

Stage = Callable[
    [np.ndarray, AugmentationParams, np.random.Generator],
    tuple[np.ndarray, dict[str, object]],
]
Seed = int | Sequence[int] | np.random.SeedSequence | None

# Canonical order of the stages that follow the geometric stage
PIPELINE: list[tuple[str, Stage]] = [
    ("photometric", photometric_adjust),
    ("noise", salt_and_pepper),
    ("overlays", environmental_overlays),
    ("artifacts", dirt_marks),
]


def validate_source(source: object) -> SourceImage:
    if not isinstance(source, SourceImage):
        raise InvalidInput(f"Expected a SourceImage, got {type(source).__name__}")
    if source.width <= 0 or source.height <= 0:
        raise InvalidInput(
            f"Source image must have positive dimensions, got {source.width}x{source.height}"
        )
    return source


def validate_count(count: object) -> int:
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidInput(f"Sample count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidInput(f"Sample count must be non-negative, got {count}")
    return int(count)


def _spawn_streams(seed: Seed, count: int) -> list[np.random.Generator]:
    """One independent generator per sample."""
    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return [np.random.default_rng(child) for child in root.spawn(count)]


def generate_sample(
    source: SourceImage,
    params: AugmentationParams,
    index: int,
    rng: np.random.Generator,
    *,
    output_format: str = "jpeg",
    background: tuple[int, int, int] = (0, 0, 0),
    timestamp: int | None = None,
) -> GeneratedSample:
    """Run the whole pipeline for one sample.

    The work buffer is created by the geometric stage, handed from stage to
    stage and dropped once the encoder has produced the sample.
    """
    buf, effects = geometric_transform(source.pixels, rng, index)
    for _name, stage in PIPELINE:
        buf, meta = stage(buf, params, rng)
        effects.update(meta)
    return encode_sample(
        buf,
        index,
        rng,
        effects=effects,
        output_format=output_format,
        background=background,
        timestamp=timestamp,
    )


def iter_samples(
    source: SourceImage,
    params: AugmentationParams,
    indices: Sequence[int],
    streams: Sequence[np.random.Generator],
    *,
    max_workers: int,
    timestamp: int,
    output_format: str,
    background: tuple[int, int, int],
    cancel: threading.Event | None = None,
) -> Iterator[GeneratedSample]:
    """Yield samples for ``indices`` in completion order.

    Stops early, without error, once ``cancel`` is set. Raises
    ``BatchGenerationError`` for the lowest failing index; samples already
    yielded by this call must then be discarded by the caller.
    """
    failures: dict[int, BaseException] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(indices)))) as executor:
        futures: dict[Future[GeneratedSample], int] = {
            executor.submit(
                generate_sample,
                source,
                params,
                index,
                streams[index],
                output_format=output_format,
                background=background,
                timestamp=timestamp,
            ): index
            for index in indices
        }
        try:
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                index = futures[future]
                exc = future.exception()
                if exc is not None:
                    failures[index] = exc
                    for other in futures:
                        other.cancel()
                    continue
                if failures:
                    continue
                yield future.result()
                if cancel is not None and cancel.is_set():
                    return
        finally:
            for other in futures:
                other.cancel()

    if failures:
        index = min(failures)
        exc = failures[index]
        logger.error("Sample %d failed, discarding batch: %s", index, exc)
        raise BatchGenerationError(index, f"Sample {index} failed: {exc}") from exc


def generate_batch(
    source: SourceImage,
    params: AugmentationParams | Mapping[str, object] | None = None,
    count: int = DEFAULT_SAMPLE_COUNT,
    *,
    seed: Seed = None,
    max_workers: int | None = None,
    output_format: str | None = None,
    cancel: threading.Event | None = None,
) -> list[GeneratedSample]:
    """Generate ``count`` augmented samples of ``source``.

    Args:
        source:        Image to augment; never modified.
        params:        Knob settings, as ``AugmentationParams`` or a mapping.
        count:         Number of samples; 0 returns an empty list.
        seed:          Optional seed for a reproducible batch.
        max_workers:   Thread pool bound; defaults to the configured value.
        output_format: Encoder format; defaults to the configured value.
        cancel:        Optional event; when set the batch stops and raises
                       ``BatchCancelled``.

    Returns:
        Samples ordered by index.

    Raises:
        InvalidInput:         bad source or count, before any draw is taken.
        BatchGenerationError: a stage failed; no samples are returned.
        BatchCancelled:       ``cancel`` was set before the batch finished.
    """
    validate_source(source)
    count = validate_count(count)
    params = coerce_params(params)
    if count == 0:
        return []
    if cancel is not None and cancel.is_set():
        raise BatchCancelled(0, count)

    cfg = Config.get_config()
    streams = _spawn_streams(seed, count)
    started = time.perf_counter()
    logger.info(
        "Generating %d samples from %dx%d source (%s)",
        count, source.width, source.height, params,
    )

    results: dict[int, GeneratedSample] = {}
    for sample in iter_samples(
        source,
        params,
        range(count),
        streams,
        max_workers=max_workers or cfg.max_workers,
        timestamp=timestamp_ms(),
        output_format=output_format or cfg.output_format,
        background=cfg.background,
        cancel=cancel,
    ):
        results[sample.index] = sample

    if len(results) < count:
        logger.info("Batch cancelled after %d/%d samples", len(results), count)
        raise BatchCancelled(len(results), count)

    logger.info("Generated %d samples in %.2fs", count, time.perf_counter() - started)
    return [results[i] for i in range(count)]
