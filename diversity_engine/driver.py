"""Interactive batch driver: progress events, cancellation, partial results."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping

from .config import Config
from .encoder import timestamp_ms
from .engine import (
    Seed,
    _spawn_streams,
    iter_samples,
    validate_count,
    validate_source,
)
from .exceptions import BatchGenerationError
from .image import GeneratedSample, SourceImage
from .params import AugmentationParams, coerce_params

logger = logging.getLogger(__name__)

BatchEvent = dict[str, object]


def _ordered(samples: Mapping[int, GeneratedSample]) -> list[GeneratedSample]:
    return [samples[i] for i in sorted(samples)]


def run_batch(
    source: SourceImage,
    params: AugmentationParams | Mapping[str, object] | None,
    count: int,
    cancel: threading.Event,
    *,
    seed: Seed = None,
    max_workers: int | None = None,
    yield_every: int | None = None,
    output_format: str | None = None,
) -> Iterator[BatchEvent]:
    """Generator: yields progress events while a batch is generated.

    Samples are produced in chunks of ``yield_every``; the host gets control
    back after every finished sample and no work is in flight between
    chunks. Setting ``cancel`` stops the batch at the next sample boundary
    and hands back whatever was finished. Unlike ``generate_batch`` this is
    the one place partial results are returned.

    Events, keyed on ``type``:

    - ``start``: ``{total}``
    - ``progress``: ``{current, total, index, file_name}``
    - ``cancelled``: ``{completed, total, samples}``
    - ``error``: ``{message, failed_at_index}``; no samples survive
    - ``done``: ``{total, samples}``

    ``InvalidInput`` is raised before ``start`` for a bad source or count.
    """
    validate_source(source)
    count = validate_count(count)
    params = coerce_params(params)
    cfg = Config.get_config()
    chunk = max(1, yield_every or cfg.yield_every)

    if count == 0:
        yield {"type": "done", "total": 0, "samples": []}
        return

    streams = _spawn_streams(seed, count)
    stamp = timestamp_ms()
    samples: dict[int, GeneratedSample] = {}

    yield {"type": "start", "total": count}

    for first in range(0, count, chunk):
        if cancel.is_set():
            break
        indices = range(first, min(count, first + chunk))
        try:
            for sample in iter_samples(
                source,
                params,
                indices,
                streams,
                max_workers=max_workers or cfg.max_workers,
                timestamp=stamp,
                output_format=output_format or cfg.output_format,
                background=cfg.background,
                cancel=cancel,
            ):
                samples[sample.index] = sample
                yield {
                    "type": "progress",
                    "current": len(samples),
                    "total": count,
                    "index": sample.index,
                    "file_name": sample.file_name,
                }
        except BatchGenerationError as exc:
            yield {
                "type": "error",
                "message": exc.message,
                "failed_at_index": exc.failed_at_index,
            }
            return

    if len(samples) < count:
        logger.info("Batch cancelled: keeping %d/%d samples", len(samples), count)
        yield {
            "type": "cancelled",
            "completed": len(samples),
            "total": count,
            "samples": _ordered(samples),
        }
        return

    yield {"type": "done", "total": count, "samples": _ordered(samples)}


def collect(events: Iterable[BatchEvent]) -> list[GeneratedSample]:
    """Drain a driver stream and return its samples.

    Partial results of a cancelled batch are returned as-is; an ``error``
    event is re-raised as ``BatchGenerationError``.
    """
    for event in events:
        kind = event["type"]
        if kind == "error":
            raise BatchGenerationError(
                int(event["failed_at_index"]),  # type: ignore[arg-type]
                str(event["message"]),
            )
        if kind in ("done", "cancelled"):
            return list(event["samples"])  # type: ignore[arg-type]
    return []
