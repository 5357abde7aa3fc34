"""
encoder.py
--------------------
Lossy re-encoding of a finished work buffer.

Quality is drawn per sample so the batch covers a spread of capture /
compression conditions. JPEG has no alpha channel, so the RGBA buffer is
flattened over an opaque background first (black, like a browser canvas
export).
"""

from __future__ import annotations

import io
import time
from collections.abc import Mapping

import numpy as np
from PIL import Image

from .constants import FILE_PREFIX, QUALITY_MAX, QUALITY_MIN
from .exceptions import EncodingError
from .image import GeneratedSample
from .utils import flatten

# output format → (Pillow format, file extension)
FORMATS: dict[str, tuple[str, str]] = {
    "jpeg": ("JPEG", "jpg"),
    "webp": ("WEBP", "webp"),
}


def draw_quality(rng: np.random.Generator) -> float:
    return float(rng.uniform(QUALITY_MIN, QUALITY_MAX))


def file_name(timestamp_ms: int, index: int, extension: str) -> str:
    """``aug_<timestamp>_<index>.<ext>``; unique within one batch."""
    return f"{FILE_PREFIX}_{timestamp_ms}_{index}.{extension}"


def timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def encode(
    buf: np.ndarray,
    quality: float,
    output_format: str = "jpeg",
    background: tuple[int, int, int] = (0, 0, 0),
) -> bytes:
    """Encode an RGBA buffer; ``quality`` is a fraction in (0, 1]."""
    if output_format not in FORMATS:
        raise EncodingError(
            f"Unknown output format {output_format!r}; expected one of {sorted(FORMATS)}"
        )
    pil_format, _ = FORMATS[output_format]
    rgb = flatten(buf, background)
    out = io.BytesIO()
    try:
        Image.fromarray(rgb).save(out, format=pil_format, quality=int(round(quality * 100)))
    except (OSError, ValueError) as exc:
        raise EncodingError(f"{pil_format} encoding failed: {exc}") from exc
    return out.getvalue()


def encode_sample(
    buf: np.ndarray,
    index: int,
    rng: np.random.Generator,
    *,
    effects: Mapping[str, object] | None = None,
    output_format: str = "jpeg",
    background: tuple[int, int, int] = (0, 0, 0),
    timestamp: int | None = None,
) -> GeneratedSample:
    """Encoder stage: draw a quality, encode, and wrap as a sample."""
    quality = draw_quality(rng)
    data = encode(buf, quality, output_format, background)
    _, extension = FORMATS[output_format]
    stamp = timestamp_ms() if timestamp is None else timestamp
    return GeneratedSample(
        index=index,
        data=data,
        file_name=file_name(stamp, index, extension),
        effects={**(effects or {}), "quality": quality},
    )
