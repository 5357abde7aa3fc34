"""
image.py
--------------------
Pixel containers passed in and out of the engine.

  SourceImage     - read-only RGBA buffer supplied by the caller
  GeneratedSample - one encoded augmented image plus the draws that made it

Decoding of arbitrary file formats is delegated to Pillow.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import numpy as np
from PIL import Image, UnidentifiedImageError

from .exceptions import InvalidInput


def _to_rgba(arr: np.ndarray) -> np.ndarray:
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise InvalidInput(
            f"Expected an (H, W, 3) or (H, W, 4) array, got shape {arr.shape}"
        )
    if arr.dtype != np.uint8:
        raise InvalidInput(f"Expected uint8 samples, got {arr.dtype}")
    if arr.shape[2] == 4:
        return arr.copy()
    alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([arr, alpha], axis=2)


@dataclass(frozen=True, eq=False)
class SourceImage:
    """Immutable source bitmap, stored as (H, W, 4) uint8 RGBA.

    The engine only ever reads ``pixels``; the array is a private copy with
    the writeable flag cleared. Dimensions are not checked here so that
    callers can wrap whatever the decoder produced; the orchestrator rejects
    empty images before a batch starts.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if not isinstance(self.pixels, np.ndarray):
            raise InvalidInput(
                f"Expected a numpy array, got {type(self.pixels).__name__}"
            )
        rgba = _to_rgba(self.pixels)
        rgba.setflags(write=False)
        object.__setattr__(self, "pixels", rgba)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height), Pillow order."""
        return self.width, self.height

    @classmethod
    def from_array(cls, arr: np.ndarray) -> SourceImage:
        return cls(np.asarray(arr))

    @classmethod
    def from_pil(cls, img: Image.Image) -> SourceImage:
        return cls(np.array(img.convert("RGBA"), dtype=np.uint8))

    @classmethod
    def from_bytes(cls, data: bytes) -> SourceImage:
        """Decode any Pillow-readable format into a source image."""
        try:
            with Image.open(io.BytesIO(data)) as opened:
                opened.load()
                return cls.from_pil(opened)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise InvalidInput(f"Could not decode source image: {exc}") from exc

    @classmethod
    def from_path(cls, path: Path | str) -> SourceImage:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise InvalidInput(f"Could not read source image {path}: {exc}") from exc
        return cls.from_bytes(data)


@dataclass(frozen=True, slots=True)
class GeneratedSample:
    """One augmented image: batch index, encoded bytes and file name.

    ``effects`` records every random draw taken while producing the sample.
    """

    index: int
    data: bytes
    file_name: str
    effects: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "effects", MappingProxyType(dict(self.effects)))

    @property
    def extension(self) -> str:
        return Path(self.file_name).suffix.lstrip(".")

    def to_array(self) -> np.ndarray:
        """Decode the encoded bytes back into an (H, W, 3) uint8 array."""
        with Image.open(io.BytesIO(self.data)) as opened:
            return np.array(opened.convert("RGB"), dtype=np.uint8)
