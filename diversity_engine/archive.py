"""
archive.py
--------------------
Writers that hand a finished batch to disk:
  - write_zip:       one zip archive holding every sample plus manifest.json
  - write_directory: one file per sample plus manifest.json

manifest.json lists each sample's file name, index and random draws so a
dataset can be traced back to the settings that produced it.
"""

from __future__ import annotations

import json
import logging
import zipfile
from collections.abc import Sequence
from pathlib import Path

from .constants import ARCHIVE_PREFIX
from .encoder import timestamp_ms
from .exceptions import ExportError
from .image import GeneratedSample

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


def build_manifest(samples: Sequence[GeneratedSample]) -> dict:
    return {
        "count": len(samples),
        "samples": [
            {"index": s.index, "file_name": s.file_name, "effects": dict(s.effects)}
            for s in samples
        ],
    }


def _manifest_text(samples: Sequence[GeneratedSample]) -> str:
    return json.dumps(build_manifest(samples), indent=2, ensure_ascii=False) + "\n"


def archive_name() -> str:
    return f"{ARCHIVE_PREFIX}_{timestamp_ms()}.zip"


def write_zip(samples: Sequence[GeneratedSample], destination: Path | str) -> Path:
    """Write ``samples`` into a zip archive.

    ``destination`` may be a ``.zip`` path or a directory, created if needed,
    in which case a timestamped ``diverse_dataset_<ms>.zip`` goes inside it.
    """
    destination = Path(destination)
    if destination.suffix.lower() == ".zip" and not destination.is_dir():
        target = destination
    else:
        target = destination / archive_name()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        # Encoded images are already compressed
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_STORED) as zf:
            for sample in samples:
                zf.writestr(sample.file_name, sample.data)
            zf.writestr(MANIFEST_NAME, _manifest_text(samples))
    except OSError as exc:
        raise ExportError(f"Could not write archive {target}: {exc}") from exc
    logger.info("Wrote %d samples to %s", len(samples), target)
    return target


def write_directory(samples: Sequence[GeneratedSample], directory: Path | str) -> list[Path]:
    """Write each sample as its own file; returns the written image paths."""
    directory = Path(directory)
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for sample in samples:
            path = directory / sample.file_name
            path.write_bytes(sample.data)
            written.append(path)
        (directory / MANIFEST_NAME).write_text(_manifest_text(samples), encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Could not write samples to {directory}: {exc}") from exc
    logger.info("Wrote %d samples to %s", len(written), directory)
    return written
