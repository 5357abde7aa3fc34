"""
diversity_engine package - procedural image augmentation for training sets.

Public API:
    generate_batch       - N augmented samples of one source image
    run_batch            - same, as a cancellable progress-event stream
    AugmentationParams   - harshness / light-aging / dirtiness knobs
    SourceImage          - read-only input bitmap
    GeneratedSample      - one encoded output image

Modules:
    geometry    - affine jitter stage
    photometric - lighting and salt-and-pepper stages
    overlays    - fog / rain / glare stage
    artifacts   - dirt mark stage
    encoder     - lossy re-encoding
    engine      - batch orchestrator
    driver      - interactive batch driver
    archive     - zip / directory writers
    config      - engine configuration
"""

from . import (
    archive,
    artifacts,
    config,
    constants,
    driver,
    encoder,
    engine,
    exceptions,
    geometry,
    overlays,
    params,
    photometric,
)
from .driver import collect, run_batch
from .engine import generate_batch, generate_sample
from .exceptions import (
    BatchCancelled,
    BatchGenerationError,
    EngineError,
    InvalidInput,
    InvalidParams,
)
from .image import GeneratedSample, SourceImage
from .params import AugmentationParams

__version__ = "0.1.0"

__all__ = [
    "AugmentationParams",
    "BatchCancelled",
    "BatchGenerationError",
    "EngineError",
    "GeneratedSample",
    "InvalidInput",
    "InvalidParams",
    "SourceImage",
    "archive",
    "artifacts",
    "collect",
    "config",
    "constants",
    "driver",
    "encoder",
    "engine",
    "exceptions",
    "generate_batch",
    "generate_sample",
    "geometry",
    "overlays",
    "params",
    "photometric",
    "run_batch",
]
