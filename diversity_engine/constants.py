"""
constants.py
--------------------
Shared constants for the augmentation engine:
  - intensity knob bounds and defaults
  - per-stage draw ranges
  - overlay gate thresholds and probabilities
  - encoder quality range and output naming
"""

from __future__ import annotations

from typing import Final

# Intensity knobs (percentages)

KNOB_MIN: Final[float] = 0.0
KNOB_MAX: Final[float] = 100.0

DEFAULT_HARSHNESS: Final[float] = 40.0
DEFAULT_LIGHT_AGING: Final[float] = 40.0
DEFAULT_DIRTINESS: Final[float] = 30.0

DEFAULT_SAMPLE_COUNT: Final[int] = 20

# Geometric stage

ROTATION_LIMIT_DEG: Final[float] = 20.0
SCALE_MIN: Final[float] = 0.85
SCALE_MAX: Final[float] = 1.15
SKEW_LIMIT: Final[float] = 0.1
TRANSLATE_FRACTION: Final[float] = 0.15
FLIP_PROBABILITY: Final[float] = 0.5

# Photometric stage

BRIGHTNESS_SPAN: Final[float] = 150.0
CONTRAST_MIN: Final[float] = 0.5
GAMMA_MIN: Final[float] = 0.5
# light_aging / AGING_SPAN_DIVISOR is the width of the contrast / gamma range
AGING_SPAN_DIVISOR: Final[float] = 50.0
GAIN_MIN: Final[float] = 0.8
GAIN_MAX: Final[float] = 1.2
HUE_ROTATION_MAX_DEG: Final[float] = 360.0

# Noise stage

# harshness / NOISE_DIVISOR is the per-pixel corruption probability
NOISE_DIVISOR: Final[float] = 5000.0

# Environmental overlays

FOG_HARSHNESS_GATE: Final[float] = 50.0
FOG_PROBABILITY: Final[float] = 0.5
FOG_OPACITY_DIVISOR: Final[float] = 200.0
FOG_BOTTOM_RATIO: Final[float] = 0.2
FOG_TOP_RGB: Final[tuple[int, int, int]] = (200, 200, 200)
FOG_BOTTOM_RGB: Final[tuple[int, int, int]] = (255, 255, 255)

RAIN_HARSHNESS_GATE: Final[float] = 70.0
RAIN_PROBABILITY: Final[float] = 0.6
RAIN_COUNT_MIN: Final[int] = 100
RAIN_COUNT_SPAN: Final[int] = 200
RAIN_LENGTH_MIN: Final[float] = 10.0
RAIN_LENGTH_SPAN: Final[float] = 30.0
RAIN_SLANT: Final[float] = 0.1
RAIN_ALPHA: Final[float] = 0.2
RAIN_RGB: Final[tuple[int, int, int]] = (255, 255, 255)

GLARE_AGING_GATE: Final[float] = 60.0
GLARE_PROBABILITY: Final[float] = 0.7
GLARE_ALPHA: Final[float] = 0.4
GLARE_CENTER_RGB: Final[tuple[int, int, int]] = (255, 255, 200)
GLARE_EDGE_RGB: Final[tuple[int, int, int]] = (255, 255, 255)

# Artifact stage

DIRT_MAX_MARKS: Final[int] = 30
DIRT_SIZE_DIVISOR: Final[float] = 20.0
DIRT_CHANNEL_MAX: Final[float] = 50.0
DIRT_ALPHA_MAX: Final[float] = 0.5
DIRT_CIRCLE_PROBABILITY: Final[float] = 0.5
DIRT_RECT_ASPECT: Final[float] = 0.2

# Encoder

QUALITY_MIN: Final[float] = 0.5
QUALITY_MAX: Final[float] = 0.9
FILE_PREFIX: Final[str] = "aug"
ARCHIVE_PREFIX: Final[str] = "diverse_dataset"

# Batch driver

DEFAULT_YIELD_EVERY: Final[int] = 4
DEFAULT_MAX_WORKERS: Final[int] = 4
