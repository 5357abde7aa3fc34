"""
Custom exceptions for the augmentation engine.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base exception for augmentation engine errors."""

    pass


class InvalidInput(EngineError):
    """Source image or batch request rejected before any stage runs."""

    pass


class InvalidParams(EngineError):
    """Intensity knobs that cannot be interpreted as numbers."""

    pass


class EncodingError(EngineError):
    """Error re-encoding a finished work buffer."""

    pass


class ExportError(EngineError):
    """Error writing generated samples to disk."""

    pass


class BatchGenerationError(EngineError):
    """A stage failed; the whole batch was discarded."""

    def __init__(self, failed_at_index: int, message: str | None = None) -> None:
        self.failed_at_index = failed_at_index
        self.message = message or f"Sample {failed_at_index} failed"
        super().__init__(self.message)


class BatchCancelled(EngineError):
    """The batch was cancelled before every sample finished."""

    def __init__(self, completed: int, total: int) -> None:
        self.completed = completed
        self.total = total
        super().__init__(f"Batch cancelled after {completed}/{total} samples")
