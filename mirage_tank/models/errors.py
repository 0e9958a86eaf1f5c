# models/errors.py
from __future__ import annotations
from pathlib import Path


class MirageError(Exception):
    """
    Base class for every failure the mirage pipeline can surface.
    Carries the offending path (if any) so the CLI can report it.
    """

    def __init__(self, message: str, path: str | Path | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class InputOpenError(MirageError):
    """Source file cannot be opened or read."""


class DecodeError(MirageError):
    """Source bytes are not a recognised image."""


class ResizeError(MirageError):
    """Resampler failed or returned a raster of the wrong size."""


class OutputWriteError(MirageError):
    """Output path cannot be created or written."""


class EncodeError(MirageError):
    """PNG encoder rejected the raster."""


class ConformanceError(MirageError):
    """Two rasters fed to the same stage differ in width or height."""


class RasterShapeError(MirageError):
    """Raster has the wrong shape, dtype, or a zero dimension."""


class ConfigurationError(MirageError):
    """Invalid scale factor or lightness ratio."""
