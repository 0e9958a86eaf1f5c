from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple
import numpy as np

from .errors import RasterShapeError


@dataclass
class _Raster:
    """
    Shared behaviour of the three raster kinds.
    Subclasses set _CHANNELS (None for single-plane gray).
    """
    pixels: np.ndarray
    path: Path | None = None

    _CHANNELS = None

    def __post_init__(self):
        if not isinstance(self.pixels, np.ndarray) or self.pixels.dtype != np.uint8:
            raise RasterShapeError(f"{type(self).__name__} needs uint8 pixels", self.path)

        if self._CHANNELS is None:
            ok = self.pixels.ndim == 2
        else:
            ok = self.pixels.ndim == 3 and self.pixels.shape[2] == self._CHANNELS
        if not ok:
            raise RasterShapeError(
                f"{type(self).__name__} got pixel array of shape {self.pixels.shape}",
                self.path,
            )

        h, w = self.pixels.shape[:2]
        if w == 0 or h == 0:
            raise RasterShapeError(f"Zero-sized raster {w}x{h}", self.path)

        if self.path is not None:
            self.path = Path(self.path)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(W, H), the order Pillow uses."""
        return self.width, self.height

    def conforms_to(self, other: "_Raster") -> bool:
        return self.size == other.size


@dataclass
class Image(_Raster):
    """
    Decoded RGB source. Shape (H, W, 3), dtype uint8, RGB order.
    No codec logic outside the repository layer.
    """
    _CHANNELS = 3


@dataclass
class GrayImage(_Raster):
    """Single luminance plane, shape (H, W), uint8."""
    _CHANNELS = None


@dataclass
class NRGBAImage(_Raster):
    """Final output, non-premultiplied RGBA, shape (H, W, 4), uint8."""
    _CHANNELS = 4
