# services/tone_service.py
"""
Per-pixel tonal operators behind the mirage tank.

Every stage is a pure numpy kernel over the whole raster: it reads its
inputs, allocates a new raster of the same size and never touches the
inputs. Integer contracts (truncation, clamping, divide-by-zero) are
the ones the rest of the pipeline relies on for bit-identical output.
"""
from __future__ import annotations
import numpy as np

from ..models.errors import ConfigurationError, ConformanceError
from ..models.image import Image, GrayImage, NRGBAImage


# ─── Numeric helpers ──────────────────────────────────────────────
def clamp8(x):
    """max(0, min(255, x)); arrays come back as uint8."""
    if isinstance(x, np.ndarray):
        return np.clip(x, 0, 255).astype(np.uint8)
    return max(0, min(255, int(x)))


def saturating_add(a, b):
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return clamp8(np.asarray(a, dtype=np.int32) + np.asarray(b, dtype=np.int32))
    return clamp8(int(a) + int(b))


def widen_to_16bit(v: np.ndarray) -> np.ndarray:
    """8-bit -> 16-bit the way codecs do it (v * 0x101)."""
    return v.astype(np.uint32) * 257


def truncate_to_8bit(v):
    """High byte of a 16-bit sample. Truncates, never rounds."""
    if isinstance(v, np.ndarray):
        return (v.astype(np.uint32) >> 8).astype(np.uint8)
    return int(v) >> 8


def _require_conformant(x, y, stage: str) -> None:
    if not x.conforms_to(y):
        raise ConformanceError(
            f"{stage}: rasters differ in size {x.size} vs {y.size}"
        )


class ToneService:
    """
    The six stages of the mirage recipe plus a background preview.
    Stateless; all methods are static so they can be used as plain kernels.
    """

    @staticmethod
    def desaturate(img: Image) -> GrayImage:
        """HSL lightness: (max(r,g,b) + min(r,g,b)) // 2."""
        rgb = img.pixels.astype(np.uint16)
        lightness = (rgb.max(axis=2) + rgb.min(axis=2)) // 2
        return GrayImage(lightness.astype(np.uint8))

    @staticmethod
    def adjust_lightness(img: GrayImage, ratio: float) -> GrayImage:
        """
        ratio > 0 blends toward white, ratio <= 0 scales toward black.
        Float64 math, then truncation of the non-negative result.
        """
        if not -1.0 <= ratio <= 1.0:
            raise ConfigurationError(f"Lightness ratio must be in [-1, 1], got {ratio}")

        y = img.pixels.astype(np.float64)
        if ratio > 0:
            adjusted = y * (1 - ratio) + 255 * ratio
        else:
            adjusted = y * (1 + ratio)
        return GrayImage(clamp8(np.floor(adjusted)))

    @staticmethod
    def invert(img: GrayImage) -> GrayImage:
        return GrayImage(255 - img.pixels)

    @staticmethod
    def linear_dodge(img_x: GrayImage, img_y: GrayImage) -> GrayImage:
        """Additive blend saturating at 255."""
        _require_conformant(img_x, img_y, "linear_dodge")
        return GrayImage(saturating_add(img_x.pixels, img_y.pixels))

    @staticmethod
    def divide(img_x: GrayImage, img_y: GrayImage) -> GrayImage:
        """
        Divide blend with img_x as divisor and img_y as dividend.
        A zero divisor saturates to 255.
        """
        _require_conformant(img_x, img_y, "divide")

        divisor = img_x.pixels.astype(np.int32)
        dividend = img_y.pixels.astype(np.int32) * 255
        safe = np.where(divisor == 0, 1, divisor)
        quotient = np.where(divisor == 0, 255, dividend // safe)
        return GrayImage(clamp8(quotient))

    @staticmethod
    def compose(rgb_src: GrayImage, alpha_src: GrayImage) -> NRGBAImage:
        """Gray plane becomes R=G=B, second plane becomes alpha."""
        _require_conformant(rgb_src, alpha_src, "compose")

        g = rgb_src.pixels
        return NRGBAImage(np.stack([g, g, g, alpha_src.pixels], axis=2))

    @staticmethod
    def render_on_background(img: NRGBAImage, level: int) -> GrayImage:
        """
        Alpha-composite a gray NRGBA image onto a constant gray background:
        (g * a + c * (255 - a) + 127) // 255.
        """
        if not 0 <= level <= 255:
            raise ConfigurationError(f"Background level must be in [0, 255], got {level}")

        g = img.pixels[:, :, 0].astype(np.int32)
        a = img.pixels[:, :, 3].astype(np.int32)
        shown = (g * a + level * (255 - a) + 127) // 255
        return GrayImage(clamp8(shown))
