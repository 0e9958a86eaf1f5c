from io import BytesIO
from pathlib import Path
from typing import Tuple, Union
import logging

import numpy as np
import cv2
from PIL import Image as PILImage

from ..models.image import Image, NRGBAImage, GrayImage
from ..models.errors import (
    InputOpenError,
    DecodeError,
    ResizeError,
    OutputWriteError,
    EncodeError,
    RasterShapeError,
)
from ..services.tone_service import widen_to_16bit, truncate_to_8bit

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Codec and resampler collaborators.
    Only place that talks to OpenCV / Pillow; everything above works on
    Image objects (uint8 numpy arrays).
    """

    # ---------- private helpers ----------
    @staticmethod
    def _to_rgb16(arr: np.ndarray) -> Tuple[np.ndarray, np.ndarray | None]:
        """
        Normalise whatever cv2 decoded into (rgb16, alpha16).
        cv2 hands back BGR(A); 8-bit samples are widened to 16 bit.
        """
        if arr.dtype == np.uint8:
            arr16 = widen_to_16bit(arr)
        elif arr.dtype == np.uint16:
            arr16 = arr.astype(np.uint32)
        else:
            raise DecodeError(f"Unsupported sample type {arr.dtype}")

        if arr16.ndim == 2:
            return np.stack([arr16] * 3, axis=2), None

        channels = arr16.shape[2]
        if channels == 1:
            return np.concatenate([arr16] * 3, axis=2), None
        if channels == 2:                                  # gray + alpha
            return np.stack([arr16[:, :, 0]] * 3, axis=2), arr16[:, :, 1]
        if channels == 3:
            return arr16[:, :, ::-1], None
        if channels == 4:
            return arr16[:, :, 2::-1], arr16[:, :, 3]
        raise DecodeError(f"Unsupported channel count {channels}")

    @staticmethod
    def _flatten_on_black(rgb16: np.ndarray, alpha16: np.ndarray | None) -> np.ndarray:
        """Premultiply by alpha (i.e. draw over a transparent/black canvas)."""
        if alpha16 is None:
            return rgb16
        return rgb16 * alpha16[:, :, None] // 65535

    # ---------- public API ----------
    def load(self, path: Union[str, Path]) -> Image:
        """
        Decode any OpenCV-readable file into an 8-bit RGB Image.
        16-bit samples keep their high byte only.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as err:
            raise InputOpenError(f"Cannot read image: {path} ({err})", path) from err

        if not data:
            raise DecodeError(f"Empty file: {path}", path)
        try:
            arr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        except cv2.error as err:
            raise DecodeError(f"Not a decodable image: {path} ({err})", path) from err
        if arr is None or arr.size == 0:
            raise DecodeError(f"Not a decodable image: {path}", path)

        try:
            rgb16, alpha16 = self._to_rgb16(arr)
        except DecodeError as err:
            raise DecodeError(f"{err} in {path}", path) from err

        rgb = truncate_to_8bit(self._flatten_on_black(rgb16, alpha16))
        logger.debug(f"Decoded {path.name}: {arr.shape} {arr.dtype}")
        try:
            return Image(pixels=np.ascontiguousarray(rgb), path=path)
        except RasterShapeError as err:
            raise DecodeError(str(err), path) from err

    @staticmethod
    def resize(img: Image, size: Tuple[int, int]) -> Image:
        """
        Bicubic (Catmull-Rom, a = -0.5) resample to size=(W, H).
        Anything other than an exact (H, W, 3) result is a ResizeError.
        """
        width, height = size
        if width <= 0 or height <= 0:
            raise ResizeError(f"Cannot resize to {width}x{height}", img.path)

        if img.size == (width, height):
            return Image(pixels=img.pixels.copy(), path=img.path)

        try:
            pil_obj = PILImage.fromarray(np.ascontiguousarray(img.pixels))
            resized = pil_obj.resize((width, height), PILImage.Resampling.BICUBIC)
            pixels = np.asarray(resized.convert("RGB"), dtype=np.uint8)
        except (ValueError, OSError, MemoryError) as err:
            raise ResizeError(f"Resize to {width}x{height} failed: {err}", img.path) from err

        if pixels.shape != (height, width, 3):
            raise ResizeError(
                f"Resampler returned {pixels.shape}, expected {(height, width, 3)}",
                img.path,
            )
        return Image(pixels=pixels.copy(), path=img.path)

    @staticmethod
    def save_png(img: Union[NRGBAImage, GrayImage], path: Union[str, Path]) -> Path:
        """
        Encode in memory, then write. A half-written file is removed.
        """
        path = Path(path)
        try:
            buffer = BytesIO()
            PILImage.fromarray(np.ascontiguousarray(img.pixels)).save(buffer, format="PNG")
        except (ValueError, TypeError, OSError) as err:
            raise EncodeError(f"PNG encoding failed for {path}: {err}", path) from err

        try:
            fh = open(path, "wb")
        except OSError as err:
            raise OutputWriteError(f"Cannot open {path}: {err}", path) from err

        try:
            with fh:
                fh.write(buffer.getvalue())
        except OSError as err:
            path.unlink(missing_ok=True)
            raise OutputWriteError(f"Cannot write {path}: {err}", path) from err

        return path
