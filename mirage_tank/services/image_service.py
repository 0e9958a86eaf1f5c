from pathlib import Path
from typing import Tuple, Union
import logging
import math

from ..models.image import Image, GrayImage, NRGBAImage
from ..models.errors import ConfigurationError, ConformanceError, ResizeError
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers.  No tonal logic, no pipeline ordering."""
    def __init__(self, image_repository: ImageRepository | None = None):
        self.image_repository = image_repository or ImageRepository()

    def load(self, path: Union[str, Path]) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path)

    @staticmethod
    def target_size(width: int, height: int, scale: float) -> Tuple[int, int]:
        """
        (floor(W * s), floor(H * s)).

        Raises:
            ConfigurationError: scale is not a finite number > 0.
            ResizeError: the scaled size collapses to zero.
        """
        if not (math.isfinite(scale) and scale > 0):
            raise ConfigurationError(f"Scale must be a finite number > 0, got {scale}")
        size = (math.floor(width * scale), math.floor(height * scale))
        if size[0] <= 0 or size[1] <= 0:
            raise ResizeError(f"Scale {scale} shrinks {width}x{height} to {size[0]}x{size[1]}")
        return size

    def resize_to(self, img: Image, size: Tuple[int, int]) -> Image:
        return self.image_repository.resize(img, size)

    def equalize(self, light: Image, dark: Image, scale: float) -> Tuple[Image, Image]:
        """
        Resize both sources to the light image's scaled size and make sure
        the resampler really handed back conformant rasters.
        """
        size = self.target_size(light.width, light.height, scale)
        logger.info(f"Resizing sources to {size[0]}x{size[1]} (scale={scale})")

        light_resized = self.resize_to(light, size)
        dark_resized = self.resize_to(dark, size)

        if not (light_resized.size == size and light_resized.conforms_to(dark_resized)):
            raise ResizeError(
                f"Resized sources are not conformant: {light_resized.size} vs {dark_resized.size}"
            )
        return light_resized, dark_resized

    @staticmethod
    def check_conformant(first, second, *others) -> None:
        for other in (second, *others):
            if not first.conforms_to(other):
                raise ConformanceError(f"Raster sizes differ: {first.size} vs {other.size}")

    def save(self, img: Union[NRGBAImage, GrayImage], path: Union[str, Path]) -> Path:
        """
        Business-level method to save a raster as PNG.
        """
        return self.image_repository.save_png(img, path)
