"""
Mirage Tank Builder Pipeline
Encodes two pictures into one PNG: the light image shows on a white
background, the dark image shows on a black background.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..models.image import Image, NRGBAImage
from ..models.mirage_settings import MirageSettings
from ..models.errors import MirageError
from ..services.image_service import ImageService
from ..services.tone_service import ToneService

logger = logging.getLogger(__name__)

PREVIEW_LEVELS = {"on_white": 255, "on_black": 0}


def build_mirage(
    light_img: Image,
    dark_img: Image,
    settings: MirageSettings = MirageSettings(),
    *,
    tone_service: ToneService = ToneService(),
) -> NRGBAImage:
    """
    Pure core of the recipe. Both inputs must already be conformant.

    Steps:
        1. desaturate both sources (HSL lightness)
        2. light: lift toward white, then invert
        3. dark: pull toward black
        4. linear dodge of the two -> alpha plane
        5. divide dark by the dodge -> gray plane
        6. compose gray + alpha into NRGBA

    Returns:
        NRGBAImage: the mirage, same size as the inputs.
    """
    ImageService.check_conformant(light_img, dark_img)

    light_gray = tone_service.desaturate(light_img)
    dark_gray = tone_service.desaturate(dark_img)
    logger.debug("Desaturated sources")

    light_biased = tone_service.invert(
        tone_service.adjust_lightness(light_gray, settings.light_ratio)
    )
    dark_biased = tone_service.adjust_lightness(dark_gray, settings.dark_ratio)
    logger.debug(f"Applied lightness bias {settings.light_ratio:+} / {settings.dark_ratio:+}")

    dodge = tone_service.linear_dodge(light_biased, dark_biased)
    divided = tone_service.divide(dodge, dark_biased)
    logger.debug("Blended dodge and divide planes")

    return tone_service.compose(divided, dodge)


def write_previews(
    mirage: NRGBAImage,
    target: Union[str, Path],
    *,
    image_service: ImageService = ImageService(),
    tone_service: ToneService = ToneService(),
) -> List[Path]:
    """
    Save how the mirage looks on white and on black next to *target*,
    as <stem>_on_white.png and <stem>_on_black.png.
    """
    target = Path(target)
    written = []
    for suffix, level in PREVIEW_LEVELS.items():
        preview = tone_service.render_on_background(mirage, level)
        preview_path = target.with_name(f"{target.stem}_{suffix}.png")
        written.append(image_service.save(preview, preview_path))
        logger.info(f"Preview written: {preview_path}")
    return written


def build_mirage_file(
    source_light: Union[str, Path],
    source_dark: Union[str, Path],
    target: Union[str, Path],
    scale: Optional[float] = None,
    *,
    settings: Optional[MirageSettings] = None,
    preview: bool = False,
    image_service: ImageService = ImageService(),
    tone_service: ToneService = ToneService(),
) -> Path:
    """
    Decode both sources, size them from the light image, run the recipe
    and write the PNG to *target*.

    Args:
        source_light: image revealed on a white background
        source_dark: image revealed on a black background
        target: output PNG path
        scale: size factor applied to the light image (overrides settings)
        settings: recipe knobs, defaults to MirageSettings.from_env()
        preview: also write on-white / on-black previews

    Returns:
        Path: the written mirage PNG.

    Raises:
        MirageError: any decode / resize / write / encode failure. Files
        written by this call are removed before the error propagates.
    """
    if settings is None:
        settings = MirageSettings.from_env(scale=scale)
    elif scale is not None:
        settings = MirageSettings(scale=scale,
                                  light_ratio=settings.light_ratio,
                                  dark_ratio=settings.dark_ratio)

    logger.info(f"Start processing {source_light} + {source_dark}")

    light_img = image_service.load(source_light)
    dark_img = image_service.load(source_dark)
    light_img, dark_img = image_service.equalize(light_img, dark_img, settings.scale)

    mirage = build_mirage(light_img, dark_img, settings, tone_service=tone_service)

    written: List[Path] = []
    try:
        written.append(image_service.save(mirage, target))
        if preview:
            written.extend(write_previews(mirage, target,
                                          image_service=image_service,
                                          tone_service=tone_service))
    except MirageError:
        for path in written:
            path.unlink(missing_ok=True)
        raise

    logger.info(f"Finished: {target} ({mirage.width}x{mirage.height})")
    return Path(target)
