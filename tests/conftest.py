from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage

from mirage_tank.models.image import Image


@pytest.fixture(autouse=True)
def _clean_mirage_env(monkeypatch):
    for name in ("MIRAGE_SCALE", "MIRAGE_LIGHT_RATIO", "MIRAGE_DARK_RATIO", "MIRAGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_png(tmp_path):
    """Save a uint8 array (L, RGB or RGBA) as PNG under tmp_path."""
    def _write(name: str, pixels) -> Path:
        path = tmp_path / name
        PILImage.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path, format="PNG")
        return path
    return _write


@pytest.fixture
def random_pair():
    rng = np.random.default_rng(1234)
    light = rng.integers(0, 256, size=(16, 24, 3), dtype=np.uint8)
    dark = rng.integers(0, 256, size=(16, 24, 3), dtype=np.uint8)
    return Image(light), Image(dark)
