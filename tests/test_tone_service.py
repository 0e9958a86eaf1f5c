import numpy as np
import pytest

from mirage_tank.models.errors import ConfigurationError, ConformanceError
from mirage_tank.models.image import GrayImage, NRGBAImage
from mirage_tank.services.tone_service import (
    ToneService,
    clamp8,
    saturating_add,
    truncate_to_8bit,
    widen_to_16bit,
)
from tests.helpers import gray, rgb

tone = ToneService()


@pytest.fixture
def gray_ramp():
    return GrayImage(np.arange(256, dtype=np.uint8).reshape(16, 16))


# ─── numeric helpers ──────────────────────────────────────────────
@pytest.mark.parametrize("x, expected", [(-5, 0), (0, 0), (128, 128), (255, 255), (300, 255)])
def test_clamp8_scalar(x, expected):
    assert clamp8(x) == expected


def test_clamp8_array_returns_uint8():
    out = clamp8(np.array([-1, 10, 999]))
    assert out.dtype == np.uint8
    assert out.tolist() == [0, 10, 255]


def test_saturating_add_does_not_wrap():
    assert saturating_add(200, 100) == 255
    a = np.array([200, 1], dtype=np.uint8)
    b = np.array([100, 2], dtype=np.uint8)
    assert saturating_add(a, b).tolist() == [255, 3]


def test_truncate_keeps_high_byte_only():
    assert truncate_to_8bit(0x12FF) == 0x12
    assert truncate_to_8bit(np.array([0xFFFF, 0x00FF, 0x8000])).tolist() == [255, 0, 128]


def test_widen_then_truncate_is_identity():
    values = np.arange(256, dtype=np.uint8)
    assert np.array_equal(truncate_to_8bit(widen_to_16bit(values)), values)


# ─── desaturate ───────────────────────────────────────────────────
def test_desaturate_uses_hsl_lightness():
    img = rgb([[[255, 0, 0], [10, 200, 30], [7, 7, 8]]])
    out = tone.desaturate(img)
    assert out.pixels.tolist() == [[127, 105, 7]]


def test_desaturate_no_overflow_on_white():
    assert tone.desaturate(rgb([255, 255, 255])).pixels.tolist() == [[255]]


# ─── lightness ────────────────────────────────────────────────────
def test_adjust_lightness_positive_lifts_toward_white():
    out = tone.adjust_lightness(gray([[0, 128, 255]]), 0.5)
    assert out.pixels.tolist() == [[127, 191, 255]]


def test_adjust_lightness_negative_scales_toward_black():
    out = tone.adjust_lightness(gray([[0, 128, 255]]), -0.5)
    assert out.pixels.tolist() == [[0, 64, 127]]


def test_adjust_lightness_zero_is_identity(gray_ramp):
    assert np.array_equal(tone.adjust_lightness(gray_ramp, 0.0).pixels, gray_ramp.pixels)


@pytest.mark.parametrize("ratio", [-1.0, 1.0])
def test_adjust_lightness_extremes(gray_ramp, ratio):
    out = tone.adjust_lightness(gray_ramp, ratio)
    assert set(np.unique(out.pixels).tolist()) == {0 if ratio < 0 else 255}


def test_adjust_lightness_rejects_out_of_range_ratio(gray_ramp):
    with pytest.raises(ConfigurationError):
        tone.adjust_lightness(gray_ramp, 1.5)


def test_adjust_lightness_does_not_mutate_input(gray_ramp):
    before = gray_ramp.pixels.copy()
    tone.adjust_lightness(gray_ramp, 0.3)
    assert np.array_equal(gray_ramp.pixels, before)


# ─── invert ───────────────────────────────────────────────────────
def test_invert(gray_ramp):
    out = tone.invert(gray_ramp)
    assert out.pixels[0, 0] == 255 and out.pixels[-1, -1] == 0


def test_invert_twice_is_identity(gray_ramp):
    assert np.array_equal(tone.invert(tone.invert(gray_ramp)).pixels, gray_ramp.pixels)


# ─── linear dodge ─────────────────────────────────────────────────
def test_linear_dodge_saturates():
    out = tone.linear_dodge(gray([[100, 200]]), gray([[100, 100]]))
    assert out.pixels.tolist() == [[200, 255]]


def test_linear_dodge_commutes(gray_ramp):
    flipped = GrayImage(gray_ramp.pixels[::-1].copy())
    assert np.array_equal(
        tone.linear_dodge(gray_ramp, flipped).pixels,
        tone.linear_dodge(flipped, gray_ramp).pixels,
    )


def test_linear_dodge_constants(gray_ramp):
    zeros = GrayImage(np.zeros_like(gray_ramp.pixels))
    whites = GrayImage(np.full_like(gray_ramp.pixels, 255))
    assert np.array_equal(tone.linear_dodge(gray_ramp, zeros).pixels, gray_ramp.pixels)
    assert np.all(tone.linear_dodge(gray_ramp, whites).pixels == 255)


def test_linear_dodge_rejects_non_conformant():
    with pytest.raises(ConformanceError):
        tone.linear_dodge(gray([[1, 2]]), gray([[1], [2]]))


# ─── divide ───────────────────────────────────────────────────────
def test_divide_zero_divisor_saturates(gray_ramp):
    zeros = GrayImage(np.zeros_like(gray_ramp.pixels))
    assert np.all(tone.divide(zeros, gray_ramp).pixels == 255)


def test_divide_by_white_is_identity(gray_ramp):
    whites = GrayImage(np.full_like(gray_ramp.pixels, 255))
    assert np.array_equal(tone.divide(whites, gray_ramp).pixels, gray_ramp.pixels)


def test_divide_truncates_and_clamps():
    out = tone.divide(gray([[128, 10, 3]]), gray([[64, 200, 1]]))
    # 64*255/128 = 127.5 -> 127, 200*255/10 -> clamp, 255/3 = 85
    assert out.pixels.tolist() == [[127, 255, 85]]


def test_divide_is_not_commutative():
    x, y = gray([[128]]), gray([[64]])
    assert tone.divide(x, y).pixels.tolist() != tone.divide(y, x).pixels.tolist()


# ─── compose / preview ────────────────────────────────────────────
def test_compose_layout():
    out = tone.compose(gray([[10, 20]]), gray([[30, 40]]))
    assert isinstance(out, NRGBAImage)
    assert out.pixels.tolist() == [[[10, 10, 10, 30], [20, 20, 20, 40]]]


def test_compose_rejects_non_conformant():
    with pytest.raises(ConformanceError):
        tone.compose(gray([[1, 2]]), gray([[1]]))


@pytest.mark.parametrize("level", [0, 77, 255])
def test_opaque_compose_hides_background(gray_ramp, level):
    opaque = GrayImage(np.full_like(gray_ramp.pixels, 255))
    shown = tone.render_on_background(tone.compose(gray_ramp, opaque), level)
    assert np.array_equal(shown.pixels, gray_ramp.pixels)


def test_transparent_compose_shows_background(gray_ramp):
    clear = GrayImage(np.zeros_like(gray_ramp.pixels))
    shown = tone.render_on_background(tone.compose(gray_ramp, clear), 200)
    assert np.all(shown.pixels == 200)


def test_render_rejects_bad_level(gray_ramp):
    out = tone.compose(gray_ramp, gray_ramp)
    with pytest.raises(ConfigurationError):
        tone.render_on_background(out, 256)


def test_every_stage_keeps_size_and_range(random_pair):
    light, dark = random_pair
    planes = [tone.desaturate(light), tone.desaturate(dark)]
    planes.append(tone.adjust_lightness(planes[0], 0.5))
    planes.append(tone.invert(planes[2]))
    planes.append(tone.adjust_lightness(planes[1], -0.5))
    planes.append(tone.linear_dodge(planes[3], planes[4]))
    planes.append(tone.divide(planes[5], planes[4]))
    for plane in planes:
        assert plane.size == light.size
        assert plane.pixels.dtype == np.uint8
    assert tone.compose(planes[6], planes[5]).size == light.size
