import numpy as np
import pytest

from models.errors import UnsupportedChannelLayout
from models.pixel_buffer import PixelBuffer
from services.color_service import ColorService


@pytest.fixture
def color():
    return ColorService()


def _bytes(*values, channels=1):
    data = np.array(values, dtype=np.uint8)
    return PixelBuffer(len(values) // channels, 1, channels, data)


# ─── Brightness ──────────────────────────────────────────────────────
@pytest.mark.parametrize("value,percentage,expected", [
    (200, 10, 220),
    (250, 10, 255),     # clamped high
    (7, -50, 4),        # -3.5 truncates toward zero, not down to -4
    (100, -200, 0),     # clamped low
    (0, 500, 0),
    (128, 0, 128),
])
def test_brightness_values(color, value, percentage, expected):
    out = color.adjust_brightness(_bytes(value), percentage)
    assert out.data.tolist() == [expected]


@pytest.mark.parametrize("percentage", [-1000, -37, 0, 15, 99, 1000])
def test_brightness_matches_integer_formula(color, make_buffer, percentage):
    buf = make_buffer(8, 8, 4, seed=percentage & 0xFF)
    out = color.adjust_brightness(buf, percentage)

    expected = [min(255, max(0, v + int(v * percentage / 100))) for v in buf.data.tolist()]
    assert out.data.tolist() == expected


# ─── Contrast ────────────────────────────────────────────────────────
def test_zero_contrast_is_identity(color, make_buffer):
    buf = make_buffer(9, 5, 4)
    out = color.adjust_contrast(buf, 0)
    assert np.array_equal(out.data, buf.data)


@pytest.mark.parametrize("value,percentage,expected", [
    (0, 100, 0),        # 128 - 256 clamps to 0
    (200, 100, 255),    # 272 clamps to 255
    (130, 100, 132),
    (127, 100, 126),
    (101, 50, 87),      # 87.5 truncates
    (3, -100, 128),     # factor 0 collapses to the midpoint
])
def test_contrast_values(color, value, percentage, expected):
    out = color.adjust_contrast(_bytes(value), percentage)
    assert out.data.tolist() == [expected]


def test_contrast_touches_alpha_too(color):
    buf = _bytes(10, 20, 30, 255, channels=4)
    out = color.adjust_contrast(buf, -100)
    assert out.data.tolist() == [128, 128, 128, 128]


@pytest.mark.parametrize("percentage", [-10**20, -10**6, -101, 25501, 10**6, 4 * 10**16, 10**20])
def test_brightness_extreme_percentages_follow_formula(color, make_buffer, percentage):
    buf = make_buffer(16, 16, 3, seed=3)
    out = color.adjust_brightness(buf, percentage)

    def reference(v):
        scaled = v * percentage
        delta = abs(scaled) // 100
        return min(255, max(0, v + delta if scaled >= 0 else v - delta))

    assert out.data.tolist() == [reference(v) for v in buf.data.tolist()]


@pytest.mark.parametrize("percentage", [25500, 10**6, 10**40])
def test_contrast_huge_gain_splits_at_midpoint(color, percentage):
    out = color.adjust_contrast(_bytes(0, 127, 128, 129, 255), percentage)
    assert out.data.tolist() == [0, 0, 128, 255, 255]


@pytest.mark.parametrize("percentage", [-25700, -10**6, -10**40])
def test_contrast_huge_negative_gain_inverts_around_midpoint(color, percentage):
    out = color.adjust_contrast(_bytes(0, 127, 128, 129, 255), percentage)
    assert out.data.tolist() == [255, 255, 128, 0, 0]


# ─── Grayscale ───────────────────────────────────────────────────────
@pytest.mark.parametrize("rgb,gray", [
    ((255, 0, 0), 76),
    ((0, 255, 0), 150),   # 149.685 rounds up
    ((0, 0, 255), 29),
    ((255, 255, 255), 255),
    ((0, 0, 0), 0),
])
def test_grayscale_luminance(color, rgb, gray):
    out = color.make_black_and_white(_bytes(*rgb, channels=3))
    assert out.data.tolist() == [gray, gray, gray]


def test_grayscale_keeps_alpha(color):
    out = color.make_black_and_white(_bytes(255, 0, 0, 42, channels=4))
    assert out.data.tolist() == [76, 76, 76, 42]


@pytest.mark.parametrize("channels", [1, 2])
def test_grayscale_needs_rgb(color, make_buffer, channels):
    buf = make_buffer(3, 3, channels)
    before = buf.data.copy()
    with pytest.raises(UnsupportedChannelLayout):
        color.make_black_and_white(buf)
    assert np.array_equal(buf.data, before)


# ─── Vintage ─────────────────────────────────────────────────────────
def test_vintage_matrix(color):
    out = color.make_vintage(_bytes(100, 150, 200, channels=3))
    assert out.data.tolist() == [192, 171, 133]


def test_vintage_clamps_white(color):
    out = color.make_vintage(_bytes(255, 255, 255, 9, channels=4))
    assert out.data.tolist() == [255, 255, 238, 9]


def test_vintage_matches_matrix_formula(color, make_buffer):
    buf = make_buffer(12, 9, 3, seed=11)
    out = color.make_vintage(buf)

    values = buf.data.tolist()
    expected = []
    for i in range(0, len(values), 3):
        r, g, b = values[i:i + 3]
        expected += [
            min(255, int(0.393 * r + 0.769 * g + 0.189 * b)),
            min(255, int(0.349 * r + 0.686 * g + 0.168 * b)),
            min(255, int(0.272 * r + 0.534 * g + 0.131 * b)),
        ]
    assert out.data.tolist() == expected


def test_vintage_needs_rgb(color, make_buffer):
    with pytest.raises(UnsupportedChannelLayout):
        color.make_vintage(make_buffer(2, 2, 1))


def test_color_filters_do_not_mutate_input(color, make_buffer):
    buf = make_buffer(6, 4, 4)
    before = buf.data.copy()
    color.adjust_brightness(buf, 30)
    color.adjust_contrast(buf, 30)
    color.make_black_and_white(buf)
    color.make_vintage(buf)
    color.adjust_saturation(buf, 30)
    assert np.array_equal(buf.data, before)


# ─── Saturation ──────────────────────────────────────────────────────
@pytest.mark.parametrize("percentage", [-100, -50, 0, 50, 300])
def test_gray_pixels_stay_gray(color, percentage):
    levels = np.arange(0, 256, 5, dtype=np.uint8)
    pixels = np.repeat(levels[None, :, None], 3, axis=2)
    out = color.adjust_saturation(PixelBuffer.from_pixels(pixels), percentage)

    rgb = out.pixels
    assert np.array_equal(rgb[..., 0], rgb[..., 1])
    assert np.array_equal(rgb[..., 1], rgb[..., 2])


def test_full_desaturation_of_red(color):
    out = color.adjust_saturation(_bytes(255, 0, 0, channels=3), -100)
    assert out.data.tolist() == [127, 127, 127]


@pytest.mark.parametrize("percentage", [0, 50])
def test_saturated_red_is_stable(color, percentage):
    out = color.adjust_saturation(_bytes(255, 0, 0, channels=3), percentage)
    assert out.data.tolist() == [255, 0, 0]


def test_zero_saturation_round_trip_within_one_level(color, make_buffer):
    buf = make_buffer(32, 32, 3, seed=11)
    out = color.adjust_saturation(buf, 0)
    diff = buf.data.astype(int) - out.data.astype(int)
    assert diff.min() >= 0
    assert diff.max() <= 1


def test_desaturation_moves_channels_together(color, make_buffer):
    buf = make_buffer(16, 16, 3, seed=5)
    out = color.adjust_saturation(buf, -60)
    spread_before = np.ptp(buf.pixels.astype(int), axis=2)
    spread_after = np.ptp(out.pixels.astype(int), axis=2)
    assert np.all(spread_after <= spread_before + 1)


def test_saturation_keeps_alpha(color):
    out = color.adjust_saturation(_bytes(200, 40, 90, 17, channels=4), 40)
    assert out.data[3] == 17


def test_saturation_needs_rgb(color, make_buffer):
    with pytest.raises(UnsupportedChannelLayout):
        color.adjust_saturation(make_buffer(2, 2, 2), 10)
