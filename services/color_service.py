from __future__ import annotations

import logging

import numpy as np

from models.pixel_buffer import PixelBuffer
from services.buffer_guards import allocation_guard, require_color

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

SEPIA_MATRIX = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)

_MIDPOINT = 128

# Percentages past these bounds saturate to the same output
_BRIGHTNESS_MIN, _BRIGHTNESS_MAX = -100, 25500
_CONTRAST_MIN, _CONTRAST_MAX = -25700, 25500


class ColorService:
    """
    Point filters: every output byte depends only on the same byte
    (brightness, contrast) or on bytes of the same pixel (grayscale,
    vintage, saturation). Inputs are never mutated, a new buffer is returned.
    """

    @staticmethod
    def _with_pixels(buffer: PixelBuffer, pixels: np.ndarray) -> PixelBuffer:
        return PixelBuffer.from_pixels(pixels, buffer.path)

    # ─── Byte-wise filters (alpha included) ───────────────────────────
    @allocation_guard
    def adjust_brightness(self, buffer: PixelBuffer, percentage: int) -> PixelBuffer:
        """
        v + v * percentage / 100 in integer arithmetic (division truncates
        toward zero), clamped to [0, 255]. Alpha bytes are scaled too.
        """
        # Below -100% every byte reaches 0, above +25500% every non-zero byte reaches 255
        percentage = min(max(int(percentage), _BRIGHTNESS_MIN), _BRIGHTNESS_MAX)
        values = buffer.data.astype(np.int64)
        scaled = values * percentage
        delta = np.sign(scaled) * (np.abs(scaled) // 100)
        data = np.clip(values + delta, 0, 255).astype(np.uint8)
        return PixelBuffer(buffer.width, buffer.height, buffer.channels, data, buffer.path)

    @allocation_guard
    def adjust_contrast(self, buffer: PixelBuffer, percentage: int) -> PixelBuffer:
        """
        Stretch bytes away from (or toward) 128 by 1 + percentage/100.
        Single precision, truncated toward zero, clamped to [0, 255].
        Alpha bytes are stretched like color bytes.
        """
        # A factor of +/-256 already pushes every off-midpoint byte to 0 or 255
        percentage = min(max(int(percentage), _CONTRAST_MIN), _CONTRAST_MAX)
        factor = np.float32(1.0) + np.float32(percentage) / np.float32(100.0)
        offset = (buffer.data.astype(np.int32) - _MIDPOINT).astype(np.float32)
        adjusted = np.trunc(np.float32(_MIDPOINT) + offset * factor)
        data = np.clip(adjusted, 0, 255).astype(np.uint8)
        return PixelBuffer(buffer.width, buffer.height, buffer.channels, data, buffer.path)

    # ─── RGB filters (need >= 3 channels, alpha untouched) ────────────
    @allocation_guard
    def make_black_and_white(self, buffer: PixelBuffer) -> PixelBuffer:
        require_color(buffer, "grayscale")

        pixels = buffer.pixels.copy()
        rgb = pixels[..., :3].astype(np.float64)
        wr, wg, wb = LUMA_WEIGHTS
        luminance = wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]
        gray = np.clip(np.floor(luminance + 0.5), 0, 255).astype(np.uint8)

        pixels[..., 0] = gray
        pixels[..., 1] = gray
        pixels[..., 2] = gray
        return self._with_pixels(buffer, pixels)

    @allocation_guard
    def make_vintage(self, buffer: PixelBuffer) -> PixelBuffer:
        require_color(buffer, "vintage")

        pixels = buffer.pixels.copy()
        rgb = pixels[..., :3].astype(np.float64)
        r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

        for channel, (cr, cg, cb) in enumerate(SEPIA_MATRIX):
            mixed = np.trunc(cr * r + cg * g + cb * b)
            pixels[..., channel] = np.minimum(mixed, 255).astype(np.uint8)

        return self._with_pixels(buffer, pixels)

    @allocation_guard
    def adjust_saturation(self, buffer: PixelBuffer, percentage: int) -> PixelBuffer:
        """
        Scale HSL saturation by 1 + percentage/100 and convert back to RGB.

        Achromatic pixels (R == G == B) have no hue, so they stay gray no
        matter the factor. The round trip truncates, which can shave one
        level off a channel.
        """
        require_color(buffer, "saturation")

        factor = np.float32(1.0) + np.float32(percentage) / np.float32(100.0)
        pixels = buffer.pixels.copy()
        rgb = pixels[..., :3].astype(np.float32) / np.float32(255.0)

        hue, sat, light = _rgb_to_hsl(rgb[..., 0], rgb[..., 1], rgb[..., 2])
        sat = np.clip(sat * factor, np.float32(0.0), np.float32(1.0))
        r, g, b = _hsl_to_rgb(hue, sat, light)

        for channel, value in enumerate((r, g, b)):
            level = np.trunc(value * np.float32(255.0))
            pixels[..., channel] = np.clip(level, 0, 255).astype(np.uint8)

        logger.debug("Saturation x%.2f on %dx%d", factor, buffer.width, buffer.height)
        return self._with_pixels(buffer, pixels)


def _rgb_to_hsl(r: np.ndarray, g: np.ndarray, b: np.ndarray):
    """Vectorised RGB -> HSL, all planes float32 in [0, 1]."""
    cmax = np.maximum(r, np.maximum(g, b))
    cmin = np.minimum(r, np.minimum(g, b))
    delta = cmax - cmin
    light = (cmax + cmin) / np.float32(2.0)

    chromatic = delta != 0
    zero = np.float32(0.0)
    safe_delta = np.where(chromatic, delta, np.float32(1.0))

    with np.errstate(divide="ignore", invalid="ignore"):
        sat = np.where(
            light < np.float32(0.5),
            delta / (cmax + cmin),
            delta / (np.float32(2.0) - cmax - cmin),
        )
    sat = np.where(chromatic, sat, zero)

    # Red wins ties, then green, matching the usual six-sector formula
    hue = np.where(
        cmax == r,
        (g - b) / safe_delta + np.where(g < b, np.float32(6.0), zero),
        np.where(
            cmax == g,
            (b - r) / safe_delta + np.float32(2.0),
            (r - g) / safe_delta + np.float32(4.0),
        ),
    )
    hue = np.where(chromatic, hue / np.float32(6.0), zero)
    return hue.astype(np.float32), sat.astype(np.float32), light.astype(np.float32)


def _hsl_to_rgb(hue: np.ndarray, sat: np.ndarray, light: np.ndarray):
    """Chroma / X / m reconstruction over six hue sectors of width 1/6."""
    one = np.float32(1.0)
    chroma = (one - np.abs(np.float32(2.0) * light - one)) * sat
    x = chroma * (one - np.abs(np.fmod(hue * np.float32(6.0), np.float32(2.0)) - one))
    m = light - chroma / np.float32(2.0)
    zero = np.zeros_like(chroma)

    bounds = [hue < np.float32(k) / np.float32(6.0) for k in range(1, 6)]
    r = np.select(bounds, [chroma, x, zero, zero, x], default=chroma)
    g = np.select(bounds, [x, chroma, chroma, x, zero], default=zero)
    b = np.select(bounds, [zero, zero, x, chroma, chroma], default=x)
    return r + m, g + m, b + m
