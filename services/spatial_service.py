from __future__ import annotations

import logging

import numpy as np

from models.errors import InvalidParameter
from models.pixel_buffer import PixelBuffer
from services.buffer_guards import allocation_guard, require_color, require_positive

logger = logging.getLogger(__name__)


class SpatialService:
    """
    Neighbourhood filters: separable Gaussian blur and block pixelation.
    """

    @staticmethod
    def gaussian_kernel(radius: int) -> np.ndarray:
        """
        1-D kernel of 2*radius+1 float32 taps, sigma = radius/2, divided by
        the left-to-right float32 sum of its taps.
        """
        require_positive(radius, "radius")

        sigma = np.float32(radius) / np.float32(2.0)
        offsets = np.arange(2 * radius + 1, dtype=np.float32) - np.float32(radius)
        kernel = np.exp(-offsets * offsets / (np.float32(2.0) * sigma * sigma)).astype(np.float32)
        # Left-to-right running total, not numpy's pairwise sum
        total = np.cumsum(kernel, dtype=np.float32)[-1]
        return kernel / total

    @staticmethod
    def _convolve_axis(pixels: np.ndarray, kernel: np.ndarray, axis: int) -> np.ndarray:
        """
        One blur pass along *axis* (0 = vertical, 1 = horizontal).

        Taps that fall outside the image are dropped and their weight is not
        redistributed, so border pixels see a reduced-support kernel.
        The float sum is truncated to a byte.
        """
        radius = len(kernel) // 2
        length = pixels.shape[axis]
        source = pixels.astype(np.float32)
        acc = np.zeros(pixels.shape, dtype=np.float32)

        for k in range(-radius, radius + 1):
            lo, hi = max(0, -k), min(length, length - k)
            if lo >= hi:
                continue
            dst = [slice(None)] * pixels.ndim
            src = [slice(None)] * pixels.ndim
            dst[axis] = slice(lo, hi)
            src[axis] = slice(lo + k, hi + k)
            acc[tuple(dst)] += source[tuple(src)] * kernel[k + radius]

        return np.clip(np.trunc(acc), 0, 255).astype(np.uint8)

    @allocation_guard
    def blur(self, buffer: PixelBuffer, radius: int) -> PixelBuffer:
        """Horizontal pass, then a vertical pass over its output."""
        require_positive(radius, "radius")
        require_color(buffer, "blur")

        kernel = self.gaussian_kernel(radius)
        horizontal = self._convolve_axis(buffer.pixels, kernel, axis=1)
        blurred = self._convolve_axis(horizontal, kernel, axis=0)

        logger.debug("Blur r=%d on %dx%d", radius, buffer.width, buffer.height)
        return PixelBuffer.from_pixels(blurred, buffer.path)

    @allocation_guard
    def pixelate(self, buffer: PixelBuffer, pixel_size: int) -> PixelBuffer:
        """
        Average non-overlapping pixel_size x pixel_size blocks.

        The image is cropped (not padded) to a multiple of pixel_size, so a
        trailing partial row/column strip is dropped. Every channel is averaged
        with truncating integer division.
        """
        require_positive(pixel_size, "pixel_size")

        p = pixel_size
        eff_w = (buffer.width // p) * p
        eff_h = (buffer.height // p) * p
        if eff_w == 0 or eff_h == 0:
            raise InvalidParameter(
                f"pixel_size {p} exceeds the {buffer.width}x{buffer.height} image, nothing would remain"
            )

        cropped = buffer.pixels[:eff_h, :eff_w].astype(np.int64)
        blocks = cropped.reshape(eff_h // p, p, eff_w // p, p, buffer.channels)
        means = blocks.sum(axis=(1, 3)) // (p * p)

        painted = np.repeat(np.repeat(means, p, axis=0), p, axis=1).astype(np.uint8)
        logger.debug("Pixelate %d: %dx%d -> %dx%d", p, buffer.width, buffer.height, eff_w, eff_h)
        return PixelBuffer.from_pixels(painted, buffer.path)
