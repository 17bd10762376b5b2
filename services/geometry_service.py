import logging

import numpy as np

from models.pixel_buffer import PixelBuffer
from services.buffer_guards import allocation_guard

logger = logging.getLogger(__name__)


class GeometryService:
    """
    Quarter-turn rotations and the 180° flip.
    Each call allocates the full output before returning it; the source is
    only read. Any channel count is accepted.
    """

    @staticmethod
    def _rebuild(buffer: PixelBuffer, pixels: np.ndarray) -> PixelBuffer:
        # np.rot90 returns a view, the copy gives the result its own contiguous bytes
        out = PixelBuffer.from_pixels(pixels.copy(), buffer.path)
        logger.debug("%dx%d -> %dx%d", buffer.width, buffer.height, out.width, out.height)
        return out

    @allocation_guard
    def rotate_right(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Rotate 90° clockwise: source (x, y) lands on (height-1-y, x),
        so the output is height pixels wide and width pixels tall.
        """
        return self._rebuild(buffer, np.rot90(buffer.pixels, k=-1, axes=(0, 1)))

    @allocation_guard
    def rotate_left(self, buffer: PixelBuffer) -> PixelBuffer:
        """Rotate 90° counter-clockwise: source (x, y) lands on (y, width-1-x)."""
        return self._rebuild(buffer, np.rot90(buffer.pixels, k=1, axes=(0, 1)))

    @allocation_guard
    def flip(self, buffer: PixelBuffer) -> PixelBuffer:
        """Rotate 180°: source (x, y) lands on (width-1-x, height-1-y)."""
        return self._rebuild(buffer, np.rot90(buffer.pixels, k=2, axes=(0, 1)))
