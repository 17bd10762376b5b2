import logging
from typing import Callable, Dict

from models.pixel_buffer import PixelBuffer
from models.transform_request import TransformKind, TransformRequest
from services.buffer_guards import require_positive
from services.color_service import ColorService
from services.geometry_service import GeometryService
from services.spatial_service import SpatialService

logger = logging.getLogger(__name__)


class TransformService:
    """
    Single entry point of the transform engine.
    Dispatches a TransformRequest to the geometry, color or spatial service.
    Every transform is (buffer, params) -> new buffer, the input is left intact.
    """

    def __init__(self):
        self.geometry = GeometryService()
        self.color = ColorService()
        self.spatial = SpatialService()

        self._handlers: Dict[TransformKind, Callable[[PixelBuffer, int], PixelBuffer]] = {
            TransformKind.ROTATE_RIGHT: lambda buf, _: self.geometry.rotate_right(buf),
            TransformKind.ROTATE_LEFT: lambda buf, _: self.geometry.rotate_left(buf),
            TransformKind.FLIP: lambda buf, _: self.geometry.flip(buf),
            TransformKind.BRIGHTNESS: self.color.adjust_brightness,
            TransformKind.CONTRAST: self.color.adjust_contrast,
            TransformKind.GRAYSCALE: lambda buf, _: self.color.make_black_and_white(buf),
            TransformKind.VINTAGE: lambda buf, _: self.color.make_vintage(buf),
            TransformKind.SATURATION: self.color.adjust_saturation,
            TransformKind.BLUR: self.spatial.blur,
            TransformKind.PIXELATE: self.spatial.pixelate,
        }

    def validate(self, request: TransformRequest) -> None:
        """Reject parameters no image could satisfy, before any file is read."""
        if request.kind is TransformKind.BLUR:
            require_positive(request.amount, "radius")
        elif request.kind is TransformKind.PIXELATE:
            require_positive(request.amount, "pixel_size")

    def apply(self, buffer: PixelBuffer, request: TransformRequest) -> PixelBuffer:
        handler = self._handlers[request.kind]
        result = handler(buffer, request.amount)
        logger.debug(
            "%s: %dx%dx%d -> %dx%dx%d",
            request.label, *buffer.shape, *result.shape,
        )
        return result

    # ─── Named shortcuts ─────────────────────────────────────────────
    def rotate_right(self, buffer: PixelBuffer) -> PixelBuffer:
        return self.geometry.rotate_right(buffer)

    def rotate_left(self, buffer: PixelBuffer) -> PixelBuffer:
        return self.geometry.rotate_left(buffer)

    def flip(self, buffer: PixelBuffer) -> PixelBuffer:
        return self.geometry.flip(buffer)

    def adjust_brightness(self, buffer: PixelBuffer, percentage: int) -> PixelBuffer:
        return self.color.adjust_brightness(buffer, percentage)

    def adjust_contrast(self, buffer: PixelBuffer, percentage: int) -> PixelBuffer:
        return self.color.adjust_contrast(buffer, percentage)

    def make_black_and_white(self, buffer: PixelBuffer) -> PixelBuffer:
        return self.color.make_black_and_white(buffer)

    def make_vintage(self, buffer: PixelBuffer) -> PixelBuffer:
        return self.color.make_vintage(buffer)

    def adjust_saturation(self, buffer: PixelBuffer, percentage: int) -> PixelBuffer:
        return self.color.adjust_saturation(buffer, percentage)

    def blur(self, buffer: PixelBuffer, radius: int) -> PixelBuffer:
        return self.spatial.blur(buffer, radius)

    def pixelate(self, buffer: PixelBuffer, pixel_size: int) -> PixelBuffer:
        return self.spatial.pixelate(buffer, pixel_size)
