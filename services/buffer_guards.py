"""Checks shared by every transform.

Guards run before a transform touches a byte, so a rejected request never
leaves partial output behind.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, TypeVar

from models.errors import AllocationFailure, InvalidParameter, UnsupportedChannelLayout
from models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., PixelBuffer])

MIN_COLOR_CHANNELS = 3


def allocation_guard(fn: F) -> F:
    """Turn a MemoryError raised while building the output into AllocationFailure."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except MemoryError as err:
            logger.error("%s could not allocate its output buffer", fn.__name__)
            raise AllocationFailure(f"{fn.__name__}: out of memory") from err

    return wrapper  # type: ignore[return-value]


def require_color(buffer: PixelBuffer, operation: str) -> None:
    if buffer.channels < MIN_COLOR_CHANNELS:
        raise UnsupportedChannelLayout(
            f"{operation} needs at least {MIN_COLOR_CHANNELS} channels, image has {buffer.channels}"
        )


def require_positive(value: int, name: str) -> None:
    if value < 1:
        raise InvalidParameter(f"{name} must be a positive integer, got {value}")
