from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np

from models.errors import InvalidParameter


@dataclass
class PixelBuffer:
    """
    Decoded raster image: flat uint8 bytes plus width/height/channel metadata.
    Row-major, channel-interleaved: channel c of pixel (x, y) lives at
    (y * width + x) * channels + c.
    """
    width: int
    height: int
    channels: int  # 1=gray, 2=gray+alpha, 3=RGB, 4=RGBA
    data: np.ndarray  # Shape (width * height * channels,), dtype uint8.
    path: Path | None = None  # Bookkeeping only, the engine never reads it.

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidParameter(f"Buffer dimensions must be positive, got {self.width}x{self.height}")
        if not 1 <= self.channels <= 4:
            raise InvalidParameter(f"Channel count must be 1-4, got {self.channels}")

        data = np.asarray(self.data)
        if data.dtype != np.uint8:
            raise InvalidParameter(f"Buffer data must be uint8, got {data.dtype}")
        data = data.reshape(-1)

        expected = self.width * self.height * self.channels
        if data.size != expected:
            raise InvalidParameter(
                f"Buffer holds {data.size} bytes, {self.width}x{self.height}x{self.channels} needs {expected}"
            )
        self.data = data

    @classmethod
    def from_pixels(cls, pixels: np.ndarray, path: str | Path | None = None) -> PixelBuffer:
        """Wrap an (H, W) or (H, W, C) uint8 array."""
        if pixels.ndim == 2:
            pixels = pixels[:, :, None]
        if pixels.ndim != 3:
            raise InvalidParameter(f"Expected an (H, W, C) array, got shape {pixels.shape}")

        height, width, channels = pixels.shape
        return cls(
            width=width,
            height=height,
            channels=channels,
            data=np.ascontiguousarray(pixels).reshape(-1),
            path=Path(path) if path is not None else None,
        )

    @property
    def pixels(self) -> np.ndarray:
        """(H, W, C) view over the same bytes."""
        return self.data.reshape(self.height, self.width, self.channels)

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.width, self.height, self.channels

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.channels, self.data.copy(), self.path)
