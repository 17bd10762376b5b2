from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage

from models.pixel_buffer import PixelBuffer


@pytest.fixture
def make_buffer():
    """Factory for random buffers: make_buffer(width, height, channels, seed=0)."""
    def _make(width: int, height: int, channels: int = 3, seed: int = 0) -> PixelBuffer:
        rng = np.random.default_rng(seed)
        data = rng.integers(0, 256, size=width * height * channels, dtype=np.uint8)
        return PixelBuffer(width, height, channels, data)

    return _make


@pytest.fixture
def solid_buffer():
    """Factory for single-color buffers: solid_buffer(width, height, color)."""
    def _make(width: int, height: int, color) -> PixelBuffer:
        color = np.asarray(color, dtype=np.uint8)
        pixels = np.broadcast_to(color, (height, width, color.size)).copy()
        return PixelBuffer.from_pixels(pixels)

    return _make


@pytest.fixture
def write_png():
    """Write an (H, W, C) or (H, W) uint8 array to disk with Pillow."""
    def _write(path: Path, pixels: np.ndarray) -> Path:
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            pixels = pixels[:, :, 0]
        PILImage.fromarray(np.ascontiguousarray(pixels)).save(path)
        return path

    return _write


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for var in ("DEFAULT_OUTPUT_NAME", "VALID_IMAGE_EXTENSIONS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("GGPICTURE_CONFIG_FILE", str(tmp_path / "config.txt"))
