from pathlib import Path
from typing import Union, Iterable, Iterator
import logging
import os

import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

from models.errors import DecodeFailure, EncodeFailure
from models.pixel_buffer import PixelBuffer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTS = ".bmp,.png,.jpg,.jpeg,.tga,.tif,.tiff"


class ImageRepository:
    """
    Decodes image files into PixelBuffers and encodes them back.
    OpenCV reads (native channel count kept), Pillow writes.
    """
    def __init__(self):
        raw = os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_EXTS)
        self.VALID_EXTS = {ext.strip().lower() for ext in raw.split(",") if ext.strip()}

    @staticmethod
    def load(path: Union[str, Path]) -> PixelBuffer:
        path = Path(path)
        if not path.is_file():
            raise DecodeFailure(f"Image not found: {path}")

        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise DecodeFailure(f"Image unreadable: {path}")
        if arr.dtype != np.uint8:
            raise DecodeFailure(f"Only 8-bit images are supported, {path} is {arr.dtype}")

        # OpenCV hands out BGR(A); the engine works in RGB(A)
        if arr.ndim == 3 and arr.shape[2] == 3:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
        elif arr.ndim == 3 and arr.shape[2] == 4:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)

        buffer = PixelBuffer.from_pixels(arr, path)
        logger.debug("Decoded %s (%dx%dx%d)", path.name, *buffer.shape)
        return buffer

    @staticmethod
    def save(buffer: PixelBuffer, path: Union[str, Path, None] = None) -> Path:
        target = Path(path) if path is not None else buffer.path
        if target is None:
            raise EncodeFailure("No destination path for the image")

        pixels = buffer.pixels
        if buffer.channels == 1:
            pixels = pixels[:, :, 0]

        try:
            PILImage.fromarray(np.ascontiguousarray(pixels)).save(target)
        except (OSError, ValueError, KeyError) as err:
            raise EncodeFailure(f"Could not save image to {target}: {err}") from err

        logger.debug("Encoded %s (%dx%dx%d)", target, *buffer.shape)
        return target

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
        exclude: Iterable[Union[str, Path]] = (),
    ) -> Iterator[PixelBuffer]:
        """
        Yield PixelBuffers one at a time.  Nothing accumulates in memory.
        Files that fail to decode are logged and skipped, files under any
        *exclude* directory are never opened.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"
        excluded = [Path(ex).resolve() for ex in exclude]

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed or not p.is_file():
                continue
            if any(p.resolve().is_relative_to(ex) for ex in excluded):
                continue
            try:
                yield self.load(p)
            except DecodeFailure as err:
                logger.warning("Skipping %s: %s", p.name, err)
