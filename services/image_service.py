from pathlib import Path
from typing import Iterable, Union, Iterator
from models.pixel_buffer import PixelBuffer
from repositories.image_repository import ImageRepository


class ImageService:
    """I/O helpers.  No pixel math here, that lives in TransformService."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def load(self, path: str | Path) -> PixelBuffer:
        """Decode a single image from disk into a PixelBuffer."""
        return self.image_repository.load(path)

    def save(self, buffer: PixelBuffer, path: str | Path | None = None) -> Path:
        """Encode *buffer* to *path* (or to its own path when omitted)."""
        return self.image_repository.save(buffer, path)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
        exclude: Iterable[Union[str, Path]] = (),
    ) -> Iterator[PixelBuffer]:
        """
        Yield images lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder,
                                              recursive=recursive,
                                              exts=exts,
                                              exclude=exclude)
