"""
Batch Transform Pipeline
Applies one transform to every image of a folder and saves the results.
Images are streamed one at a time, so the folder never sits in memory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple

from dotenv import load_dotenv
from tqdm import tqdm

from models.errors import InvalidParameter, UnsupportedChannelLayout
from models.pixel_buffer import PixelBuffer
from models.transform_request import TransformRequest
from services.image_service import ImageService
from services.transform_service import TransformService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

BATCH_OUTPUT_DIR = os.getenv("BATCH_OUTPUT_DIR", "transformed")
OUTPUT_EXT = os.getenv("OUTPUT_IMG_EXT", ".bmp")


@dataclass
class BatchReport:
    """Outcome of one batch run."""
    processed: List[Path] = field(default_factory=list)
    skipped: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.processed) + len(self.skipped)


def output_path_for(
    source: PixelBuffer,
    request: TransformRequest,
    output_dir: Path,
    ext: str,
    source_root: Path | None = None,
) -> Path:
    """
    <output_dir>/<stem>_<label><ext>. With *source_root* the image's folder
    below the root is mirrored, so equal names in sibling folders stay apart.
    """
    stem = source.path.stem if source.path else "image"
    subdir = Path()
    if source.path is not None and source_root is not None:
        parent = source.path.parent.resolve()
        root = Path(source_root).resolve()
        if parent.is_relative_to(root):
            subdir = parent.relative_to(root)
    return output_dir / subdir / f"{stem}_{request.label}{ext}"


def transform_gallery(
    gallery: Iterable[PixelBuffer],
    request: TransformRequest,
    output_dir: str | Path,
    *,
    transform_service: TransformService | None = None,
    image_service: ImageService | None = None,
    ext: str = OUTPUT_EXT,
    source_root: str | Path | None = None,
) -> BatchReport:
    """
    For every buffer in *gallery*:
        • apply *request*
        • save the result to <output_dir>/[<subdir>/]<stem>_<transform><ext>
    A radius or block size below 1 raises InvalidParameter before the first
    image is touched. Images the transform rejects (too few channels, block
    larger than the image) are recorded as skipped; encode failures abort
    the run.
    """
    transform_service = transform_service or TransformService()
    image_service = image_service or ImageService()
    transform_service.validate(request)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    source_root = Path(source_root) if source_root is not None else None

    report = BatchReport()
    for source in tqdm(gallery, desc=request.label, unit="img", ncols=70):
        source_path = source.path or Path("<memory>")
        try:
            result = transform_service.apply(source, request)
        except (UnsupportedChannelLayout, InvalidParameter) as err:
            logger.warning("Skipping %s: %s", source_path.name, err)
            report.skipped.append((source_path, str(err)))
            continue

        target = output_path_for(source, request, output_dir, ext, source_root)
        target.parent.mkdir(parents=True, exist_ok=True)
        image_service.save(result, target)
        report.processed.append(target)

    logger.info(
        "Batch %s done: %d saved, %d skipped -> %s",
        request.label, len(report.processed), len(report.skipped), output_dir,
    )
    return report


def run_batch(
    folder: str | Path,
    request: TransformRequest,
    *,
    output_dir: str | Path | None = None,
    recursive: bool = False,
    image_service: ImageService | None = None,
) -> BatchReport:
    """
    Stream *folder* through transform_gallery. The output directory is never
    read back as input, so re-running over the same folder is safe.
    """
    image_service = image_service or ImageService()
    folder = Path(folder)
    output_dir = Path(output_dir) if output_dir is not None else folder / BATCH_OUTPUT_DIR

    gallery = image_service.stream_gallery(folder, recursive=recursive, exclude=[output_dir])
    return transform_gallery(
        gallery, request, output_dir, image_service=image_service, source_root=folder,
    )
