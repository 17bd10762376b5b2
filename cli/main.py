#!/usr/bin/env python3
"""
ggpicture - command line image editor.
Each command decodes one image, applies one transform and writes the result
to the output file configured for the working directory.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from models.errors import ConfigurationError, TransformError
from models.transform_request import TransformKind, TransformRequest
from pipeline.batch_transform import run_batch
from services.image_service import ImageService
from services.transform_service import TransformService
from services.workspace_service import WorkspaceService

# Load environment variables first
load_dotenv()

logger = logging.getLogger("ggpicture")

USAGE_ERROR = 1

ROTATIONS = {
    "right": TransformKind.ROTATE_RIGHT,
    "left": TransformKind.ROTATE_LEFT,
    "flip": TransformKind.FLIP,
}


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ggpicture",
        description="Image Editor - Command Line Tool",
        epilog="example: ggpicture set-dir tests/ && ggpicture blur 5 input.bmp",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("set-dir", help="Set the working directory for input/output files.")
    p.add_argument("directory")

    p = sub.add_parser("set-output", help="Set the output file name (relative to the working directory).")
    p.add_argument("file_name")

    p = sub.add_parser("rotate", help="Rotate the image right, left, or flip it.")
    p.add_argument("direction", choices=sorted(ROTATIONS))
    p.add_argument("file")

    p = sub.add_parser("bw", help="Convert the image to black and white.")
    p.set_defaults(kind=TransformKind.GRAYSCALE)
    p.add_argument("file")

    p = sub.add_parser("vintage", help="Apply a vintage filter to the image.")
    p.set_defaults(kind=TransformKind.VINTAGE)
    p.add_argument("file")

    for name, kind, metavar, text in (
        ("brightness", TransformKind.BRIGHTNESS, "PERCENT", "Adjust image brightness by the given percentage."),
        ("contrast", TransformKind.CONTRAST, "PERCENT", "Adjust image contrast by the given percentage."),
        ("saturation", TransformKind.SATURATION, "PERCENT", "Adjust image saturation by the given percentage."),
        ("blur", TransformKind.BLUR, "RADIUS", "Apply a blur effect with the given radius."),
        ("pixelate", TransformKind.PIXELATE, "SIZE", "Pixelate the image with the given pixel size."),
    ):
        p = sub.add_parser(name, help=text)
        p.set_defaults(kind=kind)
        p.add_argument("amount", type=int, metavar=metavar)
        p.add_argument("file")

    p = sub.add_parser("batch", help="Apply one transform to every image of a folder.")
    p.add_argument("transform", choices=[k.value for k in TransformKind])
    p.add_argument("amount", type=int, nargs="?")
    p.add_argument("--folder", help="defaults to the working directory")
    p.add_argument("--output-dir", help="defaults to <folder>/transformed")
    p.add_argument("--recursive", action="store_true")

    return parser


def _request_from_args(args: argparse.Namespace) -> TransformRequest:
    if args.command == "rotate":
        return TransformRequest(ROTATIONS[args.direction])
    return TransformRequest(args.kind, getattr(args, "amount", 0))


def run_transform(args: argparse.Namespace, workspace: WorkspaceService) -> Path:
    config = workspace.load()
    source = workspace.resolve_input(config, args.file)
    request = _request_from_args(args)

    image_service = ImageService()
    buffer = image_service.load(source)
    result = TransformService().apply(buffer, request)
    saved = image_service.save(result, config.output_file)

    logger.info("%s image saved to %s", request.label, saved)
    return saved


def run_batch_command(args: argparse.Namespace, workspace: WorkspaceService) -> int:
    try:
        request = TransformRequest.parse(args.transform, args.amount)
    except ValueError as err:
        logger.error("%s", err)
        return USAGE_ERROR

    folder = Path(args.folder) if args.folder else workspace.load().working_directory
    if not folder.is_dir():
        raise ConfigurationError(f"Batch folder {folder} does not exist")

    report = run_batch(folder, request, output_dir=args.output_dir, recursive=args.recursive)
    for path, reason in report.skipped:
        logger.warning("Skipped %s: %s", path, reason)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help exits 0, argument errors exit 2; the latter is reported as a usage error
        return USAGE_ERROR if exc.code else 0

    workspace = WorkspaceService()
    try:
        if args.command == "set-dir":
            workspace.set_working_directory(args.directory)
            return 0
        if args.command == "set-output":
            workspace.set_output(args.file_name)
            return 0
        if args.command == "batch":
            return run_batch_command(args, workspace)

        run_transform(args, workspace)
        return 0
    except TransformError as err:
        logger.error("%s", err)
        return err.kind.exit_code


if __name__ == "__main__":
    sys.exit(main())
