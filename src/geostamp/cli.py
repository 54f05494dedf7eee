# src/geostamp/cli.py
"""Command line entry point: `geostamp geotag|stamp INPUT OUTPUT`."""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ConfigManager
from .constants import UIMessages
from .exceptions import GeoStampError
from .main import configure_logging, process_geotag_backend, process_stamp_backend
from .recognition import EasyOcrRecognizer
from .stamp import StampRenderer

logger = logging.getLogger(__name__)


def _print_progress(current: int, total: int, message: str) -> None:
    print(f"[{current}/{total}] {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geostamp",
        description="Move photo coordinates between printed text, EXIF metadata and stamped pixels.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    geotag = sub.add_parser("geotag", help="OCR printed coordinates and write them as EXIF GPS")
    geotag.add_argument("input", nargs="?", help="Folder with photos")
    geotag.add_argument("output", nargs="?", help="Output folder")
    geotag.add_argument("--gpu", action="store_true", help="Run the OCR engine on the GPU")

    stamp = sub.add_parser("stamp", help="Burn EXIF GPS, time and altitude into the photos")
    stamp.add_argument("input", nargs="?", help="Folder with photos")
    stamp.add_argument("output", nargs="?", help="Output folder")
    stamp.add_argument("--zip", action="store_true", help="Pack all stamped photos into one zip")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    config = ConfigManager.load_config()

    input_dir = args.input or config["input_dir"]
    output_dir = args.output or config["output_dir"]
    if not input_dir or not output_dir:
        print("Indica la carpeta de entrada y la de salida.", file=sys.stderr)
        return 2

    print(UIMessages.PROCESSING)
    try:
        if args.command == "geotag":
            with EasyOcrRecognizer(config["ocr_languages"], gpu=args.gpu) as recognizer:
                message = process_geotag_backend(
                    input_dir,
                    output_dir,
                    recognizer,
                    progress_callback=_print_progress,
                )
        else:
            renderer = StampRenderer(config["font_path"], config["jpeg_quality"])
            message = process_stamp_backend(
                input_dir,
                output_dir,
                progress_callback=_print_progress,
                as_archive=args.zip,
                renderer=renderer,
            )
    except GeoStampError as e:
        logger.error(str(e))
        print(f"{UIMessages.ERROR} {e}", file=sys.stderr)
        return 1

    ConfigManager.save_config(input_dir=input_dir, output_dir=output_dir)
    print(message)
    print(UIMessages.SUCCESS)
    return 0


if __name__ == "__main__":
    sys.exit(main())
