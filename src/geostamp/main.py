# src/geostamp/main.py
"""Folder-level backends for the geotag and stamp workflows."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Event
from typing import Callable, List, Optional

from .archive import archive_filename, build_archive, geotag_filename, stamped_filename
from .constants import IMAGE_EXTENSIONS
from .exceptions import InputFolderMissingError, NoCoordinateFoundError, NoGPSDataError, NoImagesFoundError
from .exif_codec import detect_container
from .models import BatchItem, BatchResult
from .pipeline import BatchPipeline, ItemProgressCallback
from .recognition import TextRecognizer
from .stamp import StampRenderer

logger = logging.getLogger(__name__)

LOG_DIR = Path.home() / ".geostamp_logs"


def configure_logging(level: int = logging.INFO) -> None:
    """Log to a rotating file in the user's home and to the console."""
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / "app.log"

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )


def _get_unique_path(path: Path) -> Path:
    """If path exists, returns path with incremental suffix _1, _2, ..."""
    if not path.exists():
        return path
    base = path.stem
    suffix = path.suffix
    parent = path.parent
    i = 1
    while True:
        candidate = parent / f"{base}_{i}{suffix}"
        if not candidate.exists():
            return candidate
        i += 1


def scan_files(input_dir: Path) -> List[Path]:
    """Supported images directly inside input_dir, sorted by name.

    Raises:
        InputFolderMissingError: If the folder does not exist.
        NoImagesFoundError: If it holds no supported image.
    """
    if not input_dir.exists():
        raise InputFolderMissingError(input_dir)

    raw_files: List[Path] = []
    for ext in IMAGE_EXTENSIONS:
        raw_files.extend(input_dir.glob(ext))

    image_files = sorted(set(raw_files))
    if not image_files:
        raise NoImagesFoundError(input_dir)

    logger.info(f"Found {len(image_files)} images to process")
    return image_files


def _load_items(image_files: List[Path]) -> List[BatchItem]:
    return [BatchItem(name=p.name, data=p.read_bytes()) for p in image_files]


def _summary(result: BatchResult, written: List[Path]) -> str:
    lines = [f"SUCCESS!\nProcessed: {result.summary} photos."]
    if result.failed:
        lines.append(f"Failed: {result.failed}")
    if result.cancelled:
        lines.append(f"Cancelled: {result.cancelled}")
    lines.append("Generated:")
    lines.extend(f"- {p.name}" for p in written)
    return "\n".join(lines)


def process_geotag_backend(
    input_path_str: str,
    output_path_str: str,
    recognizer: TextRecognizer,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    item_progress_callback: Optional[ItemProgressCallback] = None,
    stop_event: Optional[Event] = None,
) -> str:
    """
    OCR every photo in a folder and save copies with the recognized
    coordinates embedded as EXIF GPS.

    Raises:
        InputFolderMissingError: If input folder doesn't exist.
        NoImagesFoundError: If no supported images are found.
        NoCoordinateFoundError: If no photo yielded a coordinate.
    """
    logger.info("Starting geotag process")

    input_dir = Path(input_path_str)
    output_dir = Path(output_path_str)

    items = _load_items(scan_files(input_dir))
    pipeline = BatchPipeline(recognizer=recognizer)
    result = pipeline.geotag(items, progress_callback, item_progress_callback, stop_event)

    if result.succeeded == 0 and result.cancelled == 0:
        raise NoCoordinateFoundError(
            f"No se detectaron coordenadas en ninguna de las {result.total} fotos de {input_dir}."
        )

    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for item in result.successful_items():
        target = _get_unique_path(output_dir / geotag_filename(item.index, detect_container(item.output)))
        target.write_bytes(item.output)
        written.append(target)

    logger.info(f"Geotag completed. {result.summary} photos processed.")
    return _summary(result, written)


def process_stamp_backend(
    input_path_str: str,
    output_path_str: str,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    stop_event: Optional[Event] = None,
    as_archive: bool = False,
    renderer: Optional[StampRenderer] = None,
) -> str:
    """
    Stamp the EXIF position of every photo in a folder onto its pixels.
    With as_archive the stamped photos go into a single zip.

    Raises:
        InputFolderMissingError: If input folder doesn't exist.
        NoImagesFoundError: If no supported images are found.
        NoGPSDataError: If no photo had usable GPS metadata.
    """
    logger.info("Starting stamp process")

    input_dir = Path(input_path_str)
    output_dir = Path(output_path_str)

    items = _load_items(scan_files(input_dir))
    pipeline = BatchPipeline(renderer=renderer)
    result = pipeline.stamp(items, progress_callback, stop_event=stop_event)

    if result.succeeded == 0 and result.cancelled == 0:
        raise NoGPSDataError(result.total, str(input_dir))

    output_dir.mkdir(parents=True, exist_ok=True)
    successes = result.successful_items()
    written: List[Path] = []

    if as_archive and len(successes) > 1:
        archive = build_archive((stamped_filename(item.name), item.output) for item in successes)
        target = _get_unique_path(output_dir / archive_filename(successes[0].name))
        target.write_bytes(archive)
        written.append(target)
    else:
        for item in successes:
            target = _get_unique_path(output_dir / stamped_filename(item.name))
            target.write_bytes(item.output)
            written.append(target)

    logger.info(f"Stamp completed. {result.summary} photos processed.")
    return _summary(result, written)
