# src/geostamp/pipeline.py
"""Sequential batch processing for the geotag and stamp workflows."""

import logging
from threading import Event
from typing import Callable, Iterable, List, Optional

from .constants import UIMessages
from .exceptions import GeoStampError, NoCoordinateFoundError, NoGPSDataError
from .coordinates import format_display
from .exif_codec import ExifCodec
from .models import BatchItem, BatchResult, GpsRecord, ItemResult, ItemStatus
from .recognition import TextRecognizer
from .stamp import StampRenderer
from .text_parser import TextCoordinateExtractor

logger = logging.getLogger(__name__)

BatchProgressCallback = Callable[[int, int, str], None]
ItemProgressCallback = Callable[[int, int], None]


class _ItemProgress:
    """Forwards one item's progress clamped to 0-100 and never decreasing."""

    def __init__(self, index: int, callback: Optional[ItemProgressCallback]):
        self.index = index
        self.callback = callback
        self.last = -1

    def __call__(self, percent: float) -> None:
        value = int(max(0, min(100, percent)))
        if value < self.last:
            return
        self.last = value
        if self.callback:
            self.callback(self.index, value)

    def finish(self) -> None:
        self(100)


class BatchPipeline:
    """Runs images one at a time and records an outcome for each of them.

    A failing item is recorded and the batch moves on to the next one. The
    recognizer is owned by the caller, who is responsible for closing it.

    Attributes:
        recognizer: OCR collaborator, required only for `geotag`.
        codec: EXIF reader/writer.
        renderer: Stamp renderer.
        extractor: Coordinate parser applied to the recognized text.
    """

    def __init__(
        self,
        recognizer: Optional[TextRecognizer] = None,
        codec: Optional[ExifCodec] = None,
        renderer: Optional[StampRenderer] = None,
        extractor: Optional[TextCoordinateExtractor] = None,
    ) -> None:
        self.recognizer = recognizer
        self.codec = codec or ExifCodec()
        self.renderer = renderer or StampRenderer()
        self.extractor = extractor or TextCoordinateExtractor()

    def geotag(
        self,
        items: Iterable[BatchItem],
        progress_callback: Optional[BatchProgressCallback] = None,
        item_progress_callback: Optional[ItemProgressCallback] = None,
        stop_event: Optional[Event] = None,
    ) -> BatchResult:
        """OCR each image, parse its printed coordinate and embed it as EXIF GPS."""
        if self.recognizer is None:
            raise ValueError("A text recognizer is required for geotagging")
        return self._run(items, self._geotag_item, progress_callback, item_progress_callback, stop_event)

    def stamp(
        self,
        items: Iterable[BatchItem],
        progress_callback: Optional[BatchProgressCallback] = None,
        item_progress_callback: Optional[ItemProgressCallback] = None,
        stop_event: Optional[Event] = None,
    ) -> BatchResult:
        """Read each image's EXIF GPS and burn it into the pixels."""
        return self._run(items, self._stamp_item, progress_callback, item_progress_callback, stop_event)

    def _run(self, items, handler, progress_callback, item_progress_callback, stop_event) -> BatchResult:
        pending: List[BatchItem] = list(items)
        total = len(pending)
        result = BatchResult(items=[ItemResult(index=i, name=item.name) for i, item in enumerate(pending)])

        for i, item in enumerate(pending):
            outcome = result.items[i]

            # Check for cancellation between items only
            if stop_event and stop_event.is_set():
                outcome.status = ItemStatus.CANCELLED
                continue

            if progress_callback:
                progress_callback(i + 1, total, UIMessages.PROCESSING_ITEM.format(name=item.name))

            outcome.original = item.data
            progress = _ItemProgress(i, item_progress_callback)
            try:
                handler(item, outcome, progress)
                outcome.status = ItemStatus.SUCCEEDED
                logger.info(f"Item completed: {item.name}")
            except GeoStampError as e:
                outcome.status = ItemStatus.FAILED
                outcome.error_kind = e.kind
                outcome.error_message = str(e)
                logger.warning(f"Item failed: {item.name} - {e}")
            except Exception as e:
                outcome.status = ItemStatus.FAILED
                outcome.error_kind = "unexpected"
                outcome.error_message = f"Error - {e}"
                logger.error(f"Item error: {item.name} - {e}")
            progress.finish()

        logger.info(f"Batch finished: {result.summary} succeeded, {result.cancelled} cancelled")
        return result

    def _geotag_item(self, item: BatchItem, outcome: ItemResult, progress: _ItemProgress) -> None:
        outcome.status = ItemStatus.EXTRACTING
        recognized = self.recognizer.recognize(item.data, progress)
        outcome.recognized_text = recognized.text

        found = self.extractor.extract(recognized.text)
        if found is None:
            raise NoCoordinateFoundError()
        outcome.coordinate = found.coordinate
        formatted = format_display(found.latitude, found.longitude)
        outcome.gps = GpsRecord(found.coordinate, formatted["latitude"], formatted["longitude"])

        outcome.status = ItemStatus.WRITING
        outcome.output = self.codec.write_gps(item.data, found.coordinate)

    def _stamp_item(self, item: BatchItem, outcome: ItemResult, progress: _ItemProgress) -> None:
        outcome.status = ItemStatus.READING
        metadata = self.codec.read(item.data, item.name)
        progress(50)
        if metadata.gps is None:
            raise NoGPSDataError()
        outcome.gps = metadata.gps
        outcome.coordinate = metadata.gps.coordinate
        outcome.timestamp = metadata.timestamp

        outcome.status = ItemStatus.RENDERING
        outcome.output = self.renderer.stamp_bytes(item.data, metadata.gps, metadata.timestamp)
