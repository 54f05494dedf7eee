# src/geostamp/recognition.py
"""Text recognition collaborators used by the geotag workflow."""

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from .constants import DEFAULT_OCR_LANGUAGES
from .exceptions import RecognitionError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


@dataclass
class RecognitionResult:
    text: str
    confidence: float = 0.0


class TextRecognizer(ABC):
    """An OCR engine: one image in, raw text out.

    Implementations may hold an expensive engine between calls but must not
    keep per-image state; every call is independent given the same image.
    """

    @abstractmethod
    def recognize(self, image_bytes: bytes, progress_callback: Optional[ProgressCallback] = None) -> RecognitionResult:
        """Recognize the text in an image, reporting progress as 0-100.

        Raises:
            RecognitionError: If the engine fails on this image.
        """

    def close(self) -> None:
        """Release the engine. Safe to call more than once."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class EasyOcrRecognizer(TextRecognizer):
    """EasyOCR-backed recognizer. The reader is created on first use and reused."""

    def __init__(self, languages: Optional[List[str]] = None, gpu: bool = False):
        self.languages = list(languages or DEFAULT_OCR_LANGUAGES)
        self.gpu = gpu
        self._reader = None

    def _get_reader(self):
        if self._reader is None:
            import easyocr

            logger.info(f"Initializing EasyOCR reader ({'+'.join(self.languages)})")
            self._reader = easyocr.Reader(self.languages, gpu=self.gpu, verbose=False)
        return self._reader

    def recognize(self, image_bytes: bytes, progress_callback: Optional[ProgressCallback] = None) -> RecognitionResult:
        import numpy as np
        from PIL import Image

        if progress_callback:
            progress_callback(0)
        try:
            reader = self._get_reader()
            with Image.open(io.BytesIO(image_bytes)) as img:
                img_array = np.array(img.convert("RGB"))
            if progress_callback:
                progress_callback(10)
            detections = reader.readtext(img_array)
        except Exception as e:
            raise RecognitionError(str(e)) from e

        texts = [text for _, text, _ in detections]
        confidences = [float(conf) for _, _, conf in detections]
        if progress_callback:
            progress_callback(100)

        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return RecognitionResult(text="\n".join(texts), confidence=confidence)

    def close(self) -> None:
        self._reader = None
