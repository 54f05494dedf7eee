# src/geostamp/stamp.py
"""Burns coordinates, capture time and altitude into the bottom of an image."""

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

import pillow_heif
from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from .constants import (
    BAND_COLOR,
    BAND_PADDING_RATIO,
    DEFAULT_FONT_PATH,
    DEFAULT_JPEG_QUALITY,
    EXIF_DATETIME_FORMAT,
    FONT_SIZE_DIVISOR,
    LINE_SPACING_RATIO,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    MONTH_ABBREVIATIONS,
    TEXT_COLOR,
)
from .coordinates import cardinal_direction, round_half_up
from .exceptions import InputUnreadableError, RenderError
from .models import GpsRecord

# Register HEIF opener
pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StampLayout:
    """Overlay geometry derived from the image size. Y values are line centres."""

    width: int
    height: int
    font_size: float
    line_spacing: float
    text_block_height: float
    band_height: float
    band_top: float
    first_line_y: float
    second_line_y: float
    center_x: float


def compute_layout(width: int, height: int) -> StampLayout:
    min_dimension = min(width, height)

    font_size = max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, min_dimension / FONT_SIZE_DIVISOR))
    line_spacing = font_size * LINE_SPACING_RATIO

    text_block_height = font_size * 2 + line_spacing
    band_height = text_block_height + min_dimension * BAND_PADDING_RATIO
    band_top = height - band_height

    vertical_padding = (band_height - text_block_height) / 2
    first_line_y = band_top + vertical_padding + font_size / 2
    second_line_y = first_line_y + font_size + line_spacing

    return StampLayout(
        width=width,
        height=height,
        font_size=font_size,
        line_spacing=line_spacing,
        text_block_height=text_block_height,
        band_height=band_height,
        band_top=band_top,
        first_line_y=first_line_y,
        second_line_y=second_line_y,
        center_x=width / 2,
    )


def format_capture_time(timestamp: Optional[str], now: Optional[datetime] = None) -> Tuple[str, str]:
    """(HH:MM, 'Mon D, YYYY') from an EXIF timestamp, or from `now` without one."""
    moment = None
    if timestamp:
        try:
            moment = datetime.strptime(timestamp.strip(), EXIF_DATETIME_FORMAT)
        except ValueError:
            logger.warning(f"Invalid date format: {timestamp}")
    if moment is None:
        moment = now or datetime.now()
    return moment.strftime("%H:%M"), f"{MONTH_ABBREVIATIONS[moment.month - 1]} {moment.day}, {moment.year}"


def build_lines(record: GpsRecord, timestamp: Optional[str], now: Optional[datetime] = None) -> Tuple[str, str]:
    coord_text = f"{record.formatted_latitude} | {record.formatted_longitude}"
    if record.bearing is not None:
        coord_text += f"  {round_half_up(record.bearing) % 360}° {cardinal_direction(record.bearing)}"

    time_text, date_text = format_capture_time(timestamp, now)
    second_line = f"{time_text} | {date_text}"
    if record.altitude is not None:
        second_line += f"  |  {round_half_up(record.altitude)} m"
    return coord_text, second_line


class StampRenderer:
    def __init__(self, font_path: str = DEFAULT_FONT_PATH, jpeg_quality: int = DEFAULT_JPEG_QUALITY):
        self.font_path = font_path
        self.jpeg_quality = jpeg_quality

    def _load_font(self, size: int) -> ImageFont.ImageFont:
        try:
            return ImageFont.truetype(self.font_path, size)
        except OSError:
            logger.debug(f"Font {self.font_path} not available, using Pillow's default font")
            return ImageFont.load_default(size=size)

    def render(
        self,
        image: Image.Image,
        record: GpsRecord,
        timestamp: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Image.Image:
        """Return a stamped copy of `image`; the original is left untouched."""
        base = ImageOps.exif_transpose(image).convert("RGBA")
        layout = compute_layout(*base.size)

        overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle(
            [0, layout.band_top, layout.width, layout.height], fill=BAND_COLOR
        )
        stamped = Image.alpha_composite(base, overlay)

        line1, line2 = build_lines(record, timestamp, now)
        font = self._load_font(int(round(layout.font_size)))
        draw = ImageDraw.Draw(stamped)
        draw.text((layout.center_x, layout.first_line_y), line1, font=font, fill=TEXT_COLOR, anchor="mm")
        draw.text((layout.center_x, layout.second_line_y), line2, font=font, fill=TEXT_COLOR, anchor="mm")

        return stamped.convert("RGB")

    def stamp_bytes(
        self,
        data: bytes,
        record: GpsRecord,
        timestamp: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bytes:
        """Decode, stamp and re-encode an image as JPEG.

        Raises:
            InputUnreadableError: If the bytes cannot be decoded to pixels.
            RenderError: If the stamped image cannot be produced.
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                source = img.copy()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise InputUnreadableError("datos de imagen inválidos") from e

        try:
            stamped = self.render(source, record, timestamp, now)
            output = io.BytesIO()
            stamped.save(output, format="JPEG", quality=self.jpeg_quality)
        except (OSError, ValueError) as e:
            raise RenderError(str(e)) from e
        return output.getvalue()
