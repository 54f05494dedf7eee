import io
import logging
import math
from typing import Any, Dict, Optional

import piexif
import pillow_heif
from PIL import Image, UnidentifiedImageError

from .constants import (
    GPS_VERSION_ID,
    TAG_ALTITUDE,
    TAG_ALTITUDE_REF,
    TAG_DATETIME,
    TAG_DATETIME_ORIGINAL,
    TAG_IMG_DIRECTION,
    TAG_LATITUDE,
    TAG_LATITUDE_REF,
    TAG_LONGITUDE,
    TAG_LONGITUDE_REF,
    TAG_VERSION_ID,
)
from .coordinates import (
    decode_rational,
    format_display,
    hemisphere_for,
    in_bounds,
    rational_triplet_to_decimal,
    to_rational_triplet,
)
from .exceptions import InputUnreadableError, MetadataWriteError
from .models import DecimalCoordinate, ExifContainer, GpsRecord, PhotoMetadata

# Register HEIF opener
pillow_heif.register_heif_opener()

# Configure logger
logger = logging.getLogger(__name__)

JPEG = "jpeg"
TIFF = "tiff"
WEBP = "webp"
RAW_EXIF = "exif"

WRITABLE_CONTAINERS = {JPEG, WEBP}


def detect_container(data: bytes) -> Optional[str]:
    """Identify the containers piexif can read directly from their magic bytes."""
    if data[:2] == b"\xff\xd8":
        return JPEG
    if data[:4] in (b"II*\x00", b"MM\x00*"):
        return TIFF
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return WEBP
    if data[:6] == b"Exif\x00\x00":
        return RAW_EXIF
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    value = value.strip("\x00 ").strip()
    return value or None


def _is_below_sea_level(ref: Any) -> bool:
    # Only an explicit 1 means below sea level; anything else is above.
    if isinstance(ref, (tuple, list)) and ref:
        ref = ref[0]
    if isinstance(ref, bytes) and ref:
        ref = ref[0]
    return ref == 1


class ExifCodec:
    """Reads and writes the GPS (and capture time) tags of an image."""

    def load(self, data: bytes) -> ExifContainer:
        """Parse the EXIF tag groups of an image.

        Raises:
            InputUnreadableError: If the bytes are not an image we can read
                metadata from.
        """
        if not data:
            raise InputUnreadableError("archivo vacío")

        container = detect_container(data)
        # piexif only splits WebP files that carry a VP8X header
        if container in (JPEG, TIFF, RAW_EXIF):
            payload = data
        else:
            payload = self._exif_blob_via_pillow(data)
            if payload is None:
                return ExifContainer()

        try:
            return ExifContainer.from_piexif(piexif.load(payload))
        except Exception as e:
            raise InputUnreadableError(str(e)) from e

    def _exif_blob_via_pillow(self, data: bytes) -> Optional[bytes]:
        """EXIF blob of containers piexif cannot split itself (PNG, HEIC...)."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                blob = img.info.get("exif")
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise InputUnreadableError(str(e)) from e
        if not blob:
            return None
        if not blob.startswith(b"Exif\x00\x00"):
            blob = b"Exif\x00\x00" + blob
        return blob

    def read(self, data: bytes, filename: str = "") -> PhotoMetadata:
        """
        Reads an image and extracts its capture time and converted GPS record.
        A missing or damaged GPS group yields metadata without GPS, not an error.
        """
        container = self.load(data)
        timestamp = self._get_date(container)

        gps = None
        if container.gps:
            gps = self._get_gps_record(container.gps)
            if gps is None:
                logger.warning(f"Incomplete or invalid GPS data for {filename or 'image'}")
        else:
            logger.debug(f"No GPS info found for {filename or 'image'}")

        return PhotoMetadata(filename=filename, gps=gps, timestamp=timestamp, container=container)

    def _get_date(self, container: ExifContainer) -> Optional[str]:
        return _as_text(container.exif.get(TAG_DATETIME_ORIGINAL)) or _as_text(container.zeroth.get(TAG_DATETIME))

    def _get_gps_record(self, gps_info: Dict[int, Any]) -> Optional[GpsRecord]:
        lat_dms = gps_info.get(TAG_LATITUDE)
        lat_ref = _as_text(gps_info.get(TAG_LATITUDE_REF))
        lon_dms = gps_info.get(TAG_LONGITUDE)
        lon_ref = _as_text(gps_info.get(TAG_LONGITUDE_REF))

        if not (lat_dms and lat_ref and lon_dms and lon_ref):
            return None

        lat = rational_triplet_to_decimal(lat_dms, lat_ref)
        lon = rational_triplet_to_decimal(lon_dms, lon_ref)
        if lat is None or lon is None:
            return None
        if not in_bounds(lat, lon):
            logger.warning(f"GPS coordinates out of range: {lat}, {lon}")
            return None

        altitude = None
        if TAG_ALTITUDE in gps_info:
            altitude = decode_rational(gps_info[TAG_ALTITUDE])
            if _is_below_sea_level(gps_info.get(TAG_ALTITUDE_REF)):
                altitude = -altitude

        bearing = None
        if TAG_IMG_DIRECTION in gps_info:
            bearing = decode_rational(gps_info[TAG_IMG_DIRECTION]) % 360.0

        formatted = format_display(lat, lon)
        return GpsRecord(
            coordinate=DecimalCoordinate(lat, lon),
            formatted_latitude=formatted["latitude"],
            formatted_longitude=formatted["longitude"],
            altitude=altitude,
            bearing=bearing,
        )

    def write_gps(self, data: bytes, coordinate: DecimalCoordinate) -> bytes:
        """Return new image bytes carrying `coordinate` in the GPS group.

        Only the GPS position tags and the version marker change; the other
        groups, the thumbnail and the pixel data are carried over as they are.

        Raises:
            MetadataWriteError: If the image is not a JPEG/WebP or the
                container cannot be re-encoded.
        """
        if not (math.isfinite(coordinate.latitude) and math.isfinite(coordinate.longitude)):
            raise MetadataWriteError("coordenadas no válidas")
        if not in_bounds(coordinate.latitude, coordinate.longitude):
            raise MetadataWriteError(f"coordenadas fuera de rango: {coordinate}")

        container_type = detect_container(data or b"")
        if container_type not in WRITABLE_CONTAINERS:
            raise MetadataWriteError("formato de imagen no soportado (se requiere JPEG o WebP)")

        try:
            container = self.load(data)
        except InputUnreadableError as e:
            logger.warning(f"Existing EXIF unreadable, starting from an empty container: {e}")
            container = ExifContainer()
        if container.is_empty:
            logger.debug("Image carries no EXIF, writing a new block")

        container.gps[TAG_LATITUDE_REF] = hemisphere_for(coordinate.latitude, "lat")
        container.gps[TAG_LATITUDE] = to_rational_triplet(coordinate.latitude)
        container.gps[TAG_LONGITUDE_REF] = hemisphere_for(coordinate.longitude, "lng")
        container.gps[TAG_LONGITUDE] = to_rational_triplet(coordinate.longitude)
        container.gps[TAG_VERSION_ID] = GPS_VERSION_ID

        exif_dict = container.to_piexif()
        self._repair_for_dump(exif_dict)

        try:
            exif_bytes = piexif.dump(exif_dict)
            output = io.BytesIO()
            piexif.insert(exif_bytes, data, output)
        except Exception as e:
            raise MetadataWriteError(str(e)) from e
        return output.getvalue()

    @staticmethod
    def _repair_for_dump(exif_dict: Dict[str, Any]) -> None:
        # piexif loads SceneType as an int but only dumps it as bytes.
        scene_type = exif_dict["Exif"].get(piexif.ExifIFD.SceneType)
        if isinstance(scene_type, int):
            exif_dict["Exif"][piexif.ExifIFD.SceneType] = bytes([scene_type & 0xFF])
