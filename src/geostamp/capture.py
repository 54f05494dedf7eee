# src/geostamp/capture.py
"""Stamping frames taken by a device camera with a live position reading."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .coordinates import format_display, in_bounds
from .exceptions import DeviceUnavailableError
from .models import DecimalCoordinate, GpsRecord
from .stamp import StampRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DevicePosition:
    """Raw geolocation reading."""
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    heading: Optional[float] = None


# Providers return a reading, None when the device has no such capability,
# or raise DeviceUnavailableError with the reason it gave.
PositionProvider = Callable[[], Optional[DevicePosition]]
HeadingProvider = Callable[[], Optional[float]]


def resolve_heading(position: Optional[DevicePosition], orientation_heading: Optional[float]) -> Optional[float]:
    """Prefer the geolocation heading, then the orientation sensor's."""
    if position is not None and position.heading is not None:
        return position.heading % 360.0
    if orientation_heading is not None:
        return orientation_heading % 360.0
    return None


def record_from_position(position: DevicePosition, heading: Optional[float] = None) -> GpsRecord:
    if not in_bounds(position.latitude, position.longitude):
        raise DeviceUnavailableError(f"lectura de posición fuera de rango ({position.latitude}, {position.longitude})")
    formatted = format_display(position.latitude, position.longitude)
    return GpsRecord(
        coordinate=DecimalCoordinate(position.latitude, position.longitude),
        formatted_latitude=formatted["latitude"],
        formatted_longitude=formatted["longitude"],
        altitude=position.altitude,
        bearing=heading,
    )


def stamp_capture(
    image_bytes: bytes,
    position_provider: PositionProvider,
    orientation_provider: Optional[HeadingProvider] = None,
    renderer: Optional[StampRenderer] = None,
    now: Optional[datetime] = None,
) -> bytes:
    """Stamp a freshly captured frame with the device's current position.

    Raises:
        DeviceUnavailableError: If geolocation is denied or not available.
    """
    position = position_provider()
    if position is None:
        raise DeviceUnavailableError("geolocalización no disponible en este dispositivo")

    orientation_heading = None
    if orientation_provider is not None:
        try:
            orientation_heading = orientation_provider()
        except DeviceUnavailableError as e:
            # The orientation sensor is optional; the stamp goes out without a heading.
            logger.warning(f"Orientation sensor unavailable: {e}")

    record = record_from_position(position, resolve_heading(position, orientation_heading))
    renderer = renderer or StampRenderer()
    return renderer.stamp_bytes(image_bytes, record, None, now or datetime.now())
