"""
Coordinate conversions between decimal degrees, degrees/minutes/seconds (GMS)
and the EXIF rational triplets used in the GPS IFD.

Everything in here is pure: no I/O, no logging, no state.
"""

import math
from typing import Any, Dict, Optional, Sequence, Tuple

from .constants import CARDINAL_DIRECTIONS
from .models import GMSCoordinate, Rational

NEGATIVE_HEMISPHERES = {"S", "W"}


def round_half_up(value: float) -> int:
    """Round .5 away from zero on the positive side, as display code expects."""
    return int(math.floor(value + 0.5))


def hemisphere_for(value: float, axis: str) -> str:
    """N/S for latitude, E/W for longitude; zero counts as positive."""
    if axis == "lat":
        return "N" if value >= 0 else "S"
    if axis == "lng":
        return "E" if value >= 0 else "W"
    raise ValueError(f"Unknown axis: {axis!r}")


def decimal_to_gms(value: float, axis: Optional[str] = None) -> GMSCoordinate:
    """Convert a signed decimal value to degrees, minutes and seconds.

    Degrees and minutes are truncated; seconds are rounded to 2 decimals and
    carried into minutes/degrees when the rounding reaches 60.

    Args:
        value: Signed decimal degrees.
        axis: "lat" or "lng" to fill in the hemisphere from the sign. When
            omitted the hemisphere is left empty for the caller to decide.
    """
    absolute = abs(value)
    degrees = int(math.floor(absolute))
    minutes_not_truncated = (absolute - degrees) * 60
    minutes = int(math.floor(minutes_not_truncated))
    seconds = round((minutes_not_truncated - minutes) * 60, 2)

    if seconds >= 60:
        seconds = 0.0
        minutes += 1
    if minutes >= 60:
        minutes = 0
        degrees += 1

    hemisphere = hemisphere_for(value, axis) if axis else ""
    return GMSCoordinate(degrees, minutes, seconds, hemisphere)


def gms_to_decimal(degrees: float, minutes: float, seconds: float, hemisphere: str) -> float:
    decimal = degrees + minutes / 60 + seconds / 3600
    if hemisphere and hemisphere.upper() in NEGATIVE_HEMISPHERES:
        decimal = -decimal
    return decimal


def to_rational_triplet(value: float) -> Tuple[Rational, Rational, Rational]:
    """EXIF rationals for abs(value): ((deg, 1), (min, 1), (sec*100, 100))."""
    gms = decimal_to_gms(abs(value))
    return (
        Rational(gms.degrees, 1),
        Rational(gms.minutes, 1),
        Rational(int(round(gms.seconds * 100)), 100),
    )


def _format_number(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def format_gms(gms: GMSCoordinate) -> str:
    return f"{gms.degrees}° {gms.minutes}' {_format_number(gms.seconds)}\" {gms.hemisphere}".rstrip()


def format_display(latitude: float, longitude: float) -> Dict[str, str]:
    """Human readable `D° M' S" H` strings for both axes."""
    return {
        "latitude": format_gms(decimal_to_gms(latitude, "lat")),
        "longitude": format_gms(decimal_to_gms(longitude, "lng")),
    }


def decode_rational(value: Any) -> float:
    """Decode one EXIF rational-ish value to a float.

    Accepts a Rational or (numerator, denominator) pair, anything exposing
    numerator/denominator (Pillow's IFDRational), or a plain number. A zero or
    missing denominator, an unknown type or a non-finite result decode to 0.
    """
    numerator: Any
    denominator: Any
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            return 0.0
        numerator, denominator = value
    elif hasattr(value, "numerator") and hasattr(value, "denominator"):
        numerator, denominator = value.numerator, value.denominator
    else:
        return 0.0

    try:
        numerator = float(numerator)
        denominator = float(denominator)
    except (TypeError, ValueError):
        return 0.0
    if not denominator or not math.isfinite(denominator) or not math.isfinite(numerator):
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def rational_triplet_to_decimal(triplet: Any, ref: Optional[str]) -> Optional[float]:
    """Combine a GPS (deg, min, sec) triplet and its ref into signed decimal.

    Returns None when the triplet is structurally unusable or the result is
    not a finite number.
    """
    if not isinstance(triplet, (tuple, list)) or len(triplet) < 3:
        return None
    components: Sequence[float] = [decode_rational(part) for part in triplet[:3]]
    try:
        decimal = gms_to_decimal(components[0], components[1], components[2], ref or "")
    except (TypeError, ValueError):
        return None
    if not math.isfinite(decimal):
        return None
    return decimal


def cardinal_direction(bearing: float) -> str:
    """8-point compass name for a bearing in degrees."""
    index = round_half_up(bearing / 45) % 8
    return CARDINAL_DIRECTIONS[index]


def in_bounds(latitude: float, longitude: float) -> bool:
    return -90 <= latitude <= 90 and -180 <= longitude <= 180
