# src/geostamp/text_parser.py
"""Locate a GMS coordinate inside noisy recognized text."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .coordinates import gms_to_decimal, in_bounds
from .models import GMSCoordinate, TextCoordinate

logger = logging.getLogger(__name__)

# Symbol variants produced by OCR for the same glyph
DEGREES = "[°º]"
MINUTES = "['’‘′]"
SECONDS = '["”“″]?'
NUMBER = r"\d+(?:\.\d+)?"
LAT_HEMISPHERE = "([NS])"
LNG_HEMISPHERE = "([EWO])"
SEPARATOR = r"\s*[,;]?\s*"

# Group order inside each match: lat D, M, S, H, lng D, M, S, H
DEGREES_FIRST = 0
HEMISPHERE_FIRST = 1


@dataclass(frozen=True)
class CoordinatePattern:
    """One supported notation: its regex and where each component sits."""

    name: str
    regex: "re.Pattern[str]"
    layout: int

    def groups(self, match: "re.Match[str]") -> Tuple[str, ...]:
        g = match.groups()
        if self.layout == HEMISPHERE_FIRST:
            # H D M S , H D M S -> D M S H , D M S H
            return (g[1], g[2], g[3], g[0], g[5], g[6], g[7], g[4])
        return g


def _compile(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern, re.IGNORECASE)


DEFAULT_PATTERNS: List[CoordinatePattern] = [
    # 18° 27' 30.5" N, 69° 57' 21.3" W
    CoordinatePattern(
        "degrees_first",
        _compile(
            rf"(\d{{1,3}}){DEGREES}\s*(\d{{1,2}}){MINUTES}\s*({NUMBER}){SECONDS}\s*{LAT_HEMISPHERE}"
            rf"{SEPARATOR}"
            rf"(\d{{1,3}}){DEGREES}\s*(\d{{1,2}}){MINUTES}\s*({NUMBER}){SECONDS}\s*{LNG_HEMISPHERE}"
        ),
        DEGREES_FIRST,
    ),
    # N 18° 27' 30.5", W 69° 57' 21.3"
    CoordinatePattern(
        "hemisphere_first",
        _compile(
            rf"{LAT_HEMISPHERE}\s*(\d{{1,3}}){DEGREES}\s*(\d{{1,2}}){MINUTES}\s*({NUMBER}){SECONDS}"
            rf"{SEPARATOR}"
            rf"{LNG_HEMISPHERE}\s*(\d{{1,3}}){DEGREES}\s*(\d{{1,2}}){MINUTES}\s*({NUMBER}){SECONDS}"
        ),
        HEMISPHERE_FIRST,
    ),
    # 18 27 30.5 N 69 57 21.3 W
    CoordinatePattern(
        "bare_triplets",
        _compile(
            rf"(\d{{1,3}})\s+(\d{{1,2}})\s+({NUMBER})\s*{LAT_HEMISPHERE}"
            rf"\s+"
            rf"(\d{{1,3}})\s+(\d{{1,2}})\s+({NUMBER})\s*{LNG_HEMISPHERE}"
        ),
        DEGREES_FIRST,
    ),
]


def normalize_hemisphere(letter: str) -> str:
    """Upper-case a hemisphere letter; Spanish 'O' (Oeste) becomes 'W'."""
    letter = letter.upper()
    return "W" if letter == "O" else letter


class TextCoordinateExtractor:
    """Tries each notation in priority order and stops at the first valid one."""

    def __init__(self, patterns: Optional[Sequence[CoordinatePattern]] = None):
        self.patterns = list(patterns) if patterns is not None else list(DEFAULT_PATTERNS)

    def extract(self, text: str) -> Optional[TextCoordinate]:
        """Return the coordinate found in `text`, or None when nothing matches.

        Raises:
            TypeError: If `text` is None or not a string.
        """
        if text is None or not isinstance(text, str):
            raise TypeError("text must be a string")

        for pattern in self.patterns:
            match = pattern.regex.search(text)
            if not match:
                continue
            result = self._build(pattern, match)
            if result is not None:
                return result
            logger.debug(f"Discarded {pattern.name} match: {match.group(0)!r}")
        return None

    def _build(self, pattern: CoordinatePattern, match: "re.Match[str]") -> Optional[TextCoordinate]:
        lat_d, lat_m, lat_s, lat_h, lng_d, lng_m, lng_s, lng_h = pattern.groups(match)
        try:
            lat_gms = self._gms(lat_d, lat_m, lat_s, lat_h)
            lng_gms = self._gms(lng_d, lng_m, lng_s, lng_h)
        except ValueError:
            return None
        if lat_gms is None or lng_gms is None:
            return None

        latitude = gms_to_decimal(lat_gms.degrees, lat_gms.minutes, lat_gms.seconds, lat_gms.hemisphere)
        longitude = gms_to_decimal(lng_gms.degrees, lng_gms.minutes, lng_gms.seconds, lng_gms.hemisphere)
        if not in_bounds(latitude, longitude):
            return None

        return TextCoordinate(
            latitude=latitude,
            longitude=longitude,
            raw=match.group(0),
            latitude_gms=lat_gms,
            longitude_gms=lng_gms,
            notation=pattern.name,
        )

    @staticmethod
    def _gms(degrees: str, minutes: str, seconds: str, hemisphere: str) -> Optional[GMSCoordinate]:
        d, m, s = int(degrees), int(minutes), float(seconds)
        if m > 59 or s >= 60:
            return None
        return GMSCoordinate(d, m, s, normalize_hemisphere(hemisphere))


_default_extractor = TextCoordinateExtractor()


def parse_coordinates(text: str) -> Optional[TextCoordinate]:
    return _default_extractor.extract(text)
