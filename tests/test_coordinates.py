import math

import pytest
from PIL.TiffImagePlugin import IFDRational

from geostamp.coordinates import (
    cardinal_direction,
    decimal_to_gms,
    decode_rational,
    format_display,
    gms_to_decimal,
    hemisphere_for,
    rational_triplet_to_decimal,
    round_half_up,
    to_rational_triplet,
)
from geostamp.models import Rational

# Seconds are rounded to 2 decimals: at most 0.005" of error, plus float noise.
ROUND_TRIP_TOLERANCE = 0.0051 / 3600

SAMPLE_LATITUDES = [-90.0, -89.9999999, -45.123456, -18.4585, -0.0000001, 0.0, 0.5, 18.4585, 33.3333333, 89.9999999, 90.0]
SAMPLE_LONGITUDES = [-180.0, -179.99999, -69.9559, -0.25, 0.0, 12.3456789, 69.9559, 179.99999, 180.0]


class TestDecimalToGMS:
    def test_splits_degrees_minutes_seconds(self):
        gms = decimal_to_gms(18.4585, "lat")
        assert gms.degrees == 18
        assert gms.minutes == 27
        assert gms.seconds == pytest.approx(30.6, abs=0.001)
        assert gms.hemisphere == "N"

    def test_negative_latitude_is_south(self):
        gms = decimal_to_gms(-33.5, "lat")
        assert (gms.degrees, gms.minutes, gms.seconds, gms.hemisphere) == (33, 30, 0.0, "S")

    def test_negative_longitude_is_west(self):
        assert decimal_to_gms(-69.9559, "lng").hemisphere == "W"

    def test_zero_takes_positive_hemisphere(self):
        assert decimal_to_gms(0.0, "lat").hemisphere == "N"
        assert decimal_to_gms(0.0, "lng").hemisphere == "E"

    def test_no_axis_leaves_hemisphere_empty(self):
        assert decimal_to_gms(-10.5).hemisphere == ""

    def test_seconds_rounding_to_sixty_carries(self):
        gms = decimal_to_gms(89.9999999, "lat")
        assert (gms.degrees, gms.minutes, gms.seconds) == (90, 0, 0.0)

    def test_seconds_always_below_sixty(self):
        for value in SAMPLE_LATITUDES + SAMPLE_LONGITUDES:
            gms = decimal_to_gms(value)
            assert 0 <= gms.minutes <= 59
            assert 0 <= gms.seconds < 60

    def test_unknown_axis_rejected(self):
        with pytest.raises(ValueError):
            hemisphere_for(1.0, "alt")


class TestGMSToDecimal:
    def test_positive(self):
        assert gms_to_decimal(18, 27, 30.5, "N") == pytest.approx(18.458472, abs=1e-6)

    def test_south_and_west_are_negative(self):
        assert gms_to_decimal(33, 30, 0, "S") == -33.5
        assert gms_to_decimal(69, 57, 21.3, "W") == pytest.approx(-69.955917, abs=1e-6)

    def test_lowercase_hemisphere(self):
        assert gms_to_decimal(1, 0, 0, "w") == -1.0

    @pytest.mark.parametrize("value", SAMPLE_LATITUDES)
    def test_latitude_round_trip_is_bounded(self, value):
        gms = decimal_to_gms(value, "lat")
        back = gms_to_decimal(gms.degrees, gms.minutes, gms.seconds, gms.hemisphere)
        assert abs(back - value) <= ROUND_TRIP_TOLERANCE

    @pytest.mark.parametrize("value", SAMPLE_LONGITUDES)
    def test_longitude_round_trip_is_bounded(self, value):
        gms = decimal_to_gms(value, "lng")
        back = gms_to_decimal(gms.degrees, gms.minutes, gms.seconds, gms.hemisphere)
        assert abs(back - value) <= ROUND_TRIP_TOLERANCE

    def test_south_round_trip_keeps_magnitude(self):
        gms = decimal_to_gms(-45.123456, "lat")
        assert gms.hemisphere == "S"
        back = gms_to_decimal(gms.degrees, gms.minutes, gms.seconds, gms.hemisphere)
        assert back < 0
        assert abs(abs(back) - 45.123456) <= ROUND_TRIP_TOLERANCE


class TestRationalTriplet:
    def test_encoding_shape(self):
        degrees, minutes, seconds = to_rational_triplet(-69.9559)
        assert degrees == Rational(69, 1)
        assert minutes == Rational(57, 1)
        assert seconds.denominator == 100
        assert abs(seconds.numerator / 100 - 21.24) <= 0.01

    @pytest.mark.parametrize("value", SAMPLE_LATITUDES + SAMPLE_LONGITUDES)
    def test_decode_reconstructs_gms(self, value):
        gms = decimal_to_gms(value)
        triplet = to_rational_triplet(value)
        assert decode_rational(triplet[0]) == gms.degrees
        assert decode_rational(triplet[1]) == gms.minutes
        assert abs(decode_rational(triplet[2]) - gms.seconds) <= 0.01

    def test_integers_only(self):
        for part in to_rational_triplet(12.3456789):
            assert isinstance(part.numerator, int)
            assert isinstance(part.denominator, int)

    def test_triplet_to_decimal(self):
        value = rational_triplet_to_decimal(((18, 1), (27, 1), (3050, 100)), "N")
        assert value == pytest.approx(18.458472, abs=1e-6)

    def test_short_triplet_rejected(self):
        assert rational_triplet_to_decimal(((18, 1), (27, 1)), "N") is None
        assert rational_triplet_to_decimal(None, "N") is None

    def test_zero_denominator_component_decodes_as_zero(self):
        value = rational_triplet_to_decimal(((18, 1), (27, 0), (30, 1)), "S")
        assert value == pytest.approx(-(18 + 30 / 3600))


class TestDecodeRational:
    def test_pair(self):
        assert decode_rational((3, 2)) == 1.5
        assert decode_rational(Rational(9040, 100)) == pytest.approx(90.4)

    def test_plain_numbers(self):
        assert decode_rational(7) == 7.0
        assert decode_rational(2.5) == 2.5

    def test_pillow_rational(self):
        assert decode_rational(IFDRational(3, 4)) == 0.75

    @pytest.mark.parametrize(
        "value",
        [None, (1, 0), (1, None), Rational(5, 0), "abc", (1, 2, 3), float("nan"), float("inf"), True, object()],
    )
    def test_malformed_values_decode_to_zero(self, value):
        result = decode_rational(value)
        assert result == 0.0
        assert not math.isnan(result)

    def test_pillow_rational_with_zero_denominator(self):
        assert decode_rational(IFDRational(1, 0)) == 0.0


class TestFormatting:
    def test_format_display(self):
        formatted = format_display(18.4585, -69.9559)
        assert formatted["latitude"] == "18° 27' 30.6\" N"
        assert formatted["longitude"] == "69° 57' 21.24\" W"

    def test_format_display_origin(self):
        formatted = format_display(0.0, 0.0)
        assert formatted == {"latitude": "0° 0' 0\" N", "longitude": "0° 0' 0\" E"}

    @pytest.mark.parametrize(
        "bearing,expected",
        [(0, "N"), (22.5, "NE"), (44, "NE"), (90, "E"), (135, "SE"), (180, "S"), (225, "SW"), (270, "W"), (315, "NW"), (359, "N")],
    )
    def test_cardinal_direction(self, bearing, expected):
        assert cardinal_direction(bearing) == expected

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
        assert round_half_up(35.6) == 36
