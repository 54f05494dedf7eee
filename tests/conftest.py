import io
import os
import sys

import piexif
import pytest
from PIL import Image

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))


def make_image_bytes(size=(64, 48), color=(120, 160, 200), fmt="JPEG", exif_dict=None, exif_bytes=None):
    """Encode a solid-colour image, optionally carrying an EXIF block."""
    img = Image.new("RGB", size, color)
    buf = io.BytesIO()
    params = {}
    if exif_dict is not None:
        full = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}, "thumbnail": None}
        full.update(exif_dict)
        params["exif"] = piexif.dump(full)
    elif exif_bytes is not None:
        params["exif"] = exif_bytes
    img.save(buf, fmt, **params)
    return buf.getvalue()


def gps_ifd(lat=((18, 1), (27, 1), (3050, 100)), lat_ref=b"N", lng=((69, 1), (57, 1), (2130, 100)), lng_ref=b"W", extra=None):
    gps = {
        piexif.GPSIFD.GPSLatitudeRef: lat_ref,
        piexif.GPSIFD.GPSLatitude: lat,
        piexif.GPSIFD.GPSLongitudeRef: lng_ref,
        piexif.GPSIFD.GPSLongitude: lng,
    }
    gps.update(extra or {})
    return gps


@pytest.fixture
def plain_jpeg():
    return make_image_bytes()


@pytest.fixture
def gps_jpeg():
    return make_image_bytes(
        size=(400, 300),
        exif_dict={
            "GPS": gps_ifd(
                extra={
                    piexif.GPSIFD.GPSAltitudeRef: 0,
                    piexif.GPSIFD.GPSAltitude: (356, 10),
                    piexif.GPSIFD.GPSImgDirection: (9040, 100),
                }
            ),
            "Exif": {piexif.ExifIFD.DateTimeOriginal: b"2024:03:05 14:07:09"},
        },
    )
