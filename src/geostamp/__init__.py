"""GeoStamp: move photo coordinates between printed text, EXIF and pixels."""

__version__ = "0.3.0"
