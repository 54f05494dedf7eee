import piexif

# --- Main Configuration ---
IMAGE_EXTENSIONS = ["*.jpg", "*.jpeg", "*.JPG", "*.JPEG", "*.png", "*.PNG", "*.webp", "*.WEBP", "*.heic", "*.HEIC", "*.heif", "*.HEIF"]

# --- EXIF ---
GPS_VERSION_ID = (2, 3, 0, 0)
EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

TAG_LATITUDE_REF = piexif.GPSIFD.GPSLatitudeRef
TAG_LATITUDE = piexif.GPSIFD.GPSLatitude
TAG_LONGITUDE_REF = piexif.GPSIFD.GPSLongitudeRef
TAG_LONGITUDE = piexif.GPSIFD.GPSLongitude
TAG_ALTITUDE_REF = piexif.GPSIFD.GPSAltitudeRef
TAG_ALTITUDE = piexif.GPSIFD.GPSAltitude
TAG_IMG_DIRECTION = piexif.GPSIFD.GPSImgDirection
TAG_VERSION_ID = piexif.GPSIFD.GPSVersionID
TAG_DATETIME_ORIGINAL = piexif.ExifIFD.DateTimeOriginal
TAG_DATETIME = piexif.ImageIFD.DateTime

# --- Stamp layout ---
MIN_FONT_SIZE = 36
MAX_FONT_SIZE = 90
FONT_SIZE_DIVISOR = 10
LINE_SPACING_RATIO = 0.2
BAND_PADDING_RATIO = 0.04
BAND_COLOR = (30, 30, 30, 204)  # 80% opaque
TEXT_COLOR = (255, 255, 255, 255)
DEFAULT_FONT_PATH = "DejaVuSansMono-Bold.ttf"
DEFAULT_JPEG_QUALITY = 95

CARDINAL_DIRECTIONS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
MONTH_ABBREVIATIONS = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]

# --- Output names ---
STAMPED_SUFFIX = "_STAMPED"
GEOTAG_PREFIX = "EXIF_GPS_"

# --- OCR ---
DEFAULT_OCR_LANGUAGES = ["es", "en"]


class UIMessages:
    PROCESSING = "Procesando..."
    PROCESSING_ITEM = "Procesando: {name}"
    SUCCESS = "✅ Listo."
    ERROR = "❌ Error."
    NO_COORDINATES = (
        "No se detectaron coordenadas válidas en la imagen. Asegúrate de que el texto sea "
        "legible y esté en formato GMS (ej: 18° 27' 30\" N, 69° 57' 21\" W)"
    )
    NO_GPS = "La imagen no contiene metadatos GPS"
