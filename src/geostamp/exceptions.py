# src/geostamp/exceptions.py
from .constants import UIMessages


class GeoStampError(Exception):
    """Clase base para todas las excepciones de esta aplicación."""

    kind = "error"


class InputFolderMissingError(GeoStampError):
    """Se lanza cuando la carpeta de entrada no existe."""

    kind = "input_folder_missing"

    def __init__(self, path):
        super().__init__(f"La carpeta de entrada no existe: {path}")


class NoImagesFoundError(GeoStampError):
    """Se lanza cuando no hay imágenes válidas en la carpeta."""

    kind = "no_images"

    def __init__(self, path):
        super().__init__(f"No se encontraron imágenes (JPG/PNG/HEIC) en: {path}")


class InputUnreadableError(GeoStampError):
    """The file or image bytes cannot be decoded."""

    kind = "input_unreadable"

    def __init__(self, detail=""):
        msg = "El archivo está dañado o no es una imagen válida"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class NoCoordinateFoundError(GeoStampError):
    """Nothing matching a supported coordinate notation was found."""

    kind = "no_coordinate"

    def __init__(self, message=None):
        super().__init__(message or UIMessages.NO_COORDINATES)


class NoGPSDataError(NoCoordinateFoundError):
    """Se lanza si la imagen (o ninguna imagen del lote) tiene GPS."""

    kind = "no_gps"

    def __init__(self, total_fotos_escaneadas=None, ruta=""):
        self.total_fotos = total_fotos_escaneadas
        self.ruta = ruta
        if total_fotos_escaneadas is None:
            msg = UIMessages.NO_GPS
        else:
            msg = (
                f"No se encontraron datos GPS válidos en las {total_fotos_escaneadas} "
                f"fotos escaneadas en {ruta}. Verifica si el GPS estaba activado en la cámara."
            )
        super().__init__(msg)


class MetadataWriteError(GeoStampError):
    """The EXIF container could not be re-encoded with the new tags."""

    kind = "metadata_write_failed"

    def __init__(self, detail=""):
        super().__init__(f"Error al escribir metadatos EXIF: {detail}" if detail else "Error al escribir metadatos EXIF")


class RenderError(GeoStampError):
    """The stamped pixel buffer could not be produced."""

    kind = "render_failed"

    def __init__(self, detail=""):
        super().__init__(f"No se pudo estampar la imagen: {detail}" if detail else "No se pudo estampar la imagen")


class RecognitionError(GeoStampError):
    """The external text recognition step failed."""

    kind = "recognition_failed"

    def __init__(self, detail=""):
        super().__init__(f"Falló el reconocimiento de texto: {detail}" if detail else "Falló el reconocimiento de texto")


class DeviceUnavailableError(GeoStampError):
    """Camera, geolocation or orientation sensor denied or absent."""

    kind = "device_unavailable"

    def __init__(self, reason=""):
        self.reason = reason
        msg = "Permiso denegado o dispositivo no disponible"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
