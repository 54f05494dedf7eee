from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional


class Rational(NamedTuple):
    """EXIF rational: one GMS component as numerator/denominator."""
    numerator: int
    denominator: int


@dataclass(frozen=True)
class DecimalCoordinate:
    """Latitud y longitud en grados decimales."""
    latitude: float
    longitude: float

    def __str__(self):
        return f"{self.latitude}, {self.longitude}"


@dataclass(frozen=True)
class GMSCoordinate:
    """Display-only degrees/minutes/seconds projection of one axis."""
    degrees: int
    minutes: int
    seconds: float
    hemisphere: str = ""


@dataclass(frozen=True)
class TextCoordinate:
    """A coordinate found in recognized text."""
    latitude: float
    longitude: float
    raw: str
    latitude_gms: GMSCoordinate
    longitude_gms: GMSCoordinate
    notation: str

    @property
    def coordinate(self) -> DecimalCoordinate:
        return DecimalCoordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class GpsRecord:
    """Almacena la posición resuelta de una foto."""
    coordinate: DecimalCoordinate
    formatted_latitude: str
    formatted_longitude: str
    altitude: Optional[float] = None
    bearing: Optional[float] = None


@dataclass
class ExifContainer:
    """The four EXIF tag groups plus the parts we carry through untouched."""
    zeroth: Dict[int, Any] = field(default_factory=dict)
    exif: Dict[int, Any] = field(default_factory=dict)
    gps: Dict[int, Any] = field(default_factory=dict)
    first: Dict[int, Any] = field(default_factory=dict)
    interop: Dict[int, Any] = field(default_factory=dict)
    thumbnail: Optional[bytes] = None

    @classmethod
    def from_piexif(cls, exif_dict: Dict[str, Any]) -> "ExifContainer":
        return cls(
            zeroth=dict(exif_dict.get("0th") or {}),
            exif=dict(exif_dict.get("Exif") or {}),
            gps=dict(exif_dict.get("GPS") or {}),
            first=dict(exif_dict.get("1st") or {}),
            interop=dict(exif_dict.get("Interop") or {}),
            thumbnail=exif_dict.get("thumbnail"),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.zeroth or self.exif or self.gps or self.first or self.interop or self.thumbnail)

    def to_piexif(self) -> Dict[str, Any]:
        return {
            "0th": dict(self.zeroth),
            "Exif": dict(self.exif),
            "GPS": dict(self.gps),
            "1st": dict(self.first),
            "Interop": dict(self.interop),
            "thumbnail": self.thumbnail,
        }


@dataclass
class PhotoMetadata:
    """Objeto que representa los metadatos leídos de una foto."""
    filename: str
    gps: Optional[GpsRecord]
    timestamp: Optional[str]
    container: ExifContainer = field(default_factory=ExifContainer)

    @property
    def has_gps(self) -> bool:
        return self.gps is not None


class ItemStatus(str, Enum):
    PENDING = "pending"
    EXTRACTING = "extracting"
    READING = "reading"
    WRITING = "writing"
    RENDERING = "rendering"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class BatchItem:
    """One image handed to the pipeline."""
    name: str
    data: bytes


@dataclass
class ItemResult:
    """Outcome of one pipeline item."""
    index: int
    name: str
    status: ItemStatus = ItemStatus.PENDING
    error_kind: str = ""
    error_message: str = ""
    coordinate: Optional[DecimalCoordinate] = None
    gps: Optional[GpsRecord] = None
    timestamp: Optional[str] = None
    recognized_text: str = ""
    output: Optional[bytes] = None
    original: Optional[bytes] = None

    @property
    def success(self) -> bool:
        return self.status is ItemStatus.SUCCEEDED


@dataclass
class BatchResult:
    """Result of batch processing."""
    items: List[ItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.status is ItemStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if item.status is ItemStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return sum(1 for item in self.items if item.status is ItemStatus.CANCELLED)

    @property
    def summary(self) -> str:
        return f"{self.succeeded}/{self.total}"

    def successful_items(self) -> List[ItemResult]:
        return [item for item in self.items if item.success]
