"""Models for Gallery Resolver."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from gallery_resolver.database.models import AlbumRecord


@dataclass(frozen=True)
class Credentials:
    """Media-service credentials parsed from a connection string."""
    api_key: str
    api_secret: str
    account_name: str
    basic_token: str = field(default="", repr=False)


@dataclass(frozen=True)
class DirectImage:
    """A record whose url is a plain, directly fetchable image."""
    record: AlbumRecord


@dataclass(frozen=True)
class SingleExternalAsset:
    """A record pointing at one asset on the media service delivery host."""
    record: AlbumRecord
    public_id: str


@dataclass(frozen=True)
class CollectionReference:
    """A record pointing at a collection of externally hosted assets."""
    record: AlbumRecord
    collection_id: str
    account_hint: Optional[str] = None


ClassifiedReference = Union[DirectImage, SingleExternalAsset, CollectionReference]


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ExternalAsset:
    """Represents an asset returned by the media service."""
    public_id: str
    secure_url: str
    created_at: str
    filename: Optional[str] = None
    format: Optional[str] = None
    bytes: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ExternalAsset":
        """Build an asset from one `assets`/`resources` list entry."""
        return cls(
            public_id=str(data.get("public_id") or ""),
            secure_url=str(data.get("secure_url") or data.get("url") or ""),
            created_at=str(data.get("created_at") or ""),
            filename=data.get("filename") or data.get("display_name") or None,
            format=data.get("format") or None,
            bytes=_as_int(data.get("bytes")),
            width=_as_int(data.get("width")),
            height=_as_int(data.get("height")),
        )


@dataclass
class Photo:
    """Canonical, display-ready photo."""
    id: str
    url: str
    carpeta: str
    nombre: str
    fecha: Optional[str] = None
    formato: Optional[str] = None
    size: Optional[str] = None
    dimensiones: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Return the JSON shape, leaving out absent optional fields."""
        data = {
            "id": self.id,
            "url": self.url,
            "carpeta": self.carpeta,
            "nombre": self.nombre,
        }
        for key in ("fecha", "formato", "size", "dimensiones"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class Resolved:
    """Collection lookup produced a (possibly empty) asset list."""
    assets: List[ExternalAsset]


@dataclass(frozen=True)
class NotFound:
    """Collection lookup found nothing under the given identifier."""
    reason: str


@dataclass(frozen=True)
class Failed:
    """Collection lookup failed."""
    reason: str


ResolutionResult = Union[Resolved, NotFound, Failed]


class GalleryError(Exception):
    """Base exception for gallery operations."""


class ConfigurationError(GalleryError):
    """Raised when credentials or connection settings are missing or malformed."""


class ClassificationAmbiguity(GalleryError):
    """Raised when a url cannot be parsed into a usable reference."""


class ResolutionFailure(GalleryError):
    """Raised when a media service call fails."""


class AssetNotFound(ResolutionFailure):
    """Raised when the media service answers with not found."""


class StoreReadFailure(GalleryError):
    """Raised when album records cannot be read from the data store."""


__all__ = [
    "AlbumRecord",
    "AssetNotFound",
    "ClassificationAmbiguity",
    "ClassifiedReference",
    "CollectionReference",
    "ConfigurationError",
    "Credentials",
    "DirectImage",
    "ExternalAsset",
    "Failed",
    "GalleryError",
    "NotFound",
    "Photo",
    "Resolved",
    "ResolutionFailure",
    "ResolutionResult",
    "SingleExternalAsset",
    "StoreReadFailure",
]
