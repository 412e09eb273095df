"""Mapping of records and media service assets onto the canonical Photo."""

import uuid
from typing import Optional

from gallery_resolver.models import AlbumRecord, ExternalAsset, Photo

DEFAULT_NAME = "Imagen"
DEFAULT_FORMAT = "IMG"
MISSING_VALUE = "N/A"
PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x400?text=Contenido+no+disponible"

_BYTES_PER_MB = 1024 * 1024


def format_size(size_bytes: Optional[int]) -> str:
    """Render a byte count as megabytes with two decimals, or N/A when unknown."""
    if size_bytes is None:
        return MISSING_VALUE
    return f"{size_bytes / _BYTES_PER_MB:.2f} MB"


def _last_segment(public_id: Optional[str]) -> Optional[str]:
    if not public_id:
        return None
    return public_id.rstrip("/").split("/")[-1] or None


def _dimensions(asset: ExternalAsset, fallback: Optional[str]) -> Optional[str]:
    if asset.width and asset.height:
        return f"{asset.width}x{asset.height}"
    return fallback


def _record_id(record: AlbumRecord) -> str:
    if record.id is not None and str(record.id):
        return str(record.id)
    return uuid.uuid4().hex


def normalize_record(record: AlbumRecord, public_id: Optional[str] = None) -> Photo:
    """Map a direct image (or single external asset) record to a Photo."""
    return Photo(
        id=_record_id(record),
        url=record.url,
        carpeta=record.carpeta,
        nombre=record.nombre or _last_segment(public_id) or DEFAULT_NAME,
        fecha=record.fecha,
        formato=record.formato.upper() if record.formato else DEFAULT_FORMAT,
        size=record.size,
        dimensiones=record.dimensiones,
    )


def normalize_asset(record: AlbumRecord, asset: ExternalAsset) -> Photo:
    """Map one resolved collection member to a Photo labelled with its record's album."""
    return Photo(
        id=asset.public_id or _record_id(record),
        url=asset.secure_url or PLACEHOLDER_IMAGE_URL,
        carpeta=record.carpeta,
        nombre=asset.filename or _last_segment(asset.public_id) or record.nombre or DEFAULT_NAME,
        fecha=asset.created_at or record.fecha,
        formato=asset.format.upper() if asset.format else DEFAULT_FORMAT,
        size=format_size(asset.bytes),
        dimensiones=_dimensions(asset, record.dimensiones),
    )


def normalize_failure(record: AlbumRecord, reason: str) -> Photo:
    """Build the visible placeholder for a record that could not be resolved."""
    suffix = str(record.id) if record.id is not None else uuid.uuid4().hex
    return Photo(
        id=f"error-{suffix}",
        url=PLACEHOLDER_IMAGE_URL,
        carpeta=record.carpeta,
        nombre=f"{record.carpeta or 'Sin carpeta'} - Error: {reason}",
        fecha=record.fecha,
        formato=MISSING_VALUE,
        size=MISSING_VALUE,
        dimensiones=record.dimensiones,
    )
