"""Data models for database operations."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence

GALLERY_COLUMNS = ("id", "url", "carpeta", "nombre", "fecha", "formato", "size", "dimensiones")


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class AlbumRecord:
    """Data class for one row of the gallery table."""
    id: Optional[int]
    url: str
    carpeta: str
    nombre: Optional[str] = None
    fecha: Optional[str] = None
    formato: Optional[str] = None
    size: Optional[str] = None
    dimensiones: Optional[str] = None

    @classmethod
    def from_row(cls, row: Sequence[Any], columns: Sequence[str] = GALLERY_COLUMNS) -> "AlbumRecord":
        """Build a record from a row; columns missing from the table stay None."""
        values = dict(zip(columns, row))
        return cls(
            id=values.get("id"),
            url=str(values.get("url") or "").strip(),
            carpeta=str(values.get("carpeta") or "").strip(),
            nombre=_as_text(values.get("nombre")),
            fecha=_as_text(values.get("fecha")),
            formato=_as_text(values.get("formato")),
            size=_as_text(values.get("size")),
            dimensiones=_as_text(values.get("dimensiones")),
        )
