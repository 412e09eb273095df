"""URL classification utilities for album records."""

import logging
import os
import re
from typing import Iterable, List, Optional
from urllib.parse import unquote, urlparse

from gallery_resolver.models import (
    AlbumRecord,
    ClassificationAmbiguity,
    ClassifiedReference,
    CollectionReference,
    DirectImage,
    SingleExternalAsset,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_HOSTS = ("collection.cloudinary.com",)
DEFAULT_ASSET_HOSTS = ("res.cloudinary.com",)

COLLECTIONS_SEGMENT = "collections"
_ACTION_SUFFIXES = ("view", "edit")
_VERSION_SEGMENT = re.compile(r"^v\d+$")


def strip_url_suffixes(path: str) -> List[str]:
    """Split a url path into segments, dropping trailing slashes and /view, /edit."""
    segments = [unquote(s) for s in path.split("/") if s.strip()]
    while segments and segments[-1].lower() in _ACTION_SUFFIXES:
        segments.pop()
    return segments


def _is_collection_host(host: str, collection_hosts: Iterable[str]) -> bool:
    return host in collection_hosts or host.split(".", 1)[0] == "collection"


def _collection_from_host(record: AlbumRecord, segments: List[str]) -> CollectionReference:
    if not segments:
        raise ClassificationAmbiguity(f"No collection id in {record.url}")
    collection_id = segments[-1]
    account = segments[0] if len(segments) > 1 else None
    return CollectionReference(record=record, collection_id=collection_id, account_hint=account)


def _collection_from_path(record: AlbumRecord, segments: List[str]) -> CollectionReference:
    index = segments.index(COLLECTIONS_SEGMENT)
    if index == len(segments) - 1:
        raise ClassificationAmbiguity(f"Empty collection id in {record.url}")
    collection_id = segments[-1]
    account = segments[index - 1] if index > 0 else None
    return CollectionReference(record=record, collection_id=collection_id, account_hint=account)


def extract_public_id(url: str) -> Optional[str]:
    """Extract the public id from a media service delivery url.

    `https://res.cloudinary.com/demo/image/upload/v1712/trips/beach.jpg`
    gives `trips/beach`.
    """
    segments = strip_url_suffixes(urlparse(url).path)
    if "upload" not in segments:
        return None
    tail = segments[segments.index("upload") + 1:]
    if tail and _VERSION_SEGMENT.match(tail[0]):
        tail = tail[1:]
    if not tail:
        return None
    tail[-1] = os.path.splitext(tail[-1])[0]
    return "/".join(tail) or None


def classify_record(
    record: AlbumRecord,
    collection_hosts: Iterable[str] = DEFAULT_COLLECTION_HOSTS,
    asset_hosts: Iterable[str] = DEFAULT_ASSET_HOSTS,
) -> ClassifiedReference:
    """Decide whether a record is a direct image, a single asset or a collection.

    Args:
        record: Album record read from the data store
        collection_hosts: Hosts serving collection browsing pages
        asset_hosts: Hosts delivering single media service assets

    Returns:
        The classified reference

    Raises:
        ClassificationAmbiguity: If the record has no url at all
    """
    if not record.url or not record.url.strip():
        raise ClassificationAmbiguity("URL vacía")

    parsed = urlparse(record.url.strip())
    host = (parsed.hostname or "").lower()
    segments = strip_url_suffixes(parsed.path)

    try:
        if _is_collection_host(host, collection_hosts):
            return _collection_from_host(record, segments)
        if COLLECTIONS_SEGMENT in segments:
            return _collection_from_path(record, segments)
    except ClassificationAmbiguity as e:
        logger.debug("Treating record %s as a direct image: %s", record.id, e)
        return DirectImage(record=record)

    if host in asset_hosts:
        public_id = extract_public_id(record.url)
        if public_id:
            return SingleExternalAsset(record=record, public_id=public_id)

    return DirectImage(record=record)
