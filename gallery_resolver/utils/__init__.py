"""Utility functions for Gallery Resolver."""

from .auth import load_credentials, parse_credentials
from .url_utils import classify_record, extract_public_id, strip_url_suffixes

__all__ = [
    "classify_record",
    "extract_public_id",
    "load_credentials",
    "parse_credentials",
    "strip_url_suffixes",
]
