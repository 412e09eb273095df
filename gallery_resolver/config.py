"""Configuration loading for Gallery Resolver."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from gallery_resolver.media.fetchers import DEFAULT_TIMEOUT, FETCHERS, MAX_RESULTS
from gallery_resolver.media.resolver import DEFAULT_STRATEGY_ORDER, STRATEGIES
from gallery_resolver.models import ConfigurationError
from gallery_resolver.utils.url_utils import DEFAULT_ASSET_HOSTS, DEFAULT_COLLECTION_HOSTS

DEFAULT_DB_PATH = "gallery.db"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(item.strip().lower() for item in value.split(",") if item.strip())


def _parse_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got '{raw}'")
    return value


def _parse_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false, got '{raw}'")


@dataclass(frozen=True)
class GalleryConfig:
    """Settings for one gallery service instance."""
    db_path: str = DEFAULT_DB_PATH
    media_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    fetcher: str = "http"
    fallback_order: Tuple[str, ...] = DEFAULT_STRATEGY_ORDER
    max_results: int = MAX_RESULTS
    fallback_on_failure: bool = True
    workers: int = 1
    collection_hosts: Tuple[str, ...] = DEFAULT_COLLECTION_HOSTS
    asset_hosts: Tuple[str, ...] = DEFAULT_ASSET_HOSTS

    def __post_init__(self):
        if not self.db_path or not self.db_path.strip():
            raise ConfigurationError("Database path is not configured")
        if self.fetcher not in FETCHERS:
            raise ConfigurationError(
                f"Unknown fetcher '{self.fetcher}', expected one of: {', '.join(sorted(FETCHERS))}"
            )
        unknown = [name for name in self.fallback_order if name not in STRATEGIES]
        if unknown or not self.fallback_order:
            raise ConfigurationError(
                f"Invalid fallback order {self.fallback_order!r}, "
                f"expected names from: {', '.join(sorted(STRATEGIES))}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GalleryConfig":
        """Build the configuration from environment variables.

        A `.env` file in the working directory is loaded first when reading
        the process environment.

        Raises:
            ConfigurationError: If a value is present but invalid
        """
        if env is None:
            load_dotenv()
            env = os.environ

        db_path = env.get("GALLERY_DB_PATH", DEFAULT_DB_PATH)
        if not db_path.strip():
            raise ConfigurationError("GALLERY_DB_PATH is set but empty")

        fallback = env.get("GALLERY_FALLBACK_ORDER")
        collection_hosts = env.get("GALLERY_COLLECTION_HOSTS")
        asset_hosts = env.get("GALLERY_ASSET_HOSTS")

        return cls(
            db_path=db_path.strip(),
            media_url=env.get("CLOUDINARY_URL") or None,
            timeout=_parse_number(env, "GALLERY_HTTP_TIMEOUT", DEFAULT_TIMEOUT, float),
            fetcher=(env.get("GALLERY_FETCHER") or "http").strip().lower(),
            fallback_order=_split_list(fallback) if fallback else DEFAULT_STRATEGY_ORDER,
            fallback_on_failure=_parse_flag(env, "GALLERY_FALLBACK_ON_FAILURE", True),
            max_results=min(_parse_number(env, "GALLERY_MAX_RESULTS", MAX_RESULTS, int), MAX_RESULTS),
            workers=_parse_number(env, "GALLERY_WORKERS", 1, int),
            collection_hosts=_split_list(collection_hosts) if collection_hosts else DEFAULT_COLLECTION_HOSTS,
            asset_hosts=_split_list(asset_hosts) if asset_hosts else DEFAULT_ASSET_HOSTS,
        )
