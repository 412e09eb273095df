"""Media service asset fetchers.

Two interchangeable implementations sit behind `AssetFetcher`: a raw HTTP
client built on requests and one built on the cloudinary SDK. Both return the
raw asset dictionaries of the `assets` or `resources` list and raise
`AssetNotFound` / `ResolutionFailure` on errors.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from gallery_resolver.models import AssetNotFound, ConfigurationError, Credentials, ResolutionFailure

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.cloudinary.com/v1_1"
DEFAULT_TIMEOUT = 5.0
MAX_RESULTS = 100


def extract_asset_list(body: Any) -> List[Dict[str, Any]]:
    """Pull the asset list out of a response body.

    Raises:
        ResolutionFailure: If the body holds neither an `assets` nor a `resources` list
    """
    if not isinstance(body, dict):
        raise ResolutionFailure("unexpected response body")
    for key in ("assets", "resources"):
        items = body.get(key)
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
    raise ResolutionFailure("response without assets")


def import_cloudinary():
    """Import the cloudinary SDK.

    Returns:
        The `cloudinary`, `cloudinary.api` and `cloudinary.exceptions` modules

    Raises:
        ConfigurationError: If the SDK rejects the CLOUDINARY_URL environment variable
    """
    try:
        import cloudinary
        from cloudinary import api as cloudinary_api
        from cloudinary import exceptions as cloudinary_exceptions
    except ValueError as e:
        raise ConfigurationError(f"cloudinary SDK rejected CLOUDINARY_URL: {e}") from e
    return cloudinary, cloudinary_api, cloudinary_exceptions


class AssetFetcher(ABC):
    """Fetches raw asset entries from the media service."""

    def __init__(self, credentials: Credentials, timeout: float = DEFAULT_TIMEOUT):
        self.credentials = credentials
        self.timeout = timeout

    @abstractmethod
    def fetch_collection(
        self, account: str, collection_id: str, max_results: int = MAX_RESULTS
    ) -> List[Dict[str, Any]]:
        """Return the assets of one collection."""

    @abstractmethod
    def search(self, expression: str, max_results: int = MAX_RESULTS) -> List[Dict[str, Any]]:
        """Return the assets matching a search expression."""


class HttpAssetFetcher(AssetFetcher):
    """Talks to the media service REST endpoints with requests."""

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT,
        api_base: str = DEFAULT_API_BASE,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(credentials, timeout)
        self.api_base = api_base.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Basic {credentials.basic_token}",
                "Accept": "application/json",
            }
        )

    def _request(self, method: str, url: str, **kwargs) -> List[Dict[str, Any]]:
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise ResolutionFailure("timeout") from e
        except requests.RequestException as e:
            raise ResolutionFailure(f"network error: {e}") from e

        if response.status_code == 404:
            raise AssetNotFound("not found")
        if not response.ok:
            raise ResolutionFailure(f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise ResolutionFailure("invalid JSON") from e
        return extract_asset_list(body)

    def fetch_collection(
        self, account: str, collection_id: str, max_results: int = MAX_RESULTS
    ) -> List[Dict[str, Any]]:
        url = f"{self.api_base}/{account}/collections/{collection_id}/assets"
        return self._request("GET", url, params={"max_results": max_results})

    def search(self, expression: str, max_results: int = MAX_RESULTS) -> List[Dict[str, Any]]:
        url = f"{self.api_base}/{self.credentials.account_name}/resources/search"
        return self._request(
            "POST", url, json={"expression": expression, "max_results": max_results}
        )


class CloudinaryAssetFetcher(AssetFetcher):
    """Talks to the media service through the cloudinary SDK.

    Credentials are passed on every call so no global `cloudinary.config`
    state is touched. The SDK is imported on construction because importing
    it parses `CLOUDINARY_URL` from the environment.
    """

    def __init__(self, credentials: Credentials, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(credentials, timeout)
        self.sdk, self.sdk_api, self.sdk_exceptions = import_cloudinary()

    def _options(self, account: Optional[str] = None) -> Dict[str, Any]:
        return {
            "cloud_name": account or self.credentials.account_name,
            "api_key": self.credentials.api_key,
            "api_secret": self.credentials.api_secret,
            "timeout": self.timeout,
        }

    def _call(self, func, *args, **kwargs) -> List[Dict[str, Any]]:
        try:
            response = func(*args, **kwargs)
        except self.sdk_exceptions.NotFound as e:
            raise AssetNotFound("not found") from e
        except self.sdk_exceptions.Error as e:
            raise ResolutionFailure(f"media service error: {e}") from e
        return extract_asset_list(dict(response) if response is not None else None)

    def fetch_collection(
        self, account: str, collection_id: str, max_results: int = MAX_RESULTS
    ) -> List[Dict[str, Any]]:
        return self._call(
            self.sdk_api.call_api,
            "get",
            ["collections", collection_id, "assets"],
            {"max_results": max_results},
            **self._options(account),
        )

    def search(self, expression: str, max_results: int = MAX_RESULTS) -> List[Dict[str, Any]]:
        query = self.sdk.Search().expression(expression).max_results(max_results)
        return self._call(query.execute, **self._options())


FETCHERS = {
    "http": HttpAssetFetcher,
    "sdk": CloudinaryAssetFetcher,
}


def build_fetcher(kind: str, credentials: Credentials, timeout: float = DEFAULT_TIMEOUT) -> AssetFetcher:
    """Create the fetcher registered under `kind`.

    Raises:
        ConfigurationError: If no fetcher is registered under that name
    """
    try:
        fetcher_class = FETCHERS[kind]
    except KeyError as e:
        raise ConfigurationError(
            f"Unknown fetcher '{kind}', expected one of: {', '.join(sorted(FETCHERS))}"
        ) from e
    return fetcher_class(credentials, timeout=timeout)
