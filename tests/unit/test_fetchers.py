"""Unit tests for media service fetchers."""

import builtins
from unittest.mock import MagicMock

import pytest
import requests
from cloudinary import exceptions as cloudinary_exceptions

from gallery_resolver.media.fetchers import (
    DEFAULT_API_BASE,
    CloudinaryAssetFetcher,
    HttpAssetFetcher,
    build_fetcher,
    extract_asset_list,
    import_cloudinary,
)
from gallery_resolver.models import AssetNotFound, ConfigurationError, ResolutionFailure


def make_response(status_code=200, body=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def http_fetcher(credentials, session):
    return HttpAssetFetcher(credentials, timeout=3.0, session=session)


def test_http_fetcher_sets_basic_auth(http_fetcher, session, credentials):
    """Test that every request carries the Basic token."""
    assert session.headers["Authorization"] == f"Basic {credentials.basic_token}"


def test_http_fetch_collection(http_fetcher, session, make_asset):
    """Test the collection assets endpoint call."""
    session.request.return_value = make_response(body={"assets": [make_asset(1), make_asset(2)]})

    items = http_fetcher.fetch_collection("acct", "abc123", 100)

    assert [item["public_id"] for item in items] == ["events/photo_1", "events/photo_2"]
    session.request.assert_called_once_with(
        "GET",
        f"{DEFAULT_API_BASE}/acct/collections/abc123/assets",
        timeout=3.0,
        params={"max_results": 100},
    )


def test_http_search(http_fetcher, session, make_asset):
    """Test the search endpoint call and the `resources` body shape."""
    session.request.return_value = make_response(body={"resources": [make_asset(1)], "total_count": 1})

    items = http_fetcher.search('folder="Events"', 50)

    assert len(items) == 1
    session.request.assert_called_once_with(
        "POST",
        f"{DEFAULT_API_BASE}/demo/resources/search",
        timeout=3.0,
        json={"expression": 'folder="Events"', "max_results": 50},
    )


def test_http_not_found(http_fetcher, session):
    """Test that 404 maps to AssetNotFound."""
    session.request.return_value = make_response(status_code=404, body={"error": {"message": "Not found"}})

    with pytest.raises(AssetNotFound):
        http_fetcher.fetch_collection("acct", "missing")


@pytest.mark.parametrize(
    "response, message",
    [
        (make_response(status_code=500, body={}), "HTTP 500"),
        (make_response(status_code=401, body={}), "HTTP 401"),
        (make_response(json_error=True), "invalid JSON"),
        (make_response(body=["not", "a", "dict"]), "unexpected response body"),
        (make_response(body={"message": "ok"}), "response without assets"),
    ],
)
def test_http_failures(http_fetcher, session, response, message):
    """Test that non-2xx and malformed bodies raise ResolutionFailure."""
    session.request.return_value = response

    with pytest.raises(ResolutionFailure) as exc_info:
        http_fetcher.fetch_collection("acct", "abc")

    assert not isinstance(exc_info.value, AssetNotFound)
    assert message in str(exc_info.value)


def test_http_timeout(http_fetcher, session):
    """Test that a timeout raises ResolutionFailure."""
    session.request.side_effect = requests.Timeout("read timed out")

    with pytest.raises(ResolutionFailure, match="timeout"):
        http_fetcher.search("folder=x")


def test_http_connection_error(http_fetcher, session):
    """Test that network errors raise ResolutionFailure."""
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(ResolutionFailure, match="network error"):
        http_fetcher.search("folder=x")


def test_extract_asset_list_skips_non_dict_entries():
    """Test that junk list entries are dropped."""
    assert extract_asset_list({"assets": [{"public_id": "a"}, "junk", None]}) == [{"public_id": "a"}]


def test_sdk_fetch_collection(credentials, mocker, make_asset):
    """Test the SDK collection call passes credentials per call."""
    call_api = mocker.patch(
        "cloudinary.api.call_api",
        return_value={"assets": [make_asset(1)]},
    )
    fetcher = CloudinaryAssetFetcher(credentials, timeout=4.0)

    items = fetcher.fetch_collection("acct", "abc123", 100)

    assert items[0]["public_id"] == "events/photo_1"
    call_api.assert_called_once_with(
        "get",
        ["collections", "abc123", "assets"],
        {"max_results": 100},
        cloud_name="acct",
        api_key="123456",
        api_secret="abcdef",
        timeout=4.0,
    )


def test_sdk_search(credentials, mocker, make_asset):
    """Test the SDK search builder and execution."""
    search_class = mocker.patch("cloudinary.Search")
    query = search_class.return_value.expression.return_value.max_results.return_value
    query.execute.return_value = {"resources": [make_asset(1), make_asset(2)]}
    fetcher = CloudinaryAssetFetcher(credentials)

    items = fetcher.search('folder="Events"', 100)

    assert len(items) == 2
    search_class.return_value.expression.assert_called_once_with('folder="Events"')
    search_class.return_value.expression.return_value.max_results.assert_called_once_with(100)
    assert query.execute.call_args.kwargs["cloud_name"] == "demo"


def test_sdk_not_found(credentials, mocker):
    """Test that SDK NotFound maps to AssetNotFound."""
    mocker.patch(
        "cloudinary.api.call_api",
        side_effect=cloudinary_exceptions.NotFound("Collection not found"),
    )

    with pytest.raises(AssetNotFound):
        CloudinaryAssetFetcher(credentials).fetch_collection("acct", "abc")


def test_sdk_error(credentials, mocker):
    """Test that other SDK errors map to ResolutionFailure."""
    mocker.patch(
        "cloudinary.api.call_api",
        side_effect=cloudinary_exceptions.GeneralError("boom"),
    )

    with pytest.raises(ResolutionFailure, match="media service error"):
        CloudinaryAssetFetcher(credentials).fetch_collection("acct", "abc")


def test_build_fetcher(credentials):
    """Test the fetcher factory."""
    assert isinstance(build_fetcher("http", credentials), HttpAssetFetcher)
    assert isinstance(build_fetcher("sdk", credentials, timeout=1.0), CloudinaryAssetFetcher)

    with pytest.raises(ConfigurationError):
        build_fetcher("ftp", credentials)


@pytest.fixture
def rejecting_sdk_import(mocker):
    """Make `import cloudinary` fail the way the SDK does for a bad CLOUDINARY_URL."""
    real_import = builtins.__import__

    def fake_import(name, *args, **kwargs):
        if name == "cloudinary" or name.startswith("cloudinary."):
            raise ValueError("Invalid CLOUDINARY_URL scheme. Expecting to start with 'cloudinary://'")
        return real_import(name, *args, **kwargs)

    return mocker.patch("builtins.__import__", side_effect=fake_import)


def test_import_cloudinary_rejected_url(rejecting_sdk_import):
    """Test that the SDK's import-time ValueError becomes a ConfigurationError."""
    with pytest.raises(ConfigurationError, match="CLOUDINARY_URL"):
        import_cloudinary()


def test_build_sdk_fetcher_rejected_url(credentials, rejecting_sdk_import):
    """Test that building the SDK fetcher reports a bad environment as configuration."""
    with pytest.raises(ConfigurationError):
        build_fetcher("sdk", credentials)


def test_http_fetcher_ignores_sdk(credentials, rejecting_sdk_import):
    """Test that the HTTP fetcher never imports the SDK."""
    assert isinstance(build_fetcher("http", credentials), HttpAssetFetcher)
