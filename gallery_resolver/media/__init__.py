"""Media service access for Gallery Resolver."""

from .fetchers import AssetFetcher, CloudinaryAssetFetcher, HttpAssetFetcher, build_fetcher
from .resolver import CollectionResolver, direct_collection_lookup, folder_search

__all__ = [
    "AssetFetcher",
    "CloudinaryAssetFetcher",
    "CollectionResolver",
    "HttpAssetFetcher",
    "build_fetcher",
    "direct_collection_lookup",
    "folder_search",
]
