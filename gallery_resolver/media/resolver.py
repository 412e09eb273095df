"""Resolution of collection references into concrete asset lists."""

import logging
from typing import Callable, Dict, List, Sequence

from gallery_resolver.media.fetchers import MAX_RESULTS, AssetFetcher
from gallery_resolver.models import (
    AssetNotFound,
    CollectionReference,
    Credentials,
    ExternalAsset,
    Failed,
    NotFound,
    Resolved,
    ResolutionFailure,
    ResolutionResult,
)

logger = logging.getLogger(__name__)

Strategy = Callable[[CollectionReference, Credentials, AssetFetcher, int], ResolutionResult]


def _to_assets(items: List[dict]) -> List[ExternalAsset]:
    return [ExternalAsset.from_api(item) for item in items]


def folder_expression(folder: str) -> str:
    """Search expression matching a folder and its immediate children."""
    escaped = folder.replace('"', '\\"')
    return f'folder="{escaped}" OR folder="{escaped}/*"'


def direct_collection_lookup(
    reference: CollectionReference,
    credentials: Credentials,
    fetcher: AssetFetcher,
    max_results: int = MAX_RESULTS,
) -> ResolutionResult:
    """Query the collection assets endpoint by account and collection id."""
    account = reference.account_hint or credentials.account_name
    try:
        items = fetcher.fetch_collection(account, reference.collection_id, max_results)
    except AssetNotFound as e:
        return NotFound(f"colección {reference.collection_id}: {e}")
    except ResolutionFailure as e:
        return Failed(f"colección {reference.collection_id}: {e}")
    if not items:
        return NotFound(f"colección {reference.collection_id} vacía")
    return Resolved(_to_assets(items))


def folder_search(
    reference: CollectionReference,
    credentials: Credentials,
    fetcher: AssetFetcher,
    max_results: int = MAX_RESULTS,
) -> ResolutionResult:
    """Search for assets stored under a folder named like the record's album."""
    folder = reference.record.carpeta.strip().strip("/")
    if not folder:
        return NotFound("sin carpeta para buscar")
    try:
        items = fetcher.search(folder_expression(folder), max_results)
    except AssetNotFound as e:
        return NotFound(f"carpeta {folder}: {e}")
    except ResolutionFailure as e:
        return Failed(f"carpeta {folder}: {e}")
    if not items:
        return NotFound(f"carpeta {folder} vacía")
    return Resolved(_to_assets(items))


STRATEGIES: Dict[str, Strategy] = {
    "collection": direct_collection_lookup,
    "folder": folder_search,
}
DEFAULT_STRATEGY_ORDER = ("collection", "folder")


def strategies_for(names: Sequence[str]) -> List[Strategy]:
    """Look up strategies by name, keeping the given order."""
    return [STRATEGIES[name] for name in names]


class CollectionResolver:
    """Tries resolution strategies in order until one yields assets."""

    def __init__(
        self,
        credentials: Credentials,
        fetcher: AssetFetcher,
        strategies: Sequence[Strategy] = None,
        max_results: int = MAX_RESULTS,
        fallback_on_failure: bool = True,
    ):
        """Initialize the resolver.

        Args:
            fallback_on_failure: When False, a failed strategy ends the chain and
                later strategies only run after an empty or not found result
        """
        self.credentials = credentials
        self.fetcher = fetcher
        self.strategies = list(strategies) if strategies is not None else strategies_for(DEFAULT_STRATEGY_ORDER)
        self.max_results = min(max_results, MAX_RESULTS)
        self.fallback_on_failure = fallback_on_failure

    def resolve(self, reference: CollectionReference) -> ResolutionResult:
        """Resolve a collection reference.

        Returns:
            Resolved with the first non-empty asset list, Resolved([]) when every
            strategy came back empty or not found, otherwise Failed
        """
        failures = []
        for strategy in self.strategies:
            result = strategy(reference, self.credentials, self.fetcher, self.max_results)
            logger.debug(
                "Strategy %s for collection %s: %s",
                strategy.__name__,
                reference.collection_id,
                type(result).__name__,
            )
            if isinstance(result, Resolved) and result.assets:
                return result
            if isinstance(result, Failed):
                failures.append(result.reason)
                if not self.fallback_on_failure:
                    break

        if failures:
            return Failed("; ".join(failures))
        return Resolved([])
