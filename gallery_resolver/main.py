"""Main module for Gallery Resolver."""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Dict, List, Optional

from tabulate import tabulate

from gallery_resolver.config import GalleryConfig
from gallery_resolver.database.db_manager import DatabaseError, DatabaseManager
from gallery_resolver.media.fetchers import AssetFetcher, build_fetcher
from gallery_resolver.media.resolver import CollectionResolver, strategies_for
from gallery_resolver.models import (
    AlbumRecord,
    CollectionReference,
    ConfigurationError,
    Failed,
    GalleryError,
    Photo,
    SingleExternalAsset,
    StoreReadFailure,
)
from gallery_resolver.normalizer import normalize_asset, normalize_failure, normalize_record
from gallery_resolver.utils.auth import load_credentials
from gallery_resolver.utils.url_utils import classify_record

logger = logging.getLogger(__name__)

RESOLUTION_DISABLED = "resolución externa deshabilitada"
EMPTY_COLLECTION = "colección vacía"


class GalleryService:
    """Builds the ordered photo list from the album records of the data store."""

    def __init__(
        self,
        config: GalleryConfig,
        db: Optional[DatabaseManager] = None,
        fetcher: Optional[AssetFetcher] = None,
    ):
        """Initialize the service.

        Credentials are parsed once here; when they are missing or malformed
        collection records render as placeholders and direct images are still
        served.
        """
        self.config = config
        self.db = db or DatabaseManager(config.db_path)
        self.credentials = load_credentials(config.media_url)
        self.resolver: Optional[CollectionResolver] = None
        if not self.credentials:
            return
        if fetcher is None:
            try:
                fetcher = build_fetcher(config.fetcher, self.credentials, timeout=config.timeout)
            except ConfigurationError as e:
                logger.warning("External collection resolution disabled: %s", e)
                return
        self.resolver = CollectionResolver(
            self.credentials,
            fetcher,
            strategies=strategies_for(config.fallback_order),
            max_results=config.max_results,
            fallback_on_failure=config.fallback_on_failure,
        )

    def read_records(self) -> List[AlbumRecord]:
        """Read every album record, translating data store errors."""
        try:
            return self.db.get_all_albums()
        except DatabaseError as e:
            raise StoreReadFailure(f"Error al obtener los datos de la galería: {e}") from e
        finally:
            self.db.close()

    def process_record(self, record: AlbumRecord) -> List[Photo]:
        """Classify, resolve and normalize one record.

        Never raises: failures become a single placeholder photo.
        """
        try:
            return self._process_record(record)
        except GalleryError as e:
            logger.warning("Record %s (%s) failed: %s", record.id, record.carpeta, e)
            return [normalize_failure(record, str(e))]
        except Exception as e:
            logger.exception("Unexpected error processing record %s", record.id)
            return [normalize_failure(record, f"error inesperado ({type(e).__name__})")]

    def _process_record(self, record: AlbumRecord) -> List[Photo]:
        reference = classify_record(
            record,
            collection_hosts=self.config.collection_hosts,
            asset_hosts=self.config.asset_hosts,
        )
        if isinstance(reference, SingleExternalAsset):
            return [normalize_record(record, public_id=reference.public_id)]
        if not isinstance(reference, CollectionReference):
            return [normalize_record(record)]

        if self.resolver is None:
            return [normalize_failure(record, RESOLUTION_DISABLED)]

        result = self.resolver.resolve(reference)
        if isinstance(result, Failed):
            logger.warning("Collection %s could not be resolved: %s", reference.collection_id, result.reason)
            return [normalize_failure(record, result.reason)]
        if not result.assets:
            return [normalize_failure(record, EMPTY_COLLECTION)]

        logger.info(
            "Collection %s expanded to %d assets for '%s'",
            reference.collection_id,
            len(result.assets),
            record.carpeta,
        )
        return [normalize_asset(record, asset) for asset in result.assets]

    def get_all_photos(self) -> List[Photo]:
        """Return the canonical photo list for every album record.

        Raises:
            StoreReadFailure: If the album records cannot be read
        """
        records = self.read_records()
        workers = max(1, self.config.workers)

        if workers > 1 and len(records) > 1:
            # executor.map yields in submission order
            with ThreadPoolExecutor(max_workers=workers) as executor:
                slices = list(executor.map(self.process_record, records))
        else:
            slices = [self.process_record(record) for record in records]

        photos = [photo for photo_slice in slices for photo in photo_slice]
        ensure_unique_ids(photos)
        logger.info("Resolved %d records into %d photos", len(records), len(photos))
        return photos

    def get_photos_as_dicts(self) -> List[Dict[str, str]]:
        """Return the photo list in its JSON response shape."""
        return [photo.to_dict() for photo in self.get_all_photos()]


def ensure_unique_ids(photos: List[Photo]) -> None:
    """Suffix repeated ids with -2, -3, ... in list order."""
    seen: Dict[str, int] = {}
    taken = {photo.id for photo in photos}
    for photo in photos:
        if photo.id not in seen:
            seen[photo.id] = 1
            continue
        base = photo.id
        count = seen[base]
        while True:
            count += 1
            candidate = f"{base}-{count}"
            if candidate not in taken:
                break
        seen[base] = count
        taken.add(candidate)
        photo.id = candidate


def print_photos(photos: List[Photo]) -> None:
    """Print photos as a table."""
    if not photos:
        print("No photos found")
        return
    rows = [
        [p.id, p.carpeta, p.nombre, p.fecha or "", p.formato or "", p.size or "", p.url]
        for p in photos
    ]
    print(
        tabulate(
            rows,
            headers=["ID", "Carpeta", "Nombre", "Fecha", "Formato", "Size", "URL"],
            tablefmt="psql",
        )
    )
    print(f"\nTotal photos: {len(photos)}")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Gallery Resolver")

    # Global arguments
    parser.add_argument("--db-path", type=str, help="SQLite database holding the gallery table")
    parser.add_argument("--fetcher", choices=["http", "sdk"], help="Media service client to use")
    parser.add_argument("--dry-run", action="store_true", help="Show writes without executing them")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands", required=True)

    list_parser = subparsers.add_parser("list", help="Resolve and list all photos")
    list_parser.add_argument("--json", action="store_true", help="Print the photo list as JSON")

    subparsers.add_parser("init-db", help="Create the gallery table")

    add_parser = subparsers.add_parser("add-album", help="Insert an album record")
    add_parser.add_argument("--url", required=True, help="Image or collection url")
    add_parser.add_argument("--carpeta", required=True, help="Album name")
    add_parser.add_argument("--nombre", help="Display name")
    add_parser.add_argument("--fecha", help="Date")
    add_parser.add_argument("--formato", help="Image format")
    add_parser.add_argument("--size", help="Human readable size")
    add_parser.add_argument("--dimensiones", help="Dimensions, e.g. 1920x1080")

    classify_parser = subparsers.add_parser("classify", help="Show how a url is classified")
    classify_parser.add_argument("url", type=str, help="Url to classify")

    return parser.parse_args(argv)


def build_config(args) -> GalleryConfig:
    """Merge command line overrides into the environment configuration."""
    config = GalleryConfig.from_env()
    overrides = {}
    if args.db_path:
        overrides["db_path"] = args.db_path
    if args.fetcher:
        overrides["fetcher"] = args.fetcher
    return replace(config, **overrides) if overrides else config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the Gallery Resolver CLI."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.command == "list":
        return list_photos(config, args)

    try:
        if args.command == "classify":
            reference = classify_record(
                AlbumRecord(id=None, url=args.url, carpeta=""),
                collection_hosts=config.collection_hosts,
                asset_hosts=config.asset_hosts,
            )
            details = {
                key: value for key, value in vars(reference).items() if key != "record"
            }
            print(f"{type(reference).__name__} {details}" if details else type(reference).__name__)
            return 0

        with DatabaseManager(config.db_path, dry_run=args.dry_run) as db:
            if args.command == "init-db":
                db.init_database()
                print(f"Initialized gallery table in {config.db_path}")
                return 0

            album_id = db.store_album(
                url=args.url,
                carpeta=args.carpeta,
                nombre=args.nombre,
                fecha=args.fecha,
                formato=args.formato,
                size=args.size,
                dimensiones=args.dimensiones,
            )
            print(f"Stored album record {album_id}")
            return 0
    except (GalleryError, DatabaseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def list_photos(config: GalleryConfig, args) -> int:
    """Run the list command."""
    service = GalleryService(config, db=DatabaseManager(config.db_path))
    try:
        photos = service.get_all_photos()
    except StoreReadFailure as e:
        logger.error("%s", e)
        print(json.dumps({"error": "Error al obtener los datos de la galería", "message": str(e)}))
        return 1

    if args.json:
        print(json.dumps([photo.to_dict() for photo in photos], ensure_ascii=False, indent=2))
    else:
        print_photos(photos)
    return 0


if __name__ == "__main__":
    sys.exit(main())
