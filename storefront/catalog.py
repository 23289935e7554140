import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import chromadb
from pydantic import ValidationError

from storefront.core.config import settings
from storefront.core.errors import IndexUnavailable, ValidationFailed
from storefront.core.logger import get_logger
from storefront.core.models import Product, SiteSettings

logger = get_logger(__name__)


def _get_client() -> Any:
    """Initialize the ChromaDB client holding the catalog collections.

    Returns:
        chromadb.HttpClient: Client connected to the configured catalog host.
    """
    return chromadb.HttpClient(
        host=settings.CHROMA_HOST,
        port=settings.CHROMA_PORT,
    )


def _to_product(record_id: str, metadata: Optional[Dict[str, Any]]) -> Product:
    try:
        return Product.model_validate({"id": record_id, **(metadata or {})})
    except ValidationError as e:
        raise ValidationFailed(f"Invalid product record {record_id}: {e.errors()}") from e


class CatalogStore:
    """Read-only adapter over the catalog collections.

    Products live in one collection with their fields stored as record
    metadata; the site configuration is a single record in a second
    collection, keyed by a fixed config id.
    """

    def __init__(self, client_factory: Callable[[], Any] = _get_client):
        self._client_factory = client_factory

    def fetch_products(self) -> List[Product]:
        """Fetch every product, in store order.

        Raises:
            IndexUnavailable: If the catalog store cannot be read.
        """
        try:
            collection = self._client_factory().get_collection(settings.PRODUCTS_COLLECTION)
            records = collection.get(include=["metadatas"])
        except Exception as e:
            raise IndexUnavailable(f"Could not read products: {e}") from e

        ids = records.get("ids") or []
        metadatas = records.get("metadatas") or [None] * len(ids)
        products = []
        for record_id, metadata in zip(ids, metadatas):
            try:
                products.append(_to_product(record_id, metadata))
            except ValidationFailed as e:
                logger.warning("Skipping record: %s", e)
        logger.info("Fetched %d products (%d skipped)", len(products), len(ids) - len(products))
        return products

    def fetch_site_settings(self) -> SiteSettings:
        """Fetch the site configuration record; a missing record gives defaults.

        Raises:
            IndexUnavailable: If the catalog store cannot be read.
        """
        try:
            collection = self._client_factory().get_or_create_collection(
                settings.SETTINGS_COLLECTION
            )
            records = collection.get(ids=[settings.SITE_CONFIG_ID], include=["metadatas"])
        except Exception as e:
            raise IndexUnavailable(f"Could not read site settings: {e}") from e

        metadatas = records.get("metadatas") or []
        if not metadatas or not metadatas[0]:
            logger.info("No site config record '%s', using defaults", settings.SITE_CONFIG_ID)
            return SiteSettings()
        return SiteSettings.model_validate(metadatas[0])


class CatalogCache:
    """Shared read-through snapshot of the catalog store.

    Search, pagination and the chat price list all read through one cache so
    that a single page view sees a single snapshot. Entries expire after
    ``ttl`` seconds or when ``invalidate`` is called.
    """

    def __init__(
        self,
        store: CatalogStore,
        ttl: float = settings.CATALOG_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _read(self, key: str, loader: Callable[[], Any]) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and now - entry[0] < self.ttl:
                return entry[1]
            value = loader()
            self._entries[key] = (now, value)
            return value

    def products(self) -> List[Product]:
        return self._read("products", self.store.fetch_products)

    def site_settings(self) -> SiteSettings:
        return self._read("site_settings", self.store.fetch_site_settings)

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Catalog snapshot invalidated")
