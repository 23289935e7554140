import itertools
from typing import Callable, List, Optional, Sequence

import httpx

from storefront.core.config import settings
from storefront.core.errors import IndexUnavailable
from storefront.core.logger import get_logger
from storefront.core.models import Product, SearchResponse

logger = get_logger(__name__)

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 5


class SearchIndex:
    """In-memory substring index over product names.

    The index is loaded once from the catalog and never updated
    incrementally; it goes stale until ``load`` is called again.
    """

    def __init__(self, products: Optional[Sequence[Product]] = None):
        self._products: List[Product] = list(products or [])

    def __len__(self) -> int:
        return len(self._products)

    def load(self, fetch: Callable[[], Sequence[Product]]) -> List[Product]:
        """Load the whole catalog into the index.

        A failed fetch leaves the index empty so that queries return no
        results instead of raising.

        Args:
            fetch: Callable returning every product in catalog order.

        Returns:
            List[Product]: The products now held by the index.
        """
        try:
            self._products = list(fetch())
        except IndexUnavailable as e:
            logger.error("Search index load failed, serving no results: %s", e)
            self._products = []
        logger.debug("Search index holds %d products", len(self._products))
        return list(self._products)

    def query(self, text: str) -> List[Product]:
        """Return up to five products whose name contains ``text``, ignoring case.

        Queries shorter than two characters return nothing. Matches keep
        the order the products were loaded in.
        """
        if len(text) < MIN_QUERY_LENGTH:
            return []
        needle = text.lower()
        matches = (p for p in self._products if needle in p.name.lower())
        return list(itertools.islice(matches, MAX_RESULTS))


class SearchBox:
    """Applies asynchronous search results in issue order.

    Every submitted query gets a ticket from a monotonically increasing
    sequence. Results are only applied when they belong to the most recently
    issued ticket, so a slow response for an older keystroke can never
    overwrite the results of a newer one.
    """

    def __init__(self) -> None:
        self._sequence = itertools.count(1)
        self._latest = 0
        self.query = ""
        self.results: List[Product] = []

    def submit(self, text: str) -> int:
        self.query = text
        self._latest = next(self._sequence)
        return self._latest

    def apply(self, ticket: int, results: Sequence[Product]) -> bool:
        if ticket != self._latest:
            logger.debug("Discarding stale search results for ticket %d", ticket)
            return False
        self.results = list(results)
        return True

    def clear(self) -> None:
        # Invalidates any in-flight ticket as well.
        self._latest = next(self._sequence)
        self.query = ""
        self.results = []


class HttpProductSearch:
    """Search-as-you-type client for the storefront's ``/api/search`` route.

    Each keystroke may issue a request; the ``SearchBox`` keeps only the
    results of the latest one. A failed request shows no results.
    """

    def __init__(self, base_url: str = settings.STOREFRONT_URL,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.box = SearchBox()
        self._client = client

    async def _fetch(self, text: str) -> List[Product]:
        url = f"{self.base_url}/api/search"
        if self._client is not None:
            response = await self._client.get(url, params={"q": text})
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, params={"q": text})
        response.raise_for_status()
        return SearchResponse.model_validate(response.json()).results

    async def type(self, text: str) -> bool:
        """Run the query for the current input.

        Returns:
            bool: True if the results were applied, False if a newer query won.
        """
        ticket = self.box.submit(text)
        if len(text) < MIN_QUERY_LENGTH:
            return self.box.apply(ticket, [])
        try:
            results = await self._fetch(text)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Search request for %r failed: %s", text, e)
            results = []
        return self.box.apply(ticket, results)
