from typing import List

from fastapi import Depends, FastAPI, HTTPException

from storefront.assembler import generate_reply
from storefront.auth import require_admin
from storefront.catalog import CatalogCache, CatalogStore
from storefront.core.errors import CompletionFailed, IndexUnavailable
from storefront.core.logger import get_logger
from storefront.core.models import (
    ChatReply,
    ChatRequest,
    OrderLink,
    Product,
    ProductPage,
    SearchResponse,
    SiteSettings,
)
from storefront.handoff import build_deep_link, build_order_message, resolve_destination
from storefront.pager import paginate
from storefront.search import SearchIndex

logger = get_logger(__name__)

app = FastAPI(
    title="Pharmacy Storefront",
    description="Product search, pagination, order links and the chat assistant for the storefront",
    version="1.0.0",
)

catalog_cache = CatalogCache(CatalogStore())


def get_catalog() -> CatalogCache:
    return catalog_cache


def _products(catalog: CatalogCache) -> List[Product]:
    try:
        return catalog.products()
    except IndexUnavailable as e:
        logger.error("Catalog unavailable, serving an empty catalog: %s", e)
        return []


def _site_settings(catalog: CatalogCache) -> SiteSettings:
    try:
        return catalog.site_settings()
    except IndexUnavailable as e:
        logger.error("Site settings unavailable, using defaults: %s", e)
        return SiteSettings()


@app.get("/health", summary="Health Check")
def health_check() -> dict[str, str]:
    """Check service health status.

    Returns:
        dict[str, str]: Status message indicating service is operational.
    """
    return {"status": "ok"}


@app.get("/api/products", response_model=ProductPage, summary="List one page of products")
def list_products(page: int = 1, catalog: CatalogCache = Depends(get_catalog)) -> ProductPage:
    result = paginate(_products(catalog), page)
    return ProductPage(
        products=result.shown,
        page=result.page,
        total_pages=result.total_pages,
        has_previous=result.has_previous,
        has_next=result.has_next,
        page_numbers=result.page_numbers,
    )


@app.get("/api/search", response_model=SearchResponse, summary="Search products by name")
def search_products(q: str = "", catalog: CatalogCache = Depends(get_catalog)) -> SearchResponse:
    index = SearchIndex()
    index.load(catalog.products)
    return SearchResponse(query=q, results=index.query(q))


@app.get(
    "/api/products/{product_id}/order",
    response_model=OrderLink,
    summary="Build the messaging order link for a product",
)
def order_link(product_id: str, catalog: CatalogCache = Depends(get_catalog)) -> OrderLink:
    product = next((p for p in _products(catalog) if p.id == product_id), None)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found.")

    message = build_order_message(product)
    url = build_deep_link(message, resolve_destination(_site_settings(catalog)))
    return OrderLink(message=message, url=url)


@app.post("/api/chat", response_model=ChatReply, summary="Send one chat turn")
def chat(request: ChatRequest, catalog: CatalogCache = Depends(get_catalog)) -> ChatReply:
    """Relay one user turn to the completion API.

    Args:
        request (ChatRequest): New message plus the client's recent history.

    Returns:
        ChatReply: The single assistant reply.

    Raises:
        HTTPException: 400 for a blank message, 500 if the completion call fails.
    """
    message = request.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required.")

    logger.info("Received chat message (%d chars, %d history)", len(message), len(request.history))

    try:
        reply = generate_reply(
            request.history, message, _products(catalog), _site_settings(catalog)
        )
    except CompletionFailed as e:
        logger.error("Error generating chat reply: %s", e, exc_info=True)
        raise HTTPException(
            status_code=500, detail="An internal error occurred while generating the reply."
        )

    return ChatReply(reply=reply)


@app.post("/api/catalog/refresh", summary="Drop the cached catalog snapshot")
def refresh_catalog(
    _: object = Depends(require_admin), catalog: CatalogCache = Depends(get_catalog)
) -> dict[str, str]:
    catalog.invalidate()
    return {"status": "refreshed"}
