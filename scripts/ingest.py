import json
import os
import sys

import chromadb
import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.core.config import settings
from storefront.core.logger import get_logger
from storefront.core.models import Product, SiteSettings

logger = get_logger(__name__)

PRODUCTS_CSV = "data/products.csv"
SITE_SETTINGS_JSON = "data/site_settings.json"


def _product_metadata(row: pd.Series) -> dict:
    """Validate one CSV row and turn it into catalog record metadata.

    Empty optional columns are left out, the store does not accept nulls.
    """
    raw = {
        key: value.item() if hasattr(value, "item") else value
        for key, value in row.to_dict().items()
        if not pd.isna(value) and value != ""
    }
    product = Product.model_validate({**raw, "id": str(raw.get("id", ""))})
    return product.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)


def ingest_catalog() -> None:
    """Seed the catalog store from local files.

    Loads products from CSV and the site configuration from JSON, and upserts
    them into the ChromaDB collections the storefront reads from.

    Raises:
        Exception: If ChromaDB connection or ingestion fails.
    """
    logger.info("Starting catalog ingestion")

    try:
        df = pd.read_csv(PRODUCTS_CSV, dtype={"id": str})
        logger.info("Successfully loaded %d rows from CSV", len(df))
    except FileNotFoundError:
        logger.error("CSV file '%s' not found", PRODUCTS_CSV)
        return

    ids, documents, metadatas = [], [], []
    for _, row in df.iterrows():
        try:
            metadata = _product_metadata(row)
        except ValueError as e:
            logger.warning("Skipping row %s: %s", row.get("id"), e)
            continue
        ids.append(str(row["id"]))
        documents.append(f"{metadata['name']}\n{metadata.get('description', '')}".strip())
        metadatas.append(metadata)

    site_settings = SiteSettings()
    if os.path.exists(SITE_SETTINGS_JSON):
        with open(SITE_SETTINGS_JSON, encoding="utf-8") as f:
            site_settings = SiteSettings.model_validate(json.load(f))

    try:
        logger.info("Connecting to ChromaDB at %s:%s", settings.CHROMA_HOST, settings.CHROMA_PORT)
        db_client = chromadb.HttpClient(
            host=settings.CHROMA_HOST,
            port=settings.CHROMA_PORT,
        )

        products = db_client.get_or_create_collection(name=settings.PRODUCTS_COLLECTION)
        if ids:
            products.upsert(ids=ids, documents=documents, metadatas=metadatas)
        logger.info("Upserted %d products into '%s'", len(ids), settings.PRODUCTS_COLLECTION)

        config = db_client.get_or_create_collection(name=settings.SETTINGS_COLLECTION)
        config.upsert(
            ids=[settings.SITE_CONFIG_ID],
            documents=["site configuration"],
            metadatas=[site_settings.model_dump(by_alias=True)],
        )
        logger.info("Wrote site config record '%s'", settings.SITE_CONFIG_ID)

    except Exception as e:
        logger.error("Failed to ingest catalog into ChromaDB: %s", e)
        raise


if __name__ == "__main__":
    ingest_catalog()
