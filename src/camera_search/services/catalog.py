"""Catalog search service mapping API documents into products."""

import logging
from dataclasses import dataclass

from camera_search.adapters.catalog_client import CatalogClient
from camera_search.domain.products import ProductSearchResponse
from camera_search.domain.session import SearchResult

_logger = logging.getLogger(__name__)


@dataclass
class CatalogSearchService:
    """Searches the catalog; failures degrade to an empty, flagged result."""

    client: CatalogClient
    default_limit: int = 8

    async def search(self, term: str, limit: int | None = None) -> SearchResult:
        """Run one catalog query for ``term``."""
        cleaned = term.strip()
        if not cleaned:
            return SearchResult(term=term)

        resolved_limit = self.default_limit if limit is None else limit
        try:
            payload = await self.client.search_products(cleaned, resolved_limit)
            response = ProductSearchResponse.model_validate(payload)
        except Exception as exc:
            _logger.warning(
                "Catalog search failed: term=%s error=%s", cleaned, _describe(exc)
            )
            return SearchResult(term=term, failed=True)

        products = [doc.to_product() for doc in response.products]
        _logger.info("Catalog search: term=%s results=%s", cleaned, len(products))
        return SearchResult(term=term, products=products)


def _describe(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if status_code is not None:
        return f"HTTP {status_code}"
    return f"{type(exc).__name__}: {exc}"
