"""Product catalog API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class CatalogClient(Protocol):
    """Interface for catalog API interactions."""

    async def search_products(self, term: str, limit: int) -> dict[str, object]:
        """Search products by term and return raw API data."""


@dataclass
class HttpxCatalogClient(CatalogClient):
    """HTTPX-backed catalog client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(cls, base_url: str, timeout: float = 15) -> "HttpxCatalogClient":
        """Create a catalog client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def search_products(self, term: str, limit: int) -> dict[str, object]:
        """Search products by term."""
        response = await self.http_client.get(
            f"{self.base_url}/api/products",
            params={"search": term, "limit": limit},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
