"""Catalog product models."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Product:
    """Product record as shown in search results."""

    id: str
    name: str
    category: str
    category_slug: str
    subcategory: str
    subcategory_slug: str
    price: float
    old_price: float | None
    discount: float | None
    image: str
    images: list[str] = field(default_factory=list)
    description: str = ""
    featured: bool = False


class ProductDoc(BaseModel):
    """Product document as returned by the catalog API.

    Optional fields may be absent or ``null``; ``to_product`` fills in the
    empty defaults.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    name: str | None = None
    category: str | None = None
    category_slug: str | None = Field(default=None, alias="categorySlug")
    subcategory: str | None = None
    subcategory_slug: str | None = Field(default=None, alias="subcategorySlug")
    price: float | None = None
    old_price: float | None = Field(default=None, alias="oldPrice")
    discount: float | None = None
    image: str | None = None
    images: list[str] | None = None
    description: str | None = None
    featured: bool | None = None

    def to_product(self) -> Product:
        images = list(self.images or [])
        return Product(
            id=self.id,
            name=self.name or "",
            category=self.category or "",
            category_slug=self.category_slug or "",
            subcategory=self.subcategory or "",
            subcategory_slug=self.subcategory_slug or "",
            price=self.price or 0.0,
            old_price=self.old_price,
            discount=self.discount,
            image=self.image or (images[0] if images else ""),
            images=images,
            description=self.description or "",
            featured=bool(self.featured),
        )


class ProductSearchResponse(BaseModel):
    """Envelope of ``GET /api/products``."""

    products: list[ProductDoc] = Field(default_factory=list)
