"""Pydantic models for the camera search API."""

from pydantic import BaseModel

from camera_search.domain.products import Product
from camera_search.domain.session import SessionSnapshot


class SearchRequest(BaseModel):
    """Select a detected category to search for."""

    term: str


class DetectedCategoryView(BaseModel):
    """Detected category chip."""

    display_label: str
    search_term: str
    confidence_percent: int


class ProductView(BaseModel):
    """Product row in the results list."""

    id: str
    name: str
    category: str
    category_slug: str
    subcategory: str
    subcategory_slug: str
    price: float
    old_price: float | None = None
    discount: float | None = None
    image: str
    images: list[str] = []
    description: str = ""
    featured: bool = False

    @classmethod
    def from_product(cls, product: Product) -> "ProductView":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            category_slug=product.category_slug,
            subcategory=product.subcategory,
            subcategory_slug=product.subcategory_slug,
            price=product.price,
            old_price=product.old_price,
            discount=product.discount,
            image=product.image,
            images=list(product.images),
            description=product.description,
            featured=product.featured,
        )


class SessionView(BaseModel):
    """Session state as rendered by the camera search panel."""

    state: str
    loading_stage: str
    analyzing_stage: str
    error_kind: str | None = None
    error: str = ""
    has_captured_frame: bool = False
    detected_categories: list[DetectedCategoryView] = []
    active_search_term: str = ""
    results_view: str
    results: list[ProductView] = []
    search_failed: bool = False
    holds_stream: bool = False

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "SessionView":
        return cls(
            state=snapshot.state,
            loading_stage=snapshot.loading_stage,
            analyzing_stage=snapshot.analyzing_stage,
            error_kind=snapshot.error_kind,
            error=snapshot.error,
            has_captured_frame=snapshot.captured_frame is not None,
            detected_categories=[
                DetectedCategoryView(
                    display_label=category.display_label,
                    search_term=category.search_term,
                    confidence_percent=category.confidence_percent,
                )
                for category in snapshot.detected_categories
            ],
            active_search_term=snapshot.active_search_term,
            results_view=snapshot.results_view,
            results=[ProductView.from_product(product) for product in snapshot.results],
            search_failed=snapshot.search_failed,
            holds_stream=snapshot.holds_stream,
        )
