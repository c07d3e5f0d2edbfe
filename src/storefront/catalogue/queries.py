"""Read side of the catalogue: product search, product detail and category listing.

Results are plain JSON-ready dicts so the API layer can cache them as-is.
"""

import math
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product

SIMILAR_PRODUCTS_LIMIT = 5


@dataclass(frozen=True)
class ProductFilters:
    """Product search criteria taken from the query string."""

    keyword: str | None = None
    category: str | None = None
    price_gte: float | None = None
    price_lte: float | None = None
    page: int = 1

    def as_params(self) -> dict:
        return {
            "keyword": self.keyword,
            "category": self.category,
            "price[gte]": self.price_gte,
            "price[lte]": self.price_lte,
            "page": self.page,
        }


def product_card(product: Product, category_name: str | None = None) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "sold": product.sold,
        "category": {"id": str(product.category_id), "name": category_name},
        "images": [{"public_id": image.public_id, "url": image.url} for image in product.images],
        "isActive": product.is_active,
        "createdAt": product.created_at.isoformat() if product.created_at else None,
    }


def _category_names() -> dict[str, str]:
    categories = current_domain.repository_for(Category)._dao.query.all().items
    return {str(category.id): category.name for category in categories}


def search_products(filters: ProductFilters, page_size: int) -> dict:
    """Active products matching ``filters``, newest first, one page at a time."""
    criteria = {"is_active": True, "is_deleted": False}
    if filters.keyword:
        criteria["name__icontains"] = filters.keyword
    if filters.category:
        criteria["category_id"] = filters.category
    if filters.price_gte is not None:
        criteria["price__gte"] = filters.price_gte
    if filters.price_lte is not None:
        criteria["price__lte"] = filters.price_lte

    page = max(filters.page, 1)
    result = (
        current_domain.repository_for(Product)
        ._dao.query.filter(**criteria)
        .order_by("-created_at")
        .limit(page_size)
        .offset((page - 1) * page_size)
        .all()
    )

    names = _category_names()
    return {
        "products": [product_card(product, names.get(str(product.category_id))) for product in result.items],
        "totalPages": math.ceil(result.total / page_size) if page_size else 0,
        "totalProducts": result.total,
    }


def product_detail(product_id: str) -> dict:
    """Product plus a few other active products of the same category.

    Raises ``ObjectNotFoundError`` for missing, inactive or deleted products.
    """
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    if not product.is_available:
        raise ObjectNotFoundError(f"Product {product_id} is not available")

    siblings = (
        repo._dao.query.filter(category_id=product.category_id, is_active=True, is_deleted=False)
        .order_by("-created_at")
        .limit(SIMILAR_PRODUCTS_LIMIT + 1)
        .all()
        .items
    )
    names = _category_names()
    category_name = names.get(str(product.category_id))
    return {
        "product": product_card(product, category_name),
        "sameCategoryProducts": [
            product_card(sibling, category_name) for sibling in siblings if sibling.id != product.id
        ][:SIMILAR_PRODUCTS_LIMIT],
    }


def active_categories() -> list[dict]:
    categories = (
        current_domain.repository_for(Category)._dao.query.filter(is_active=True).order_by("name").all().items
    )
    return [{"id": str(category.id), "name": category.name, "sold": category.sold} for category in categories]
