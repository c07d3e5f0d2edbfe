import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.catalogue.category import Category
from storefront.catalogue.management import (
    CreateCategory,
    CreateProduct,
    DeactivateCategory,
    DeleteProduct,
    RestockProduct,
    UpdateProduct,
)
from storefront.catalogue.product import Product
from storefront.catalogue.queries import ProductFilters, active_categories, product_detail, search_products


def _create_product(category_id, **overrides):
    defaults = {
        "name": "Ultrabook 14",
        "description": "Thin and light",
        "price": 1000.0,
        "stock": 5,
        "category_id": category_id,
        "images": json.dumps([{"public_id": "img-1", "url": "https://img.example/1.jpg"}]),
    }
    defaults.update(overrides)
    return current_domain.process(CreateProduct(**defaults), asynchronous=False)


class TestCategories:
    def test_create_category(self):
        category_id = current_domain.process(CreateCategory(name="Phones"), asynchronous=False)
        assert current_domain.repository_for(Category).get(category_id).name == "Phones"

    def test_category_names_are_unique_ignoring_case(self):
        current_domain.process(CreateCategory(name="Phones"), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(CreateCategory(name="phones"), asynchronous=False)

    def test_deactivated_categories_are_not_listed(self, category):
        current_domain.process(CreateCategory(name="Phones"), asynchronous=False)
        current_domain.process(DeactivateCategory(category_id=category.id), asynchronous=False)
        assert [c["name"] for c in active_categories()] == ["Phones"]


class TestProducts:
    def test_create_product_with_images(self, category):
        product_id = _create_product(category.id)
        product = current_domain.repository_for(Product).get(product_id)
        assert product.image_url == "https://img.example/1.jpg"

    def test_product_requires_active_category(self, category):
        current_domain.process(DeactivateCategory(category_id=category.id), asynchronous=False)
        with pytest.raises(ValidationError):
            _create_product(category.id)

    def test_update_and_restock(self, category):
        product_id = _create_product(category.id, stock=1)
        current_domain.process(UpdateProduct(product_id=product_id, price=900.0), asynchronous=False)
        current_domain.process(RestockProduct(product_id=product_id, quantity=4), asynchronous=False)
        product = current_domain.repository_for(Product).get(product_id)
        assert (product.price, product.stock) == (900.0, 5)

    def test_deleted_product_has_no_detail(self, category):
        product_id = _create_product(category.id)
        current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
        with pytest.raises(ObjectNotFoundError):
            product_detail(product_id)


class TestSearch:
    def test_filters(self, category, make_product):
        make_product(name="Gaming Laptop", price=1500.0)
        make_product(name="Office Laptop", price=600.0)
        make_product(name="Mouse", price=20.0)

        result = search_products(ProductFilters(keyword="laptop", price_gte=500, price_lte=1000), page_size=10)

        assert [p["name"] for p in result["products"]] == ["Office Laptop"]
        assert result["totalProducts"] == 1
        assert result["products"][0]["category"]["name"] == category.name

    def test_pagination(self, make_product):
        for index in range(3):
            make_product(name=f"Cable {index}")

        result = search_products(ProductFilters(page=2), page_size=2)

        assert len(result["products"]) == 1
        assert result["totalPages"] == 2
        assert result["totalProducts"] == 3

    def test_inactive_products_are_hidden(self, make_product):
        make_product(name="Visible")
        make_product(name="Hidden", is_active=False)
        result = search_products(ProductFilters(), page_size=10)
        assert [p["name"] for p in result["products"]] == ["Visible"]

    def test_detail_lists_same_category_products(self, make_product):
        main = make_product(name="Main")
        for index in range(6):
            make_product(name=f"Sibling {index}")

        detail = product_detail(str(main.id))

        assert detail["product"]["name"] == "Main"
        assert len(detail["sameCategoryProducts"]) == 5
        assert str(main.id) not in {p["id"] for p in detail["sameCategoryProducts"]}
