"""Catalogue load test scenarios.

Administrator journeys that build and maintain the product catalogue, plus
an anonymous browsing user that exercises the cached product listing.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import admin_headers, category_name, product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CatalogueState


class CatalogueBuilder(SequentialTaskSet):
    """Create Category -> Create Products (x2) -> Update Price -> Restock."""

    def on_start(self):
        self.state = CatalogueState(headers=admin_headers())

    @task
    def create_category(self):
        with self.client.post(
            "/categories",
            json={"name": category_name()},
            headers=self.state.headers,
            catch_response=True,
            name="POST /categories",
        ) as resp:
            if resp.status_code == 201:
                self.state.category_ids.append(resp.json()["data"]["id"])
            else:
                resp.failure(f"Create category failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    def _create_product(self):
        with self.client.post(
            "/products",
            json=product_data(self.state.category_ids[-1]),
            headers=self.state.headers,
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_ids.append(resp.json()["data"]["id"])
            else:
                resp.failure(f"Create product failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def create_first_product(self):
        self._create_product()

    @task
    def create_second_product(self):
        self._create_product()

    @task
    def update_price(self):
        with self.client.put(
            f"/products/{self.state.product_ids[0]}",
            json={"price": round(random.uniform(5.0, 500.0), 2)},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update product failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def restock(self):
        with self.client.put(
            f"/products/{self.state.product_ids[-1]}/restock",
            json={"quantity": random.randint(10, 100)},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /products/{id}/restock",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Restock failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ProductRetirement(SequentialTaskSet):
    """Create Category -> Create Product -> Deactivate -> Delete -> Deactivate Category."""

    def on_start(self):
        self.state = CatalogueState(headers=admin_headers())

    @task
    def create_category(self):
        with self.client.post(
            "/categories",
            json={"name": category_name()},
            headers=self.state.headers,
            catch_response=True,
            name="POST /categories",
        ) as resp:
            if resp.status_code == 201:
                self.state.category_ids.append(resp.json()["data"]["id"])
            else:
                resp.failure(f"Create category failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def create_product(self):
        with self.client.post(
            "/products",
            json=product_data(self.state.category_ids[0]),
            headers=self.state.headers,
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_ids.append(resp.json()["data"]["id"])
            else:
                resp.failure(f"Create product failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def deactivate_product(self):
        with self.client.put(
            f"/products/{self.state.product_ids[0]}/deactivate",
            headers=self.state.headers,
            catch_response=True,
            name="PUT /products/{id}/deactivate",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Deactivate product failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def delete_product(self):
        with self.client.delete(
            f"/products/{self.state.product_ids[0]}",
            headers=self.state.headers,
            catch_response=True,
            name="DELETE /products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Delete product failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def deactivate_category(self):
        with self.client.put(
            f"/categories/{self.state.category_ids[0]}/deactivate",
            headers=self.state.headers,
            catch_response=True,
            name="PUT /categories/{id}/deactivate",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Deactivate category failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CatalogueAdminUser(HttpUser):
    """Locust user simulating catalogue administration.

    Weighted distribution:
    - 80% Catalogue Builder
    - 20% Product Retirement
    """

    weight = 1
    wait_time = between(1.0, 3.0)
    tasks = {
        CatalogueBuilder: 4,
        ProductRetirement: 1,
    }


class BrowsingUser(HttpUser):
    """Anonymous visitor paging through and filtering the catalogue."""

    weight = 4
    wait_time = between(0.5, 2.0)

    @task(5)
    def list_products(self):
        self.client.get("/products", params={"page": random.randint(1, 3)}, name="GET /products")

    @task(2)
    def search_products(self):
        params = {"keyword": random.choice(["a", "e", "o", "pro"]), "price[lte]": 250}
        self.client.get("/products", params=params, name="GET /products?keyword")

    @task(1)
    def list_categories(self):
        self.client.get("/categories", name="GET /categories")
