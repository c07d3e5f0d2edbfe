"""Checkout load test scenarios.

Shopper journeys through cart and order placement. Products are seeded
once per shopper with an administrator identity so every journey has
stock to reserve.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    address_data,
    admin_headers,
    category_name,
    order_payload,
    product_data,
    shopper_headers,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


class ShopperJourney(SequentialTaskSet):
    """Browse -> Add to Cart (x2) -> View Cart -> Add Address -> Place Order -> My Orders."""

    def on_start(self):
        self.state = ShopperState(headers=shopper_headers(), product_ids=list(self.user.product_ids))

    @task
    def browse(self):
        self.client.get("/products", name="GET /products")

    def _add_to_cart(self):
        product_id = random.choice(self.state.product_ids)
        with self.client.post(
            "/cart",
            json={"productId": product_id, "quantity": random.randint(1, 3)},
            headers=self.state.headers,
            catch_response=True,
            name="POST /cart",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Add to cart failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_first_item(self):
        self._add_to_cart()

    @task
    def add_second_item(self):
        self._add_to_cart()

    @task
    def view_cart(self):
        with self.client.get("/cart", headers=self.state.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code == 200:
                self.state.cart = resp.json()["data"]["cart"]
                if not self.state.cart:
                    resp.failure("Cart is empty after adding items")
                    self.interrupt()
            else:
                resp.failure(f"View cart failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_address(self):
        with self.client.post(
            "/customers",
            json={"name": "Load Test Shopper"},
            headers=self.state.headers,
            catch_response=True,
            name="POST /customers",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Registration failed: {resp.status_code} | {extract_error_detail(resp)}")
                return
        with self.client.post(
            "/customers/me/addresses",
            json=address_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /customers/me/addresses",
        ) as resp:
            if resp.status_code == 201:
                self.state.address_id = resp.json()["data"]["id"]
            else:
                resp.failure(f"Add address failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def place_order(self):
        with self.client.post(
            "/orders/webhook",
            json=order_payload(self.state.cart, self.state.address_id),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders/webhook",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_numbers.append(resp.json()["orderNumber"])
            elif resp.status_code == 409:
                # Stock ran out under concurrent checkouts; an expected outcome.
                resp.success()
            else:
                resp.failure(f"Place order failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def my_orders(self):
        with self.client.get(
            "/orders/me", headers=self.state.headers, catch_response=True, name="GET /orders/me"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"My orders failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Locust user placing orders against a small seeded catalogue."""

    weight = 3
    wait_time = between(1.0, 3.0)
    tasks = [ShopperJourney]

    def on_start(self):
        self.product_ids = []
        headers = admin_headers()
        resp = self.client.post("/categories", json={"name": category_name()}, headers=headers, name="seed category")
        if resp.status_code != 201:
            self.stop()
            return
        category_id = resp.json()["data"]["id"]
        for _ in range(3):
            resp = self.client.post("/products", json=product_data(category_id), headers=headers, name="seed product")
            if resp.status_code == 201:
                self.product_ids.append(resp.json()["data"]["id"])
        if not self.product_ids:
            self.stop()
