"""POST /orders/webhook through the full application stack."""

import asyncio

import pytest
from app import create_app
from fastapi.testclient import TestClient
from protean import UnitOfWork, current_domain
from protean.exceptions import ExpectedVersionError
from shared.settings import RateLimitPolicy, Settings
from storefront.catalogue.product import Product
from storefront.checkout.placement import OrderPlacement
from storefront.checkout.transaction import Transaction, TransactionFactory
from storefront.order.order import Order

BUYER = {"X-User-Id": "user-1", "X-User-Email": "buyer@example.com"}


@pytest.fixture()
def app():
    return create_app(Settings())


@pytest.fixture()
def client(app):
    return TestClient(app, raise_server_exceptions=False)


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock


class ConflictingTransaction(Transaction):
    async def commit(self):
        await self.rollback()
        raise ExpectedVersionError("Product was modified by another transaction")


class ConflictingTransactions(TransactionFactory):
    async def begin(self):
        uow = UnitOfWork()
        uow.start()
        return ConflictingTransaction(uow)


class CountingTransactions(TransactionFactory):
    def __init__(self):
        self.opened = 0

    async def begin(self):
        self.opened += 1
        return await super().begin()


class TestOrderCreated:
    def test_returns_201_with_order_number(self, client, make_product, order_payload):
        mouse = make_product(name="Mouse", price=25.0, stock=5)

        response = client.post("/orders/webhook", json=order_payload([(mouse.id, 2)], total_amount=50.0), headers=BUYER)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["orderNumber"].startswith("ORD-")
        assert body["requestId"].startswith("order-")
        assert response.headers["X-Request-Id"] == body["requestId"]
        assert current_domain.repository_for(Order).get(body["id"]).user_id == "user-1"
        assert _stock(mouse) == 3

    def test_cart_entries_are_consumed(self, client, make_product, make_cart_entry, order_payload):
        mouse = make_product(name="Mouse", price=25.0, stock=5)
        entry = make_cart_entry("user-1", mouse, quantity=2)

        client.post("/orders/webhook", json=order_payload([(mouse.id, 2, entry.id)], total_amount=50.0), headers=BUYER)

        cart = client.get("/cart", headers=BUYER).json()["data"]
        assert cart["cartCount"] == 0


class TestStockConflict:
    def test_returns_409_with_unavailable_products(self, client, make_product, order_payload):
        mouse = make_product(name="Mouse", price=25.0, stock=5)
        keyboard = make_product(name="Keyboard", price=50.0, stock=1)

        response = client.post(
            "/orders/webhook",
            json=order_payload([(mouse.id, 2), (keyboard.id, 3)], total_amount=200.0),
            headers=BUYER,
        )

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["data"]["inavailableStockProducts"] == [
            {
                "id": str(keyboard.id),
                "name": "Keyboard",
                "image": "https://img.example/1.jpg",
                "stock": 1,
                "quantity": 3,
            }
        ]
        assert (_stock(mouse), _stock(keyboard)) == (5, 1)

    def test_concurrent_stock_change_returns_409(self, app, client, make_product, order_payload):
        lamp = make_product(name="Lamp", price=30.0, stock=1)
        app.state.placement = OrderPlacement(ConflictingTransactions(), Settings(), caches=app.state.caches)

        response = client.post("/orders/webhook", json=order_payload([(lamp.id, 1)], total_amount=30.0), headers=BUYER)

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["requestId"].startswith("order-")
        assert body["data"]["inavailableStockProducts"] == [
            {
                "id": str(lamp.id),
                "name": "Lamp",
                "image": "https://img.example/1.jpg",
                "quantity": 1,
                "error": "Stock changed while the order was being placed",
            }
        ]
        assert _stock(lamp) == 1
        assert current_domain.repository_for(Order)._dao.query.all().items == []


class TestRejectedRequests:
    def test_invalid_quantity(self, client, make_product, order_payload):
        mouse = make_product(name="Mouse", stock=5)

        response = client.post("/orders/webhook", json=order_payload([(mouse.id, 0)]), headers=BUYER)

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid product quantities detected"
        assert body["errors"][0]["field"] == "orderItems[0].quantity"
        assert _stock(mouse) == 5

    def test_missing_amount_paid_never_opens_a_transaction(self, app, client, make_product, order_payload):
        mouse = make_product(name="Mouse", stock=5)
        transactions = CountingTransactions()
        app.state.placement = OrderPlacement(transactions, Settings(), caches=app.state.caches)
        payload = order_payload([(mouse.id, 1)])
        del payload["paymentInfo"]["amountPaid"]

        response = client.post("/orders/webhook", json=payload, headers=BUYER)

        assert response.status_code == 400
        assert response.json()["message"] == "Missing payment information: amountPaid"
        assert transactions.opened == 0
        assert _stock(mouse) == 5

    def test_malformed_json(self, client):
        response = client.post(
            "/orders/webhook",
            content=b"{not json",
            headers={**BUYER, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid order data format"

    def test_requires_caller(self, client, order_payload):
        response = client.post("/orders/webhook", json=order_payload([("p-1", 1)]))
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_rate_limited(self, order_payload):
        limits = {**Settings().rate_limits, "CRITICAL_ENDPOINTS": RateLimitPolicy("CRITICAL_ENDPOINTS", 2, 60.0)}
        client = TestClient(create_app(Settings(rate_limits=limits)))
        payload = order_payload([("p-1", 0)])

        statuses = [client.post("/orders/webhook", json=payload, headers=BUYER).status_code for _ in range(3)]

        assert statuses == [400, 400, 429]
        last = client.post("/orders/webhook", json=payload, headers=BUYER)
        assert last.json()["message"] == "Too many order requests, please try again later"
        assert int(last.headers["Retry-After"]) >= 1


class SlowTransactions(TransactionFactory):
    async def begin(self):
        await asyncio.sleep(0.2)
        return await super().begin()


class TestServerFaults:
    def test_database_timeout_returns_503(self, app, client, make_product, order_payload):
        mouse = make_product(name="Mouse", stock=5)
        app.state.placement = OrderPlacement(
            SlowTransactions(),
            Settings(db_connect_timeout=0.05),
            reporter=app.state.reporter,
        )

        response = client.post("/orders/webhook", json=order_payload([(mouse.id, 1)]), headers=BUYER)

        assert response.status_code == 503
        assert response.json()["message"] == "Database service unavailable, please try again later"
        assert _stock(mouse) == 5

    def test_unexpected_error_returns_500_with_error_code(self, app, client, order_payload):
        class Broken:
            async def place(self, *args, **kwargs):
                raise RuntimeError("boom")

        app.state.placement = Broken()

        response = client.post("/orders/webhook", json=order_payload([("p-1", 1)]), headers=BUYER)

        assert response.status_code == 500
        body = response.json()
        assert body["errorCode"].startswith("ERR")
        assert "boom" not in body["message"]
        assert app.state.reporter.captured[-1].tags["operation"] == "global-handler"
