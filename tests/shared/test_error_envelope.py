import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.exceptions import ObjectNotFoundError, ValidationError
from pydantic import BaseModel
from shared.errors import (
    NotFound,
    RateLimitExceeded,
    StockConflict,
    new_error_code,
    register_exception_handlers,
)
from shared.monitoring.log_adapter import LogExceptionReporter
from shared.requests import REQUEST_ID_HEADER, new_request_id, request_id_middleware


class Item(BaseModel):
    quantity: int


@pytest.fixture()
def reporter():
    return LogExceptionReporter()


@pytest.fixture()
def client(reporter):
    app = FastAPI()
    app.middleware("http")(request_id_middleware)
    register_exception_handlers(app, reporter=reporter)

    @app.get("/orders/conflict")
    async def conflict():
        raise StockConflict(data={"inavailableStockProducts": [{"id": "p-1"}]})

    @app.get("/missing")
    async def missing():
        raise NotFound("Cart item not found")

    @app.get("/limited")
    async def limited():
        raise RateLimitExceeded(retry_after=12)

    @app.get("/domain-invalid")
    async def domain_invalid():
        raise ValidationError({"quantity": ["Only 2 units available"]})

    @app.get("/domain-missing")
    async def domain_missing():
        raise ObjectNotFoundError("Product p-1 does not exist")

    @app.post("/items")
    async def create_item(item: Item):
        return item

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret connection string")

    return TestClient(app, raise_server_exceptions=False)


class TestErrorEnvelope:
    def test_stock_conflict(self, client):
        response = client.get("/orders/conflict")
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["data"] == {"inavailableStockProducts": [{"id": "p-1"}]}
        assert body["requestId"].startswith("order-")

    def test_not_found_message(self, client):
        response = client.get("/missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Cart item not found"

    def test_rate_limit_sets_retry_after(self, client):
        response = client.get("/limited")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "12"

    def test_domain_validation_error(self, client):
        response = client.get("/domain-invalid")
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "quantity", "message": "Only 2 units available"}]

    def test_domain_not_found(self, client):
        response = client.get("/domain-missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Resource not found"

    def test_request_validation_error(self, client):
        response = client.post("/items", json={"quantity": "many"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "quantity"

    def test_unhandled_error_hides_details(self, client, reporter):
        response = client.get("/boom")
        assert response.status_code == 500
        body = response.json()
        assert "secret" not in body["message"]
        assert body["errorCode"].startswith("ERR")
        assert reporter.captured[0].tags["errorCode"] == body["errorCode"]

    def test_request_id_header(self, client):
        response = client.get("/missing")
        assert response.headers[REQUEST_ID_HEADER] == response.json()["requestId"]


class TestIdentifiers:
    def test_request_id_format(self):
        request_id = new_request_id("order")
        prefix, millis, suffix = request_id.split("-")
        assert prefix == "order"
        assert millis.isdigit()
        assert len(suffix) == 5

    def test_error_codes_are_unique(self):
        assert new_error_code() != new_error_code()
