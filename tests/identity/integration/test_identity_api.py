"""Customer, address book and contact endpoints through the application."""

import pytest
from app import create_app
from fastapi.testclient import TestClient
from identity.contact.message import ContactMessage, ContactStatus
from protean import current_domain
from shared.settings import Settings

JANE = {"X-User-Id": "user-1", "X-User-Email": "jane@example.com"}
ADDRESS = {"street": "12 Market Street", "city": "Douala", "state": "Littoral", "zipCode": "237", "country": "Cameroon"}


@pytest.fixture()
def app():
    return create_app(Settings(support_email="help@storefront.example"))


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def registered(client):
    response = client.post("/customers", json={"name": "Jane Doe"}, headers=JANE)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestCustomerEndpoints:
    def test_register_uses_caller_email(self, client, registered):
        profile = client.get("/customers/me", headers=JANE).json()["data"]
        assert profile["id"] == registered
        assert profile["email"] == "jane@example.com"

    def test_register_requires_login(self, client):
        assert client.post("/customers", json={"name": "Jane Doe"}).status_code == 401

    def test_invalid_email(self, client):
        response = client.post("/customers", json={"name": "Jane", "email": "not-an-email"}, headers=JANE)
        assert response.status_code == 400

    def test_update_profile(self, client, registered):
        response = client.put("/customers/me", json={"phone": "+237 699 001 122"}, headers=JANE)
        assert response.status_code == 200
        assert response.json()["data"]["phone"] == "+237 699 001 122"

    def test_profile_of_unregistered_user(self, client):
        response = client.get("/customers/me", headers={"X-User-Id": "nobody"})
        assert response.status_code == 404


class TestAddressEndpoints:
    def test_add_and_list(self, client, registered):
        response = client.post("/customers/me/addresses", json=ADDRESS, headers=JANE)
        assert response.status_code == 201

        addresses = client.get("/customers/me/addresses", headers=JANE).json()["data"]["addresses"]
        assert addresses[0]["zipCode"] == "237"
        assert addresses[0]["isDefault"] is True

    def test_zip_code_format(self, client, registered):
        response = client.post("/customers/me/addresses", json={**ADDRESS, "zipCode": "1"}, headers=JANE)
        assert response.status_code == 400

    def test_update_set_default_and_delete(self, client, registered):
        first = client.post("/customers/me/addresses", json=ADDRESS, headers=JANE).json()["data"]["id"]
        second = client.post(
            "/customers/me/addresses", json={**ADDRESS, "street": "99 Harbour Road"}, headers=JANE
        ).json()["data"]["id"]

        assert client.put(f"/customers/me/addresses/{first}", json={"city": "Yaounde"}, headers=JANE).status_code == 200
        assert client.put(f"/customers/me/addresses/{second}/default", headers=JANE).status_code == 200

        addresses = client.delete(f"/customers/me/addresses/{second}", headers=JANE).json()["data"]["addresses"]
        assert [(a["id"], a["city"], a["isDefault"]) for a in addresses] == [(first, "Yaounde", True)]

    def test_unknown_address(self, client, registered):
        response = client.delete("/customers/me/addresses/nope", headers=JANE)
        assert response.status_code == 404


class TestContactEndpoint:
    def test_message_is_stored_and_sent(self, app, client):
        response = client.post(
            "/contact",
            json={"subject": "Late delivery", "message": "My order has not arrived yet."},
            headers=JANE,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == ContactStatus.SENT.value
        [email] = app.state.email_sender.sent_emails
        assert email["to"] == "help@storefront.example"
        assert email["reply_to"] == "jane@example.com"
        assert email["subject"] == "[Contact] Late delivery"

    def test_failed_delivery_is_recorded(self, app, client):
        app.state.email_sender.configure(should_succeed=False, failure_reason="SMTP down")

        data = client.post(
            "/contact",
            json={"subject": "Refund", "message": "Please refund my last order."},
            headers=JANE,
        ).json()["data"]

        message = current_domain.repository_for(ContactMessage).get(data["id"])
        assert message.status == ContactStatus.FAILED.value
        assert message.failure_reason == "SMTP down"

    def test_message_length(self, client):
        response = client.post("/contact", json={"subject": "Hi", "message": "short"}, headers=JANE)
        assert response.status_code == 400
