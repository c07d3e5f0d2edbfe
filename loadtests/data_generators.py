"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's validation rules
(EmailAddress VO, PhoneNumber VO, address field lengths, order payload
rules) and match the field names the endpoints expect.
"""

import random
import uuid

from faker import Faker

fake = Faker()

# ---------- Callers ----------


def shopper_headers() -> dict:
    """Headers the session gateway would forward for a fresh shopper."""
    user_id = f"lt-{uuid.uuid4().hex[:12]}"
    return {"X-User-Id": user_id, "X-User-Email": valid_email()}


def admin_headers() -> dict:
    return {"X-User-Id": f"lt-admin-{uuid.uuid4().hex[:8]}", "X-User-Role": "admin"}


# ---------- Identity ----------


def valid_email() -> str:
    """Generate emails that pass EmailAddress VO validation."""
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:4]}@{domain}"


def valid_phone() -> str:
    """Digits separated by spaces or hyphens, 10 digits in total."""
    return f"+1 {random.randint(200, 999)}-{random.randint(200, 999)}-{random.randint(1000, 9999)}"


def customer_data() -> dict:
    return {"name": fake.name()[:50], "phone": valid_phone()}


def address_data() -> dict:
    return {
        "street": fake.street_address()[:100],
        "city": fake.city()[:50],
        "state": fake.state()[:50],
        "zipCode": str(random.randint(10, 99999)),
        "additionalInfo": fake.sentence(nb_words=4)[:100],
        "country": fake.country()[:50].ljust(2, "x"),
    }


def contact_data() -> dict:
    return {"subject": fake.sentence(nb_words=4)[:100], "message": fake.paragraph(nb_sentences=3)[:1000]}


# ---------- Catalogue ----------


def category_name() -> str:
    return f"{fake.word().title()} {uuid.uuid4().hex[:6]}"[:50]


def product_data(category_id: str) -> dict:
    return {
        "name": f"{fake.color_name()} {fake.word().title()}"[:100],
        "description": fake.paragraph(nb_sentences=2)[:2000],
        "price": round(random.uniform(5.0, 500.0), 2),
        "stock": random.randint(50, 500),
        "category_id": category_id,
        "images": [{"public_id": f"lt-{uuid.uuid4().hex[:8]}", "url": fake.image_url()}],
    }


# ---------- Checkout ----------


def order_payload(cart: list[dict], address_id: str | None = None) -> dict:
    """Webhook payload for the entries of a ``GET /cart`` response."""
    total = round(sum(item["subtotal"] for item in cart), 2)
    payload = {
        "orderItems": [
            {
                "product": item["productId"],
                "name": item["productName"],
                "quantity": item["quantity"],
                "cartId": item["id"],
            }
            for item in cart
        ],
        "paymentInfo": {
            "amountPaid": total,
            "typePayment": random.choice(["Mobile Money", "Card", "Bank transfer"]),
            "paymentAccountNumber": fake.msisdn(),
            "paymentAccountName": fake.name()[:100],
        },
        "totalAmount": total,
    }
    if address_id:
        payload["shippingInfo"] = address_id
    return payload
