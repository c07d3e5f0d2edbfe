import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def category():
    from protean import current_domain
    from storefront.catalogue.category import Category

    category = Category.create(name="Laptops")
    current_domain.repository_for(Category).add(category)
    return category


@pytest.fixture()
def make_product(category):
    """Factory persisting an active product in ``category``."""
    from protean import current_domain
    from storefront.catalogue.product import Product

    def _make(name="Ultrabook 14", price=1000.0, stock=5, images=None, **overrides):
        product = Product.create(
            name=name,
            description=f"{name} description",
            price=price,
            stock=stock,
            category_id=overrides.pop("category_id", category.id),
            images=images if images is not None else [{"public_id": "img-1", "url": "https://img.example/1.jpg"}],
        )
        for field, value in overrides.items():
            setattr(product, field, value)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def make_cart_entry():
    from protean import current_domain
    from storefront.cart.cart_entry import CartEntry

    def _make(user_id, product, quantity=1):
        entry = CartEntry.create(user_id=user_id, product=product, quantity=quantity)
        current_domain.repository_for(CartEntry).add(entry)
        return entry

    return _make


def _order_payload(lines, total_amount=None, **overrides):
    """Webhook body for ``lines`` of ``(product_id, quantity)`` or ``(product_id, quantity, cart_id)``."""
    items = []
    for line in lines:
        item = {"product": str(line[0]), "quantity": line[1], "name": "Item"}
        if len(line) > 2:
            item["cartId"] = str(line[2])
        items.append(item)
    payload = {
        "orderItems": items,
        "paymentInfo": {
            "amountPaid": total_amount or 100.0,
            "typePayment": "Mobile Money",
            "paymentAccountNumber": "0700000000",
            "paymentAccountName": "Jane Doe",
        },
        "totalAmount": total_amount or 100.0,
        "shippingInfo": "addr-1",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def order_payload():
    return _order_payload
