import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from shared.errors import NotFound, PermissionDenied
from storefront.cart.cart_entry import CartEntry
from storefront.cart.management import AddToCart, ChangeCartQuantity, RemoveFromCart
from storefront.cart.queries import cart_view
from storefront.catalogue.product import Product


def _add(user_id, product_id, quantity=1):
    return current_domain.process(
        AddToCart(user_id=user_id, product_id=product_id, quantity=quantity), asynchronous=False
    )


def _change(user_id, entry_id, change):
    return current_domain.process(
        ChangeCartQuantity(user_id=user_id, cart_entry_id=entry_id, change=change), asynchronous=False
    )


class TestAddToCart:
    def test_add_creates_entry(self, make_product):
        mouse = make_product(name="Mouse", price=25.0, stock=5)
        entry_id = _add("user-1", mouse.id, 2)
        entry = current_domain.repository_for(CartEntry).get(entry_id)
        assert (entry.quantity, entry.product_name) == (2, "Mouse")

    def test_adding_same_product_merges_entries(self, make_product):
        mouse = make_product(name="Mouse", stock=5)
        first = _add("user-1", mouse.id, 1)
        second = _add("user-1", mouse.id, 2)
        assert first == second
        assert current_domain.repository_for(CartEntry).get(first).quantity == 3

    def test_cannot_add_more_than_stock(self, make_product):
        mouse = make_product(name="Mouse", stock=2)
        with pytest.raises(ValidationError) as exc:
            _add("user-1", mouse.id, 3)
        assert exc.value.messages["quantity"] == ["Only 2 units available"]

    def test_unknown_product(self):
        with pytest.raises(NotFound):
            _add("user-1", "no-such-product")

    def test_inactive_product(self, make_product):
        mouse = make_product(name="Mouse", is_active=False)
        with pytest.raises(ValidationError):
            _add("user-1", mouse.id)


class TestChangeQuantity:
    def test_increase_respects_stock(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=2)
        entry = make_cart_entry("user-1", mouse, quantity=2)
        with pytest.raises(ValidationError):
            _change("user-1", entry.id, "increase")

    def test_decrease(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=5)
        entry = make_cart_entry("user-1", mouse, quantity=2)
        _change("user-1", entry.id, "decrease")
        assert current_domain.repository_for(CartEntry).get(entry.id).quantity == 1

    def test_decrease_last_unit_removes_entry(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=5)
        entry = make_cart_entry("user-1", mouse, quantity=1)
        assert _change("user-1", entry.id, "decrease") is None
        assert current_domain.repository_for(CartEntry)._dao.query.all().total == 0

    def test_entry_must_belong_to_caller(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=5)
        entry = make_cart_entry("user-1", mouse)
        with pytest.raises(PermissionDenied):
            _change("user-2", entry.id, "increase")

    def test_remove(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=5)
        entry = make_cart_entry("user-1", mouse)
        current_domain.process(RemoveFromCart(user_id="user-1", cart_entry_id=entry.id), asynchronous=False)
        assert current_domain.repository_for(CartEntry)._dao.query.all().total == 0

    def test_remove_missing_entry(self):
        with pytest.raises(NotFound):
            current_domain.process(RemoveFromCart(user_id="user-1", cart_entry_id="missing"), asynchronous=False)


class TestCartView:
    def test_totals(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", price=25.0, stock=5)
        pad = make_product(name="Pad", price=5.5, stock=5)
        make_cart_entry("user-1", mouse, quantity=2)
        make_cart_entry("user-1", pad, quantity=1)
        make_cart_entry("user-2", pad, quantity=4)

        view = cart_view("user-1")

        assert view["cartCount"] == 2
        assert view["cartTotal"] == 55.5
        assert {item["productName"] for item in view["cart"]} == {"Mouse", "Pad"}

    def test_unavailable_products_are_hidden(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=5)
        sold_out = make_product(name="Sold out", stock=5)
        make_cart_entry("user-1", mouse)
        make_cart_entry("user-1", sold_out)
        sold_out.stock = 0
        current_domain.repository_for(Product).add(sold_out)

        assert [item["productName"] for item in cart_view("user-1")["cart"]] == ["Mouse"]

    def test_quantity_is_clamped_to_stock(self, make_product, make_cart_entry):
        mouse = make_product(name="Mouse", stock=5)
        entry = make_cart_entry("user-1", mouse, quantity=4)
        mouse.stock = 2
        current_domain.repository_for(Product).add(mouse)

        [item] = cart_view("user-1")["cart"]

        assert item["quantity"] == 2
        assert current_domain.repository_for(CartEntry).get(entry.id).quantity == 2

    def test_entries_are_capped(self, make_product, make_cart_entry):
        for index in range(3):
            make_cart_entry("user-1", make_product(name=f"Cable {index}"))
        assert cart_view("user-1", max_entries=2)["cartCount"] == 2
