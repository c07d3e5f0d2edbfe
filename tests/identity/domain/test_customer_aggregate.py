import pytest
from identity.customer.customer import MAX_ADDRESSES, Customer
from identity.customer.events import (
    AddressAdded,
    AddressRemoved,
    CustomerRegistered,
    DefaultAddressChanged,
    ProfileUpdated,
)
from protean.exceptions import ValidationError


def _customer(**overrides):
    defaults = {"user_id": "user-1", "email": "jane@example.com", "name": "Jane Doe"}
    defaults.update(overrides)
    customer = Customer.register(**defaults)
    customer._events.clear()
    return customer


def _address(customer, **overrides):
    defaults = {"street": "12 Market Street", "city": "Douala", "state": "Littoral", "country": "Cameroon"}
    defaults.update(overrides)
    return customer.add_address(**defaults)


class TestRegistration:
    def test_register_normalizes_email(self):
        customer = Customer.register(user_id="u-1", email="  Jane.Doe@Example.COM ", name=" Jane ")
        assert customer.email.address == "jane.doe@example.com"
        assert customer.name == "Jane"

    def test_register_raises_event(self):
        customer = Customer.register(user_id="u-1", email="jane@example.com", name="Jane")
        assert isinstance(customer._events[-1], CustomerRegistered)

    @pytest.mark.parametrize("email", ["jane", "jane@", "jane@localhost", "ja ne@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            Customer.register(user_id="u-1", email=email, name="Jane")

    def test_name_length(self):
        with pytest.raises(ValidationError):
            Customer.register(user_id="u-1", email="jane@example.com", name="J")

    @pytest.mark.parametrize("phone", ["+237 6 99 00 11 22", "699-001-122", "699.001.122"])
    def test_valid_phone(self, phone):
        customer = Customer.register(user_id="u-1", email="jane@example.com", name="Jane", phone=phone)
        assert customer.phone.number == phone

    @pytest.mark.parametrize("phone", ["12345", "call me", "1" * 16])
    def test_invalid_phone(self, phone):
        with pytest.raises(ValidationError):
            Customer.register(user_id="u-1", email="jane@example.com", name="Jane", phone=phone)


class TestProfile:
    def test_update_name_and_phone(self):
        customer = _customer()
        customer.update_profile(name="Jane Smith", phone="699001122")
        assert (customer.name, customer.phone.number) == ("Jane Smith", "699001122")
        assert isinstance(customer._events[-1], ProfileUpdated)

    def test_empty_phone_clears_number(self):
        customer = _customer(phone="699001122")
        customer.update_profile(phone=None)
        assert customer.phone is None

    def test_omitted_fields_are_kept(self):
        customer = _customer(phone="699001122")
        customer.update_profile(name="Jane Smith")
        assert customer.phone.number == "699001122"


class TestAddresses:
    def test_first_address_becomes_default(self):
        customer = _customer()
        address = _address(customer)
        assert address.is_default is True
        assert isinstance(customer._events[-1], AddressAdded)

    def test_new_default_replaces_previous(self):
        customer = _customer()
        first = _address(customer)
        second = _address(customer, street="99 Harbour Road", is_default=True)
        assert customer.default_address.id == second.id
        assert customer.find_address(first.id).is_default is False

    def test_zip_code_must_be_two_to_five_digits(self):
        customer = _customer()
        with pytest.raises(ValidationError):
            _address(customer, zip_code="12a")

    def test_short_street_is_rejected(self):
        customer = _customer()
        with pytest.raises(ValidationError):
            _address(customer, street="No")

    def test_address_book_is_capped(self):
        customer = _customer()
        for index in range(MAX_ADDRESSES):
            _address(customer, street=f"{index} Market Street")
        with pytest.raises(ValidationError):
            _address(customer, street="One too many")

    def test_removing_default_promotes_another(self):
        customer = _customer()
        first = _address(customer)
        second = _address(customer, street="99 Harbour Road")
        customer.remove_address(first.id)
        assert customer.default_address.id == second.id
        assert isinstance(customer._events[-1], AddressRemoved)

    def test_last_address_can_be_removed(self):
        customer = _customer()
        address = _address(customer)
        customer.remove_address(address.id)
        assert customer.addresses == []

    def test_set_default(self):
        customer = _customer()
        first = _address(customer)
        second = _address(customer, street="99 Harbour Road")
        customer.set_default_address(second.id)
        event = customer._events[-1]
        assert isinstance(event, DefaultAddressChanged)
        assert event.previous_default_address_id == first.id
        assert [a.is_default for a in customer.addresses] == [False, True]

    def test_update_address_fields(self):
        customer = _customer()
        address = _address(customer)
        customer.update_address(address.id, city="Yaounde", zip_code="237")
        assert (address.city, address.zip_code) == ("Yaounde", "237")

    def test_unknown_address(self):
        with pytest.raises(ValidationError):
            _customer().remove_address("nope")
