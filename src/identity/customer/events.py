"""Domain events for the Customer aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from identity.domain import identity


@identity.event(part_of="Customer")
class CustomerRegistered:
    """A shopper created their customer account."""

    __version__ = 1

    customer_id: Identifier(required=True)
    user_id: Identifier(required=True)
    email: String(required=True)
    name: String(required=True)
    registered_at: DateTime(required=True)


@identity.event(part_of="Customer")
class ProfileUpdated:
    __version__ = 1

    customer_id: Identifier(required=True)
    name: String(required=True)
    phone: String()


@identity.event(part_of="Customer")
class AddressAdded:
    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    street: String(required=True)
    city: String(required=True)
    state: String(required=True)
    zip_code: String()
    country: String(required=True)
    is_default: Boolean(default=False)


@identity.event(part_of="Customer")
class AddressUpdated:
    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    street: String()
    city: String()
    state: String()
    zip_code: String()
    country: String()


@identity.event(part_of="Customer")
class AddressRemoved:
    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.event(part_of="Customer")
class DefaultAddressChanged:
    """Another address became the customer's default delivery address."""

    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    previous_default_address_id: Identifier()
