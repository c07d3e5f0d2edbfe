"""Read helpers for customer profiles and address books."""

from identity.customer.customer import Customer
from identity.customer.lookup import customer_for_user


def profile_view(customer: Customer) -> dict:
    return {
        "id": str(customer.id),
        "userId": str(customer.user_id),
        "email": customer.email.address,
        "name": customer.name,
        "phone": customer.phone.number if customer.phone else None,
        "addresses": [address.as_dict() for address in customer.addresses],
        "registeredAt": customer.registered_at.isoformat() if customer.registered_at else None,
    }


def addresses_of(user_id) -> list[dict]:
    """The caller's addresses, default first."""
    customer = customer_for_user(user_id)
    return [a.as_dict() for a in sorted(customer.addresses, key=lambda a: not a.is_default)]
