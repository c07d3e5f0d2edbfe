"""Customer address management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from identity.customer.customer import Customer
from identity.customer.lookup import customer_for_user
from identity.domain import identity

_ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "additional_info", "country")


@identity.command(part_of="Customer")
class AddAddress:
    """Add a new address to a customer's address book."""

    user_id: Identifier(required=True)
    street: String(required=True, max_length=100)
    city: String(required=True, max_length=50)
    state: String(required=True, max_length=50)
    zip_code: String(max_length=5)
    additional_info: String(max_length=100)
    country: String(required=True, max_length=50)
    is_default: Boolean(default=False)


@identity.command(part_of="Customer")
class UpdateAddress:
    """Modify fields of an existing address."""

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    street: String(max_length=100)
    city: String(max_length=50)
    state: String(max_length=50)
    zip_code: String(max_length=5)
    additional_info: String(max_length=100)
    country: String(max_length=50)
    is_default: Boolean()


@identity.command(part_of="Customer")
class RemoveAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.command(part_of="Customer")
class SetDefaultAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.command_handler(part_of=Customer)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        customer = customer_for_user(command.user_id)
        address = customer.add_address(
            street=command.street,
            city=command.city,
            state=command.state,
            country=command.country,
            zip_code=command.zip_code or None,
            additional_info=command.additional_info,
            is_default=bool(command.is_default),
        )
        current_domain.repository_for(Customer).add(customer)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        customer = customer_for_user(command.user_id)

        updates = {}
        for field in _ADDRESS_FIELDS:
            value = getattr(command, field, None)
            if value is not None:
                updates[field] = value
        if command.is_default:
            updates["is_default"] = True

        customer.update_address(command.address_id, **updates)
        current_domain.repository_for(Customer).add(customer)
        return str(command.address_id)

    @handle(RemoveAddress)
    def remove_address(self, command):
        customer = customer_for_user(command.user_id)
        customer.remove_address(command.address_id)
        current_domain.repository_for(Customer).add(customer)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        customer = customer_for_user(command.user_id)
        customer.set_default_address(command.address_id)
        current_domain.repository_for(Customer).add(customer)
