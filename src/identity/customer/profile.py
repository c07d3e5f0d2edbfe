"""Profile management: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.customer.customer import Customer
from identity.customer.lookup import customer_for_user
from identity.domain import identity


@identity.command(part_of="Customer")
class UpdateProfile:
    """Change the customer's display name and/or phone number.

    An empty ``phone`` clears the stored number; ``None`` leaves it alone.
    """

    user_id: Identifier(required=True)
    name: String(max_length=50)
    phone: String(max_length=20)


@identity.command_handler(part_of=Customer)
class UpdateProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        customer = customer_for_user(command.user_id)
        changes = {}
        if command.name is not None:
            changes["name"] = command.name
        if command.phone is not None:
            changes["phone"] = command.phone or None
        customer.update_profile(**changes)
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)
