"""Customer registration: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.customer.customer import Customer
from identity.domain import identity


@identity.command(part_of="Customer")
class RegisterCustomer:
    """Create the customer account for an authenticated user."""

    user_id: Identifier(required=True)
    email: String(required=True, max_length=254)
    name: String(required=True, max_length=50)
    phone: String(max_length=20)


@identity.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)
        if repo._dao.query.filter(user_id=command.user_id).all().total:
            raise ValidationError({"user_id": ["Customer account already exists"]})

        customer = Customer.register(
            user_id=command.user_id,
            email=command.email,
            name=command.name,
            phone=command.phone,
        )
        repo.add(customer)
        return str(customer.id)
