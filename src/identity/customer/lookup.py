"""Resolve customers by the authenticated user id."""

from protean.utils.globals import current_domain

from identity.customer.customer import Customer
from shared.errors import NotFound


def customer_for_user(user_id) -> Customer:
    repo = current_domain.repository_for(Customer)
    results = repo._dao.query.filter(user_id=user_id).limit(1).all()
    if not results.items:
        raise NotFound("Customer profile not found")
    # The DAO returns a detached copy; reload through the repository so
    # the aggregate is tracked by the current unit of work.
    return repo.get(results.items[0].id)
