import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def identity_bed():
    from identity.domain import identity

    bed = DomainFixture(identity)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(identity_bed):
    with identity_bed.domain_context():
        yield


@pytest.fixture()
def customer():
    from identity.customer.customer import Customer
    from protean import current_domain

    customer = Customer.register(user_id="user-1", email="Jane.Doe@Example.com", name="Jane Doe")
    current_domain.repository_for(Customer).add(customer)
    return customer
