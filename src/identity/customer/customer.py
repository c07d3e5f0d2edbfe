"""Customer aggregate root with its address book."""

from datetime import datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String, ValueObject

from identity.domain import identity
from identity.shared.email import EmailAddress
from identity.shared.phone import PhoneNumber

MAX_ADDRESSES = 10

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


@identity.entity(part_of="Customer")
class Address:
    """A delivery address in the customer's address book.

    A customer may keep up to 10 addresses; whenever there is at least one,
    exactly one of them is the default.
    """

    street: String(required=True, min_length=3, max_length=100)
    city: String(required=True, min_length=2, max_length=50)
    state: String(required=True, min_length=2, max_length=50)
    zip_code: String(max_length=5)
    additional_info: String(max_length=100)
    country: String(required=True, min_length=2, max_length=50)
    is_default: Boolean(default=False)

    def as_dict(self) -> dict:
        return {
            "id": str(self.id),
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "additionalInfo": self.additional_info,
            "country": self.country,
            "isDefault": self.is_default,
        }


@identity.aggregate
class Customer:
    """A registered shopper.

    ``user_id`` is the identity the upstream session gateway authenticates;
    every ``/me`` endpoint resolves the customer through it.
    """

    user_id: Identifier(required=True, unique=True)
    email: ValueObject(EmailAddress, required=True)
    name: String(required=True, min_length=2, max_length=50)
    phone: ValueObject(PhoneNumber)
    addresses: HasMany(Address)
    registered_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @invariant.post
    def zip_codes_are_two_to_five_digits(self):
        for address in self.addresses:
            if address.zip_code and not (address.zip_code.isdigit() and 2 <= len(address.zip_code) <= 5):
                raise ValidationError({"zip_code": ["Zip code must contain 2 to 5 digits"]})

    @classmethod
    def register(cls, user_id, email, name, phone=None):
        from identity.customer.events import CustomerRegistered

        now = datetime.now()
        customer = cls(
            user_id=user_id,
            email=EmailAddress.of(email),
            name=name.strip(),
            phone=PhoneNumber(number=phone) if phone else None,
            registered_at=now,
            updated_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=customer.id,
                user_id=user_id,
                email=customer.email.address,
                name=customer.name,
                registered_at=now,
            )
        )
        return customer

    def update_profile(self, name=_UNSET, phone=_UNSET):
        from identity.customer.events import ProfileUpdated

        if name is not _UNSET and name is not None:
            self.name = name.strip()
        if phone is not _UNSET:
            self.phone = PhoneNumber(number=phone) if phone else None
        self.updated_at = datetime.now()

        self.raise_(
            ProfileUpdated(
                customer_id=self.id,
                name=self.name,
                phone=self.phone.number if self.phone else None,
            )
        )

    def find_address(self, address_id) -> Address:
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address

    @property
    def default_address(self) -> Address | None:
        return next((a for a in self.addresses if a.is_default), None)

    def add_address(self, street, city, state, country, zip_code=None, additional_info=None, is_default=False):
        from identity.customer.events import AddressAdded

        if len(self.addresses) >= MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    addr.is_default = False

            address = Address(
                street=street,
                city=city,
                state=state,
                zip_code=zip_code,
                additional_info=additional_info,
                country=country,
                is_default=is_default,
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                customer_id=self.id,
                address_id=address.id,
                street=street,
                city=city,
                state=state,
                zip_code=zip_code,
                country=country,
                is_default=is_default,
            )
        )
        return address

    def update_address(self, address_id, **changes):
        from identity.customer.events import AddressUpdated

        address = self.find_address(address_id)
        make_default = changes.pop("is_default", None)

        with atomic_change(self):
            for field, value in changes.items():
                setattr(address, field, value)
            if make_default:
                for addr in self.addresses:
                    addr.is_default = addr is address

        self.raise_(
            AddressUpdated(
                customer_id=self.id,
                address_id=address.id,
                street=address.street,
                city=address.city,
                state=address.state,
                zip_code=address.zip_code,
                country=address.country,
            )
        )

    def remove_address(self, address_id):
        from identity.customer.events import AddressRemoved

        address = self.find_address(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)
            # A removed default hands over to the first remaining address
            if was_default and self.addresses:
                self.addresses[0].is_default = True

        self.raise_(AddressRemoved(customer_id=self.id, address_id=address.id))

    def set_default_address(self, address_id):
        from identity.customer.events import DefaultAddressChanged

        address = self.find_address(address_id)
        previous = self.default_address

        with atomic_change(self):
            for addr in self.addresses:
                addr.is_default = False
            address.is_default = True

        self.raise_(
            DefaultAddressChanged(
                customer_id=self.id,
                address_id=address.id,
                previous_default_address_id=previous.id if previous else None,
            )
        )
