"""EmailAddress value object for validated email addresses."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

_LOCAL_PART = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*$")
_DOMAIN_LABEL = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?$")


@identity.value_object
class EmailAddress:
    """An email address with a dotted local part and at least two domain labels.

    Addresses are compared case-insensitively, so they are stored lowercased.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address or ""
        local_part, at, domain_part = email.partition("@")

        labels = domain_part.split(".")
        valid = (
            at == "@"
            and _LOCAL_PART.match(local_part) is not None
            and len(labels) >= 2
            and all(_DOMAIN_LABEL.match(label) for label in labels)
        )
        if not valid:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

    @classmethod
    def of(cls, address: str) -> "EmailAddress":
        return cls(address=address.strip().lower())
