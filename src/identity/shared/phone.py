"""PhoneNumber value object."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity


@identity.value_object
class PhoneNumber:
    """Digits with optional spaces, dots or hyphens and an optional leading ``+``; 6 to 15 digits."""

    number: String(required=True, max_length=20)

    @invariant.post
    def validate_phone_format(self):
        number = self.number or ""
        digits = re.sub(r"\D", "", number)
        if not re.fullmatch(r"\+?[\d\s.\-]+", number) or not 6 <= len(digits) <= 15:
            raise ValidationError({"phone": [f"Invalid phone number: {number!r}"]})
