"""Order request validation.

The payload of ``POST /orders/webhook`` is checked against a table of field
rules before anything touches the database. Each field's rules run in order
and stop at the first failure, so a field reports at most one error. Errors
are tagged so the response message can name the most relevant problem.
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from shared.errors import RequestValidationFailed

_MISSING = object()

REQUIRED_FIELDS = ("paymentInfo", "totalAmount", "orderItems")
PAYMENT_FIELDS = ("amountPaid", "typePayment", "paymentAccountNumber", "paymentAccountName")


class ErrorTag(Enum):
    """Kinds of validation problems, in the order they are reported."""

    STRUCTURE = "structure"
    MISSING_FIELD = "missing_field"
    MISSING_PAYMENT = "missing_payment"
    INVALID_TOTAL = "invalid_total"
    INVALID_ITEM = "invalid_item"
    INVALID_FIELD = "invalid_field"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    tag: ErrorTag = ErrorTag.INVALID_FIELD

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class OrderValidationError(RequestValidationFailed):
    """The order payload was rejected; ``field_errors`` lists every problem found."""

    def __init__(self, field_errors: list[FieldError]):
        self.field_errors = field_errors
        super().__init__(_summary(field_errors), errors=[error.as_dict() for error in field_errors])


@dataclass(frozen=True)
class FieldRule:
    """``check`` must hold for the value at ``field``, else ``message`` is reported with ``tag``.

    A rule with ``required=False`` is skipped when the field is absent.
    """

    field: str
    check: Callable[[Any], bool]
    message: str
    tag: ErrorTag = ErrorTag.INVALID_FIELD
    required: bool = True


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    quantity: int
    cart_id: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class PaymentDetails:
    amount_paid: float
    type_payment: str
    account_number: str
    account_name: str
    payment_date: datetime | None = None


@dataclass(frozen=True)
class OrderRequest:
    """A validated order request. Transient: it lives for one HTTP call."""

    lines: tuple[OrderLine, ...]
    payment: PaymentDetails
    total_amount: float
    shipping_info: str | None = None
    explanation: str | None = None

    @property
    def cart_entry_ids(self) -> list[str]:
        return [line.cart_id for line in self.lines if line.cart_id]


# --- Predicates ---


def _present(value) -> bool:
    return value is not _MISSING and value is not None and value != ""


def _is_mapping(value) -> bool:
    return isinstance(value, Mapping)


def _non_empty_list(value) -> bool:
    return isinstance(value, list) and len(value) > 0


def _number(value) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _positive_number(value) -> bool:
    number = _number(value)
    return number is not None and number > 0


def _non_negative_number(value) -> bool:
    number = _number(value)
    return number is not None and number >= 0


def _positive_integer(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    return isinstance(value, float) and value.is_integer() and value > 0


def _non_blank_string(value) -> bool:
    return isinstance(value, str | int) and str(value).strip() != ""


def _string(value) -> bool:
    return isinstance(value, str)


def _max_length(limit: int) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, str) and len(value) <= limit


def _iso_datetime(value) -> bool:
    if isinstance(value, datetime):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


# --- Rule tables ---

ORDER_RULES: tuple[FieldRule, ...] = (
    FieldRule("orderItems", _present, "orderItems is required", ErrorTag.MISSING_FIELD),
    FieldRule("orderItems", _non_empty_list, "orderItems must be a non-empty list", ErrorTag.STRUCTURE),
    FieldRule("paymentInfo", _present, "paymentInfo is required", ErrorTag.MISSING_FIELD),
    FieldRule("paymentInfo", _is_mapping, "paymentInfo must be an object", ErrorTag.STRUCTURE),
    FieldRule("totalAmount", _present, "totalAmount is required", ErrorTag.MISSING_FIELD),
    FieldRule("totalAmount", _positive_number, "totalAmount must be a positive number", ErrorTag.INVALID_TOTAL),
    FieldRule("shippingInfo", _non_blank_string, "shippingInfo must be an address id", required=False),
    FieldRule("explanation", _string, "explanation must be a string", required=False),
    FieldRule("explanation", _max_length(500), "explanation cannot exceed 500 characters", required=False),
)

PAYMENT_RULES: tuple[FieldRule, ...] = (
    FieldRule("amountPaid", _present, "amountPaid is required", ErrorTag.MISSING_PAYMENT),
    FieldRule("amountPaid", _non_negative_number, "amountPaid must be a non-negative number"),
    FieldRule("typePayment", _present, "typePayment is required", ErrorTag.MISSING_PAYMENT),
    FieldRule("typePayment", _string, "typePayment must be a string"),
    FieldRule("typePayment", _max_length(50), "typePayment must be at most 50 characters"),
    FieldRule("paymentAccountNumber", _present, "paymentAccountNumber is required", ErrorTag.MISSING_PAYMENT),
    FieldRule("paymentAccountNumber", _non_blank_string, "paymentAccountNumber must be a string"),
    FieldRule("paymentAccountName", _present, "paymentAccountName is required", ErrorTag.MISSING_PAYMENT),
    FieldRule("paymentAccountName", _string, "paymentAccountName must be a string"),
    FieldRule("paymentAccountName", _max_length(100), "paymentAccountName must be at most 100 characters"),
    FieldRule("paymentDate", _iso_datetime, "paymentDate must be an ISO 8601 date", required=False),
)

ITEM_RULES: tuple[FieldRule, ...] = (
    FieldRule("product", _present, "product is required", ErrorTag.INVALID_ITEM),
    FieldRule("product", _non_blank_string, "product must be a product id", ErrorTag.INVALID_ITEM),
    FieldRule("quantity", _present, "quantity is required", ErrorTag.INVALID_ITEM),
    FieldRule("quantity", _positive_integer, "quantity must be a positive integer", ErrorTag.INVALID_ITEM),
    FieldRule("cartId", _non_blank_string, "cartId must be a cart entry id", ErrorTag.INVALID_ITEM, required=False),
    FieldRule("name", _string, "name must be a string", required=False),
    FieldRule("name", _max_length(100), "name must be at most 100 characters", required=False),
)


def apply_rules(data: Mapping, rules: tuple[FieldRule, ...], prefix: str = "") -> list[FieldError]:
    errors: list[FieldError] = []
    failed: set[str] = set()
    for rule in rules:
        if rule.field in failed:
            continue
        value = data.get(rule.field, _MISSING)
        if not rule.required and not _present(value):
            continue
        if not rule.check(value):
            failed.add(rule.field)
            errors.append(FieldError(f"{prefix}{rule.field}", rule.message, rule.tag))
    return errors


def _summary(errors: list[FieldError]) -> str:
    tags = {error.tag for error in errors}
    if ErrorTag.STRUCTURE in tags and any(error.field in ("body", "orderItems") for error in errors):
        return "Invalid order data structure"
    if ErrorTag.MISSING_FIELD in tags:
        missing = [error.field for error in errors if error.tag is ErrorTag.MISSING_FIELD]
        return f"Missing required fields: {', '.join(missing)}"
    if ErrorTag.MISSING_PAYMENT in tags:
        missing = [error.field.split(".", 1)[1] for error in errors if error.tag is ErrorTag.MISSING_PAYMENT]
        return f"Missing payment information: {', '.join(missing)}"
    if ErrorTag.INVALID_TOTAL in tags:
        return "Invalid order total amount"
    if ErrorTag.INVALID_ITEM in tags:
        return "Invalid product quantities detected"
    return "Invalid order data"


def validate_order_request(payload: Any) -> OrderRequest:
    """Check ``payload`` and convert it into an :class:`OrderRequest`.

    Pure function: raises :class:`OrderValidationError` listing every
    offending field, never touches storage.
    """
    if not isinstance(payload, Mapping):
        raise OrderValidationError([FieldError("body", "Order payload must be a JSON object", ErrorTag.STRUCTURE)])

    errors = apply_rules(payload, ORDER_RULES)
    failed = {error.field for error in errors}

    payment = payload.get("paymentInfo")
    if "paymentInfo" not in failed:
        errors.extend(apply_rules(payment, PAYMENT_RULES, prefix="paymentInfo."))

    items = payload.get("orderItems")
    if "orderItems" not in failed:
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                errors.append(
                    FieldError(f"orderItems[{index}]", "order item must be an object", ErrorTag.INVALID_ITEM)
                )
                continue
            errors.extend(apply_rules(item, ITEM_RULES, prefix=f"orderItems[{index}]."))

    if errors:
        raise OrderValidationError(errors)

    payment_date = payment.get("paymentDate")
    if isinstance(payment_date, str):
        payment_date = datetime.fromisoformat(payment_date.replace("Z", "+00:00"))

    return OrderRequest(
        lines=tuple(
            OrderLine(
                product_id=str(item["product"]).strip(),
                quantity=int(item["quantity"]),
                cart_id=str(item["cartId"]).strip() if _present(item.get("cartId", _MISSING)) else None,
                name=item.get("name") or None,
            )
            for item in items
        ),
        payment=PaymentDetails(
            amount_paid=_number(payment["amountPaid"]),
            type_payment=payment["typePayment"],
            account_number=str(payment["paymentAccountNumber"]).strip(),
            account_name=payment["paymentAccountName"],
            payment_date=payment_date,
        ),
        total_amount=_number(payload["totalAmount"]),
        shipping_info=str(payload["shippingInfo"]).strip() if _present(payload.get("shippingInfo")) else None,
        explanation=payload.get("explanation") or None,
    )
