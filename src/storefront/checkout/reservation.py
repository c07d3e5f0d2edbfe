"""Stock reservation for the line items of one order.

Every line is checked concurrently against the same open transaction. A
line ends up ``available`` (stock taken), ``unavailable`` (not enough
stock), ``not_found`` (no such product on sale) or ``error`` (checking it
failed). Anything but ``available`` blocks the whole order.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from shared.logging import get_logger
from shared.monitoring import ExceptionReporter
from storefront.checkout.transaction import Transaction, TransactionError
from storefront.checkout.validation import OrderLine

logger = get_logger(__name__)

PRODUCT_NOT_FOUND = "Product not found"
AVAILABILITY_CHECK_FAILED = "Error checking availability"
UNKNOWN_PRODUCT = "Unknown product"


class ReservationStatus(Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ReservationOutcome:
    """Result of reserving one line item.

    For ``available`` outcomes ``stock`` is the stock left after the
    reservation; for ``unavailable`` it is the stock that was on hand.
    """

    index: int
    line: OrderLine
    status: ReservationStatus
    name: str | None = None
    image: str | None = None
    stock: int | None = None
    price: float | None = None
    category: str | None = None
    error: str | None = None

    @property
    def product_id(self) -> str:
        return self.line.product_id

    @property
    def reserved(self) -> bool:
        return self.status is ReservationStatus.AVAILABLE

    def as_unavailable(self) -> dict:
        """Entry of ``inavailableStockProducts`` describing why this line blocked the order."""
        if self.status is ReservationStatus.UNAVAILABLE:
            return {
                "id": self.product_id,
                "name": self.name,
                "image": self.image,
                "stock": self.stock,
                "quantity": self.line.quantity,
            }
        if self.status is ReservationStatus.NOT_FOUND:
            return {
                "id": self.product_id,
                "name": self.line.name or UNKNOWN_PRODUCT,
                "stock": 0,
                "quantity": self.line.quantity,
                "error": PRODUCT_NOT_FOUND,
            }
        return {
            "id": self.product_id,
            "name": self.line.name or UNKNOWN_PRODUCT,
            "error": AVAILABILITY_CHECK_FAILED,
        }

    def as_order_item(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.line.quantity,
            "image": self.image,
            "price": self.price,
            "category": self.category,
        }


@dataclass(frozen=True)
class ReservationSummary:
    requested: int
    reserved: list[ReservationOutcome] = field(default_factory=list)
    rejected: list[ReservationOutcome] = field(default_factory=list)

    @property
    def shortfall(self) -> int:
        return self.requested - len(self.reserved)

    @property
    def can_finalize(self) -> bool:
        return self.shortfall == 0

    @property
    def unavailable_products(self) -> list[dict]:
        return [outcome.as_unavailable() for outcome in self.rejected]


def aggregate_outcomes(outcomes: list[ReservationOutcome], requested: int) -> ReservationSummary:
    """Partition ``outcomes`` (in line order) into reserved and rejected lines."""
    ordered = sorted(outcomes, key=lambda outcome: outcome.index)
    return ReservationSummary(
        requested=requested,
        reserved=[outcome for outcome in ordered if outcome.reserved],
        rejected=[outcome for outcome in ordered if not outcome.reserved],
    )


class StockReservationCoordinator:
    """Reserves stock for all lines of an order inside ``transaction``.

    Failures of individual lines become ``error`` outcomes and are reported;
    failures of the transaction itself propagate.
    """

    def __init__(
        self,
        transaction: Transaction,
        reporter: ExceptionReporter | None = None,
        request_id: str | None = None,
    ):
        self.transaction = transaction
        self.reporter = reporter
        self.request_id = request_id

    async def reserve_all(self, lines) -> list[ReservationOutcome]:
        return list(await asyncio.gather(*(self.reserve(index, line) for index, line in enumerate(lines))))

    async def reserve(self, index: int, line: OrderLine) -> ReservationOutcome:
        try:
            product = await self.transaction.product(line.product_id)
            if product is None or not product.is_available:
                logger.warning("Product not found during order processing", product_id=line.product_id)
                return ReservationOutcome(index=index, line=line, status=ReservationStatus.NOT_FOUND)

            category = await self.transaction.category_name(product.category_id)

            # No await between the stock check and the decrement
            if product.stock < line.quantity:
                return ReservationOutcome(
                    index=index,
                    line=line,
                    status=ReservationStatus.UNAVAILABLE,
                    name=product.name,
                    image=product.image_url,
                    stock=product.stock,
                    price=product.price,
                    category=category,
                )

            product.reserve(line.quantity)
            self.transaction.stage(product)
            return ReservationOutcome(
                index=index,
                line=line,
                status=ReservationStatus.AVAILABLE,
                name=product.name,
                image=product.image_url,
                stock=product.stock,
                price=product.price,
                category=category,
            )
        except TransactionError:
            raise
        except Exception as exc:
            logger.error(
                "Error checking product availability",
                product_id=line.product_id,
                error=str(exc),
            )
            if self.reporter is not None:
                await self.reporter.capture(
                    exc,
                    tags={
                        "component": "order-webhook",
                        "operation": "check-product",
                        "requestId": self.request_id,
                        "productId": line.product_id,
                    },
                )
            return ReservationOutcome(
                index=index,
                line=line,
                status=ReservationStatus.ERROR,
                error=str(exc),
            )
