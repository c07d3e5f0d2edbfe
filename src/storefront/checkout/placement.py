"""Order placement: reserve every line item, then commit the order or abort.

::

    Start -> Reserving -> AllReserved -> Committed             (201)
                       -> PartiallyUnavailable -> Aborted      (409)
    any fault while reserving or finalizing     -> Aborted      (500)
    connect or transaction timeout             -> Aborted      (503)

Within one process, placements (and every other write to the store) are
serialized by one ``asyncio.Lock``. Across processes the store's version
check at commit decides the winner; the loser aborts with a stock conflict.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum

from protean.exceptions import ExpectedVersionError

from shared.cache import CART_PATTERN, PRODUCTS_PATTERN, Caches
from shared.errors import DatabaseError, ServiceTimeout, StorefrontError
from shared.logging import get_logger
from shared.monitoring import ExceptionReporter
from shared.settings import Settings
from storefront.checkout.reservation import (
    ReservationSummary,
    StockReservationCoordinator,
    aggregate_outcomes,
)
from storefront.checkout.transaction import Transaction, TransactionFactory
from storefront.checkout.validation import OrderRequest
from storefront.order.order import Order, PaymentInfo

logger = get_logger(__name__)

STOCK_CHANGED = "Stock changed while the order was being placed"


class PlacementState(Enum):
    """Terminal states of a placement."""

    COMMITTED = "Committed"
    ABORTED = "Aborted"


class PlacementFailed(StorefrontError):
    """Unexpected fault while reserving stock or finalizing the order."""

    default_message = "Failed to process order"


@dataclass(frozen=True)
class PlacementResult:
    state: PlacementState
    order_id: str | None = None
    order_number: str | None = None
    unavailable: list[dict] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.state is PlacementState.COMMITTED


class OrderPlacement:
    """Places orders for validated requests.

    Returns a :class:`PlacementResult` for committed and stock-conflicted
    orders. Raises ``ServiceTimeout`` (503), ``DatabaseError`` or
    ``PlacementFailed`` (500) when the placement had to be aborted for
    any other reason; the transaction is always rolled back first.
    """

    def __init__(
        self,
        transactions: TransactionFactory,
        settings: Settings,
        caches: Caches | None = None,
        reporter: ExceptionReporter | None = None,
        lock: asyncio.Lock | None = None,
    ):
        self.transactions = transactions
        self.settings = settings
        self.caches = caches
        self.reporter = reporter
        self.lock = lock or asyncio.Lock()

    async def place(self, user_id: str, request: OrderRequest, request_id: str | None = None) -> PlacementResult:
        started = time.perf_counter()
        async with self.lock:
            transaction = await self._begin(request_id)
            try:
                async with asyncio.timeout(self.settings.transaction_timeout):
                    result = await self._run(transaction, user_id, request, request_id)
            except TimeoutError as exc:
                await self._abort(transaction, request_id)
                logger.error("Order transaction timed out", timeout=self.settings.transaction_timeout)
                await self._report(exc, "transaction", request_id)
                raise ServiceTimeout() from exc
            except StorefrontError:
                await self._abort(transaction, request_id)
                raise
            except Exception as exc:
                await self._abort(transaction, request_id)
                logger.error("Error during stock verification", error=str(exc), exc_info=exc)
                await self._report(exc, "verify-stock", request_id)
                raise PlacementFailed("Error verifying product availability") from exc

        if result.committed:
            await self._invalidate_caches(request_id)
            logger.info(
                "Order created successfully",
                user_id=user_id,
                order_id=result.order_id,
                order_number=result.order_number,
                total_amount=request.total_amount,
                item_count=len(request.lines),
                processing_time_ms=round((time.perf_counter() - started) * 1000),
            )
        return result

    async def _begin(self, request_id) -> Transaction:
        try:
            async with asyncio.timeout(self.settings.db_connect_timeout):
                return await self.transactions.begin()
        except TimeoutError as exc:
            logger.error("Database connection timed out", timeout=self.settings.db_connect_timeout)
            await self._report(exc, "db-connect", request_id)
            raise ServiceTimeout("Database service unavailable, please try again later") from exc
        except Exception as exc:
            logger.error("Database connection failed", error=str(exc))
            await self._report(exc, "db-connect", request_id)
            raise DatabaseError("Database connection failed") from exc

    async def _run(self, transaction: Transaction, user_id, request: OrderRequest, request_id) -> PlacementResult:
        coordinator = StockReservationCoordinator(transaction, reporter=self.reporter, request_id=request_id)
        outcomes = await coordinator.reserve_all(request.lines)
        summary = aggregate_outcomes(outcomes, requested=len(request.lines))

        if not summary.can_finalize:
            await transaction.rollback()
            unavailable = summary.unavailable_products
            logger.warning(
                "Products unavailable during order processing",
                user_id=user_id,
                unavailable_products=[
                    {
                        "id": item["id"],
                        "name": item.get("name"),
                        "requested_qty": item.get("quantity"),
                        "available_qty": item.get("stock"),
                    }
                    for item in unavailable
                ],
            )
            return PlacementResult(state=PlacementState.ABORTED, unavailable=unavailable)

        return await self._finalize(transaction, user_id, request, summary, request_id)

    async def _finalize(
        self,
        transaction: Transaction,
        user_id,
        request: OrderRequest,
        summary: ReservationSummary,
        request_id,
    ) -> PlacementResult:
        try:
            for entry in await transaction.cart_entries(request.cart_entry_ids, user_id):
                transaction.stage_removal(entry)

            order = Order.place(
                user_id=user_id,
                items=[outcome.as_order_item() for outcome in summary.reserved],
                payment_info=PaymentInfo(
                    amount_paid=request.payment.amount_paid,
                    type_payment=request.payment.type_payment,
                    account_number=request.payment.account_number,
                    account_name=request.payment.account_name,
                    payment_date=request.payment.payment_date,
                ),
                total_amount=request.total_amount,
                shipping_info=request.shipping_info,
                explanation=request.explanation,
            )
            if abs(order.items_total - order.total_amount) > 0.01:
                logger.warning(
                    "Declared total differs from item prices",
                    order_number=order.order_number,
                    total_amount=order.total_amount,
                    items_total=order.items_total,
                )
            transaction.stage(order)
            await transaction.commit()
        except ExpectedVersionError:
            logger.warning("Stock changed concurrently, aborting order", user_id=user_id)
            return PlacementResult(
                state=PlacementState.ABORTED,
                unavailable=[
                    {
                        "id": outcome.product_id,
                        "name": outcome.name,
                        "image": outcome.image,
                        "quantity": outcome.line.quantity,
                        "error": STOCK_CHANGED,
                    }
                    for outcome in summary.reserved
                ],
            )
        except StorefrontError:
            raise
        except Exception as exc:
            logger.error("Failed to create order or clean cart", error=str(exc), exc_info=exc)
            await self._report(exc, "create-order", request_id)
            raise PlacementFailed() from exc

        return PlacementResult(
            state=PlacementState.COMMITTED,
            order_id=str(order.id),
            order_number=order.order_number,
        )

    async def _abort(self, transaction: Transaction, request_id):
        try:
            await transaction.rollback()
        except Exception as exc:
            logger.error("Failed to abort transaction", error=str(exc))
            await self._report(exc, "rollback", request_id)

    async def _invalidate_caches(self, request_id):
        if self.caches is None:
            return
        try:
            await self.caches.products.invalidate_pattern(PRODUCTS_PATTERN)
            await self.caches.cart.invalidate_pattern(CART_PATTERN)
        except Exception as exc:
            # The order is committed; a stale cache only delays fresh reads
            logger.error("Cache invalidation failed after order", error=str(exc))
            await self._report(exc, "cache-invalidation", request_id)

    async def _report(self, exc, operation, request_id):
        if self.reporter is not None:
            await self.reporter.capture(
                exc,
                tags={"component": "order-webhook", "operation": operation, "requestId": request_id},
            )
