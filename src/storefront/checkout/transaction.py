"""Checkout transaction: one Protean unit of work spanning stock reservation,
cart cleanup and order creation.

Aggregates read through a transaction are kept in an identity map, so two
line items naming the same product reserve against the same stock. Writes
are staged and only reach the repositories in :meth:`Transaction.commit`,
right before the unit of work commits; a rolled back transaction leaves
nothing behind.
"""

import time

from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart_entry import CartEntry
from storefront.catalogue.category import Category
from storefront.catalogue.product import Product


class TransactionError(Exception):
    """The transaction itself failed, as opposed to one of the items in it."""


class TransactionClosed(TransactionError):
    pass


class Transaction:
    def __init__(self, uow: UnitOfWork):
        self._uow = uow
        self._products: dict[str, Product | None] = {}
        self._category_names: dict[str, str | None] = {}
        self._staged: dict[str, object] = {}
        self._doomed: list[CartEntry] = []
        self.started_at = time.monotonic()

    @property
    def in_progress(self) -> bool:
        return self._uow.in_progress

    def _ensure_open(self):
        if not self.in_progress:
            raise TransactionClosed("Transaction is no longer in progress")

    async def product(self, product_id) -> Product | None:
        """The product as seen by this transaction, or ``None`` when it does not exist."""
        self._ensure_open()
        key = str(product_id)
        if key not in self._products:
            try:
                self._products[key] = current_domain.repository_for(Product).get(key)
            except ObjectNotFoundError:
                self._products[key] = None
        return self._products[key]

    async def category_name(self, category_id) -> str | None:
        self._ensure_open()
        key = str(category_id)
        if key not in self._category_names:
            try:
                self._category_names[key] = current_domain.repository_for(Category).get(key).name
            except ObjectNotFoundError:
                self._category_names[key] = None
        return self._category_names[key]

    async def cart_entries(self, entry_ids, user_id) -> list[CartEntry]:
        """Cart entries among ``entry_ids`` that belong to ``user_id``. Unknown ids are skipped."""
        self._ensure_open()
        repo = current_domain.repository_for(CartEntry)
        entries = []
        for entry_id in dict.fromkeys(str(entry_id) for entry_id in entry_ids):
            try:
                entry = repo.get(entry_id)
            except ObjectNotFoundError:
                continue
            if entry.belongs_to(user_id):
                entries.append(entry)
        return entries

    def stage(self, aggregate):
        """Persist ``aggregate`` when the transaction commits."""
        self._ensure_open()
        self._staged[f"{type(aggregate).__name__}:{aggregate.id}"] = aggregate

    def stage_removal(self, entry: CartEntry):
        self._ensure_open()
        self._doomed.append(entry)

    async def commit(self):
        self._ensure_open()
        try:
            for aggregate in self._staged.values():
                current_domain.repository_for(type(aggregate)).add(aggregate)
            cart_repo = current_domain.repository_for(CartEntry)
            for entry in self._doomed:
                cart_repo._dao.delete(entry)
            self._uow.commit()
        except Exception:
            await self.rollback()
            raise

    async def rollback(self):
        """Abandon every staged change. Safe to call more than once."""
        self._staged.clear()
        self._doomed.clear()
        if self._uow.in_progress:
            self._uow.rollback()


class TransactionFactory:
    """Opens checkout transactions against the current domain's providers.

    Owned by the application and shared by every request.
    """

    async def begin(self) -> Transaction:
        uow = UnitOfWork()
        uow.start()
        return Transaction(uow)
