"""Category aggregate: flat grouping of products shown in catalogue filters."""

from datetime import datetime

from protean.fields import Boolean, DateTime, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class Category:
    """A named product category.

    ``sold`` accumulates units sold across the category's products and is
    informational only.
    """

    name: String(required=True, max_length=50)
    is_active: Boolean(default=True)
    sold: Integer(default=0, min_value=0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def create(cls, name):
        from storefront.catalogue.events import CategoryCreated

        now = datetime.now()
        category = cls(name=name.strip(), created_at=now, updated_at=now)
        category.raise_(CategoryCreated(category_id=category.id, name=category.name))
        return category

    def deactivate(self):
        from storefront.catalogue.events import CategoryDeactivated

        self.is_active = False
        self.updated_at = datetime.now()
        self.raise_(CategoryDeactivated(category_id=self.id))
