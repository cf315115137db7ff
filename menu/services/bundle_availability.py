"""Availability of combinado (bundle_special) promotions.

A bundle can be sold only when every item can be fulfilled:

* a fixed item needs its product to be active;
* a choice group needs at least one option whose product is active.

A missing product reference counts as inactive. Variant flags are not
consulted; the product's own flag decides.
"""
import logging
from typing import Iterable, Optional, Protocol

from menu.bundles import ChoiceGroup, FixedSelection

logger = logging.getLogger(__name__)


class ActiveStatusLookup(Protocol):
    def is_product_active(self, product_id: Optional[int], variant_id: Optional[int] = None) -> bool:
        ...


class ProductActiveStatusLookup:
    """Answers product active-status from the database, one query per batch of unseen ids."""

    def __init__(self, product_ids: Iterable[int] = ()):
        self._statuses = {}
        self.preload(product_ids)

    def preload(self, product_ids: Iterable[int]):
        from menu.models import Product

        missing = {pk for pk in product_ids if pk is not None and pk not in self._statuses}
        if not missing:
            return
        found = dict(Product.objects.filter(pk__in=missing).values_list('pk', 'is_active'))
        for pk in missing:
            self._statuses[pk] = found.get(pk, False)

    def is_product_active(self, product_id, variant_id=None) -> bool:
        if product_id is None:
            return False
        if product_id not in self._statuses:
            self.preload([product_id])
        return self._statuses[product_id]


class BundleAvailabilityService:

    @staticmethod
    def is_shape_available(shape, lookup: ActiveStatusLookup) -> bool:
        """Availability of a single bundle item."""
        if isinstance(shape, FixedSelection):
            return lookup.is_product_active(shape.product_id, shape.variant_id)
        if isinstance(shape, ChoiceGroup):
            return any(lookup.is_product_active(option.product_id, option.variant_id) for option in shape.options)
        raise TypeError(f"Unknown bundle item shape: {shape!r}")

    @classmethod
    def _shapes_and_lookup(cls, promotion, lookup):
        shapes = promotion.bundle_shapes()
        if lookup is None:
            lookup = ProductActiveStatusLookup(pk for shape in shapes for pk in shape.product_ids)
        return shapes, lookup

    @classmethod
    def is_available(cls, promotion, lookup: Optional[ActiveStatusLookup] = None) -> bool:
        """True when every item of the bundle can be fulfilled. Non-bundle promotions are always available."""
        if not promotion.is_bundle:
            return True
        shapes, lookup = cls._shapes_and_lookup(promotion, lookup)
        return all(cls.is_shape_available(shape, lookup) for shape in shapes)

    @classmethod
    def unavailable_items(cls, promotion, lookup: Optional[ActiveStatusLookup] = None):
        """Shapes that currently block the bundle, for admin/storefront warnings."""
        if not promotion.is_bundle:
            return []
        shapes, lookup = cls._shapes_and_lookup(promotion, lookup)
        blocking = [shape for shape in shapes if not cls.is_shape_available(shape, lookup)]
        if blocking:
            logger.info(
                "Bundle promotion %s has %d unavailable item(s)",
                promotion.pk,
                len(blocking),
            )
        return blocking
