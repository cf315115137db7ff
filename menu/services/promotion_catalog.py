"""Read side of the promotions engine, consumed by the menu endpoints."""
import logging

from django.utils import timezone

from menu.models import Promotion
from menu.services.bundle_availability import BundleAvailabilityService, ProductActiveStatusLookup
from menu.services.promotion_cache import PromotionCacheService

logger = logging.getLogger(__name__)


class PromotionCatalogService:

    @staticmethod
    def _annotate_availability(promotions):
        """Set `available` on each promotion, sharing one product lookup across the list."""
        lookup = ProductActiveStatusLookup(
            pk
            for promotion in promotions if promotion.is_bundle
            for shape in promotion.bundle_shapes()
            for pk in shape.product_ids
        )
        for promotion in promotions:
            promotion.available = BundleAvailabilityService.is_available(promotion, lookup=lookup)
        return promotions

    @classmethod
    def list_promotions(cls, at=None, promotion_type=None, valid_now=False, available=False, ordered=True):
        """Promotions (with bundle content) matching the given filters, annotated with `available`."""
        queryset = Promotion.objects.with_bundle_content()
        if promotion_type:
            queryset = queryset.of_type(promotion_type)
        if valid_now:
            queryset = queryset.valid_now(at)
        if available:
            queryset = queryset.available()
        if ordered:
            queryset = queryset.by_sort_order()
        return cls._annotate_availability(list(queryset))

    @classmethod
    def combinados(cls, at=None):
        """Bundle specials that can be ordered at `at`."""
        return cls.list_promotions(
            at=at,
            promotion_type=Promotion.Type.BUNDLE_SPECIAL,
            valid_now=True,
            available=True,
        )

    @staticmethod
    def daily_special():
        return (
            Promotion.objects.active()
            .daily_specials()
            .by_sort_order()
            .first()
        )

    @classmethod
    def grouped_by_type(cls, at=None):
        """Active catalog grouped by type, built from the cached promotions.

        Bundle specials are limited to those valid at `at` and available.
        """
        at = at or timezone.now()
        promotions = cls._annotate_availability(list(PromotionCacheService.get_active_promotions()))

        grouped = {promotion_type: [] for promotion_type in Promotion.Type.values}
        for promotion in promotions:
            grouped[promotion.type].append(promotion)

        bundle_specials = [
            promotion for promotion in grouped[Promotion.Type.BUNDLE_SPECIAL]
            if promotion.available and promotion.is_valid_now(at)
        ]
        daily = grouped[Promotion.Type.DAILY_SPECIAL]

        return {
            'daily_special': daily[0] if daily else None,
            'two_for_one': grouped[Promotion.Type.TWO_FOR_ONE],
            'percentage_discounts': grouped[Promotion.Type.PERCENTAGE_DISCOUNT],
            'bundle_specials': bundle_specials,
        }
