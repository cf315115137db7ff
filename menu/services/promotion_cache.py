"""Shared cache of the active promotions catalog."""
import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)


class PromotionCacheService:
    """Single cache entry for the whole catalog, cleared wholesale on any promotion or product write."""

    DEFAULT_KEY = "active_promotions"
    DEFAULT_TTL_SECONDS = 300

    @classmethod
    def cache_key(cls) -> str:
        return getattr(settings, "PROMOTIONS_CACHE_KEY", cls.DEFAULT_KEY)

    @classmethod
    def ttl_seconds(cls) -> int:
        return int(getattr(settings, "PROMOTIONS_CACHE_TTL", cls.DEFAULT_TTL_SECONDS))

    @staticmethod
    def _load_active_promotions():
        from menu.models import Promotion
        return list(Promotion.objects.active().by_sort_order().with_bundle_content())

    @classmethod
    def get_active_promotions(cls):
        """Active, non-deleted promotions with bundle content loaded, served from cache when warm."""
        return cache.get_or_set(cls.cache_key(), cls._load_active_promotions, cls.ttl_seconds())

    @classmethod
    def clear(cls):
        """Drop the cached catalog. Safe to call any number of times."""
        cache.delete(cls.cache_key())
        logger.debug("Promotions cache cleared", extra={'cache_key': cls.cache_key()})
