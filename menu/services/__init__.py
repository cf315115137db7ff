# Services package
from .promotion_cache import PromotionCacheService
from .bundle_availability import BundleAvailabilityService, ProductActiveStatusLookup
from .bundle_builder import BundleBuilder
from .promotion_catalog import PromotionCatalogService

__all__ = [
    'PromotionCacheService', 'BundleAvailabilityService', 'ProductActiveStatusLookup',
    'BundleBuilder', 'PromotionCatalogService',
]
