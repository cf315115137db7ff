"""
Signal handlers for the menu app.

Any write to a promotion, to its bundle content or to a product or variant
(whose names the cached catalog embeds) clears the cached promotions catalog:
once right away and once more when the surrounding transaction commits, so a
reader cannot re-populate the cache with pre-commit data.
"""
import logging
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Product, ProductVariant, Promotion, BundlePromotionItem, BundlePromotionItemOption
from .services.promotion_cache import PromotionCacheService

logger = logging.getLogger(__name__)


def _clear_cache_safely(reason):
    try:
        PromotionCacheService.clear()
    except Exception as e:
        logger.error(
            "Failed to clear promotions cache after %s: %s",
            reason,
            e,
            exc_info=True,
        )


def invalidate_promotions_cache(reason):
    _clear_cache_safely(reason)
    transaction.on_commit(lambda: _clear_cache_safely(f"{reason} (commit)"))


@receiver(post_save, sender=Promotion)
def promotion_saved(sender, instance, created, update_fields=None, **kwargs):
    """Covers create, update, soft delete and restore (the latter two save deleted_at)."""
    if created:
        action = "create"
    elif update_fields and 'deleted_at' in update_fields:
        action = "delete" if instance.deleted_at else "restore"
    else:
        action = "update"
    logger.info("Promotion %s %s, invalidating promotions cache", instance.pk, action)
    invalidate_promotions_cache(f"promotion {instance.pk} {action}")


@receiver(post_delete, sender=Promotion)
def promotion_force_deleted(sender, instance, **kwargs):
    logger.info("Promotion %s permanently deleted, invalidating promotions cache", instance.pk)
    invalidate_promotions_cache(f"promotion {instance.pk} force-delete")


@receiver(post_save, sender=BundlePromotionItem)
@receiver(post_delete, sender=BundlePromotionItem)
@receiver(post_save, sender=BundlePromotionItemOption)
@receiver(post_delete, sender=BundlePromotionItemOption)
def bundle_content_changed(sender, instance, **kwargs):
    invalidate_promotions_cache(f"{sender.__name__} {instance.pk} change")


@receiver(post_save, sender=Product)
@receiver(post_delete, sender=Product)
@receiver(post_save, sender=ProductVariant)
@receiver(post_delete, sender=ProductVariant)
def catalog_product_changed(sender, instance, **kwargs):
    invalidate_promotions_cache(f"{sender.__name__} {instance.pk} change")
