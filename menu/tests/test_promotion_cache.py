from unittest import mock

from django.core.cache import cache
from django.test import TestCase, override_settings

from menu.models import ProductVariant, Promotion
from menu.services.promotion_cache import PromotionCacheService

from .helpers import add_choice_group, add_fixed_item, create_product, create_promotion

CACHE_KEY = 'active_promotions'


@override_settings(PROMOTIONS_CACHE_KEY=CACHE_KEY)
class PromotionCacheInvalidationTests(TestCase):
    """Every promotion write leaves the cached catalog empty."""

    def setUp(self):
        cache.clear()
        self.sub = create_product('Sub Italiano')
        self.soda = create_product('Coca-Cola')
        self.promotion = create_promotion('2x1 Martes', promotion_type=Promotion.Type.TWO_FOR_ONE)
        self.warm_cache()

    def warm_cache(self):
        PromotionCacheService.get_active_promotions()
        self.assertIsNotNone(cache.get(CACHE_KEY))

    def assertCacheCleared(self):
        self.assertIsNone(cache.get(CACHE_KEY))

    def test_cache_serves_active_promotions(self):
        create_promotion('Inactivo', promotion_type=Promotion.Type.TWO_FOR_ONE, is_active=False)
        self.warm_cache()
        with self.assertNumQueries(0):
            promotions = PromotionCacheService.get_active_promotions()
        self.assertEqual([promotion.pk for promotion in promotions], [self.promotion.pk])

    def test_create_clears_cache(self):
        create_promotion('Sub del Dia', promotion_type=Promotion.Type.DAILY_SPECIAL)
        self.assertCacheCleared()

    def test_update_clears_cache(self):
        self.promotion.name = '2x1 Miercoles'
        self.promotion.save()
        self.assertCacheCleared()

    def test_soft_delete_clears_cache(self):
        self.promotion.delete()
        self.assertCacheCleared()

    def test_restore_clears_cache(self):
        self.promotion.delete()
        self.warm_cache()
        Promotion.all_objects.get(pk=self.promotion.pk).restore()
        self.assertCacheCleared()

    def test_force_delete_clears_cache(self):
        self.promotion.force_delete()
        self.assertCacheCleared()

    def test_bulk_update_clears_cache(self):
        Promotion.objects.filter(pk=self.promotion.pk).update(is_active=False)
        self.assertCacheCleared()

    def test_bulk_soft_delete_and_force_delete_clear_cache(self):
        Promotion.objects.all().delete()
        self.assertCacheCleared()

        self.warm_cache()
        Promotion.all_objects.all().force_delete()
        self.assertCacheCleared()

    def test_bundle_content_change_clears_cache(self):
        bundle = create_promotion('Combo Italiano')
        add_fixed_item(bundle, self.sub)
        self.warm_cache()

        add_choice_group(bundle, 'Bebida', [self.soda])
        self.assertCacheCleared()

    def test_cache_is_cleared_again_on_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            self.promotion.is_active = False
            self.promotion.save()
            # Simulates a reader re-populating the cache before commit.
            self.warm_cache()

        self.assertGreaterEqual(len(callbacks), 1)
        self.assertCacheCleared()

    def test_read_after_write_reflects_new_state(self):
        self.promotion.is_active = False
        self.promotion.save()
        self.assertEqual(PromotionCacheService.get_active_promotions(), [])

    def test_cache_backend_failure_does_not_abort_write(self):
        with mock.patch.object(PromotionCacheService, 'clear', side_effect=ConnectionError('cache down')):
            with self.assertLogs('menu.signals', level='ERROR'):
                self.promotion.name = '2x1 Jueves'
                self.promotion.save()

        self.promotion.refresh_from_db()
        self.assertEqual(self.promotion.name, '2x1 Jueves')

    def test_product_rename_clears_cache(self):
        self.sub.name = 'Sub Italiano BMT'
        self.sub.save()
        self.assertCacheCleared()

    def test_variant_changes_clear_cache(self):
        self.sub.has_variants = True
        self.sub.save()
        self.warm_cache()

        variant = ProductVariant.objects.create(product=self.sub, name='15cm')
        self.assertCacheCleared()

        self.warm_cache()
        variant.name = '6 pulgadas'
        variant.save()
        self.assertCacheCleared()

        self.warm_cache()
        variant.delete()
        self.assertCacheCleared()

    def test_cached_catalog_shows_renamed_product(self):
        bundle = create_promotion('Combo Italiano')
        add_fixed_item(bundle, self.sub)
        add_choice_group(bundle, 'Bebida', [self.soda, self.sub], sort_order=1)
        PromotionCacheService.get_active_promotions()

        self.soda.name = 'Coca-Cola Zero'
        self.soda.save()

        cached = next(p for p in PromotionCacheService.get_active_promotions() if p.pk == bundle.pk)
        self.assertEqual(
            [option.product.name for option in cached.bundle_items.all()[1].options.all()],
            ['Coca-Cola Zero', 'Sub Italiano'],
        )
