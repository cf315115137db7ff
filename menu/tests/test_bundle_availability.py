from django.test import SimpleTestCase, TestCase

from menu.bundles import ChoiceGroup, ChoiceOption, FixedSelection
from menu.models import BundlePromotionItem, BundlePromotionItemOption, ProductVariant, Promotion
from menu.services.bundle_availability import BundleAvailabilityService, ProductActiveStatusLookup

from .helpers import add_choice_group, add_fixed_item, create_product, create_promotion


class StaticLookup:
    def __init__(self, statuses):
        self.statuses = statuses

    def is_product_active(self, product_id, variant_id=None):
        return self.statuses.get(product_id, False)


class ShapeAvailabilityTests(SimpleTestCase):
    """Rules applied to shapes alone, without touching the database."""

    def setUp(self):
        self.lookup = StaticLookup({1: True, 2: False, 3: False})

    def test_fixed_item_follows_product_flag(self):
        self.assertTrue(BundleAvailabilityService.is_shape_available(FixedSelection(product_id=1), self.lookup))
        self.assertFalse(BundleAvailabilityService.is_shape_available(FixedSelection(product_id=2), self.lookup))

    def test_fixed_item_without_product_is_unavailable(self):
        self.assertFalse(BundleAvailabilityService.is_shape_available(FixedSelection(product_id=None), self.lookup))

    def test_choice_group_needs_one_active_option(self):
        one_active = ChoiceGroup(label='Bebida', options=(ChoiceOption(1), ChoiceOption(2), ChoiceOption(3)))
        none_active = ChoiceGroup(label='Bebida', options=(ChoiceOption(2), ChoiceOption(3)))
        empty = ChoiceGroup(label='Bebida')

        self.assertTrue(BundleAvailabilityService.is_shape_available(one_active, self.lookup))
        self.assertFalse(BundleAvailabilityService.is_shape_available(none_active, self.lookup))
        self.assertFalse(BundleAvailabilityService.is_shape_available(empty, self.lookup))

    def test_unknown_shape_is_rejected(self):
        with self.assertRaises(TypeError):
            BundleAvailabilityService.is_shape_available(object(), self.lookup)


class BundleAvailabilityTests(TestCase):
    def setUp(self):
        self.p1 = create_product('Sub Italiano')
        self.p2 = create_product('Coca-Cola')
        self.p3 = create_product('Te Frio', is_active=False)

        self.bundle = create_promotion('Combo Italiano')
        add_fixed_item(self.bundle, self.p1, sort_order=0)
        add_choice_group(self.bundle, 'Elige tu bebida', [self.p2, self.p3], sort_order=1)

    def test_available_then_unavailable_after_deactivating_fixed_product(self):
        self.assertTrue(self.bundle.is_available())

        self.p1.is_active = False
        self.p1.save()

        self.assertFalse(self.bundle.is_available())

    def test_every_fixed_item_must_be_active(self):
        fries = create_product('Papas')
        add_fixed_item(self.bundle, fries, sort_order=2)
        self.assertTrue(self.bundle.is_available())

        fries.is_active = False
        fries.save()
        self.assertFalse(self.bundle.is_available())

    def test_choice_group_with_only_inactive_options(self):
        self.p2.is_active = False
        self.p2.save()

        self.assertFalse(self.bundle.is_available())
        blocking = BundleAvailabilityService.unavailable_items(self.bundle)
        self.assertEqual(len(blocking), 1)
        self.assertIsInstance(blocking[0], ChoiceGroup)
        self.assertEqual(blocking[0].label, 'Elige tu bebida')

    def test_empty_choice_group_makes_bundle_unavailable(self):
        add_choice_group(self.bundle, 'Postre', [], sort_order=2)
        self.assertFalse(self.bundle.is_available())

    def test_non_bundle_promotions_are_always_available(self):
        daily = create_promotion('Sub del Dia', promotion_type=Promotion.Type.DAILY_SPECIAL)
        self.assertTrue(daily.is_available())
        self.assertEqual(BundleAvailabilityService.unavailable_items(daily), [])

    def test_shared_lookup_batches_product_queries(self):
        lookup = ProductActiveStatusLookup([self.p1.pk, self.p2.pk, self.p3.pk])
        promotion = Promotion.objects.with_bundle_content().get(pk=self.bundle.pk)
        with self.assertNumQueries(0):
            self.assertTrue(BundleAvailabilityService.is_available(promotion, lookup=lookup))

    def test_lookup_treats_missing_products_as_inactive(self):
        lookup = ProductActiveStatusLookup([999999])
        self.assertFalse(lookup.is_product_active(999999))
        self.assertFalse(lookup.is_product_active(None))

    def test_inactive_variants_do_not_block_availability(self):
        sub = create_product('Sub Pollo', has_variants=True)
        sub_15 = ProductVariant.objects.create(product=sub, name='15cm', is_active=False)
        sub_30 = ProductVariant.objects.create(product=sub, name='30cm', is_active=False)
        combo = create_promotion('Combo Pollo')
        BundlePromotionItem.objects.create(promotion=combo, product=sub, variant=sub_15)
        group = add_choice_group(combo, 'Elige tu sub', [], sort_order=1)
        BundlePromotionItemOption.objects.create(bundle_item=group, product=sub, variant=sub_30)
        BundlePromotionItemOption.objects.create(bundle_item=group, product=self.p3, sort_order=1)

        self.assertTrue(combo.is_available())
        self.assertEqual(BundleAvailabilityService.unavailable_items(combo), [])
        self.assertIn(combo, Promotion.objects.available())

        sub.is_active = False
        sub.save()

        self.assertFalse(combo.is_available())
        self.assertNotIn(combo, Promotion.objects.available())
