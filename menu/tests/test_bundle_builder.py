from django.core.exceptions import ValidationError
from django.test import TestCase

from menu.bundles import ChoiceGroup, ChoiceOption, FixedSelection
from menu.models import BundlePromotionItem, BundlePromotionItemOption, Promotion
from menu.services.bundle_builder import BundleBuilder

from .helpers import add_fixed_item, create_product, create_promotion


class BundleBuilderTests(TestCase):
    def setUp(self):
        self.sub = create_product('Sub Italiano')
        self.soda = create_product('Coca-Cola')
        self.tea = create_product('Te Frio')
        self.bundle = create_promotion('Combo Italiano')

    def test_save_writes_items_in_insertion_order(self):
        items = (
            BundleBuilder(self.bundle)
            .add_fixed(self.sub.pk, quantity=2)
            .add_choice_group('Elige tu bebida', [(self.soda.pk, None), ChoiceOption(self.tea.pk)])
            .save()
        )

        self.assertEqual(len(items), 2)
        shapes = self.bundle.bundle_shapes()
        self.assertEqual(
            shapes[0],
            FixedSelection(product_id=self.sub.pk, quantity=2, sort_order=0, item_id=items[0].pk),
        )
        self.assertIsInstance(shapes[1], ChoiceGroup)
        self.assertEqual(shapes[1].label, 'Elige tu bebida')
        self.assertEqual(shapes[1].product_ids, (self.soda.pk, self.tea.pk))
        self.assertEqual([option.sort_order for option in shapes[1].options], [0, 1])

    def test_save_replaces_existing_content(self):
        add_fixed_item(self.bundle, self.tea)

        BundleBuilder(self.bundle).add_fixed(self.sub.pk).add_fixed(self.soda.pk).save()

        self.assertEqual(
            list(self.bundle.bundle_items.values_list('product_id', flat=True)),
            [self.sub.pk, self.soda.pk],
        )

    def test_fixed_item_without_product_is_rejected(self):
        builder = BundleBuilder(self.bundle).add_fixed(None).add_fixed(self.sub.pk)

        with self.assertRaises(ValidationError) as ctx:
            builder.save()

        self.assertIn('Item 1: a fixed item requires a product.', ctx.exception.messages)
        self.assertFalse(BundlePromotionItem.objects.filter(promotion=self.bundle).exists())

    def test_choice_group_rules(self):
        builder = (
            BundleBuilder(self.bundle)
            .add_choice_group('  ', [(self.soda.pk, None), (self.tea.pk, None)])
            .add_choice_group('Bebida', [(self.soda.pk, None), (self.soda.pk, None)])
        )

        with self.assertRaises(ValidationError) as ctx:
            builder.validate()

        self.assertIn('Item 1: a choice group requires a label.', ctx.exception.messages)
        self.assertIn(
            'Item 2: a choice group cannot repeat the same product and variant.',
            ctx.exception.messages,
        )

    def test_quantity_must_be_positive(self):
        with self.assertRaises(ValidationError):
            BundleBuilder(self.bundle).add_fixed(self.sub.pk, quantity=0).validate()

    def test_non_bundle_promotion_is_rejected(self):
        daily = create_promotion('Sub del Dia', promotion_type=Promotion.Type.DAILY_SPECIAL)
        with self.assertRaises(ValidationError):
            BundleBuilder(daily).add_fixed(self.sub.pk).save()

    def test_failed_save_keeps_previous_content(self):
        original = add_fixed_item(self.bundle, self.tea)

        with self.assertRaises(ValidationError):
            BundleBuilder(self.bundle).add_fixed(None).save()

        self.assertEqual(list(self.bundle.bundle_items.all()), [original])

    def test_from_payload(self):
        BundleBuilder.from_payload(self.bundle, [
            {'is_choice_group': False, 'product_id': self.sub.pk, 'quantity': 1},
            {
                'is_choice_group': True,
                'choice_label': 'Bebida',
                'options': [{'product_id': self.soda.pk}, {'product_id': self.tea.pk, 'variant_id': None}],
            },
        ]).save()

        group = BundlePromotionItem.objects.get(promotion=self.bundle, is_choice_group=True)
        self.assertEqual(group.choice_label, 'Bebida')
        self.assertEqual(BundlePromotionItemOption.objects.filter(bundle_item=group).count(), 2)
