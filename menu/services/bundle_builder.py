"""Two-phase construction of combinado content.

Items are collected as tagged shapes first and only written once the whole
bundle validates, so a fixed item without a product never reaches the
database through this path.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from menu.bundles import ChoiceGroup, ChoiceOption, FixedSelection
from menu.models import BundlePromotionItem, BundlePromotionItemOption

logger = logging.getLogger(__name__)


class BundleBuilder:
    def __init__(self, promotion):
        self.promotion = promotion
        self.shapes = []

    def add_fixed(self, product_id, variant_id=None, quantity=1):
        self.shapes.append(FixedSelection(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            sort_order=len(self.shapes),
        ))
        return self

    def add_choice_group(self, label, options=(), quantity=1):
        """`options` holds ChoiceOption instances or (product_id, variant_id) pairs."""
        normalized = []
        for index, option in enumerate(options):
            if not isinstance(option, ChoiceOption):
                product_id, variant_id = option
                option = ChoiceOption(product_id=product_id, variant_id=variant_id)
            normalized.append(ChoiceOption(
                product_id=option.product_id,
                variant_id=option.variant_id,
                sort_order=index,
            ))
        self.shapes.append(ChoiceGroup(
            label=label,
            options=tuple(normalized),
            quantity=quantity,
            sort_order=len(self.shapes),
        ))
        return self

    @classmethod
    def from_payload(cls, promotion, items):
        """Build from validated API data: dicts with is_choice_group, product/variant ids, label and options."""
        builder = cls(promotion)
        for item in items:
            quantity = item.get('quantity', 1)
            if item.get('is_choice_group'):
                builder.add_choice_group(
                    item.get('choice_label') or '',
                    [(option['product_id'], option.get('variant_id')) for option in item.get('options') or []],
                    quantity=quantity,
                )
            else:
                builder.add_fixed(item.get('product_id'), item.get('variant_id'), quantity=quantity)
        return builder

    def validate(self):
        errors = []
        if not self.promotion.is_bundle:
            errors.append(f"Promotion '{self.promotion}' is not a bundle special.")

        for position, shape in enumerate(self.shapes, start=1):
            if shape.quantity < 1:
                errors.append(f"Item {position}: quantity must be at least 1.")
            if isinstance(shape, FixedSelection):
                if shape.product_id is None:
                    errors.append(f"Item {position}: a fixed item requires a product.")
                continue
            if not shape.label.strip():
                errors.append(f"Item {position}: a choice group requires a label.")
            pairs = [(option.product_id, option.variant_id) for option in shape.options]
            if len(pairs) != len(set(pairs)):
                errors.append(f"Item {position}: a choice group cannot repeat the same product and variant.")

        if errors:
            raise ValidationError(errors)

    @transaction.atomic
    def save(self):
        """Validate and replace the promotion's bundle content. Returns the created items."""
        self.validate()

        self.promotion.bundle_items.all().delete()
        created = []
        for shape in self.shapes:
            if isinstance(shape, FixedSelection):
                item = BundlePromotionItem.objects.create(
                    promotion=self.promotion,
                    is_choice_group=False,
                    product_id=shape.product_id,
                    variant_id=shape.variant_id,
                    quantity=shape.quantity,
                    sort_order=shape.sort_order,
                )
            else:
                item = BundlePromotionItem.objects.create(
                    promotion=self.promotion,
                    is_choice_group=True,
                    choice_label=shape.label,
                    quantity=shape.quantity,
                    sort_order=shape.sort_order,
                )
                BundlePromotionItemOption.objects.bulk_create([
                    BundlePromotionItemOption(
                        bundle_item=item,
                        product_id=option.product_id,
                        variant_id=option.variant_id,
                        sort_order=option.sort_order,
                    )
                    for option in shape.options
                ])
            created.append(item)

        logger.info(
            "Bundle content saved for promotion %s (%d items)",
            self.promotion.pk,
            len(created),
        )
        return created
