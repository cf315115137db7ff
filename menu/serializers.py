from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from .models import Product, ProductVariant, Promotion, BundlePromotionItem, BundlePromotionItemOption
from .services.bundle_builder import BundleBuilder
import logging

logger = logging.getLogger(__name__)

# --- CATALOG SERIALIZERS ---

class ProductVariantSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductVariant
        fields = ('id', 'product', 'name', 'is_active', 'sort_order')
        read_only_fields = ('id',)


class ProductSerializer(serializers.ModelSerializer):
    """Product with its variants (read-only nested)."""
    variants = ProductVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ('id', 'name', 'description', 'is_active', 'has_variants', 'sort_order', 'variants', 'created_at', 'updated_at')
        read_only_fields = ('id', 'variants', 'created_at', 'updated_at')


# --- BUNDLE CONTENT SERIALIZERS ---

class BundleOptionSerializer(serializers.ModelSerializer):
    product_id = serializers.PrimaryKeyRelatedField(source='product', queryset=Product.objects.all())
    variant_id = serializers.PrimaryKeyRelatedField(
        source='variant', queryset=ProductVariant.objects.all(), required=False, allow_null=True
    )
    product_name = serializers.CharField(source='product.name', read_only=True)
    variant_name = serializers.CharField(source='variant.name', read_only=True, default=None)

    class Meta:
        model = BundlePromotionItemOption
        fields = ('id', 'product_id', 'product_name', 'variant_id', 'variant_name', 'sort_order')
        read_only_fields = ('id', 'sort_order')


class BundleItemSerializer(serializers.ModelSerializer):
    product_id = serializers.PrimaryKeyRelatedField(
        source='product', queryset=Product.objects.all(), required=False, allow_null=True
    )
    variant_id = serializers.PrimaryKeyRelatedField(
        source='variant', queryset=ProductVariant.objects.all(), required=False, allow_null=True
    )
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    variant_name = serializers.CharField(source='variant.name', read_only=True, default=None)
    quantity = serializers.IntegerField(min_value=1, max_value=10, default=1)
    options = BundleOptionSerializer(many=True, required=False)

    class Meta:
        model = BundlePromotionItem
        fields = (
            'id', 'is_choice_group', 'choice_label', 'product_id', 'product_name',
            'variant_id', 'variant_name', 'quantity', 'sort_order', 'options'
        )
        read_only_fields = ('id', 'sort_order')


def _variant_errors(product, variant, label):
    """Products sold by variant need a variant of their own; others must not carry one."""
    if product is None:
        return []
    if product.has_variants:
        if variant is None:
            return [f"{label}: select a variant for {product.name}."]
        if variant.product_id != product.pk:
            return [f"{label}: the selected variant does not belong to {product.name}."]
    elif variant is not None:
        return [f"{label}: {product.name} has no variants."]
    return []


# --- PROMOTION SERIALIZERS ---

class PromotionSerializer(serializers.ModelSerializer):
    """Admin promotion serializer. Bundle content is written through BundleBuilder."""
    # Names stay unique across trashed promotions too.
    name = serializers.CharField(
        max_length=255,
        validators=[UniqueValidator(queryset=Promotion.all_objects.all())],
    )
    items = BundleItemSerializer(source='bundle_items', many=True, required=False)
    weekdays = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=7),
        required=False,
        allow_null=True,
        allow_empty=True,
    )
    is_valid_now = serializers.SerializerMethodField()
    is_expired = serializers.SerializerMethodField()
    is_upcoming = serializers.SerializerMethodField()
    is_available = serializers.SerializerMethodField()

    class Meta:
        model = Promotion
        fields = (
            'id', 'name', 'description', 'type', 'is_active', 'sort_order',
            'special_bundle_price_capital', 'special_bundle_price_interior', 'discount_percentage',
            'valid_from', 'valid_until', 'time_from', 'time_until', 'weekdays',
            'items', 'is_valid_now', 'is_expired', 'is_upcoming', 'is_available',
            'created_at', 'updated_at', 'deleted_at',
        )
        read_only_fields = ('id', 'created_at', 'updated_at', 'deleted_at')

    def get_is_valid_now(self, obj):
        return obj.is_valid_now(self.context.get('at'))

    def get_is_expired(self, obj):
        return obj.is_expired()

    def get_is_upcoming(self, obj):
        return obj.is_upcoming()

    def get_is_available(self, obj):
        return obj.is_available()

    def _value(self, attrs, field):
        if field in attrs:
            return attrs[field]
        return getattr(self.instance, field, None)

    def validate_weekdays(self, value):
        if value:
            return sorted(set(value))
        return None

    def validate(self, attrs):
        errors = {}
        promotion_type = self._value(attrs, 'type')

        valid_from = self._value(attrs, 'valid_from')
        valid_until = self._value(attrs, 'valid_until')
        if valid_from and valid_until and valid_until < valid_from:
            errors['valid_until'] = ['The end date must be on or after the start date.']

        time_from = self._value(attrs, 'time_from')
        time_until = self._value(attrs, 'time_until')
        if time_from and time_until and time_until <= time_from:
            errors['time_until'] = ['The end time must be after the start time.']

        items = attrs.get('bundle_items')
        if promotion_type == Promotion.Type.BUNDLE_SPECIAL:
            if self.instance is None and items is None:
                errors['items'] = ['A bundle special needs at least 2 items.']
            if items is not None:
                item_errors = self._validate_bundle_items(items)
                if item_errors:
                    errors['items'] = item_errors
            for field in ('special_bundle_price_capital', 'special_bundle_price_interior'):
                if self._value(attrs, field) is None:
                    errors[field] = ['A bundle special needs a price for this zone.']
        elif items:
            errors['items'] = ['Only bundle specials have bundle items.']

        if promotion_type == Promotion.Type.PERCENTAGE_DISCOUNT:
            percentage = self._value(attrs, 'discount_percentage')
            if percentage is None or not 0 < percentage <= 100:
                errors['discount_percentage'] = ['Percentage discounts need a value between 0 and 100.']

        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def _validate_bundle_items(self, items):
        errors = []
        if len(items) < 2:
            errors.append('A bundle special needs at least 2 items.')

        for position, item in enumerate(items, start=1):
            label = f"Item {position}"
            if not item.get('is_choice_group'):
                if item.get('product') is None:
                    errors.append(f"{label}: a fixed item requires a product.")
                elif not item['product'].is_active:
                    errors.append(f"{label}: {item['product'].name} is inactive.")
                errors.extend(_variant_errors(item.get('product'), item.get('variant'), label))
                continue

            if item.get('product') is not None or item.get('variant') is not None:
                errors.append(f"{label}: a choice group cannot have its own product.")
            if not (item.get('choice_label') or '').strip():
                errors.append(f"{label}: a choice group requires a label.")
            options = item.get('options') or []
            if len(options) < 2:
                errors.append(f"{label}: a choice group needs at least 2 options.")
            pairs = [(option['product'].pk, getattr(option.get('variant'), 'pk', None)) for option in options]
            if len(pairs) != len(set(pairs)):
                errors.append(f"{label}: options cannot repeat the same product and variant.")
            for option_position, option in enumerate(options, start=1):
                option_label = f"{label}, option {option_position}"
                if not option['product'].is_active:
                    errors.append(f"{option_label}: {option['product'].name} is inactive.")
                errors.extend(_variant_errors(option['product'], option.get('variant'), option_label))
        return errors

    @staticmethod
    def _builder_payload(items):
        return [
            {
                'is_choice_group': item.get('is_choice_group', False),
                'choice_label': item.get('choice_label'),
                'product_id': getattr(item.get('product'), 'pk', None),
                'variant_id': getattr(item.get('variant'), 'pk', None),
                'quantity': item.get('quantity', 1),
                'options': [
                    {
                        'product_id': option['product'].pk,
                        'variant_id': getattr(option.get('variant'), 'pk', None),
                    }
                    for option in item.get('options') or []
                ],
            }
            for item in items
        ]

    def _save_bundle_items(self, promotion, items):
        try:
            BundleBuilder.from_payload(promotion, self._builder_payload(items)).save()
        except DjangoValidationError as e:
            raise serializers.ValidationError({'items': e.messages})

    @transaction.atomic
    def create(self, validated_data):
        items = validated_data.pop('bundle_items', None)
        promotion = Promotion.objects.create(**validated_data)
        if items is not None:
            self._save_bundle_items(promotion, items)
        logger.info("Promotion %s created (%s)", promotion.pk, promotion.type)
        return promotion

    @transaction.atomic
    def update(self, instance, validated_data):
        items = validated_data.pop('bundle_items', None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        if instance.is_bundle:
            if items is not None:
                self._save_bundle_items(instance, items)
        elif instance.bundle_items.exists():
            # Only bundle specials keep bundle content.
            deleted, _ = instance.bundle_items.all().delete()
            logger.info(
                "Promotion %s changed to %s; removed %d bundle row(s)", instance.pk, instance.type, deleted
            )
        return instance


class PromotionReorderSerializer(serializers.Serializer):
    """Payload for POST /promotions/reorder/: [{"id": 1, "sort_order": 1}, ...]."""
    class EntrySerializer(serializers.Serializer):
        id = serializers.IntegerField()
        sort_order = serializers.IntegerField(min_value=1)

    promotions = EntrySerializer(many=True, allow_empty=False)
