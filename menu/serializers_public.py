"""Public (storefront) serializers for promotions. Read-only."""
from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field

from .models import Promotion, BundlePromotionItem, BundlePromotionItemOption


class PublicBundleOptionSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    variant_name = serializers.CharField(source='variant.name', read_only=True, default=None)

    class Meta:
        model = BundlePromotionItemOption
        fields = ('id', 'product_id', 'product_name', 'variant_id', 'variant_name', 'sort_order')
        read_only_fields = fields


class PublicBundleItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    variant_name = serializers.CharField(source='variant.name', read_only=True, default=None)
    options = PublicBundleOptionSerializer(many=True, read_only=True)

    class Meta:
        model = BundlePromotionItem
        fields = (
            'id', 'is_choice_group', 'choice_label', 'product_id', 'product_name',
            'variant_id', 'variant_name', 'quantity', 'sort_order', 'options'
        )
        read_only_fields = fields


class PublicPromotionSerializer(serializers.ModelSerializer):
    """Public promotion serializer (limited fields, bundle content included)."""
    items = PublicBundleItemSerializer(source='bundle_items', many=True, read_only=True)
    is_valid_now = serializers.SerializerMethodField()
    is_available = serializers.SerializerMethodField()
    price = serializers.SerializerMethodField()

    class Meta:
        model = Promotion
        fields = (
            'id', 'name', 'description', 'type', 'sort_order',
            'special_bundle_price_capital', 'special_bundle_price_interior', 'price',
            'discount_percentage', 'valid_from', 'valid_until', 'time_from', 'time_until',
            'weekdays', 'is_valid_now', 'is_available', 'items'
        )
        read_only_fields = fields

    @extend_schema_field(serializers.BooleanField())
    def get_is_valid_now(self, obj):
        return obj.is_valid_now(self.context.get('at'))

    @extend_schema_field(serializers.BooleanField())
    def get_is_available(self, obj):
        # Catalog service pre-computes this for whole lists.
        available = getattr(obj, 'available', None)
        if available is None:
            return obj.is_available()
        return available

    @extend_schema_field(serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True))
    def get_price(self, obj):
        """Bundle price for the zone requested with ?zone=capital|interior."""
        zone = self.context.get('zone')
        if not zone:
            return None
        price = obj.price_for_zone(zone)
        return str(price) if price is not None else None


class PublicPromotionCatalogSerializer(serializers.Serializer):
    """Active catalog grouped by promotion type."""
    daily_special = PublicPromotionSerializer(allow_null=True, read_only=True)
    two_for_one = PublicPromotionSerializer(many=True, read_only=True)
    percentage_discounts = PublicPromotionSerializer(many=True, read_only=True)
    bundle_specials = PublicPromotionSerializer(many=True, read_only=True)
