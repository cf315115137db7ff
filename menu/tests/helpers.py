from decimal import Decimal

from menu.models import Product, Promotion, BundlePromotionItem, BundlePromotionItemOption


def create_product(name, is_active=True, **extra):
    return Product.objects.create(name=name, is_active=is_active, **extra)


def create_promotion(name, promotion_type=Promotion.Type.BUNDLE_SPECIAL, **extra):
    if promotion_type == Promotion.Type.BUNDLE_SPECIAL:
        extra.setdefault('special_bundle_price_capital', Decimal('59.00'))
        extra.setdefault('special_bundle_price_interior', Decimal('55.00'))
    return Promotion.objects.create(name=name, type=promotion_type, **extra)


def add_fixed_item(promotion, product, quantity=1, sort_order=0):
    return BundlePromotionItem.objects.create(
        promotion=promotion,
        product=product,
        quantity=quantity,
        sort_order=sort_order,
    )


def add_choice_group(promotion, label, products, sort_order=0):
    item = BundlePromotionItem.objects.create(
        promotion=promotion,
        is_choice_group=True,
        choice_label=label,
        sort_order=sort_order,
    )
    for index, product in enumerate(products):
        BundlePromotionItemOption.objects.create(bundle_item=item, product=product, sort_order=index)
    return item
