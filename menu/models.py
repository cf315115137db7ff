from django.db import models
from django.db.models import Exists, OuterRef, Q
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from menu.bundles import ChoiceGroup, ChoiceOption, FixedSelection
from menu import validity


# -------------------------------------------------------------------------
# 1. MENU CATALOG (Products and Variants)
# -------------------------------------------------------------------------

class Product(models.Model):
    """A menu product (e.g. "Sub Italiano"). Only its active flag matters to promotions."""
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, help_text="Inactive products make bundles that require them unavailable")
    has_variants = models.BooleanField(default=False, help_text="Product is sold by variant (e.g. 15cm / 30cm)")
    sort_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class ProductVariant(models.Model):
    """A sellable size/format of a product."""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    name = models.CharField(max_length=100, help_text="e.g. 15cm, 30cm")
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self):
        return f"{self.product.name} - {self.name}"


# -------------------------------------------------------------------------
# 2. PROMOTIONS
# -------------------------------------------------------------------------

def _clear_promotions_cache():
    # Bulk queryset writes bypass model signals.
    from menu.signals import invalidate_promotions_cache
    invalidate_promotions_cache("bulk promotion write")


class PromotionQuerySet(models.QuerySet):
    """Chainable promotion filters. Bulk writes clear the promotions cache."""

    def active(self):
        return self.filter(is_active=True)

    def of_type(self, promotion_type):
        return self.filter(type=promotion_type)

    def bundles(self):
        """Combinados only."""
        return self.of_type(Promotion.Type.BUNDLE_SPECIAL)

    def daily_specials(self):
        return self.of_type(Promotion.Type.DAILY_SPECIAL)

    def valid_now(self, at=None):
        """Promotions valid at `at` (defaults to now): active, in date range, in time window and on a listed weekday."""
        at = at or timezone.now()
        on_date, at_time, _ = validity.reference_moment(at)

        # Weekdays live in a JSON list, so the last step runs through the evaluator.
        candidates = (
            self.prefetch_related(None)
            .filter(is_active=True)
            .filter(
                Q(valid_from__isnull=True) | Q(valid_from__lte=on_date),
                Q(valid_until__isnull=True) | Q(valid_until__gte=on_date),
                Q(time_from__isnull=True) | Q(time_from__lte=at_time),
                Q(time_until__isnull=True) | Q(time_until__gte=at_time),
            )
            .only('pk', 'is_active', 'valid_from', 'valid_until', 'time_from', 'time_until', 'weekdays')
        )
        valid_ids = [promotion.pk for promotion in candidates if validity.is_valid_now(promotion, at)]
        return self.filter(pk__in=valid_ids)

    def expired(self, today=None):
        today = today or timezone.localdate()
        return self.filter(valid_until__isnull=False, valid_until__lt=today)

    def upcoming(self, today=None):
        today = today or timezone.localdate()
        return self.filter(valid_from__isnull=False, valid_from__gt=today)

    def available(self):
        """Bundles whose fixed products are all active and whose choice groups each offer an active product.

        Promotions of other types are left untouched.
        """
        broken_fixed_items = BundlePromotionItem.objects.filter(
            promotion=OuterRef('pk'),
            is_choice_group=False,
        ).filter(Q(product__isnull=True) | Q(product__is_active=False))

        active_options = BundlePromotionItemOption.objects.filter(
            bundle_item=OuterRef('pk'),
            product__is_active=True,
        )
        empty_choice_groups = BundlePromotionItem.objects.filter(
            promotion=OuterRef('pk'),
            is_choice_group=True,
        ).filter(~Exists(active_options))

        return self.filter(
            ~Q(type=Promotion.Type.BUNDLE_SPECIAL)
            | (Q(~Exists(broken_fixed_items)) & Q(~Exists(empty_choice_groups)))
        )

    def by_sort_order(self):
        return self.order_by('sort_order', 'id')

    def with_bundle_content(self):
        """Prefetch items, options and their products/variants in display order."""
        return self.prefetch_related(
            models.Prefetch(
                'bundle_items',
                queryset=BundlePromotionItem.objects.select_related('product', 'variant').prefetch_related(
                    models.Prefetch(
                        'options',
                        queryset=BundlePromotionItemOption.objects.select_related('product', 'variant'),
                    )
                ),
            )
        )

    # --- soft delete ---

    def only_trashed(self):
        return self.filter(deleted_at__isnull=False)

    def update(self, **kwargs):
        rows = super().update(**kwargs)
        if rows:
            _clear_promotions_cache()
        return rows

    def delete(self):
        """Soft-delete every promotion in the queryset."""
        rows = self.update(deleted_at=timezone.now())
        return rows, {self.model._meta.label: rows}

    delete.queryset_only = True

    def restore(self):
        return self.update(deleted_at=None)

    def force_delete(self):
        result = super().delete()
        _clear_promotions_cache()
        return result

    force_delete.queryset_only = True


class ActivePromotionManager(models.Manager.from_queryset(PromotionQuerySet)):
    """Hides soft-deleted promotions."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class PromotionManager(models.Manager.from_queryset(PromotionQuerySet)):
    """Includes soft-deleted promotions."""


class Promotion(models.Model):
    """A promotional campaign: daily special, 2x1, percentage discount or combinado (bundle)."""
    class Type(models.TextChoices):
        DAILY_SPECIAL = 'daily_special', _('Daily Special')
        TWO_FOR_ONE = 'two_for_one', _('Two for One')
        PERCENTAGE_DISCOUNT = 'percentage_discount', _('Percentage Discount')
        BUNDLE_SPECIAL = 'bundle_special', _('Bundle Special')

    class Zone(models.TextChoices):
        CAPITAL = 'capital', _('Capital')
        INTERIOR = 'interior', _('Interior')

    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, max_length=500)
    type = models.CharField(max_length=30, choices=Type.choices, db_index=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    # Pricing
    special_bundle_price_capital = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text="Bundle price for the capital zone (bundle_special)"
    )
    special_bundle_price_interior = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text="Bundle price for the interior zone (bundle_special)"
    )
    discount_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True,
        help_text="Discount percentage (percentage_discount)"
    )

    # Validity window
    valid_from = models.DateField(null=True, blank=True, help_text="First valid date (inclusive). Empty = no lower bound")
    valid_until = models.DateField(null=True, blank=True, help_text="Last valid date (inclusive). Empty = no upper bound")
    time_from = models.TimeField(null=True, blank=True, help_text="Daily start time (inclusive). Empty = all day")
    time_until = models.TimeField(null=True, blank=True, help_text="Daily end time (inclusive). Empty = all day")
    weekdays = models.JSONField(
        null=True, blank=True,
        help_text="ISO weekdays [1-7], 1 = Monday. Empty = every day"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = ActivePromotionManager()
    all_objects = PromotionManager()

    class Meta:
        ordering = ['sort_order', 'id']
        indexes = [
            models.Index(fields=['type', 'is_active'], name='idx_promotion_type_active'),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        errors = {}
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            errors['valid_until'] = 'valid_until must be on or after valid_from.'
        if self.weekdays is not None:
            if not isinstance(self.weekdays, list) or any(
                isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 7 for day in self.weekdays
            ):
                errors['weekdays'] = 'weekdays must be a list of integers between 1 (Monday) and 7 (Sunday).'
        if errors:
            raise ValidationError(errors)

    # --- soft delete ---

    def delete(self, using=None, keep_parents=False):
        """Soft delete. Use force_delete() to remove the row and its bundle content."""
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])
        return 1, {self._meta.label: 1}

    def force_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)

    def restore(self):
        self.deleted_at = None
        self.save(update_fields=['deleted_at', 'updated_at'])

    @property
    def is_trashed(self):
        return self.deleted_at is not None

    # --- rules ---

    @property
    def is_bundle(self):
        return self.type == self.Type.BUNDLE_SPECIAL

    def is_valid_now(self, at=None):
        return validity.is_valid_now(self, at)

    def is_expired(self, today=None):
        return validity.is_expired(self, today)

    def is_upcoming(self, today=None):
        return validity.is_upcoming(self, today)

    def is_available(self, lookup=None):
        from menu.services.bundle_availability import BundleAvailabilityService
        return BundleAvailabilityService.is_available(self, lookup=lookup)

    def bundle_shapes(self):
        """Bundle content as tagged shapes, in sort order."""
        return [item.as_shape() for item in self.bundle_items.all()]

    def price_for_zone(self, zone):
        """Bundle price for a delivery zone; None for other promotion types or unknown zones."""
        if not self.is_bundle:
            return None
        if zone == self.Zone.CAPITAL:
            return self.special_bundle_price_capital
        if zone == self.Zone.INTERIOR:
            return self.special_bundle_price_interior
        return None


# -------------------------------------------------------------------------
# 3. BUNDLE (COMBINADO) CONTENT
# -------------------------------------------------------------------------

class BundlePromotionItem(models.Model):
    """One slot of a combinado: either a fixed product or a choice group with options."""
    promotion = models.ForeignKey(Promotion, on_delete=models.CASCADE, related_name='bundle_items')
    is_choice_group = models.BooleanField(default=False)
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, null=True, blank=True, related_name='bundle_items',
        help_text="Fixed items only"
    )
    variant = models.ForeignKey(
        ProductVariant, on_delete=models.PROTECT, null=True, blank=True, related_name='bundle_items',
        help_text="Fixed items of products with variants"
    )
    choice_label = models.CharField(max_length=255, blank=True, null=True, help_text="Choice groups only, e.g. 'Choose your drink'")
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    sort_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'id']
        indexes = [
            models.Index(fields=['promotion', 'is_choice_group'], name='idx_bundle_promo_choice_group'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(is_choice_group=False) | Q(product__isnull=True, variant__isnull=True),
                name='bundle_choice_group_without_product',
            ),
            models.CheckConstraint(condition=Q(quantity__gte=1), name='bundle_item_quantity_positive'),
        ]

    def __str__(self):
        if self.is_choice_group:
            return f"{self.promotion.name}: {self.choice_label}"
        return f"{self.promotion.name}: {self.product.name if self.product else '(no product)'}"

    def as_shape(self):
        if self.is_choice_group:
            return ChoiceGroup(
                label=self.choice_label or '',
                options=tuple(
                    ChoiceOption(product_id=option.product_id, variant_id=option.variant_id, sort_order=option.sort_order)
                    for option in self.options.all()
                ),
                quantity=self.quantity,
                sort_order=self.sort_order,
                item_id=self.pk,
            )
        return FixedSelection(
            product_id=self.product_id,
            variant_id=self.variant_id,
            quantity=self.quantity,
            sort_order=self.sort_order,
            item_id=self.pk,
        )


class BundlePromotionItemOption(models.Model):
    """One selectable product/variant inside a choice group."""
    bundle_item = models.ForeignKey(BundlePromotionItem, on_delete=models.CASCADE, related_name='options')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='bundle_options')
    variant = models.ForeignKey(ProductVariant, on_delete=models.PROTECT, null=True, blank=True, related_name='bundle_options')
    sort_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['bundle_item', 'product', 'variant'], name='unique_bundle_option'),
        ]

    def __str__(self):
        if self.variant_id:
            return f"{self.product.name} ({self.variant.name})"
        return self.product.name
