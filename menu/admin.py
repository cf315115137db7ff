from django.contrib import admin, messages

from .models import Product, ProductVariant, Promotion, BundlePromotionItem, BundlePromotionItemOption

# --- INLINE CLASSES ---

class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 1
    fields = ['name', 'is_active', 'sort_order']


class BundlePromotionItemInline(admin.TabularInline):
    """Bundle slots of a combinado. Choice group options are edited on the item page."""
    model = BundlePromotionItem
    extra = 0
    fields = ['is_choice_group', 'choice_label', 'product', 'variant', 'quantity', 'sort_order']
    autocomplete_fields = ['product']
    show_change_link = True


class BundlePromotionItemOptionInline(admin.TabularInline):
    model = BundlePromotionItemOption
    extra = 2
    fields = ['product', 'variant', 'sort_order']
    autocomplete_fields = ['product']


# --- MENU CATALOG ---

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'is_active', 'has_variants', 'sort_order', 'updated_at')
    list_filter = ('is_active', 'has_variants')
    list_editable = ('is_active', 'sort_order')
    search_fields = ('name', 'description')
    inlines = [ProductVariantInline]


# --- PROMOTIONS ---

@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    """Promotions including trashed ones; deleting moves to trash."""
    list_display = ('name', 'type', 'is_active', 'sort_order', 'valid_from', 'valid_until', 'is_valid_now', 'is_trashed')
    list_filter = ('type', 'is_active', ('deleted_at', admin.EmptyFieldListFilter))
    search_fields = ('name', 'description')
    ordering = ('sort_order', 'id')
    actions = ['restore_promotions', 'force_delete_promotions']
    inlines = [BundlePromotionItemInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'type', 'is_active', 'sort_order')
        }),
        ('Pricing', {
            'fields': ('special_bundle_price_capital', 'special_bundle_price_interior', 'discount_percentage'),
            'description': 'Zone prices apply to bundle specials; the percentage to percentage discounts.'
        }),
        ('Validity', {
            'fields': ('valid_from', 'valid_until', 'time_from', 'time_until', 'weekdays'),
            'description': 'Leave a field empty for no restriction. Weekdays: 1 = Monday ... 7 = Sunday.'
        }),
    )

    def get_queryset(self, request):
        return Promotion.all_objects.all()

    @admin.display(boolean=True, description='Valid now')
    def is_valid_now(self, obj):
        return obj.is_valid_now()

    @admin.display(boolean=True, description='Trashed')
    def is_trashed(self, obj):
        return obj.is_trashed

    @admin.action(description='Restore selected promotions')
    def restore_promotions(self, request, queryset):
        restored = queryset.only_trashed().restore()
        self.message_user(request, f"{restored} promotion(s) restored.", messages.SUCCESS)

    @admin.action(description='Permanently delete selected promotions')
    def force_delete_promotions(self, request, queryset):
        deleted, _ = queryset.force_delete()
        self.message_user(request, f"{deleted} row(s) permanently deleted.", messages.WARNING)


@admin.register(BundlePromotionItem)
class BundlePromotionItemAdmin(admin.ModelAdmin):
    list_display = ('__str__', 'promotion', 'is_choice_group', 'quantity', 'sort_order')
    list_filter = ('is_choice_group',)
    list_select_related = ('promotion', 'product')
    autocomplete_fields = ['product']
    inlines = [BundlePromotionItemOptionInline]
