import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True, help_text='Inactive products make bundles that require them unavailable')),
                ('has_variants', models.BooleanField(default=False, help_text='Product is sold by variant (e.g. 15cm / 30cm)')),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['sort_order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='ProductVariant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='e.g. 15cm, 30cm', max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='variants', to='menu.product')),
            ],
            options={
                'ordering': ['sort_order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Promotion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, unique=True)),
                ('description', models.TextField(blank=True, max_length=500)),
                ('type', models.CharField(choices=[('daily_special', 'Daily Special'), ('two_for_one', 'Two for One'), ('percentage_discount', 'Percentage Discount'), ('bundle_special', 'Bundle Special')], db_index=True, max_length=30)),
                ('is_active', models.BooleanField(default=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('special_bundle_price_capital', models.DecimalField(blank=True, decimal_places=2, help_text='Bundle price for the capital zone (bundle_special)', max_digits=10, null=True)),
                ('special_bundle_price_interior', models.DecimalField(blank=True, decimal_places=2, help_text='Bundle price for the interior zone (bundle_special)', max_digits=10, null=True)),
                ('discount_percentage', models.DecimalField(blank=True, decimal_places=2, help_text='Discount percentage (percentage_discount)', max_digits=5, null=True)),
                ('valid_from', models.DateField(blank=True, help_text='First valid date (inclusive). Empty = no lower bound', null=True)),
                ('valid_until', models.DateField(blank=True, help_text='Last valid date (inclusive). Empty = no upper bound', null=True)),
                ('time_from', models.TimeField(blank=True, help_text='Daily start time (inclusive). Empty = all day', null=True)),
                ('time_until', models.TimeField(blank=True, help_text='Daily end time (inclusive). Empty = all day', null=True)),
                ('weekdays', models.JSONField(blank=True, help_text='ISO weekdays [1-7], 1 = Monday. Empty = every day', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, null=True)),
            ],
            options={
                'ordering': ['sort_order', 'id'],
                'indexes': [models.Index(fields=['type', 'is_active'], name='idx_promotion_type_active')],
            },
        ),
        migrations.CreateModel(
            name='BundlePromotionItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_choice_group', models.BooleanField(default=False)),
                ('choice_label', models.CharField(blank=True, help_text="Choice groups only, e.g. 'Choose your drink'", max_length=255, null=True)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(blank=True, help_text='Fixed items only', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bundle_items', to='menu.product')),
                ('promotion', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bundle_items', to='menu.promotion')),
                ('variant', models.ForeignKey(blank=True, help_text='Fixed items of products with variants', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bundle_items', to='menu.productvariant')),
            ],
            options={
                'ordering': ['sort_order', 'id'],
                'indexes': [models.Index(fields=['promotion', 'is_choice_group'], name='idx_bundle_promo_choice_group')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('is_choice_group', False), models.Q(('product__isnull', True), ('variant__isnull', True)), _connector='OR'), name='bundle_choice_group_without_product'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 1)), name='bundle_item_quantity_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BundlePromotionItemOption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('bundle_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='options', to='menu.bundlepromotionitem')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bundle_options', to='menu.product')),
                ('variant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bundle_options', to='menu.productvariant')),
            ],
            options={
                'ordering': ['sort_order', 'id'],
                'constraints': [models.UniqueConstraint(fields=('bundle_item', 'product', 'variant'), name='unique_bundle_option')],
            },
        ),
    ]
