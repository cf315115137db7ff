from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase

from .helpers import add_choice_group, add_fixed_item, create_product, create_promotion


class ManagementCommandTests(TestCase):
    def test_clear_promotions_cache(self):
        cache.set('active_promotions', ['stale'])
        out = StringIO()

        call_command('clear_promotions_cache', stdout=out)

        self.assertIsNone(cache.get('active_promotions'))
        self.assertIn('active_promotions', out.getvalue())

    def test_audit_bundle_availability(self):
        sub = create_product('Sub Italiano')
        tea = create_product('Te Frio', is_active=False)
        good = create_promotion('Combo Bueno')
        add_fixed_item(good, sub)
        bad = create_promotion('Combo Te')
        add_fixed_item(bad, sub)
        add_choice_group(bad, 'Bebida', [tea], sort_order=1)
        out = StringIO()

        call_command('audit_bundle_availability', stdout=out)

        output = out.getvalue()
        self.assertIn('Combo Te', output)
        self.assertNotIn('Combo Bueno', output)
        self.assertIn('choice group "Bebida"', output)
        self.assertIn('1 available, 1 unavailable', output)
