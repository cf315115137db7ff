"""Management command to report combinados that cannot currently be sold."""
from django.core.management.base import BaseCommand

from menu.bundles import FixedSelection
from menu.models import Promotion
from menu.services.bundle_availability import BundleAvailabilityService, ProductActiveStatusLookup


class Command(BaseCommand):
    help = 'List bundle specials with items whose products are inactive or missing'

    def add_arguments(self, parser):
        parser.add_argument(
            '--include-inactive',
            action='store_true',
            help='Also audit promotions that are switched off',
        )

    def handle(self, *args, **options):
        promotions = Promotion.objects.bundles().with_bundle_content().by_sort_order()
        if not options['include_inactive']:
            promotions = promotions.active()
        promotions = list(promotions)

        lookup = ProductActiveStatusLookup(
            pk for promotion in promotions for shape in promotion.bundle_shapes() for pk in shape.product_ids
        )

        blocked = 0
        for promotion in promotions:
            blocking = BundleAvailabilityService.unavailable_items(promotion, lookup=lookup)
            if not blocking:
                continue
            blocked += 1
            self.stdout.write(self.style.WARNING(f'{promotion.name} (id {promotion.pk}) is unavailable:'))
            for shape in blocking:
                if isinstance(shape, FixedSelection):
                    detail = f'fixed item, product {shape.product_id if shape.product_id is not None else "missing"}'
                else:
                    detail = f'choice group "{shape.label}", no active option'
                self.stdout.write(f'  - item {shape.item_id}: {detail}')

        self.stdout.write(
            self.style.SUCCESS(
                f'Audited {len(promotions)} combinados: {len(promotions) - blocked} available, {blocked} unavailable'
            )
        )
