"""Management command to drop the cached promotions catalog."""
from django.core.management.base import BaseCommand

from menu.services.promotion_cache import PromotionCacheService


class Command(BaseCommand):
    help = 'Clear the cached active promotions catalog (it is rebuilt on the next read)'

    def handle(self, *args, **options):
        PromotionCacheService.clear()
        self.stdout.write(
            self.style.SUCCESS(f'Cleared promotions cache key "{PromotionCacheService.cache_key()}"')
        )
