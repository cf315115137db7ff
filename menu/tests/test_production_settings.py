import importlib
import os
import sys
from unittest import mock

from django.test import SimpleTestCase

PRODUCTION_ENV = {
    'SECRET_KEY': 'production-test-key',
    'ALLOWED_HOSTS': 'menu.example.com',
    'DB_NAME': 'restaurant',
}


class ProductionCacheSettingsTests(SimpleTestCase):
    """Production workers share one cache backend."""

    def load_production_settings(self, **env):
        sys.modules.pop('restaurant.settings_production', None)
        self.addCleanup(sys.modules.pop, 'restaurant.settings_production', None)
        with mock.patch.dict(os.environ, {**PRODUCTION_ENV, **env}):
            if 'REDIS_URL' not in env:
                os.environ.pop('REDIS_URL', None)
            return importlib.import_module('restaurant.settings_production')

    def test_defaults_to_database_cache(self):
        production = self.load_production_settings()

        self.assertEqual(production.CACHES['default']['BACKEND'], 'django.core.cache.backends.db.DatabaseCache')
        self.assertEqual(production.CACHES['default']['LOCATION'], 'restaurant_cache')

    def test_uses_redis_when_configured(self):
        production = self.load_production_settings(REDIS_URL='redis://cache.internal:6379/1')

        self.assertEqual(production.CACHES['default']['BACKEND'], 'django.core.cache.backends.redis.RedisCache')
        self.assertEqual(production.CACHES['default']['LOCATION'], 'redis://cache.internal:6379/1')

    def test_never_uses_per_process_cache(self):
        production = self.load_production_settings()
        self.assertNotIn('locmem', production.CACHES['default']['BACKEND'])
