from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


def api_root(request):
    """Root endpoint providing API information."""
    return JsonResponse({
        'name': 'Restaurant Chain API',
        'version': '1.0.0',
        'description': 'Django REST API for the restaurant chain menu and promotions',
        'endpoints': {
            'admin': '/admin/',
            'api_documentation': '/api/schema/swagger-ui/',
            'api_schema': '/api/schema/',
            'public_api': '/api/v1/public/',
            'menu_api': '/api/menu/',
        },
    })


urlpatterns = [
    # 0. Root endpoint
    path('', api_root, name='api-root'),

    # 1. Django Admin Interface
    path('admin/', admin.site.urls),
    path('api/auth/', include('rest_framework.urls')),

    # 2. Menu management API (staff)
    path('api/menu/', include('menu.urls')),

    # 3. Public menu API (storefront and mobile apps)
    path('api/v1/public/', include('menu.urls_public')),

    # 4. API Documentation (drf-spectacular generated)
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
