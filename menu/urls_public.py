"""Public API URLs for the storefront and ordering channels."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views_public

router = DefaultRouter()
router.register(r'promotions', views_public.PublicPromotionViewSet, basename='public-promotion')

urlpatterns = [
    path('', include(router.urls)),
]
