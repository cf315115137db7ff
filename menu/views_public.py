"""Public API ViewSets for the storefront and ordering channels."""
import logging

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import extend_schema, OpenApiTypes, OpenApiParameter
from rest_framework import viewsets, permissions, exceptions, status
from rest_framework.decorators import action
from rest_framework.response import Response

from menu.models import Promotion
from menu.serializers_public import PublicPromotionSerializer, PublicPromotionCatalogSerializer
from menu.services.promotion_catalog import PromotionCatalogService

logger = logging.getLogger(__name__)

AT_PARAMETER = OpenApiParameter(
    'at', OpenApiTypes.DATETIME, OpenApiParameter.QUERY,
    description="Reference moment (ISO 8601). Defaults to now; naive values use the restaurant time zone.",
)
ZONE_PARAMETER = OpenApiParameter(
    'zone', OpenApiTypes.STR, OpenApiParameter.QUERY,
    enum=Promotion.Zone.values,
    description="Delivery zone used to fill `price`.",
)


def parse_at_param(request):
    """Read the optional `at` query parameter. Returns None when absent."""
    raw = request.query_params.get('at')
    if not raw:
        return None
    try:
        at = parse_datetime(raw)
    except ValueError:
        at = None
    if at is None:
        raise exceptions.ValidationError({'at': ['Enter a valid ISO 8601 date/time.']})
    if timezone.is_naive(at):
        at = timezone.make_aware(at)
    return at


def parse_zone_param(request):
    zone = request.query_params.get('zone')
    if zone and zone not in Promotion.Zone.values:
        raise exceptions.ValidationError({'zone': [f"Unknown zone '{zone}'."]})
    return zone


class PublicPromotionViewSet(viewsets.GenericViewSet):
    """Public promotions: grouped catalog, combinados and the daily special."""
    serializer_class = PublicPromotionSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    pagination_class = None

    def get_queryset(self):
        return Promotion.objects.active().with_bundle_content()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['at'] = parse_at_param(self.request)
        context['zone'] = parse_zone_param(self.request)
        return context

    @extend_schema(parameters=[AT_PARAMETER, ZONE_PARAMETER], responses=PublicPromotionCatalogSerializer)
    def list(self, request):
        at = parse_at_param(request)
        catalog = PromotionCatalogService.grouped_by_type(at=at)
        serializer = PublicPromotionCatalogSerializer(catalog, context=self.get_serializer_context())
        return Response(serializer.data)

    @extend_schema(parameters=[AT_PARAMETER, ZONE_PARAMETER], responses=PublicPromotionSerializer(many=True))
    @action(detail=False, methods=['get'])
    def combinados(self, request):
        """Bundle specials valid at `at` whose products can all be served."""
        at = parse_at_param(request)
        promotions = PromotionCatalogService.combinados(at=at)
        serializer = self.get_serializer(promotions, many=True)
        return Response(serializer.data)

    @extend_schema(parameters=[ZONE_PARAMETER], responses=PublicPromotionSerializer)
    @action(detail=False, methods=['get'])
    def daily(self, request):
        promotion = PromotionCatalogService.daily_special()
        if promotion is None:
            return Response({'detail': 'No daily special is active.'}, status=status.HTTP_404_NOT_FOUND)
        serializer = self.get_serializer(promotion)
        return Response(serializer.data)
