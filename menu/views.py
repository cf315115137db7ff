import logging

from django.db import transaction
from django.db.models import ProtectedError, Q
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiTypes, OpenApiParameter
from rest_framework import viewsets, filters, status, exceptions
from rest_framework.decorators import action
from rest_framework.response import Response

from .bundles import FixedSelection
from .models import Product, Promotion
from .permissions import IsMenuAdmin, IsMenuAdminOrReadOnly
from .serializers import ProductSerializer, PromotionSerializer, PromotionReorderSerializer
from .services.bundle_availability import BundleAvailabilityService
from .views_public import AT_PARAMETER, parse_at_param

logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ModelViewSet):
    """
    CRUD for menu products.
    - Authenticated staff and cashiers: read
    - Menu admins: full CRUD (deactivating a product makes combinados that need it unavailable)
    """
    queryset = Product.objects.prefetch_related('variants')
    serializer_class = ProductSerializer
    permission_classes = [IsMenuAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active', 'has_variants']
    search_fields = ['name', 'description']
    ordering_fields = ['sort_order', 'name', 'created_at']

    def perform_update(self, serializer):
        was_active = serializer.instance.is_active
        product = serializer.save()
        if was_active != product.is_active:
            logger.info(
                "Product %s %s; %d combinado(s) reference it",
                product.pk,
                "activated" if product.is_active else "deactivated",
                Promotion.objects.bundles().filter(
                    Q(bundle_items__product=product) | Q(bundle_items__options__product=product)
                ).distinct().count(),
            )

    def perform_destroy(self, instance):
        """Combinado items protect their products, trashed combinados included."""
        try:
            instance.delete()
        except ProtectedError:
            logger.warning("Product %s is referenced by combinado items; delete refused", instance.pk)
            raise exceptions.ValidationError({
                'detail': (
                    f'Unable to delete product "{instance.name}" because combinados still use it. '
                    f'Deactivate it instead; its combinados will show as unavailable.'
                )
            })


@extend_schema_view(
    list=extend_schema(
        parameters=[
            OpenApiParameter('type', OpenApiTypes.STR, OpenApiParameter.QUERY, enum=Promotion.Type.values),
            OpenApiParameter('is_active', OpenApiTypes.BOOL, OpenApiParameter.QUERY),
            OpenApiParameter(
                'status', OpenApiTypes.STR, OpenApiParameter.QUERY,
                enum=['valid_now', 'expired', 'upcoming', 'available'],
            ),
            AT_PARAMETER,
        ]
    )
)
class PromotionViewSet(viewsets.ModelViewSet):
    """
    Promotion management for menu admins.

    DELETE soft-deletes; trashed promotions are listed under /trashed/ and can be
    restored or removed for good.
    """
    queryset = Promotion.objects.all()
    serializer_class = PromotionSerializer
    permission_classes = [IsMenuAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['type', 'is_active']
    search_fields = ['name', 'description']
    ordering_fields = ['sort_order', 'name', 'valid_from', 'valid_until', 'created_at']
    ordering = ['sort_order', 'id']

    def get_queryset(self):
        queryset = super().get_queryset().with_bundle_content()

        status_filter = self.request.query_params.get('status')
        if status_filter == 'valid_now':
            queryset = queryset.valid_now(parse_at_param(self.request))
        elif status_filter == 'expired':
            queryset = queryset.expired()
        elif status_filter == 'upcoming':
            queryset = queryset.upcoming()
        elif status_filter == 'available':
            queryset = queryset.bundles().available()
        elif status_filter:
            raise exceptions.ValidationError({'status': [f"Unknown status '{status_filter}'."]})

        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['at'] = parse_at_param(self.request)
        return context

    def perform_destroy(self, instance):
        instance.delete()
        logger.info("Promotion %s moved to trash by %s", instance.pk, self.request.user)

    @extend_schema(request=None, responses=PromotionSerializer)
    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        promotion = get_object_or_404(Promotion.all_objects.only_trashed(), pk=pk)
        promotion.restore()
        logger.info("Promotion %s restored by %s", promotion.pk, request.user)
        return Response(self.get_serializer(promotion).data)

    @extend_schema(request=None, responses={204: None})
    @action(detail=True, methods=['delete'], url_path='force-delete')
    def force_delete(self, request, pk=None):
        promotion = get_object_or_404(Promotion.all_objects, pk=pk)
        promotion_id = promotion.pk
        promotion.force_delete()
        logger.warning("Promotion %s permanently deleted by %s", promotion_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses=PromotionSerializer)
    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        """Flip is_active."""
        promotion = self.get_object()
        promotion.is_active = not promotion.is_active
        promotion.save(update_fields=['is_active', 'updated_at'])
        return Response(self.get_serializer(promotion).data)

    @extend_schema(request=PromotionReorderSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['post'])
    def reorder(self, request):
        serializer = PromotionReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entries = {entry['id']: entry['sort_order'] for entry in serializer.validated_data['promotions']}

        with transaction.atomic():
            promotions = list(Promotion.objects.select_for_update().filter(pk__in=entries))
            missing = set(entries) - {promotion.pk for promotion in promotions}
            if missing:
                raise exceptions.ValidationError(
                    {'promotions': [f"Unknown promotion id(s): {', '.join(str(pk) for pk in sorted(missing))}."]}
                )
            for promotion in promotions:
                promotion.sort_order = entries[promotion.pk]
            Promotion.objects.bulk_update(promotions, ['sort_order'])

        return Response({'updated': len(promotions)})

    @extend_schema(responses=PromotionSerializer(many=True))
    @action(detail=False, methods=['get'])
    def trashed(self, request):
        queryset = Promotion.all_objects.only_trashed().with_bundle_content().by_sort_order()
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(self.get_serializer(queryset, many=True).data)

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        """Whether the combinado can be sold, and which items block it."""
        promotion = self.get_object()
        blocking = BundleAvailabilityService.unavailable_items(promotion)
        return Response({
            'id': promotion.pk,
            'is_bundle': promotion.is_bundle,
            'is_available': not blocking,
            'unavailable_items': [
                {
                    'item_id': shape.item_id,
                    'kind': 'fixed' if isinstance(shape, FixedSelection) else 'choice_group',
                    'label': None if isinstance(shape, FixedSelection) else shape.label,
                    'product_ids': shape.product_ids,
                }
                for shape in blocking
            ],
        })
