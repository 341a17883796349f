import logging

from django.db import transaction as db_transaction
from django.db.models import Q, Sum, Count
from rest_framework import status, generics, permissions
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.exceptions import NotFound
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser

from authentication.permissions import IsSalesperson, IsEntityOwner, HasCapability, get_request_role
from authentication.roles import BUSINESS_MANAGEMENT, SalesManagerRole
from authentication.views import get_tokens_for_user
from backend.exceptions import Conflict
from backend.ids import require_object_id
from backend.utils import api_response, validation_failed, to_float
from referral.services import apply_referral
from .models import Business, Branch
from .serializers import (
    BusinessSerializer,
    EntityCreateSerializer,
    BusinessUpdateSerializer,
    BranchSerializer,
    BranchMediaSerializer,
    BranchMediaUploadSerializer,
)

logger = logging.getLogger(__name__)


def get_business(business_id):
    require_object_id(business_id, 'business ID')
    try:
        return Business.objects.select_related('user', 'created_by').get(id=business_id)
    except Business.DoesNotExist:
        raise NotFound('Business not found')


def get_own_business(user):
    try:
        return Business.objects.select_related('user', 'created_by').get(user=user)
    except Business.DoesNotExist:
        raise NotFound('Business profile not found')


def get_own_branch(user, branch_id):
    require_object_id(branch_id, 'branch ID')
    try:
        return Branch.objects.select_related('business').get(id=branch_id, business__user=user)
    except Branch.DoesNotExist:
        raise NotFound('Branch not found')


def scope_for_reviewer(request, queryset):
    """Sales managers only review entities their own salespersons brought in."""
    if isinstance(get_request_role(request), SalesManagerRole):
        return queryset.filter(created_by__sales_manager=request.user)
    return queryset


class EntitySignupView(generics.CreateAPIView):
    serializer_class = EntityCreateSerializer
    permission_classes = [permissions.AllowAny]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        referral_code = serializer.validated_data.get('referral_code')
        with db_transaction.atomic():
            business = serializer.save()
            if referral_code:
                apply_referral(business.user, referral_code)
        logger.info('Business %s self-registered as %s', business.id, business.entity_type)
        return api_response('Business registered successfully', {
            'business': BusinessSerializer(business).data,
            'tokens': get_tokens_for_user(business.user),
        }, status.HTTP_201_CREATED)


class SalespersonEntityView(generics.ListCreateAPIView):
    serializer_class = EntityCreateSerializer
    permission_classes = [IsSalesperson]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_queryset(self):
        queryset = Business.objects.filter(created_by=self.request.user).select_related('user', 'created_by')
        status_filter = self.request.query_params.get('status', None)
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        entity_type = self.request.query_params.get('entity_type', None)
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type.upper())
        return queryset.annotate(
            commission_earned=Sum('commissions__salesperson_commission')
        ).order_by('-created_at')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['creator'] = self.request.user
        return context

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        business = serializer.save()
        logger.info('Business %s created by salesperson %s', business.id, request.user.id)
        return api_response('Business created successfully', BusinessSerializer(business).data, status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        rows = []
        for business in queryset:
            row = BusinessSerializer(business).data
            row['commission_earned'] = to_float(business.commission_earned)
            rows.append(row)
        return api_response('Businesses retrieved successfully', {
            'businesses': rows,
            'count': len(rows),
        })


@api_view(['GET'])
@permission_classes([HasCapability(BUSINESS_MANAGEMENT)])
def pending_businesses(request):
    queryset = Business.objects.filter(status='PENDING').select_related('user', 'created_by')
    queryset = scope_for_reviewer(request, queryset).order_by('-created_at')
    return api_response('Pending businesses retrieved successfully', {
        'businesses': BusinessSerializer(queryset, many=True).data,
        'count': queryset.count(),
    })


def review_business(request, business_id, new_status):
    require_object_id(business_id, 'business ID')
    with db_transaction.atomic():
        queryset = scope_for_reviewer(request, Business.objects.select_for_update(of=('self',)))
        try:
            business = queryset.get(id=business_id)
        except Business.DoesNotExist:
            raise NotFound('Business not found')
        if business.status != 'PENDING':
            raise Conflict(f'Business is already {business.status.lower()}')
        business.status = new_status
        business.save(update_fields=['status', 'updated_at'])
        if new_status == 'INACTIVE':
            business.user.status = 'INACTIVE'
            business.user.save(update_fields=['status'])
    logger.info('Business %s set to %s by %s', business.id, new_status, request.user.id)
    return business


@api_view(['POST'])
@permission_classes([HasCapability(BUSINESS_MANAGEMENT)])
def approve_business(request, business_id):
    business = review_business(request, business_id, 'APPROVED')
    return api_response('Business approved successfully', BusinessSerializer(business).data)


@api_view(['POST'])
@permission_classes([HasCapability(BUSINESS_MANAGEMENT)])
def reject_business(request, business_id):
    business = review_business(request, business_id, 'INACTIVE')
    return api_response('Business rejected successfully', BusinessSerializer(business).data)


class AdminBusinessListView(generics.ListAPIView):
    serializer_class = BusinessSerializer
    permission_classes = [HasCapability(BUSINESS_MANAGEMENT)]

    def get_queryset(self):
        queryset = Business.objects.select_related('user', 'created_by')
        entity_type = self.request.query_params.get('entity_type', None)
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type.upper())
        status_filter = self.request.query_params.get('status', None)
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        search = self.request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(business_name__icontains=search) |
                Q(user__email__icontains=search) |
                Q(phone__icontains=search)
            )
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        by_status = dict(queryset.values_list('status').annotate(total=Count('id')).order_by())
        return api_response('Businesses retrieved successfully', {
            'businesses': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
            'by_status': by_status,
        })


@api_view(['POST'])
@permission_classes([HasCapability(BUSINESS_MANAGEMENT)])
def toggle_business_status(request, business_id):
    business = get_business(business_id)
    if business.status not in ('ACTIVE', 'INACTIVE'):
        raise Conflict(f'Cannot toggle a {business.status.lower()} business')
    business.status = 'INACTIVE' if business.status == 'ACTIVE' else 'ACTIVE'
    business.save(update_fields=['status', 'updated_at'])
    business.user.status = business.status
    business.user.save(update_fields=['status'])
    return api_response(f'Business {business.status.lower()}', BusinessSerializer(business).data)


class MyBusinessView(generics.RetrieveUpdateAPIView):
    permission_classes = [IsEntityOwner]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_object(self):
        return get_own_business(self.request.user)

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return BusinessUpdateSerializer
        return BusinessSerializer

    def retrieve(self, request, *args, **kwargs):
        return api_response('Business retrieved successfully', BusinessSerializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        business = self.get_object()
        serializer = self.get_serializer(business, data=request.data, partial=partial)
        if not serializer.is_valid():
            return validation_failed(serializer)
        business = serializer.save()
        return api_response('Business updated successfully', BusinessSerializer(business).data)


class BranchListView(generics.ListCreateAPIView):
    serializer_class = BranchSerializer
    permission_classes = [IsEntityOwner]

    def get_queryset(self):
        return Branch.objects.filter(business__user=self.request.user).prefetch_related('media')

    def create(self, request, *args, **kwargs):
        business = get_own_business(request.user)
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        # Branches of an active business start active.
        initial_status = 'ACTIVE' if business.status == 'ACTIVE' else 'PENDING'
        branch = serializer.save(business=business, status=initial_status)
        return api_response('Branch created successfully', BranchSerializer(branch).data, status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Branches retrieved successfully', {
            'branches': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


class BranchDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = BranchSerializer
    permission_classes = [IsEntityOwner]

    def get_object(self):
        return get_own_branch(self.request.user, self.kwargs['branch_id'])

    def retrieve(self, request, *args, **kwargs):
        return api_response('Branch retrieved successfully', BranchSerializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        if not serializer.is_valid():
            return validation_failed(serializer)
        branch = serializer.save()
        return api_response('Branch updated successfully', BranchSerializer(branch).data)

    def destroy(self, request, *args, **kwargs):
        branch = self.get_object()
        for media in branch.media.all():
            media.file.delete(save=False)
        branch.delete()
        return api_response('Branch deleted successfully')


@api_view(['POST'])
@permission_classes([IsEntityOwner])
@parser_classes([MultiPartParser, FormParser])
def upload_branch_media(request, branch_id):
    branch = get_own_branch(request.user, branch_id)
    serializer = BranchMediaUploadSerializer(data=request.data, context={'branch': branch})
    if not serializer.is_valid():
        return validation_failed(serializer)
    media = serializer.save()
    logger.info('Uploaded %d media files to branch %s', len(media), branch.id)
    return api_response('Media uploaded successfully', {
        'media': BranchMediaSerializer(media, many=True).data,
        'paths': [m.file.name for m in media],
    }, status.HTTP_201_CREATED)
