import logging

from rest_framework import status, generics, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound

from authentication.permissions import IsAdmin, IsEntityOwner
from backend.ids import require_object_id
from backend.utils import api_response, validation_failed
from business.views import get_own_business
from wallet.serializers import CommissionSerializer
from . import services
from .models import SubscriptionPlan, SubscriptionRequest, Sponsorship, SponsorshipRequest
from .serializers import (
    SubscriptionPlanSerializer,
    SubscriptionRequestCreateSerializer,
    SubscriptionRequestSerializer,
    SubscriptionSerializer,
    ProcessRequestSerializer,
    SponsorshipSerializer,
    SponsorshipRequestCreateSerializer,
    SponsorshipRequestSerializer,
    SponsorshipSubscriptionSerializer,
)

logger = logging.getLogger(__name__)


class SubscriptionPlanListView(generics.ListCreateAPIView):
    serializer_class = SubscriptionPlanSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = SubscriptionPlan.objects.all()
        if not self.request.user.is_admin:
            queryset = queryset.filter(is_active=True)
        plan_type = self.request.query_params.get('type', None)
        if plan_type:
            queryset = queryset.filter(plan_type=plan_type.upper())
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        plan = serializer.save()
        logger.info('Plan %s created by %s', plan.id, request.user.id)
        return api_response('Plan created successfully', SubscriptionPlanSerializer(plan).data, status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Plans retrieved successfully', {
            'plans': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


class SubscriptionPlanDetailView(generics.RetrieveUpdateAPIView):
    serializer_class = SubscriptionPlanSerializer
    permission_classes = [IsAdmin]

    def get_object(self):
        plan_id = require_object_id(self.kwargs['plan_id'], 'plan ID')
        try:
            return SubscriptionPlan.objects.get(id=plan_id)
        except SubscriptionPlan.DoesNotExist:
            raise NotFound('Plan not found')

    def retrieve(self, request, *args, **kwargs):
        return api_response('Plan retrieved successfully', self.get_serializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        if not serializer.is_valid():
            return validation_failed(serializer)
        plan = serializer.save()
        return api_response('Plan updated successfully', SubscriptionPlanSerializer(plan).data)


@api_view(['POST'])
@permission_classes([IsEntityOwner])
def request_subscription(request):
    serializer = SubscriptionRequestCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)
    plan_id = require_object_id(serializer.validated_data['plan_id'], 'plan ID')
    try:
        plan = SubscriptionPlan.objects.get(id=plan_id)
    except SubscriptionPlan.DoesNotExist:
        raise NotFound('Plan not found')

    business = get_own_business(request.user)
    sub_request = services.create_subscription_request(business, plan)
    return api_response(
        'Subscription request submitted successfully',
        SubscriptionRequestSerializer(sub_request).data,
        status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsEntityOwner])
def my_subscription(request):
    business = get_own_business(request.user)
    subscription = services.get_current_subscription(business)
    pending = SubscriptionRequest.objects.filter(business=business, status='PENDING').select_related('plan').first()
    return api_response('Subscription retrieved successfully', {
        'has_active_subscription': subscription is not None,
        'subscription': SubscriptionSerializer(subscription).data if subscription else None,
        'pending_request': SubscriptionRequestSerializer(pending).data if pending else None,
    })


@api_view(['POST'])
@permission_classes([IsEntityOwner])
def cancel_my_subscription(request):
    business = get_own_business(request.user)
    subscription = services.cancel_subscription(business)
    return api_response('Subscription cancelled successfully', SubscriptionSerializer(subscription).data)


@api_view(['GET'])
@permission_classes([IsAdmin])
def admin_subscription_requests(request):
    queryset = SubscriptionRequest.objects.select_related('business', 'business__user', 'plan')
    status_filter = request.query_params.get('status', 'PENDING')
    if status_filter:
        queryset = queryset.filter(status=status_filter.upper())
    return api_response('Subscription requests retrieved successfully', {
        'requests': SubscriptionRequestSerializer(queryset, many=True).data,
        'count': queryset.count(),
    })


@api_view(['POST'])
@permission_classes([IsAdmin])
def admin_process_subscription_request(request, request_id):
    serializer = ProcessRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)
    result = services.process_subscription_request(
        request_id,
        serializer.validated_data['status'],
        serializer.validated_data.get('admin_note', ''),
        processed_by=request.user,
    )
    subscription = result['subscription']
    commission = result['commission']
    return api_response(f"Subscription request {result['status']} successfully", {
        'request_id': result['request_id'],
        'business_name': result['business_name'],
        'plan_name': result['plan_name'],
        'status': result['status'],
        'processed_at': result['processed_at'],
        'admin_note': result['admin_note'],
        'subscription': SubscriptionSerializer(subscription).data if subscription else None,
        'commission': CommissionSerializer(commission).data if commission else None,
    })


class SponsorshipListView(generics.ListCreateAPIView):
    serializer_class = SponsorshipSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = Sponsorship.objects.all()
        if not self.request.user.is_admin:
            queryset = queryset.filter(is_active=True)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        sponsorship = serializer.save()
        return api_response('Sponsorship created successfully', SponsorshipSerializer(sponsorship).data, status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Sponsorships retrieved successfully', {
            'sponsorships': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


@api_view(['POST'])
@permission_classes([IsEntityOwner])
def request_sponsorship(request):
    serializer = SponsorshipRequestCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)
    sponsorship_id = require_object_id(serializer.validated_data['sponsorship_id'], 'sponsorship ID')
    try:
        sponsorship = Sponsorship.objects.get(id=sponsorship_id)
    except Sponsorship.DoesNotExist:
        raise NotFound('Sponsorship not found')
    business = get_own_business(request.user)
    spons_request = services.create_sponsorship_request(business, sponsorship)
    return api_response(
        'Sponsorship request submitted successfully',
        SponsorshipRequestSerializer(spons_request).data,
        status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAdmin])
def admin_sponsorship_requests(request):
    queryset = SponsorshipRequest.objects.filter(status='PENDING').select_related('business', 'sponsorship')
    return api_response('Sponsorship requests retrieved successfully', {
        'requests': SponsorshipRequestSerializer(queryset, many=True).data,
        'count': queryset.count(),
    })


@api_view(['POST'])
@permission_classes([IsAdmin])
def admin_process_sponsorship_request(request, request_id):
    serializer = ProcessRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)
    decision = serializer.validated_data['status'].strip().lower()
    sponsorship_subscription = services.process_sponsorship_request(request_id, decision)
    return api_response(f'Sponsorship request {decision} successfully', {
        'status': decision,
        'sponsorship_subscription': (
            SponsorshipSubscriptionSerializer(sponsorship_subscription).data
            if sponsorship_subscription else None
        ),
    })
