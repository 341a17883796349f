from django.db.models import Q
from rest_framework import status, generics, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound

from authentication.permissions import IsAdmin, HasCapability
from authentication.roles import REFERRAL_PROGRAM_MONITORING
from backend.ids import require_object_id
from backend.utils import api_response, validation_failed
from .models import Referral, Voucher, VoucherPurchase
from .serializers import ApplyReferralSerializer, ReferralSerializer, VoucherSerializer, VoucherPurchaseSerializer
from .services import apply_referral, ensure_referral_code, referral_link, purchase_voucher


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def apply_referral_code(request):
    serializer = ApplyReferralSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_failed(serializer)
    result = apply_referral(request.user, serializer.validated_data['referral_code'])
    return api_response('Referral code applied successfully', result)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def my_referrals(request):
    user = request.user
    code = ensure_referral_code(user)
    referrals = Referral.objects.filter(referrer=user).select_related('referee')
    user.refresh_from_db(fields=['points'])
    return api_response('Referral data retrieved successfully', {
        'referral_code': code,
        'referral_link': referral_link(code),
        'referral_count': referrals.count(),
        'points': user.points,
        'referrals': ReferralSerializer(referrals, many=True).data,
    })


class ReferralListView(generics.ListAPIView):
    serializer_class = ReferralSerializer
    permission_classes = [HasCapability(REFERRAL_PROGRAM_MONITORING)]

    def get_queryset(self):
        queryset = Referral.objects.select_related('referrer', 'referee')
        search = self.request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(referrer__email__icontains=search) |
                Q(referee__email__icontains=search) |
                Q(referrer__referral_code__iexact=search)
            )
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Referrals retrieved successfully', {
            'referrals': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


class VoucherListView(generics.ListCreateAPIView):
    serializer_class = VoucherSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = Voucher.objects.all()
        if not self.request.user.is_admin:
            queryset = queryset.filter(is_active=True)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        voucher = serializer.save()
        return api_response('Voucher created successfully', VoucherSerializer(voucher).data, status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Vouchers retrieved successfully', {
            'vouchers': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def buy_voucher(request, voucher_id):
    require_object_id(voucher_id, 'voucher ID')
    try:
        voucher = Voucher.objects.get(id=voucher_id)
    except Voucher.DoesNotExist:
        raise NotFound('Voucher not found')
    purchase, remaining = purchase_voucher(request.user, voucher)
    return api_response('Voucher purchased successfully', {
        'purchase': VoucherPurchaseSerializer(purchase).data,
        'remaining_points': remaining,
    }, status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def my_vouchers(request):
    purchases = VoucherPurchase.objects.filter(user=request.user).select_related('voucher')
    return api_response('Purchased vouchers retrieved successfully', {
        'purchases': VoucherPurchaseSerializer(purchases, many=True).data,
        'count': purchases.count(),
    })
