import logging

from django.db import transaction as db_transaction
from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status, generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound

from authentication.permissions import IsAdmin, IsSalesperson, IsSalesManager, HasCapability
from authentication.roles import FINANCIAL_DASHBOARD_REVENUE
from backend.exceptions import BadRequest, Conflict
from backend.ids import require_object_id
from backend.utils import api_response, validation_failed, to_float
from .models import Commission, WalletTransaction
from .serializers import CommissionSerializer, WalletTransactionSerializer, WalletTransactionCreateSerializer
from .services import get_wallet_summary, serialize_summary

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([HasCapability(FINANCIAL_DASHBOARD_REVENUE)])
def wallet_summary(request):
    summary = get_wallet_summary()
    return api_response('Admin wallet retrieved successfully', serialize_summary(summary))


def parse_date_param(value):
    if not value:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise BadRequest('Invalid date format, expected YYYY-MM-DD')
    return parsed


class WalletTransactionListView(generics.ListCreateAPIView):
    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return [HasCapability(FINANCIAL_DASHBOARD_REVENUE)()]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return WalletTransactionCreateSerializer
        return WalletTransactionSerializer

    def get_queryset(self):
        queryset = WalletTransaction.objects.select_related('business')
        type_filter = self.request.query_params.get('type', None)
        if type_filter:
            queryset = queryset.filter(type=type_filter.upper())
        date_from = parse_date_param(self.request.query_params.get('date_from', None))
        date_to = parse_date_param(self.request.query_params.get('date_to', None))
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)
        return queryset.order_by('-created_at')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer)
        entry = serializer.save()
        logger.info('Wallet %s of %s recorded by %s', entry.type, entry.amount, request.user.id)
        return api_response('Wallet transaction recorded successfully', WalletTransactionSerializer(entry).data, status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Wallet transactions retrieved successfully', {
            'transactions': WalletTransactionSerializer(queryset, many=True).data,
            'count': queryset.count(),
            'total_amount': to_float(queryset.aggregate(total=Sum('amount'))['total']),
        })


class CommissionListView(generics.ListAPIView):
    serializer_class = CommissionSerializer
    permission_classes = [HasCapability(FINANCIAL_DASHBOARD_REVENUE)]

    def get_queryset(self):
        queryset = Commission.objects.select_related('business', 'plan', 'salesperson', 'sales_manager')
        paid = self.request.query_params.get('paid', None)
        if paid is not None:
            queryset = queryset.filter(paid=paid.lower() == 'true')
        salesperson = self.request.query_params.get('salesperson', None)
        if salesperson:
            queryset = queryset.filter(salesperson_id=salesperson)
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        return api_response('Commissions retrieved successfully', {
            'commissions': self.get_serializer(queryset, many=True).data,
            'count': queryset.count(),
        })


@api_view(['POST'])
@permission_classes([IsAdmin])
def mark_commission_paid(request, commission_id):
    require_object_id(commission_id, 'commission ID')
    with db_transaction.atomic():
        try:
            commission = Commission.objects.select_for_update().get(id=commission_id)
        except Commission.DoesNotExist:
            raise NotFound('Commission not found')
        if commission.paid:
            raise Conflict('Commission is already paid')
        commission.paid = True
        commission.paid_at = timezone.now()
        commission.save(update_fields=['paid', 'paid_at'])
    return api_response('Commission marked as paid', CommissionSerializer(commission).data)


def commission_history(queryset, amount_field):
    totals = queryset.aggregate(total=Sum(amount_field))
    paid_totals = queryset.filter(paid=True).aggregate(total=Sum(amount_field))
    return {
        'commissions': CommissionSerializer(queryset, many=True).data,
        'count': queryset.count(),
        'total_commission': to_float(totals['total']),
        'paid_commission': to_float(paid_totals['total']),
    }


@api_view(['GET'])
@permission_classes([IsSalesperson])
def salesperson_commissions(request):
    queryset = Commission.objects.filter(salesperson=request.user).select_related('business', 'plan')
    return api_response('Commission history retrieved successfully', commission_history(queryset, 'salesperson_commission'))


@api_view(['GET'])
@permission_classes([IsSalesManager])
def sales_manager_commissions(request):
    queryset = Commission.objects.filter(sales_manager=request.user).select_related('business', 'plan', 'salesperson')
    return api_response('Commission history retrieved successfully', commission_history(queryset, 'sales_manager_commission'))
