import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum
from django.utils import timezone

from subscription.models import Subscription, SponsorshipSubscription
from .models import Commission, WalletTransaction

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')

ENTITY_TYPES = ('COMPANY', 'WHOLESALER', 'SERVICE_PROVIDER')


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_commissions(price, salesperson_percent, sales_manager_percent):
    """Return ``(salesperson_amount, sales_manager_amount)``.

    Both amounts are taken from the full plan price. Rates are not clamped or
    normalised, so they may add up to more than 100%.
    """
    price = to_decimal(price)
    return (
        price * to_decimal(salesperson_percent) / HUNDRED,
        price * to_decimal(sales_manager_percent) / HUNDRED,
    )


def record_subscription_income(subscription):
    """Book the income side of an approved subscription.

    Self-registered businesses pay the admin directly. Businesses brought in by
    a salesperson produce one commission line split with the salesperson's
    sales manager. Any other case is logged and skipped.
    """
    business = subscription.business
    plan = subscription.plan

    if business.is_self_registered:
        WalletTransaction.objects.create(
            type='DIRECT_INCOME',
            amount=plan.price,
            entity_type=business.entity_type,
            business=business,
            description=f'Direct subscription payment for {plan.title}',
        )
        logger.info('Business %s is self-registered, %s booked as direct income', business.id, plan.price)
        return None

    creator = business.created_by
    if creator is None or not creator.is_salesperson:
        logger.warning(
            'Business %s was not created by a salesperson, no commission recorded',
            business.id,
        )
        return None

    sales_manager = creator.sales_manager
    if sales_manager is None:
        logger.warning(
            'Salesperson %s has no sales manager, no commission recorded for subscription %s',
            creator.id, subscription.id,
        )
        return None

    salesperson_amount, sales_manager_amount = calculate_commissions(
        plan.price, creator.commission_percent, sales_manager.commission_percent
    )
    commission = Commission.objects.create(
        subscription=subscription,
        business=business,
        plan=plan,
        plan_price=plan.price,
        salesperson=creator,
        salesperson_commission_percent=creator.commission_percent,
        salesperson_commission=salesperson_amount,
        sales_manager=sales_manager,
        sales_manager_commission_percent=sales_manager.commission_percent,
        sales_manager_commission=sales_manager_amount,
    )
    logger.info(
        'Commission %s recorded: salesperson %s gets %s, sales manager %s gets %s',
        commission.id, creator.id, salesperson_amount, sales_manager.id, sales_manager_amount,
    )
    return commission


def percentage(part, total):
    if total <= ZERO:
        return ZERO
    return (part / total * HUNDRED).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def get_wallet_summary():
    """Aggregate admin income, commissions and net profit. Read-only."""
    by_type = {
        row['business__entity_type']: row['total'] or ZERO
        for row in Subscription.objects
        .filter(status='ACTIVE', business__entity_type__in=ENTITY_TYPES)
        .values('business__entity_type')
        .annotate(total=Sum('plan__price'))
        .order_by()
    }
    company_income = by_type.get('COMPANY', ZERO)
    wholesaler_income = by_type.get('WHOLESALER', ZERO)
    service_provider_income = by_type.get('SERVICE_PROVIDER', ZERO)

    sponsorship_income = SponsorshipSubscription.objects.filter(status='ACTIVE').aggregate(
        total=Sum('sponsorship__price')
    )['total'] or ZERO

    ledger = {
        row['type']: row['total'] or ZERO
        for row in WalletTransaction.objects.values('type').annotate(total=Sum('amount')).order_by()
    }
    admin_wallet_income = ledger.get('SUBSCRIPTION_INCOME', ZERO)
    withdrawal_income = ledger.get('WITHDRAWAL_INCOME', ZERO)
    direct_income = ledger.get('DIRECT_INCOME', ZERO)

    # Direct income is reported only; the active subscription it came from is
    # already counted.
    total_income = (
        company_income + wholesaler_income + service_provider_income
        + sponsorship_income + admin_wallet_income + withdrawal_income
    )

    commission_totals = Commission.objects.aggregate(
        salesperson=Sum('salesperson_commission'),
        sales_manager=Sum('sales_manager_commission'),
    )
    salesperson_total = commission_totals['salesperson'] or ZERO
    sales_manager_total = commission_totals['sales_manager'] or ZERO
    total_commissions = salesperson_total + sales_manager_total

    return {
        'total_income': total_income,
        'total_commissions': total_commissions,
        'net_profit': total_income - total_commissions,
        'admin_wallet_income': admin_wallet_income,
        'withdrawal_income': withdrawal_income,
        'direct_income': direct_income,
        'total_admin_wallet': admin_wallet_income + withdrawal_income,
        'income_breakdown': {
            'company': company_income,
            'wholesaler': wholesaler_income,
            'service_provider': service_provider_income,
            'sponsorship': sponsorship_income,
        },
        'commission_breakdown': {
            'salesperson': {
                'total': salesperson_total,
                'percentage': percentage(salesperson_total, total_commissions),
            },
            'sales_manager': {
                'total': sales_manager_total,
                'percentage': percentage(sales_manager_total, total_commissions),
            },
        },
        'last_updated': timezone.now(),
    }


def serialize_summary(value):
    """Convert Decimals in a wallet summary to floats for JSON responses."""
    if isinstance(value, dict):
        return {key: serialize_summary(item) for key, item in value.items()}
    if isinstance(value, Decimal):
        return float(value)
    return value
