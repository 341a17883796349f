from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from subscription.models import Sponsorship, SponsorshipSubscription
from subscription.services import process_subscription_request
from .models import Commission, WalletTransaction
from .services import calculate_commissions, get_wallet_summary

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('price, sp, sm, expected', [
    ('100', '10', '5', (Decimal('10'), Decimal('5'))),
    ('49.99', '12.5', '7.25', (Decimal('6.24875'), Decimal('3.624275'))),
    ('100', '80', '40', (Decimal('80'), Decimal('40'))),
    ('0', '10', '5', (Decimal('0'), Decimal('0'))),
])
def test_commissions_are_independent_shares_of_the_price(price, sp, sm, expected):
    assert calculate_commissions(Decimal(price), Decimal(sp), Decimal(sm)) == expected


def test_commission_accepts_plain_numbers():
    assert calculate_commissions(200, 2.5, 1) == (Decimal('5'), Decimal('2'))


def approve(make_business, make_plan, make_request, price='100.00', **business_kwargs):
    business = make_business(**business_kwargs)
    plan = make_plan(plan_type=business.entity_type, price=Decimal(price))
    process_subscription_request(make_request(business, plan).id, 'approved')
    return business


def test_salesperson_scenario_retains_85(salesperson, make_business, make_plan, make_request):
    approve(make_business, make_plan, make_request, created_by=salesperson)
    summary = get_wallet_summary()
    assert summary['total_income'] == Decimal('100.00')
    assert summary['total_commissions'] == Decimal('15')
    assert summary['net_profit'] == Decimal('85')
    assert summary['commission_breakdown']['salesperson']['percentage'] == Decimal('66.67')
    assert summary['commission_breakdown']['sales_manager']['percentage'] == Decimal('33.33')


def test_self_registered_scenario_counts_full_price_once(make_business, make_plan, make_request):
    approve(make_business, make_plan, make_request, self_registered=True)
    summary = get_wallet_summary()
    assert Commission.objects.count() == 0
    assert summary['total_income'] == Decimal('100.00')
    assert summary['direct_income'] == Decimal('100.00')
    assert summary['total_commissions'] == Decimal('0')
    assert summary['net_profit'] == Decimal('100.00')


def test_summary_combines_every_income_source(salesperson, make_business, make_plan, make_request):
    approve(make_business, make_plan, make_request, created_by=salesperson)
    approve(make_business, make_plan, make_request, price='40.00', entity_type='COMPANY', self_registered=True)
    approve(make_business, make_plan, make_request, price='60.00', entity_type='SERVICE_PROVIDER', self_registered=True)

    sponsored = make_business(self_registered=True)
    now = timezone.now()
    SponsorshipSubscription.objects.create(
        sponsorship=Sponsorship.objects.create(title='Top', price=Decimal('25.00'), duration=7),
        business=sponsored,
        start_date=now,
        end_date=now + timezone.timedelta(days=7),
    )
    WalletTransaction.objects.create(type='SUBSCRIPTION_INCOME', amount=Decimal('10.00'))
    WalletTransaction.objects.create(type='WITHDRAWAL_INCOME', amount=Decimal('5.00'))

    summary = get_wallet_summary()
    assert summary['income_breakdown'] == {
        'wholesaler': Decimal('100.00'),
        'company': Decimal('40.00'),
        'service_provider': Decimal('60.00'),
        'sponsorship': Decimal('25.00'),
    }
    assert summary['admin_wallet_income'] == Decimal('10.00')
    assert summary['withdrawal_income'] == Decimal('5.00')
    assert summary['total_income'] == Decimal('240.00')
    assert summary['net_profit'] == summary['total_income'] - summary['total_commissions']


def test_cancelled_subscriptions_are_not_income(salesperson, make_business, make_plan, make_request):
    business = approve(make_business, make_plan, make_request, created_by=salesperson)
    business.subscriptions.update(status='CANCELLED')
    summary = get_wallet_summary()
    assert summary['total_income'] == Decimal('0')
    assert summary['total_commissions'] == Decimal('15')
    assert summary['net_profit'] == Decimal('-15')


def test_summary_is_idempotent(salesperson, make_business, make_plan, make_request):
    approve(make_business, make_plan, make_request, created_by=salesperson)
    first = get_wallet_summary()
    second = get_wallet_summary()
    first.pop('last_updated')
    second.pop('last_updated')
    assert first == second


def test_empty_wallet_has_zero_percentages(db):
    summary = get_wallet_summary()
    assert summary['net_profit'] == Decimal('0')
    assert summary['commission_breakdown']['salesperson']['percentage'] == Decimal('0')


def test_wallet_transactions_are_append_only(db):
    entry = WalletTransaction.objects.create(type='WITHDRAWAL_INCOME', amount=Decimal('3.00'))
    entry.amount = Decimal('300.00')
    with pytest.raises(ValueError):
        entry.save()


def test_summary_endpoint_requires_financial_capability(auth_client, admin_user, sales_manager, make_user):
    response = auth_client(sales_manager).get(reverse('wallet:admin-wallet-summary'))
    assert response.status_code == 403

    finance = make_user('MANAGER', roles_access=['financial_dashboard_revenue'])
    response = auth_client(finance).get(reverse('wallet:admin-wallet-summary'))
    assert response.status_code == 200
    assert response.data['data']['net_profit'] == 0.0


def test_summary_endpoint_returns_floats(auth_client, admin_user, salesperson, make_business, make_plan, make_request):
    approve(make_business, make_plan, make_request, created_by=salesperson)
    response = auth_client(admin_user).get(reverse('wallet:admin-wallet-summary'))
    data = response.data['data']
    assert data['total_income'] == 100.0
    assert data['total_commissions'] == 15.0
    assert data['net_profit'] == 85.0
    assert data['income_breakdown']['wholesaler'] == 100.0


def test_admin_appends_wallet_transaction(auth_client, admin_user):
    client = auth_client(admin_user)
    response = client.post(reverse('wallet:admin-wallet-transactions'), {
        'type': 'WITHDRAWAL_INCOME', 'amount': '12.50', 'description': 'Fee'
    }, format='json')
    assert response.status_code == 201

    response = client.post(reverse('wallet:admin-wallet-transactions'), {
        'type': 'DIRECT_INCOME', 'amount': '12.50'
    }, format='json')
    assert response.status_code == 400

    response = client.get(reverse('wallet:admin-wallet-transactions'), {'type': 'withdrawal_income'})
    assert response.data['data']['count'] == 1
    assert response.data['data']['total_amount'] == 12.5


def test_commission_history_views(auth_client, admin_user, salesperson, sales_manager, make_business, make_plan, make_request):
    approve(make_business, make_plan, make_request, created_by=salesperson)

    response = auth_client(salesperson).get(reverse('wallet:salesperson-commissions'))
    assert response.data['data']['total_commission'] == 10.0

    response = auth_client(sales_manager).get(reverse('wallet:sales-manager-commissions'))
    assert response.data['data']['total_commission'] == 5.0

    commission = Commission.objects.get()
    client = auth_client(admin_user)
    response = client.post(reverse('wallet:admin-mark-commission-paid', args=[commission.id]))
    assert response.status_code == 200
    response = client.post(reverse('wallet:admin-mark-commission-paid', args=[commission.id]))
    assert response.status_code == 409

    response = client.get(reverse('wallet:admin-commissions'), {'paid': 'true'})
    assert response.data['data']['count'] == 1


def test_wallet_transactions_filter_by_date(auth_client, admin_user):
    WalletTransaction.objects.create(type='WITHDRAWAL_INCOME', amount=Decimal('4.00'))
    client = auth_client(admin_user)
    today = timezone.localdate().isoformat()

    response = client.get(reverse('wallet:admin-wallet-transactions'), {'date_from': today, 'date_to': today})
    assert response.status_code == 200
    assert response.data['data']['count'] == 1

    response = client.get(reverse('wallet:admin-wallet-transactions'), {'date_from': '2000-01-01', 'date_to': '2000-01-31'})
    assert response.data['data']['count'] == 0


@pytest.mark.parametrize('params', [
    {'date_from': 'not-a-date'},
    {'date_to': '2024-02-30'},
    {'date_from': '2024-13-01'},
])
def test_wallet_transactions_reject_malformed_dates(auth_client, admin_user, params):
    response = auth_client(admin_user).get(reverse('wallet:admin-wallet-transactions'), params)
    assert response.status_code == 400
    assert response.data == {'status': 400, 'message': 'Invalid date format, expected YYYY-MM-DD'}
