from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

import pytest
from django.core import mail
from django.db import DatabaseError
from django.urls import reverse

from backend.exceptions import InvalidPlanConfiguration
from business.models import Branch
from wallet.models import Commission, WalletTransaction
from . import services
from .models import Subscription, SubscriptionRequest, SponsorshipSubscription, Sponsorship, SponsorshipRequest
from .services import compute_end_date, process_subscription_request

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('duration, expected', [
    (1, datetime(2024, 2, 29, 12, tzinfo=dt_timezone.utc)),
    (6, datetime(2024, 7, 31, 12, tzinfo=dt_timezone.utc)),
    (12, datetime(2025, 1, 31, 12, tzinfo=dt_timezone.utc)),
])
def test_end_date_adds_calendar_months(duration, expected):
    start = datetime(2024, 1, 31, 12, tzinfo=dt_timezone.utc)
    assert compute_end_date(start, duration) == expected


@pytest.mark.parametrize('duration', [0, 3, 24, None])
def test_end_date_rejects_unsupported_durations(duration):
    with pytest.raises(InvalidPlanConfiguration):
        compute_end_date(datetime(2024, 1, 1, tzinfo=dt_timezone.utc), duration)


def test_approval_by_salesperson_creates_subscription_and_commission(
    salesperson, sales_manager, make_business, make_plan, make_request, admin_user, django_capture_on_commit_callbacks
):
    business = make_business(created_by=salesperson, branches=2)
    plan = make_plan(price=Decimal('100.00'), duration=6)
    sub_request = make_request(business, plan)

    with django_capture_on_commit_callbacks(execute=True):
        result = process_subscription_request(sub_request.id, 'approved', processed_by=admin_user)

    assert not SubscriptionRequest.objects.filter(id=sub_request.id).exists()
    subscription = Subscription.objects.get(business=business)
    assert subscription.status == 'ACTIVE'
    assert subscription.auto_renew is False
    assert subscription.end_date == compute_end_date(subscription.start_date, 6)

    business.refresh_from_db()
    business.user.refresh_from_db()
    assert business.status == 'ACTIVE'
    assert business.user.status == 'ACTIVE'
    assert set(business.branches.values_list('status', flat=True)) == {'ACTIVE'}

    commission = Commission.objects.get(subscription=subscription)
    assert commission.salesperson_id == salesperson.id
    assert commission.sales_manager_id == sales_manager.id
    assert commission.salesperson_commission == Decimal('10')
    assert commission.sales_manager_commission == Decimal('5')
    assert commission.paid is False
    assert result['commission'] == commission
    assert result['plan_name'] == plan.title

    assert len(mail.outbox) == 1
    assert f'active until {subscription.end_date:%Y-%m-%d}' in mail.outbox[0].body


def test_self_registered_approval_books_direct_income_without_commission(make_business, make_plan, make_request):
    business = make_business(self_registered=True)
    plan = make_plan(price=Decimal('100.00'))
    process_subscription_request(make_request(business, plan).id, 'approved')

    assert not Commission.objects.exists()
    entry = WalletTransaction.objects.get()
    assert entry.type == 'DIRECT_INCOME'
    assert entry.amount == Decimal('100.00')


def test_salesperson_without_sales_manager_skips_commission(make_user, make_business, make_plan, make_request):
    orphan = make_user('SALESPERSON', commission_percent=Decimal('10'))
    business = make_business(created_by=orphan)
    process_subscription_request(make_request(business, make_plan()).id, 'approved')

    assert Subscription.objects.filter(business=business, status='ACTIVE').exists()
    assert not Commission.objects.exists()


def test_invalid_plan_duration_writes_nothing(make_business, make_plan, make_request):
    business = make_business(self_registered=True, branches=1)
    plan = make_plan(duration=3)
    sub_request = make_request(business, plan)

    with pytest.raises(InvalidPlanConfiguration):
        process_subscription_request(sub_request.id, 'approved')

    assert SubscriptionRequest.objects.filter(id=sub_request.id, status='PENDING').exists()
    assert not Subscription.objects.exists()
    business.refresh_from_db()
    assert business.status == 'PENDING'
    assert not WalletTransaction.objects.exists()


def test_non_pending_request_is_conflict_without_writes(auth_client, admin_user, make_business, make_plan, make_request):
    business = make_business(self_registered=True, branches=1)
    sub_request = make_request(business, make_plan(), status='APPROVED')

    response = auth_client(admin_user).post(
        reverse('subscription:admin-process-subscription-request', args=[sub_request.id]),
        {'status': 'approved'},
        format='json',
    )
    assert response.status_code == 409
    assert SubscriptionRequest.objects.filter(id=sub_request.id).exists()
    assert not Subscription.objects.exists()
    assert set(business.branches.values_list('status', flat=True)) == {'PENDING'}


def test_rejection_deactivates_branches_and_notifies(
    make_business, salesperson, make_plan, make_request, django_capture_on_commit_callbacks
):
    business = make_business(created_by=salesperson, branches=3)
    sub_request = make_request(business, make_plan())

    with django_capture_on_commit_callbacks(execute=True):
        result = process_subscription_request(sub_request.id, 'rejected', 'Missing documents')

    assert result['subscription'] is None
    assert not SubscriptionRequest.objects.exists()
    assert not Subscription.objects.exists()
    assert not Commission.objects.exists()
    assert set(business.branches.values_list('status', flat=True)) == {'INACTIVE'}
    assert 'Reason: Missing documents' in mail.outbox[0].body


def test_branch_cascade_falls_back_per_branch(make_business):
    business = make_business(self_registered=True, branches=2)
    with mock.patch('django.db.models.query.QuerySet.update', side_effect=DatabaseError('boom')):
        updated = services.cascade_branch_status(business, 'ACTIVE')
    assert updated == 2
    assert set(Branch.objects.values_list('status', flat=True)) == {'ACTIVE'}


def test_branch_cascade_failure_does_not_block_approval(make_business, make_plan, make_request):
    business = make_business(self_registered=True, branches=1)
    sub_request = make_request(business, make_plan())
    with mock.patch.object(Branch, 'save', side_effect=DatabaseError('locked')), \
            mock.patch('django.db.models.query.QuerySet.update', side_effect=DatabaseError('locked')):
        process_subscription_request(sub_request.id, 'approved')

    assert Subscription.objects.filter(business=business, status='ACTIVE').exists()
    assert business.branches.get().status == 'PENDING'


def test_notification_failure_is_not_fatal(make_business, make_plan, make_request, monkeypatch, django_capture_on_commit_callbacks):
    monkeypatch.delenv('SMTP_USER')
    business = make_business(self_registered=True)
    with django_capture_on_commit_callbacks(execute=True):
        process_subscription_request(make_request(business, make_plan()).id, 'approved')
    assert Subscription.objects.filter(business=business).exists()
    assert len(mail.outbox) == 0


def test_process_endpoint_validates_decision_and_id(auth_client, admin_user, make_business, make_plan, make_request):
    client = auth_client(admin_user)
    sub_request = make_request(make_business(self_registered=True), make_plan())

    response = client.post(
        reverse('subscription:admin-process-subscription-request', args=[sub_request.id]),
        {'status': 'maybe'}, format='json',
    )
    assert response.status_code == 400

    response = client.post(
        reverse('subscription:admin-process-subscription-request', args=['xyz']),
        {'status': 'approved'}, format='json',
    )
    assert response.status_code == 400
    assert response.data['message'] == 'Invalid request ID format'

    response = client.post(
        reverse('subscription:admin-process-subscription-request', args=['a' * 24]),
        {'status': 'approved'}, format='json',
    )
    assert response.status_code == 404


def test_process_endpoint_requires_admin(auth_client, sales_manager, make_business, make_plan, make_request):
    sub_request = make_request(make_business(self_registered=True), make_plan())
    response = auth_client(sales_manager).post(
        reverse('subscription:admin-process-subscription-request', args=[sub_request.id]),
        {'status': 'approved'}, format='json',
    )
    assert response.status_code == 403


def test_process_endpoint_response_shape(auth_client, admin_user, make_business, salesperson, make_plan, make_request):
    business = make_business(created_by=salesperson)
    sub_request = make_request(business, make_plan())
    response = auth_client(admin_user).post(
        reverse('subscription:admin-process-subscription-request', args=[sub_request.id]),
        {'status': 'Approved', 'admin_note': 'Welcome'}, format='json',
    )
    assert response.status_code == 200
    data = response.data['data']
    assert data['request_id'] == sub_request.id
    assert data['status'] == 'approved'
    assert data['admin_note'] == 'Welcome'
    assert data['subscription']['status'] == 'ACTIVE'
    assert data['commission']['salesperson_commission'] == '10.000000'


def test_entity_request_rules(auth_client, make_business, make_plan):
    business = make_business('COMPANY', self_registered=True)
    client = auth_client(business.user)
    wrong_type = make_plan(plan_type='WHOLESALER')
    right_type = make_plan(plan_type='COMPANY')

    response = client.post(reverse('subscription:request-subscription'), {'plan_id': wrong_type.id}, format='json')
    assert response.status_code == 400

    response = client.post(reverse('subscription:request-subscription'), {'plan_id': right_type.id}, format='json')
    assert response.status_code == 201

    response = client.post(reverse('subscription:request-subscription'), {'plan_id': right_type.id}, format='json')
    assert response.status_code == 409


def test_entity_views_and_cancels_subscription(auth_client, make_business, make_plan, make_request):
    business = make_business(self_registered=True)
    process_subscription_request(make_request(business, make_plan(duration=12)).id, 'approved')
    client = auth_client(business.user)

    response = client.get(reverse('subscription:my-subscription'))
    assert response.data['data']['has_active_subscription'] is True
    assert response.data['data']['subscription']['remaining_days'] >= 364

    response = client.post(reverse('subscription:cancel-subscription'))
    assert response.status_code == 200
    subscription = Subscription.objects.get(business=business)
    assert subscription.status == 'CANCELLED'
    assert subscription.cancelled_at is not None

    response = client.post(reverse('subscription:cancel-subscription'))
    assert response.status_code == 404


def test_plan_listing_hides_inactive_plans(auth_client, make_user, admin_user, make_plan):
    make_plan(title='Live')
    make_plan(title='Retired', is_active=False)
    response = auth_client(make_user()).get(reverse('subscription:plan-list'))
    assert [p['title'] for p in response.data['data']['plans']] == ['Live']

    response = auth_client(admin_user).get(reverse('subscription:plan-list'))
    assert response.data['data']['count'] == 2


def test_admin_plan_creation_validates_duration(auth_client, admin_user):
    client = auth_client(admin_user)
    payload = {'title': 'Gold', 'price': '49.99', 'duration': 3, 'plan_type': 'COMPANY', 'benefits': ['Badge']}
    response = client.post(reverse('subscription:plan-list'), payload, format='json')
    assert response.status_code == 400
    assert 'duration' in response.data['errors']

    payload['duration'] = 12
    response = client.post(reverse('subscription:plan-list'), payload, format='json')
    assert response.status_code == 201


def test_sponsorship_request_and_approval(auth_client, admin_user, make_business):
    business = make_business(self_registered=True)
    sponsorship = Sponsorship.objects.create(title='Homepage', price=Decimal('20.00'), duration=30)
    client = auth_client(business.user)

    response = client.post(reverse('subscription:request-sponsorship'), {'sponsorship_id': sponsorship.id}, format='json')
    assert response.status_code == 201
    response = client.post(reverse('subscription:request-sponsorship'), {'sponsorship_id': sponsorship.id}, format='json')
    assert response.status_code == 409

    spons_request = SponsorshipRequest.objects.get()
    response = auth_client(admin_user).post(
        reverse('subscription:admin-process-sponsorship-request', args=[spons_request.id]),
        {'status': 'approved'}, format='json',
    )
    assert response.status_code == 200
    active = SponsorshipSubscription.objects.get()
    assert (active.end_date - active.start_date).days == 30
    assert not SponsorshipRequest.objects.exists()
