from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from authentication.models import User
from authentication.otp import otp_store
from business.models import Business, Branch
from subscription.models import SubscriptionPlan, SubscriptionRequest


@pytest.fixture(autouse=True)
def test_settings(settings, tmp_path, monkeypatch):
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    monkeypatch.delenv('SUPER_ADMIN_EMAIL', raising=False)
    monkeypatch.delenv('ADMIN_EMAIL', raising=False)
    monkeypatch.setenv('SMTP_USER', 'mailer')
    monkeypatch.setenv('SMTP_PASS', 'secret')
    monkeypatch.setenv('FROM_EMAIL', 'noreply@example.com')
    yield
    otp_store.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def factory(role='USER', **kwargs):
        counter['n'] += 1
        kwargs.setdefault('email', f'{role.lower()}{counter["n"]}@example.com')
        kwargs.setdefault('full_name', f'{role.title()} {counter["n"]}')
        kwargs.setdefault('password', 'Str0ng-pass!')
        return User.objects.create_user(role=role, **kwargs)

    return factory


@pytest.fixture
def admin_user(make_user):
    return make_user('ADMIN', email='admin@example.com', is_staff=True)


@pytest.fixture
def sales_manager(make_user, admin_user):
    return make_user(
        'SALES_MANAGER',
        commission_percent=Decimal('5'),
        roles_access=['business_management'],
        created_by=admin_user,
    )


@pytest.fixture
def salesperson(make_user, sales_manager):
    return make_user(
        'SALESPERSON',
        commission_percent=Decimal('10'),
        sales_manager=sales_manager,
        created_by=sales_manager,
    )


@pytest.fixture
def make_business(make_user):
    def factory(entity_type='WHOLESALER', created_by=None, self_registered=False, branches=0, **kwargs):
        owner = make_user(entity_type, status='PENDING', created_by=created_by)
        business = Business.objects.create(
            user=owner,
            entity_type=entity_type,
            business_name=kwargs.pop('business_name', f'{entity_type.title()} Co'),
            created_by=owner if self_registered else created_by,
            **kwargs
        )
        for i in range(branches):
            Branch.objects.create(business=business, name=f'Branch {i + 1}')
        return business

    return factory


@pytest.fixture
def make_plan(db):
    def factory(plan_type='WHOLESALER', price=Decimal('100.00'), duration=1, **kwargs):
        return SubscriptionPlan.objects.create(
            title=kwargs.pop('title', f'{duration} month {plan_type.lower()} plan'),
            price=price,
            duration=duration,
            plan_type=plan_type,
            **kwargs
        )

    return factory


@pytest.fixture
def make_request(db):
    def factory(business, plan, **kwargs):
        return SubscriptionRequest.objects.create(business=business, plan=plan, **kwargs)

    return factory


@pytest.fixture
def auth_client(api_client):
    def login(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return login
