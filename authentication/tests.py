from datetime import timedelta
from decimal import Decimal

import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone

from backend.exceptions import BadRequest
from backend.ids import is_object_id, require_object_id
from .models import User
from .otp import OTPStore, OTPNotFound, OTPExpired, OTPInvalid, otp_store
from .roles import (
    resolve_role,
    authorize,
    AdminRole,
    DeniedRole,
    SuperAdminRole,
    SalesManagerRole,
    EntityRole,
    BUSINESS_MANAGEMENT,
    FINANCIAL_DASHBOARD_REVENUE,
    USER_MANAGEMENT,
    CAPABILITIES,
)


pytestmark = pytest.mark.django_db


class AnonymousStub:
    is_authenticated = False


def test_anonymous_caller_is_denied():
    role = resolve_role(AnonymousStub())
    assert isinstance(role, DeniedRole)
    assert role.capabilities == []


def test_unknown_role_fails_closed(make_user):
    user = make_user('USER')
    User.objects.filter(id=user.id).update(role='AUDITOR')
    user.refresh_from_db()
    assert isinstance(resolve_role(user), DeniedRole)
    for capability in CAPABILITIES:
        assert not authorize(user, capability)


def test_admin_has_every_capability_but_not_unknown_ones(admin_user):
    role = resolve_role(admin_user)
    assert isinstance(role, AdminRole)
    assert set(role.capabilities) == set(CAPABILITIES)
    assert not role.has_capability('launch_rockets')


def test_super_admin_bypasses_every_check(make_user, monkeypatch):
    user = make_user('USER', email='Boss@Example.com')
    monkeypatch.setenv('SUPER_ADMIN_EMAIL', 'boss@example.com')
    role = resolve_role(user)
    assert isinstance(role, SuperAdminRole)
    assert role.has_capability('anything_at_all')


def test_super_admin_email_is_read_per_call(make_user, monkeypatch):
    user = make_user('USER', email='boss@example.com')
    assert not authorize(user, USER_MANAGEMENT)
    monkeypatch.setenv('SUPER_ADMIN_EMAIL', 'boss@example.com')
    assert authorize(user, USER_MANAGEMENT)


def test_sales_manager_capabilities_come_from_roles_access(sales_manager):
    role = resolve_role(sales_manager)
    assert isinstance(role, SalesManagerRole)
    assert role.has_capability(BUSINESS_MANAGEMENT)
    assert not role.has_capability(FINANCIAL_DASHBOARD_REVENUE)


def test_manager_without_grants_has_nothing(make_user):
    manager = make_user('MANAGER', roles_access=[])
    assert resolve_role(manager).capabilities == []


def test_entity_and_inactive_accounts_have_no_capabilities(make_user):
    entity = make_user('COMPANY')
    assert isinstance(resolve_role(entity), EntityRole)
    assert not authorize(entity, BUSINESS_MANAGEMENT)

    admin = make_user('ADMIN', is_active=False)
    assert isinstance(resolve_role(admin), DeniedRole)


def test_user_gets_referral_code_and_hex_id(make_user):
    user = make_user()
    assert len(user.id) == 24
    int(user.id, 16)
    assert user.referral_code and len(user.referral_code) == 8


def test_register_and_login_return_tokens(api_client):
    response = api_client.post(reverse('auth:register'), {
        'email': 'new@example.com',
        'full_name': 'New Person',
        'password': 'Str0ng-pass!',
        'confirm_password': 'Str0ng-pass!',
    }, format='json')
    assert response.status_code == 201
    assert response.data['status'] == 201
    assert 'access' in response.data['data']['tokens']

    response = api_client.post(reverse('auth:login'), {
        'email': 'new@example.com',
        'password': 'Str0ng-pass!',
    }, format='json')
    assert response.status_code == 200
    assert response.data['data']['user']['role'] == 'USER'


def test_register_duplicate_email_is_conflict(api_client, make_user):
    make_user(email='taken@example.com')
    response = api_client.post(reverse('auth:register'), {
        'email': 'taken@example.com',
        'full_name': 'Someone',
        'password': 'Str0ng-pass!',
        'confirm_password': 'Str0ng-pass!',
    }, format='json')
    assert response.status_code == 409
    assert response.data['message'] == 'A user with this email already exists.'


def test_login_rejects_bad_password(api_client, make_user):
    make_user(email='u@example.com')
    response = api_client.post(reverse('auth:login'), {'email': 'u@example.com', 'password': 'nope'}, format='json')
    assert response.status_code == 400
    assert response.data['message'] == 'Validation failed'
    assert 'non_field_errors' in response.data['errors']


def test_check_role_lists_capabilities(auth_client, sales_manager):
    response = auth_client(sales_manager).get(reverse('auth:check-role'))
    assert response.status_code == 200
    assert response.data['data']['resolved_role'] == 'sales_manager'
    assert response.data['data']['capabilities'] == [BUSINESS_MANAGEMENT]


def test_user_list_requires_user_management(auth_client, sales_manager, admin_user):
    response = auth_client(sales_manager).get(reverse('auth:admin-users-list'))
    assert response.status_code == 403

    response = auth_client(admin_user).get(reverse('auth:admin-users-list'), {'role': 'sales_manager'})
    assert response.status_code == 200
    assert response.data['data']['count'] == 1


def test_admin_creates_sales_manager_with_known_capabilities(auth_client, admin_user):
    client = auth_client(admin_user)
    response = client.post(reverse('auth:admin-create-sales-manager'), {
        'email': 'sm@example.com',
        'full_name': 'Sales Manager',
        'password': 'longenough',
        'commission_percent': '7.50',
        'roles_access': ['business_management'],
    }, format='json')
    assert response.status_code == 201
    created = User.objects.get(email='sm@example.com')
    assert created.role == 'SALES_MANAGER'
    assert created.commission_percent == Decimal('7.50')

    response = client.post(reverse('auth:admin-create-manager'), {
        'email': 'm@example.com',
        'full_name': 'Manager',
        'password': 'longenough',
        'roles_access': ['fly'],
    }, format='json')
    assert response.status_code == 400
    assert 'roles_access' in response.data['errors']


def test_sales_manager_creates_linked_salesperson(auth_client, sales_manager):
    client = auth_client(sales_manager)
    response = client.post(reverse('auth:create-salesperson'), {
        'email': 'sp@example.com',
        'full_name': 'Sales Person',
        'password': 'longenough',
        'commission_percent': '10',
    }, format='json')
    assert response.status_code == 201
    salesperson = User.objects.get(email='sp@example.com')
    assert salesperson.sales_manager_id == sales_manager.id

    response = client.get(reverse('auth:sales-manager-salespersons'))
    assert response.data['data']['count'] == 1


def test_admin_must_name_sales_manager_for_salesperson(auth_client, admin_user):
    response = auth_client(admin_user).post(reverse('auth:create-salesperson'), {
        'email': 'sp2@example.com',
        'full_name': 'Sales Person',
        'password': 'longenough',
        'commission_percent': '10',
    }, format='json')
    assert response.status_code == 400
    assert 'sales_manager' in response.data['errors']


def test_deactivate_user_with_bad_id_is_bad_request(auth_client, admin_user):
    response = auth_client(admin_user).post(reverse('auth:admin-deactivate-user', args=['not-an-id']))
    assert response.status_code == 400
    assert response.data['message'] == 'Invalid user ID format'


@pytest.mark.parametrize('value', ['a' * 24 + '\n', 'A' * 24, 'a' * 23, 'a' * 25, 'g' * 24, None])
def test_malformed_object_ids_are_rejected(value):
    assert not is_object_id(value)
    with pytest.raises(BadRequest, match='Invalid user ID format'):
        require_object_id(value, 'user ID')


def test_object_id_accepts_generated_ids():
    assert require_object_id('0123456789abcdef01234567', 'user ID') == '0123456789abcdef01234567'


def test_deactivate_and_activate_user(auth_client, admin_user, make_user):
    target = make_user()
    client = auth_client(admin_user)
    client.post(reverse('auth:admin-deactivate-user', args=[target.id]))
    target.refresh_from_db()
    assert not target.is_active and target.status == 'INACTIVE'
    client.post(reverse('auth:admin-activate-user', args=[target.id]))
    target.refresh_from_db()
    assert target.is_active and target.status == 'ACTIVE'


class TestOTPStore:
    def test_issue_and_verify(self):
        store = OTPStore()
        code = store.issue('a@example.com')
        assert len(code) == 4 and code.isdigit()
        assert store.verify('a@example.com', code)

    def test_missing_request(self):
        with pytest.raises(OTPNotFound):
            OTPStore().verify('nobody@example.com', '1234')

    def test_wrong_code(self):
        store = OTPStore()
        code = store.issue('a@example.com')
        wrong = '0000' if code != '0000' else '1111'
        with pytest.raises(OTPInvalid):
            store.verify('a@example.com', wrong)

    def test_expired_code(self):
        store = OTPStore(ttl=timedelta(minutes=-1))
        code = store.issue('a@example.com')
        with pytest.raises(OTPExpired):
            store.verify('a@example.com', code)
        with pytest.raises(OTPNotFound):
            store.verify('a@example.com', code)

    def test_clear(self):
        store = OTPStore()
        store.issue('a@example.com')
        store.clear()
        with pytest.raises(OTPNotFound):
            store.verify('a@example.com', '1234')


def test_admin_password_reset_flow(api_client, admin_user, monkeypatch):
    monkeypatch.setenv('ADMIN_EMAIL', admin_user.email)

    response = api_client.post(reverse('auth:forgot-password'), {}, format='json')
    assert response.status_code == 200
    assert len(mail.outbox) == 1
    body = mail.outbox[0].body
    assert 'This OTP will expire in 10 minutes.' in body
    code = body.split('is: ')[1][:4]

    response = api_client.post(reverse('auth:reset-password'), {'otp': code, 'new_password': 'brand-new-pass'}, format='json')
    assert response.status_code == 200
    admin_user.refresh_from_db()
    assert admin_user.check_password('brand-new-pass')

    response = api_client.post(reverse('auth:reset-password'), {'otp': code, 'new_password': 'again-new-pass'}, format='json')
    assert response.status_code == 400
    assert response.data['message'] == 'No OTP request found'


def test_reset_password_with_wrong_otp(api_client, admin_user, monkeypatch):
    monkeypatch.setenv('ADMIN_EMAIL', admin_user.email)
    code = otp_store.issue(admin_user.email)
    wrong = '0000' if code != '0000' else '1111'
    response = api_client.post(reverse('auth:reset-password'), {'otp': wrong, 'new_password': 'brand-new-pass'}, format='json')
    assert response.status_code == 400
    assert response.data['message'] == 'Invalid OTP'


def test_forgot_password_without_smtp_credentials_is_server_error(api_client, admin_user, monkeypatch):
    monkeypatch.setenv('ADMIN_EMAIL', admin_user.email)
    monkeypatch.delenv('SMTP_PASS')
    response = api_client.post(reverse('auth:forgot-password'), {}, format='json')
    assert response.status_code == 500
    assert response.data['message'] == 'Failed to send OTP email'
    assert len(mail.outbox) == 0


def test_forgot_password_without_admin_email_is_server_error(api_client):
    response = api_client.post(reverse('auth:forgot-password'), {}, format='json')
    assert response.status_code == 500


def test_expired_otp_timestamp(monkeypatch):
    store = OTPStore()
    code = store.issue('x@example.com')
    later = timezone.now() + timedelta(minutes=11)
    monkeypatch.setattr('authentication.otp.timezone.now', lambda: later)
    with pytest.raises(OTPExpired):
        store.verify('x@example.com', code)
