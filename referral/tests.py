from unittest import mock

import pytest
from django.urls import reverse
from rest_framework.exceptions import NotFound

from backend.exceptions import BadRequest, Conflict
from .models import Referral, Voucher, VoucherPurchase
from .services import apply_referral, purchase_voucher, referral_link

pytestmark = pytest.mark.django_db


def test_apply_referral_awards_points(make_user):
    referrer = make_user('SALESPERSON')
    newcomer = make_user()
    result = apply_referral(newcomer, referrer.referral_code.lower())
    referrer.refresh_from_db()
    assert referrer.points == 5
    assert result == {'referrer_id': referrer.id, 'referrer_role': 'SALESPERSON', 'points_added': 5}
    assert Referral.objects.filter(referrer=referrer, referee=newcomer).exists()


@pytest.mark.parametrize('code, error', [('', BadRequest), ('   ', BadRequest), ('ZZZZ9999', NotFound)])
def test_apply_referral_rejects_missing_or_unknown_code(make_user, code, error):
    with pytest.raises(error):
        apply_referral(make_user(), code)


def test_own_code_is_rejected(make_user):
    user = make_user()
    with pytest.raises(BadRequest, match='own referral code'):
        apply_referral(user, user.referral_code)


def test_same_code_cannot_be_used_twice(make_user):
    referrer = make_user()
    newcomer = make_user()
    apply_referral(newcomer, referrer.referral_code)
    with pytest.raises(BadRequest, match='already been used'):
        apply_referral(newcomer, referrer.referral_code)
    referrer.refresh_from_db()
    assert referrer.points == 5


def test_referral_link_follows_frontend_url(monkeypatch):
    monkeypatch.delenv('FRONTEND_URL', raising=False)
    assert referral_link('ABC') is None
    monkeypatch.setenv('FRONTEND_URL', 'https://shop.example.com/')
    assert referral_link('ABC') == 'https://shop.example.com/signup?ref=ABC'


def test_apply_and_list_my_referrals(auth_client, make_user):
    referrer = make_user()
    newcomer = make_user()

    response = auth_client(newcomer).post(reverse('referral:apply'), {'referral_code': referrer.referral_code}, format='json')
    assert response.status_code == 200
    assert response.data['data']['points_added'] == 5

    response = auth_client(referrer).get(reverse('referral:my-referrals'))
    data = response.data['data']
    assert data['referral_code'] == referrer.referral_code
    assert data['referral_count'] == 1
    assert data['points'] == 5
    assert data['referrals'][0]['referee_email'] == newcomer.email


def test_apply_endpoint_reports_unknown_code(auth_client, make_user):
    response = auth_client(make_user()).post(reverse('referral:apply'), {'referral_code': 'NOPE0000'}, format='json')
    assert response.status_code == 404
    assert response.data['message'] == 'Invalid referral code'


def test_referral_list_requires_monitoring_capability(auth_client, admin_user, sales_manager, make_user):
    apply_referral(make_user(), sales_manager.referral_code)

    response = auth_client(sales_manager).get(reverse('referral:admin-referral-list'))
    assert response.status_code == 403

    response = auth_client(admin_user).get(reverse('referral:admin-referral-list'))
    assert response.status_code == 200
    assert response.data['data']['count'] == 1

    monitor = make_user('MANAGER', roles_access=['referral_program_monitoring'])
    response = auth_client(monitor).get(reverse('referral:admin-referral-list'), {'search': sales_manager.email})
    assert response.data['data']['count'] == 1


class TestVoucherPurchase:
    @pytest.fixture
    def voucher(self):
        return Voucher.objects.create(title='Coffee', points_cost=10)

    def test_purchase_deducts_points(self, make_user, voucher):
        buyer = make_user(points=12)
        purchase, remaining = purchase_voucher(buyer, voucher)
        assert remaining == 2
        assert purchase.points_spent == 10

    def test_second_purchase_is_conflict(self, make_user, voucher):
        buyer = make_user(points=30)
        purchase_voucher(buyer, voucher)
        with pytest.raises(Conflict):
            purchase_voucher(buyer, voucher)
        buyer.refresh_from_db()
        assert buyer.points == 20

    def test_insufficient_points(self, make_user, voucher):
        buyer = make_user(points=3)
        with pytest.raises(BadRequest, match='Insufficient points'):
            purchase_voucher(buyer, voucher)
        assert not VoucherPurchase.objects.exists()

    def test_inactive_voucher(self, make_user):
        retired = Voucher.objects.create(title='Old', points_cost=1, is_active=False)
        with pytest.raises(BadRequest):
            purchase_voucher(make_user(points=5), retired)


def test_voucher_endpoints(auth_client, admin_user, make_user):
    response = auth_client(admin_user).post(reverse('referral:voucher-list'), {'title': 'Lunch', 'points_cost': 5}, format='json')
    assert response.status_code == 201
    voucher_id = response.data['data']['id']
    Voucher.objects.create(title='Hidden', points_cost=1, is_active=False)

    buyer = make_user(points=5)
    client = auth_client(buyer)
    response = client.get(reverse('referral:voucher-list'))
    assert [v['title'] for v in response.data['data']['vouchers']] == ['Lunch']

    response = client.post(reverse('referral:buy-voucher', args=[voucher_id]))
    assert response.status_code == 201
    assert response.data['data']['remaining_points'] == 0

    response = client.post(reverse('referral:buy-voucher', args=[voucher_id]))
    assert response.status_code == 409

    response = client.get(reverse('referral:my-vouchers'))
    assert response.data['data']['count'] == 1

    response = client.post(reverse('referral:buy-voucher', args=['bad']))
    assert response.status_code == 400


def test_entity_cannot_create_voucher(auth_client, make_business):
    business = make_business(self_registered=True)
    response = auth_client(business.user).post(reverse('referral:voucher-list'), {'title': 'Free', 'points_cost': 1}, format='json')
    assert response.status_code == 403


def test_concurrent_duplicate_referral_is_bad_request(make_user):
    referrer = make_user()
    newcomer = make_user()
    apply_referral(newcomer, referrer.referral_code)
    # Both requests passed the duplicate check before either one wrote.
    with mock.patch('django.db.models.query.QuerySet.exists', return_value=False):
        with pytest.raises(BadRequest, match='already been used'):
            apply_referral(newcomer, referrer.referral_code)
    referrer.refresh_from_db()
    assert referrer.points == 5
    assert Referral.objects.count() == 1
