import io
from unittest import mock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.urls import reverse
from PIL import Image

from authentication.models import User
from .models import Business, Branch, BranchMedia

pytestmark = pytest.mark.django_db


def png_file(name='photo.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (8, 8), color=(200, 30, 30)).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


def signup_payload(**overrides):
    payload = {
        'email': 'shop@example.com',
        'full_name': 'Shop Owner',
        'password': 'Str0ng-pass!',
        'entity_type': 'WHOLESALER',
        'business_name': 'Shop Wholesale',
        'category': 'groceries',
        'phone': '+96170000000',
    }
    payload.update(overrides)
    return payload


def test_self_signup_creates_pending_self_registered_business(api_client):
    response = api_client.post(reverse('business:signup'), signup_payload(), format='json')
    assert response.status_code == 201
    business = Business.objects.get(business_name='Shop Wholesale')
    assert business.status == 'PENDING'
    assert business.is_self_registered
    assert business.user.role == 'WHOLESALER'
    assert 'access' in response.data['data']['tokens']


def test_self_signup_with_logo_upload(api_client, settings):
    response = api_client.post(reverse('business:signup'), signup_payload(logo=png_file('logo.png')), format='multipart')
    assert response.status_code == 201
    business = Business.objects.get(business_name='Shop Wholesale')
    assert business.logo.name.startswith('uploads/logos/')


def test_self_signup_with_referral_code_awards_referrer(api_client, make_user):
    referrer = make_user()
    response = api_client.post(
        reverse('business:signup'),
        signup_payload(referral_code=referrer.referral_code),
        format='json',
    )
    assert response.status_code == 201
    referrer.refresh_from_db()
    assert referrer.points == 5


def test_self_signup_with_unknown_referral_code_rolls_back(api_client):
    response = api_client.post(reverse('business:signup'), signup_payload(referral_code='NOPE1234'), format='json')
    assert response.status_code == 404
    assert not User.objects.filter(email='shop@example.com').exists()


def test_salesperson_creates_and_lists_entities(auth_client, salesperson):
    client = auth_client(salesperson)
    response = client.post(reverse('business:salesperson-entities'), signup_payload(
        email='client@example.com', business_name='Client Co', entity_type='COMPANY'
    ), format='json')
    assert response.status_code == 201
    business = Business.objects.get(business_name='Client Co')
    assert business.created_by_id == salesperson.id
    assert not business.is_self_registered

    response = client.get(reverse('business:salesperson-entities'))
    assert response.data['data']['count'] == 1
    assert response.data['data']['businesses'][0]['commission_earned'] == 0.0


def test_entity_cannot_use_salesperson_endpoint(auth_client, make_business):
    business = make_business(self_registered=True)
    response = auth_client(business.user).get(reverse('business:salesperson-entities'))
    assert response.status_code == 403


def test_sales_manager_sees_only_own_team_pending(auth_client, sales_manager, salesperson, make_business, make_user):
    own = make_business(created_by=salesperson)
    other_sp = make_user('SALESPERSON', sales_manager=make_user('SALES_MANAGER'))
    make_business(created_by=other_sp)

    response = auth_client(sales_manager).get(reverse('business:admin-pending-businesses'))
    assert response.status_code == 200
    ids = [b['id'] for b in response.data['data']['businesses']]
    assert ids == [own.id]


def test_approve_then_approve_again_is_conflict(auth_client, admin_user, make_business):
    business = make_business(self_registered=True)
    client = auth_client(admin_user)
    response = client.post(reverse('business:admin-approve-business', args=[business.id]))
    assert response.status_code == 200
    business.refresh_from_db()
    assert business.status == 'APPROVED'

    response = client.post(reverse('business:admin-approve-business', args=[business.id]))
    assert response.status_code == 409


def test_reject_marks_business_and_owner_inactive(auth_client, admin_user, make_business):
    business = make_business(self_registered=True)
    response = auth_client(admin_user).post(reverse('business:admin-reject-business', args=[business.id]))
    assert response.status_code == 200
    business.refresh_from_db()
    assert business.status == 'INACTIVE'
    assert business.user.status == 'INACTIVE'


def test_reviewer_without_capability_is_forbidden(auth_client, make_user, make_business):
    manager = make_user('MANAGER', roles_access=['financial_dashboard_revenue'])
    business = make_business(self_registered=True)
    response = auth_client(manager).post(reverse('business:admin-approve-business', args=[business.id]))
    assert response.status_code == 403


def test_admin_list_filters_and_toggle(auth_client, admin_user, make_business):
    active = make_business(self_registered=True, status='ACTIVE', business_name='Alpha')
    make_business('COMPANY', self_registered=True, business_name='Beta')
    client = auth_client(admin_user)

    response = client.get(reverse('business:admin-business-list'), {'entity_type': 'wholesaler'})
    assert response.data['data']['count'] == 1

    response = client.post(reverse('business:admin-toggle-business-status', args=[active.id]))
    assert response.status_code == 200
    active.refresh_from_db()
    assert active.status == 'INACTIVE'


def test_owner_branch_crud_is_scoped(auth_client, make_business):
    mine = make_business(self_registered=True)
    theirs = make_business(self_registered=True, branches=1)
    client = auth_client(mine.user)

    response = client.post(reverse('business:branch-list'), {'name': 'Downtown', 'city': 'Beirut'}, format='json')
    assert response.status_code == 201
    branch_id = response.data['data']['id']
    assert response.data['data']['status'] == 'PENDING'

    response = client.patch(reverse('business:branch-detail', args=[branch_id]), {'phone': '123'}, format='json')
    assert response.status_code == 200

    other_branch = theirs.branches.first()
    response = client.get(reverse('business:branch-detail', args=[other_branch.id]))
    assert response.status_code == 404

    response = client.delete(reverse('business:branch-detail', args=[branch_id]))
    assert response.status_code == 200
    assert not Branch.objects.filter(id=branch_id).exists()


def test_branch_media_upload(auth_client, make_business):
    business = make_business(self_registered=True, branches=1)
    branch = business.branches.first()
    video = SimpleUploadedFile('tour.mp4', b'\x00\x00\x00\x18ftypmp42', content_type='video/mp4')

    response = auth_client(business.user).post(
        reverse('business:branch-media-upload', args=[branch.id]),
        {'images': [png_file('a.png'), png_file('b.png')], 'videos': [video]},
        format='multipart',
    )
    assert response.status_code == 201
    paths = response.data['data']['paths']
    assert len(paths) == 3
    assert sum(p.startswith('uploads/branches/images/') for p in paths) == 2
    assert BranchMedia.objects.filter(branch=branch, media_type='VIDEO').count() == 1


def test_branch_media_rejects_bad_extension(auth_client, make_business):
    business = make_business(self_registered=True, branches=1)
    branch = business.branches.first()
    bogus = SimpleUploadedFile('tour.exe', b'MZ', content_type='application/octet-stream')
    response = auth_client(business.user).post(
        reverse('business:branch-media-upload', args=[branch.id]),
        {'videos': [bogus]},
        format='multipart',
    )
    assert response.status_code == 400
    assert not BranchMedia.objects.exists()


def test_branch_media_upload_is_all_or_nothing(auth_client, make_business):
    business = make_business(self_registered=True, branches=1)
    branch = business.branches.first()
    create = BranchMedia.objects.create
    calls = []

    def fail_on_third(**kwargs):
        calls.append(kwargs)
        if len(calls) == 3:
            raise DatabaseError('disk full')
        return create(**kwargs)

    with mock.patch.object(BranchMedia.objects, 'create', side_effect=fail_on_third):
        response = auth_client(business.user).post(
            reverse('business:branch-media-upload', args=[branch.id]),
            {'images': [png_file('a.png'), png_file('b.png'), png_file('c.png')]},
            format='multipart',
        )
    assert response.status_code == 500
    assert response.data['status'] == 500
    assert not BranchMedia.objects.exists()
