import logging
import os

from django.db import IntegrityError, transaction as db_transaction
from django.db.models import F
from rest_framework.exceptions import NotFound

from authentication.models import User, generate_unique_referral_code
from backend.exceptions import BadRequest, Conflict
from .models import Referral, VoucherPurchase, REFERRAL_POINTS

logger = logging.getLogger(__name__)


def ensure_referral_code(user):
    if not user.referral_code:
        user.referral_code = generate_unique_referral_code()
        user.save(update_fields=['referral_code'])
    return user.referral_code


def referral_link(code):
    base = os.getenv('FRONTEND_URL', '').rstrip('/')
    if not base:
        return None
    return f'{base}/signup?ref={code}'


def apply_referral(user, code):
    """Credit the owner of ``code`` for bringing in ``user``."""
    code = (code or '').strip()
    if not code:
        raise BadRequest('Referral code is required')

    try:
        referrer = User.objects.get(referral_code__iexact=code)
    except User.DoesNotExist:
        raise NotFound('Invalid referral code')

    if referrer.id == user.id:
        raise BadRequest('Cannot use your own referral code')

    with db_transaction.atomic():
        if Referral.objects.filter(referrer=referrer, referee=user).exists():
            raise BadRequest('This referral code has already been used')
        try:
            with db_transaction.atomic():
                Referral.objects.create(referrer=referrer, referee=user, points_awarded=REFERRAL_POINTS)
        except IntegrityError:
            raise BadRequest('This referral code has already been used')
        User.objects.filter(id=referrer.id).update(points=F('points') + REFERRAL_POINTS)
        ensure_referral_code(user)

    logger.info('User %s referred by %s, %d points awarded', user.id, referrer.id, REFERRAL_POINTS)
    return {
        'referrer_id': referrer.id,
        'referrer_role': referrer.role,
        'points_added': REFERRAL_POINTS,
    }


def purchase_voucher(user, voucher):
    if not voucher.is_active:
        raise BadRequest('This voucher is not available')

    with db_transaction.atomic():
        buyer = User.objects.select_for_update().get(id=user.id)
        if VoucherPurchase.objects.filter(voucher=voucher, user=buyer).exists():
            raise Conflict('You have already purchased this voucher')
        if buyer.points < voucher.points_cost:
            raise BadRequest(
                f'Insufficient points: {voucher.points_cost} required, {buyer.points} available'
            )
        buyer.points = F('points') - voucher.points_cost
        buyer.save(update_fields=['points'])
        purchase = VoucherPurchase.objects.create(voucher=voucher, user=buyer, points_spent=voucher.points_cost)

    buyer.refresh_from_db(fields=['points'])
    logger.info('User %s bought voucher %s for %d points', buyer.id, voucher.id, voucher.points_cost)
    return purchase, buyer.points
