"""Subscription approval workflow.

An admin decision on a pending request is applied in one database
transaction. The branch status cascade runs in its own savepoint so a failure
there is logged and does not undo the approval. The owner is emailed only
after the transaction commits.
"""
import logging
from datetime import timedelta

from dateutil.relativedelta import relativedelta
from django.db import DatabaseError, transaction as db_transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from authentication.emails import notify
from backend.exceptions import BadRequest, Conflict, InvalidPlanConfiguration
from backend.ids import require_object_id
from business.models import Branch
from wallet.services import record_subscription_income
from .models import (
    SubscriptionRequest,
    Subscription,
    SponsorshipRequest,
    SponsorshipSubscription,
)

logger = logging.getLogger(__name__)

APPROVED = 'approved'
REJECTED = 'rejected'
DECISIONS = (APPROVED, REJECTED)

PLAN_PERIODS = {
    1: relativedelta(months=1),
    6: relativedelta(months=6),
    12: relativedelta(years=1),
}


def compute_end_date(start, duration):
    try:
        period = PLAN_PERIODS[int(duration)]
    except (KeyError, TypeError, ValueError):
        raise InvalidPlanConfiguration(f'Invalid plan duration: {duration}')
    return start + period


def cascade_branch_status(business, new_status):
    """Set every branch of ``business`` to ``new_status``.

    Tries one bulk update first and falls back to saving branches one at a
    time. Failures are logged and never raised.
    """
    try:
        with db_transaction.atomic():
            updated = Branch.objects.filter(business=business).update(
                status=new_status, updated_at=timezone.now()
            )
        logger.info('Set %d branches of business %s to %s', updated, business.id, new_status)
        return updated
    except DatabaseError:
        logger.warning(
            'Bulk branch update failed for business %s, retrying per branch',
            business.id, exc_info=True,
        )

    updated = 0
    for branch in Branch.objects.filter(business=business):
        try:
            with db_transaction.atomic():
                branch.status = new_status
                branch.save(update_fields=['status', 'updated_at'])
            updated += 1
        except DatabaseError:
            logger.exception('Failed to set branch %s to %s', branch.id, new_status)
    logger.info('Set %d branches of business %s to %s one by one', updated, business.id, new_status)
    return updated


def process_subscription_request(request_id, decision, admin_note='', processed_by=None):
    require_object_id(request_id, 'request ID')
    decision = (decision or '').strip().lower()
    if decision not in DECISIONS:
        raise BadRequest("Status must be either 'approved' or 'rejected'")
    admin_note = admin_note or ''

    with db_transaction.atomic():
        try:
            sub_request = (
                SubscriptionRequest.objects
                .select_for_update(of=('self',))
                .select_related('business', 'business__user', 'plan')
                .get(id=request_id)
            )
        except SubscriptionRequest.DoesNotExist:
            raise NotFound('Subscription request not found')

        if sub_request.status != 'PENDING':
            raise Conflict(f'Subscription request is already {sub_request.status.lower()}')

        business = sub_request.business
        plan = sub_request.plan
        owner = business.user
        processed_at = timezone.now()
        subscription = None
        commission = None

        if decision == APPROVED:
            # Validated before anything is written.
            end_date = compute_end_date(processed_at, plan.duration)

            sub_request.delete()
            subscription = Subscription.objects.create(
                business=business,
                plan=plan,
                start_date=processed_at,
                end_date=end_date,
                status='ACTIVE',
                auto_renew=False,
            )
            business.status = 'ACTIVE'
            business.save(update_fields=['status', 'updated_at'])
            cascade_branch_status(business, 'ACTIVE')
            owner.status = 'ACTIVE'
            owner.save(update_fields=['status'])
            commission = record_subscription_income(subscription)

            subject = 'Subscription Approved'
            body = (
                f'Your subscription request for {plan.title} has been approved. '
                f'Your subscription is active until {end_date:%Y-%m-%d}.'
            )
        else:
            sub_request.delete()
            cascade_branch_status(business, 'INACTIVE')

            subject = 'Subscription Rejected'
            body = f'Your subscription request for {plan.title} has been rejected.'
            if admin_note:
                body += f' Reason: {admin_note}'

        db_transaction.on_commit(lambda: notify(owner.email, subject, body))

    logger.info(
        'Subscription request %s for business %s %s by %s',
        request_id, business.id, decision, getattr(processed_by, 'id', None),
    )
    return {
        'request_id': request_id,
        'business_name': business.business_name,
        'plan_name': plan.title,
        'status': decision,
        'processed_at': processed_at,
        'admin_note': admin_note,
        'subscription': subscription,
        'commission': commission,
    }


def create_subscription_request(business, plan):
    if not plan.is_active:
        raise BadRequest('This plan is not available')
    if plan.plan_type != business.entity_type:
        raise BadRequest(
            f'This plan is for {plan.get_plan_type_display()} accounts only'
        )
    with db_transaction.atomic():
        pending = SubscriptionRequest.objects.select_for_update().filter(business=business, status='PENDING')
        if pending.exists():
            raise Conflict('You already have a pending subscription request')
        sub_request = SubscriptionRequest.objects.create(business=business, plan=plan)
    logger.info('Business %s requested plan %s', business.id, plan.id)
    return sub_request


def get_current_subscription(business):
    return (
        Subscription.objects
        .filter(business=business, status='ACTIVE', end_date__gt=timezone.now())
        .select_related('plan')
        .order_by('-end_date')
        .first()
    )


def cancel_subscription(business):
    subscription = get_current_subscription(business)
    if subscription is None:
        raise NotFound('No active subscription found')
    subscription.status = 'CANCELLED'
    subscription.cancelled_at = timezone.now()
    subscription.auto_renew = False
    subscription.save(update_fields=['status', 'cancelled_at', 'auto_renew', 'updated_at'])
    logger.info('Subscription %s cancelled by business %s', subscription.id, business.id)
    return subscription


def create_sponsorship_request(business, sponsorship):
    if not sponsorship.is_active:
        raise BadRequest('This sponsorship is not available')
    with db_transaction.atomic():
        pending = SponsorshipRequest.objects.select_for_update().filter(
            business=business, sponsorship=sponsorship, status='PENDING'
        )
        if pending.exists():
            raise Conflict('You already have a pending request for this sponsorship')
        return SponsorshipRequest.objects.create(business=business, sponsorship=sponsorship)


def process_sponsorship_request(request_id, decision):
    require_object_id(request_id, 'request ID')
    decision = (decision or '').strip().lower()
    if decision not in DECISIONS:
        raise BadRequest("Status must be either 'approved' or 'rejected'")

    with db_transaction.atomic():
        try:
            spons_request = (
                SponsorshipRequest.objects
                .select_for_update(of=('self',))
                .select_related('business', 'business__user', 'sponsorship')
                .get(id=request_id)
            )
        except SponsorshipRequest.DoesNotExist:
            raise NotFound('Sponsorship request not found')
        if spons_request.status != 'PENDING':
            raise Conflict(f'Sponsorship request is already {spons_request.status.lower()}')

        business = spons_request.business
        sponsorship = spons_request.sponsorship
        spons_request.delete()

        sponsorship_subscription = None
        if decision == APPROVED:
            start = timezone.now()
            sponsorship_subscription = SponsorshipSubscription.objects.create(
                sponsorship=sponsorship,
                business=business,
                status='ACTIVE',
                start_date=start,
                end_date=start + timedelta(days=sponsorship.duration),
            )
            body = f'Your sponsorship request for {sponsorship.title} has been approved.'
        else:
            body = f'Your sponsorship request for {sponsorship.title} has been rejected.'

        owner_email = business.user.email
        db_transaction.on_commit(lambda: notify(owner_email, 'Sponsorship Request Update', body))

    return sponsorship_subscription
