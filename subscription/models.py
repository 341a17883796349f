from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from backend.ids import new_object_id
from business.models import Business


class SubscriptionPlan(models.Model):
    PLAN_TYPE_CHOICES = Business.ENTITY_TYPE_CHOICES

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    title = models.CharField(max_length=200, help_text="Plan title")
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text="Plan price"
    )
    duration = models.PositiveIntegerField(help_text="Plan length in calendar months (1, 6 or 12)")
    plan_type = models.CharField(
        max_length=20,
        choices=PLAN_TYPE_CHOICES,
        db_index=True,
        help_text="Entity type this plan is sold to"
    )
    benefits = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscription_plans'
        verbose_name = 'Subscription Plan'
        verbose_name_plural = 'Subscription Plans'
        ordering = ['plan_type', 'price']

    def __str__(self):
        return f"{self.title} ({self.duration} months)"


class SubscriptionRequest(models.Model):
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('APPROVED', 'Approved'),
        ('REJECTED', 'Rejected'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='subscription_requests')
    plan = models.ForeignKey(SubscriptionPlan, on_delete=models.PROTECT, related_name='requests')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='PENDING', db_index=True)
    admin_note = models.TextField(blank=True, default='')
    requested_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'subscription_requests'
        verbose_name = 'Subscription Request'
        verbose_name_plural = 'Subscription Requests'
        ordering = ['-requested_at']

    def __str__(self):
        return f"{self.business.business_name} -> {self.plan.title} ({self.status})"


class Subscription(models.Model):
    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('EXPIRED', 'Expired'),
        ('CANCELLED', 'Cancelled'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='subscriptions')
    plan = models.ForeignKey(SubscriptionPlan, on_delete=models.PROTECT, related_name='subscriptions')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='ACTIVE', db_index=True)
    auto_renew = models.BooleanField(default=False)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscriptions'
        verbose_name = 'Subscription'
        verbose_name_plural = 'Subscriptions'
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.business.business_name} - {self.plan.title} ({self.status})"

    @property
    def remaining_days(self):
        if self.status != 'ACTIVE':
            return 0
        return max((self.end_date - timezone.now()).days, 0)


class Sponsorship(models.Model):
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    duration = models.PositiveIntegerField(help_text="Sponsorship length in days")
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'sponsorships'
        verbose_name = 'Sponsorship'
        verbose_name_plural = 'Sponsorships'
        ordering = ['price']

    def __str__(self):
        return self.title


class SponsorshipRequest(models.Model):
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    sponsorship = models.ForeignKey(Sponsorship, on_delete=models.CASCADE, related_name='requests')
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='sponsorship_requests')
    status = models.CharField(
        max_length=10,
        choices=SubscriptionRequest.STATUS_CHOICES,
        default='PENDING',
        db_index=True
    )
    requested_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'sponsorship_requests'
        verbose_name = 'Sponsorship Request'
        verbose_name_plural = 'Sponsorship Requests'
        ordering = ['-requested_at']

    def __str__(self):
        return f"{self.business.business_name} -> {self.sponsorship.title}"


class SponsorshipSubscription(models.Model):
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    sponsorship = models.ForeignKey(Sponsorship, on_delete=models.PROTECT, related_name='subscriptions')
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='sponsorship_subscriptions')
    status = models.CharField(
        max_length=10,
        choices=Subscription.STATUS_CHOICES,
        default='ACTIVE',
        db_index=True
    )
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'sponsorship_subscriptions'
        verbose_name = 'Sponsorship Subscription'
        verbose_name_plural = 'Sponsorship Subscriptions'
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.business.business_name} - {self.sponsorship.title}"
