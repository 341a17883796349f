from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from backend.ids import new_object_id

REFERRAL_POINTS = 5


class Referral(models.Model):
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    referrer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='referrals_made')
    referee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='referrals_received')
    points_awarded = models.IntegerField(default=REFERRAL_POINTS)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'referrals'
        verbose_name = 'Referral'
        verbose_name_plural = 'Referrals'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['referrer', 'referee'], name='unique_referrer_referee'),
        ]

    def __str__(self):
        return f"{self.referrer} -> {self.referee}"


class Voucher(models.Model):
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    points_cost = models.PositiveIntegerField(validators=[MinValueValidator(1)], help_text="Points needed to buy this voucher")
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'vouchers'
        verbose_name = 'Voucher'
        verbose_name_plural = 'Vouchers'
        ordering = ['points_cost']

    def __str__(self):
        return f"{self.title} ({self.points_cost} pts)"


class VoucherPurchase(models.Model):
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    voucher = models.ForeignKey(Voucher, on_delete=models.PROTECT, related_name='purchases')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='voucher_purchases')
    points_spent = models.PositiveIntegerField()
    purchased_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'voucher_purchases'
        verbose_name = 'Voucher Purchase'
        verbose_name_plural = 'Voucher Purchases'
        ordering = ['-purchased_at']
        constraints = [
            models.UniqueConstraint(fields=['voucher', 'user'], name='unique_voucher_purchase'),
        ]

    def __str__(self):
        return f"{self.user} bought {self.voucher.title}"
