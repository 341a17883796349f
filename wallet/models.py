from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from backend.ids import new_object_id
from business.models import Business


class Commission(models.Model):
    """One commission line per approved subscription.

    Rates are copied at creation time and the row is never recomputed.
    """
    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    subscription = models.OneToOneField(
        'subscription.Subscription',
        on_delete=models.PROTECT,
        related_name='commission'
    )
    business = models.ForeignKey(Business, on_delete=models.PROTECT, related_name='commissions')
    plan = models.ForeignKey('subscription.SubscriptionPlan', on_delete=models.PROTECT, related_name='commissions')
    plan_price = models.DecimalField(max_digits=12, decimal_places=2)
    salesperson = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='salesperson_commissions'
    )
    salesperson_commission_percent = models.DecimalField(max_digits=5, decimal_places=2)
    salesperson_commission = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        help_text="plan_price * salesperson_commission_percent / 100"
    )
    sales_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='sales_manager_commissions'
    )
    sales_manager_commission_percent = models.DecimalField(max_digits=5, decimal_places=2)
    sales_manager_commission = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        help_text="plan_price * sales_manager_commission_percent / 100"
    )
    paid = models.BooleanField(default=False, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'commissions'
        verbose_name = 'Commission'
        verbose_name_plural = 'Commissions'
        ordering = ['-created_at']

    def __str__(self):
        return f"Commission on {self.business.business_name} ({self.plan_price})"

    @property
    def total_commission(self):
        return (self.salesperson_commission or Decimal('0')) + (self.sales_manager_commission or Decimal('0'))


class WalletTransaction(models.Model):
    TYPE_CHOICES = [
        ('SUBSCRIPTION_INCOME', 'Subscription Income'),
        ('WITHDRAWAL_INCOME', 'Withdrawal Income'),
        ('DIRECT_INCOME', 'Direct Income'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, db_index=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    entity_type = models.CharField(max_length=20, blank=True, default='')
    business = models.ForeignKey(
        Business,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='wallet_transactions'
    )
    description = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'admin_wallet'
        verbose_name = 'Wallet Transaction'
        verbose_name_plural = 'Wallet Transactions'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_type_display()} {self.amount}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Wallet transactions are append-only and cannot be modified')
        super().save(*args, **kwargs)
