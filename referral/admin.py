from django.contrib import admin
from .models import Referral, Voucher, VoucherPurchase


@admin.register(Referral)
class ReferralAdmin(admin.ModelAdmin):
    list_display = ['referrer', 'referee', 'points_awarded', 'created_at']
    search_fields = ['referrer__email', 'referee__email']
    raw_id_fields = ['referrer', 'referee']


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ['title', 'points_cost', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['title']


@admin.register(VoucherPurchase)
class VoucherPurchaseAdmin(admin.ModelAdmin):
    list_display = ['user', 'voucher', 'points_spent', 'purchased_at']
    search_fields = ['user__email', 'voucher__title']
    raw_id_fields = ['user', 'voucher']
