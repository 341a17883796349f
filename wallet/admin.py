from django.contrib import admin
from .models import Commission, WalletTransaction


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = [
        'business', 'plan_price', 'salesperson', 'salesperson_commission',
        'sales_manager', 'sales_manager_commission', 'paid', 'created_at'
    ]
    list_filter = ['paid', 'created_at']
    search_fields = ['business__business_name', 'salesperson__email', 'sales_manager__email']
    raw_id_fields = ['subscription', 'business', 'plan', 'salesperson', 'sales_manager']
    readonly_fields = [
        'id', 'plan_price', 'salesperson_commission_percent', 'salesperson_commission',
        'sales_manager_commission_percent', 'sales_manager_commission', 'created_at'
    ]


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ['type', 'amount', 'entity_type', 'business', 'created_at']
    list_filter = ['type', 'entity_type', 'created_at']
    search_fields = ['description', 'business__business_name']
    raw_id_fields = ['business']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
