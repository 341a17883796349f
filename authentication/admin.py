from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = [
        'email', 'full_name', 'role', 'status', 'commission_percent',
        'sales_manager', 'created_by', 'points', 'is_active', 'date_joined'
    ]
    list_filter = ['role', 'status', 'is_active', 'is_staff', 'date_joined']
    search_fields = ['email', 'full_name', 'phone_number', 'referral_code']
    ordering = ['-date_joined']
    raw_id_fields = ['created_by', 'sales_manager']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('full_name', 'phone_number')}),
        ('Hierarchy', {'fields': ('created_by', 'sales_manager', 'commission_percent')}),
        ('Access', {'fields': ('role', 'status', 'roles_access')}),
        ('Referrals', {'fields': ('referral_code', 'points')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'full_name', 'password1', 'password2', 'role', 'is_staff', 'is_superuser'),
        }),
    )

    readonly_fields = ['date_joined', 'last_login']
