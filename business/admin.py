from django.contrib import admin
from .models import Business, Branch, BranchMedia


class BranchInline(admin.TabularInline):
    model = Branch
    extra = 0
    fields = ['name', 'phone', 'city', 'status']


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'entity_type', 'user', 'status', 'created_by', 'created_at']
    list_filter = ['entity_type', 'status', 'created_at']
    search_fields = ['business_name', 'user__email', 'phone']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['user', 'created_by']
    inlines = [BranchInline]

    fieldsets = (
        ('Business', {'fields': ('id', 'business_name', 'entity_type', 'category', 'phone', 'logo')}),
        ('Ownership', {'fields': ('user', 'created_by')}),
        ('Status', {'fields': ('status',)}),
        ('Timestamps', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'city', 'country', 'status', 'created_at']
    list_filter = ['status', 'country']
    search_fields = ['name', 'business__business_name', 'city']
    raw_id_fields = ['business']


@admin.register(BranchMedia)
class BranchMediaAdmin(admin.ModelAdmin):
    list_display = ['file', 'media_type', 'branch', 'uploaded_at']
    list_filter = ['media_type']
    raw_id_fields = ['branch']
