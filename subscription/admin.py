from django.contrib import admin
from .models import (
    SubscriptionPlan,
    SubscriptionRequest,
    Subscription,
    Sponsorship,
    SponsorshipRequest,
    SponsorshipSubscription,
)


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ['title', 'plan_type', 'price', 'duration', 'is_active', 'created_at']
    list_filter = ['plan_type', 'is_active', 'duration']
    search_fields = ['title']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(SubscriptionRequest)
class SubscriptionRequestAdmin(admin.ModelAdmin):
    list_display = ['business', 'plan', 'status', 'requested_at']
    list_filter = ['status', 'requested_at']
    search_fields = ['business__business_name', 'plan__title']
    raw_id_fields = ['business', 'plan']


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ['business', 'plan', 'status', 'start_date', 'end_date', 'auto_renew']
    list_filter = ['status', 'auto_renew', 'start_date']
    search_fields = ['business__business_name', 'plan__title']
    raw_id_fields = ['business', 'plan']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(Sponsorship)
class SponsorshipAdmin(admin.ModelAdmin):
    list_display = ['title', 'price', 'duration', 'is_active']
    list_filter = ['is_active']
    search_fields = ['title']


@admin.register(SponsorshipRequest)
class SponsorshipRequestAdmin(admin.ModelAdmin):
    list_display = ['business', 'sponsorship', 'status', 'requested_at']
    list_filter = ['status']
    raw_id_fields = ['business', 'sponsorship']


@admin.register(SponsorshipSubscription)
class SponsorshipSubscriptionAdmin(admin.ModelAdmin):
    list_display = ['business', 'sponsorship', 'status', 'start_date', 'end_date']
    list_filter = ['status']
    raw_id_fields = ['business', 'sponsorship']
