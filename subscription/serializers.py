from rest_framework import serializers

from .models import (
    SubscriptionPlan,
    SubscriptionRequest,
    Subscription,
    Sponsorship,
    SponsorshipRequest,
    SponsorshipSubscription,
)
from .services import PLAN_PERIODS


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubscriptionPlan
        fields = [
            'id',
            'title',
            'description',
            'price',
            'duration',
            'plan_type',
            'benefits',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_duration(self, value):
        if value not in PLAN_PERIODS:
            raise serializers.ValidationError("Duration must be 1, 6 or 12 months.")
        return value

    def validate_title(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Title cannot be empty.")
        return value.strip()

    def validate_benefits(self, value):
        if not isinstance(value, list) or not all(isinstance(b, str) for b in value):
            raise serializers.ValidationError("Benefits must be a list of strings.")
        return value


class SubscriptionRequestCreateSerializer(serializers.Serializer):
    plan_id = serializers.CharField(required=True)


class SubscriptionRequestSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.business_name', read_only=True)
    entity_type = serializers.CharField(source='business.entity_type', read_only=True)
    owner_email = serializers.EmailField(source='business.user.email', read_only=True)
    plan = SubscriptionPlanSerializer(read_only=True)

    class Meta:
        model = SubscriptionRequest
        fields = [
            'id',
            'business',
            'business_name',
            'entity_type',
            'owner_email',
            'plan',
            'status',
            'admin_note',
            'requested_at',
        ]


class SubscriptionSerializer(serializers.ModelSerializer):
    plan = SubscriptionPlanSerializer(read_only=True)
    business_name = serializers.CharField(source='business.business_name', read_only=True)
    remaining_days = serializers.IntegerField(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            'id',
            'business',
            'business_name',
            'plan',
            'start_date',
            'end_date',
            'status',
            'auto_renew',
            'cancelled_at',
            'remaining_days',
            'created_at',
        ]


class ProcessRequestSerializer(serializers.Serializer):
    status = serializers.CharField(required=True, help_text="approved or rejected")
    admin_note = serializers.CharField(required=False, allow_blank=True, default='')


class SponsorshipSerializer(serializers.ModelSerializer):
    class Meta:
        model = Sponsorship
        fields = ['id', 'title', 'description', 'price', 'duration', 'is_active', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_duration(self, value):
        if value < 1:
            raise serializers.ValidationError("Duration must be at least one day.")
        return value


class SponsorshipRequestCreateSerializer(serializers.Serializer):
    sponsorship_id = serializers.CharField(required=True)


class SponsorshipRequestSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.business_name', read_only=True)
    sponsorship = SponsorshipSerializer(read_only=True)

    class Meta:
        model = SponsorshipRequest
        fields = ['id', 'business', 'business_name', 'sponsorship', 'status', 'requested_at']


class SponsorshipSubscriptionSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.business_name', read_only=True)
    sponsorship = SponsorshipSerializer(read_only=True)

    class Meta:
        model = SponsorshipSubscription
        fields = ['id', 'business', 'business_name', 'sponsorship', 'status', 'start_date', 'end_date']
