from rest_framework import serializers

from .models import Referral, Voucher, VoucherPurchase


class ApplyReferralSerializer(serializers.Serializer):
    referral_code = serializers.CharField(required=True, allow_blank=True, max_length=20)


class ReferralSerializer(serializers.ModelSerializer):
    referrer_email = serializers.EmailField(source='referrer.email', read_only=True)
    referrer_role = serializers.CharField(source='referrer.role', read_only=True)
    referee_email = serializers.EmailField(source='referee.email', read_only=True)
    referee_role = serializers.CharField(source='referee.role', read_only=True)

    class Meta:
        model = Referral
        fields = [
            'id',
            'referrer',
            'referrer_email',
            'referrer_role',
            'referee',
            'referee_email',
            'referee_role',
            'points_awarded',
            'created_at',
        ]


class VoucherSerializer(serializers.ModelSerializer):
    class Meta:
        model = Voucher
        fields = ['id', 'title', 'description', 'points_cost', 'is_active', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Title cannot be empty.")
        return value.strip()


class VoucherPurchaseSerializer(serializers.ModelSerializer):
    voucher = VoucherSerializer(read_only=True)

    class Meta:
        model = VoucherPurchase
        fields = ['id', 'voucher', 'points_spent', 'purchased_at']
