from rest_framework import serializers

from .models import Commission, WalletTransaction


class CommissionSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.business_name', read_only=True)
    plan_title = serializers.CharField(source='plan.title', read_only=True)
    salesperson_email = serializers.EmailField(source='salesperson.email', read_only=True)
    sales_manager_email = serializers.EmailField(source='sales_manager.email', read_only=True)
    total_commission = serializers.DecimalField(max_digits=18, decimal_places=6, read_only=True)

    class Meta:
        model = Commission
        fields = [
            'id',
            'subscription',
            'business',
            'business_name',
            'plan',
            'plan_title',
            'plan_price',
            'salesperson',
            'salesperson_email',
            'salesperson_commission_percent',
            'salesperson_commission',
            'sales_manager',
            'sales_manager_email',
            'sales_manager_commission_percent',
            'sales_manager_commission',
            'total_commission',
            'paid',
            'paid_at',
            'created_at',
        ]
        read_only_fields = fields


class WalletTransactionSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.business_name', read_only=True)

    class Meta:
        model = WalletTransaction
        fields = ['id', 'type', 'amount', 'entity_type', 'business', 'business_name', 'description', 'created_at']
        read_only_fields = fields


class WalletTransactionCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletTransaction
        fields = ['type', 'amount', 'entity_type', 'business', 'description']
        extra_kwargs = {
            'business': {'required': False, 'allow_null': True},
        }

    def validate_type(self, value):
        if value == 'DIRECT_INCOME':
            raise serializers.ValidationError("Direct income is recorded automatically on subscription approval.")
        return value

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than 0.")
        return value

    def validate(self, attrs):
        business = attrs.get('business')
        if business and not attrs.get('entity_type'):
            attrs['entity_type'] = business.entity_type
        return attrs
