from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from backend.exceptions import Conflict

from .models import User
from .roles import CAPABILITIES


def ensure_email_available(value):
    if User.objects.filter(email__iexact=value).exists():
        raise Conflict("A user with this email already exists.")
    return value


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=True)
    confirm_password = serializers.CharField(write_only=True, required=True)

    class Meta:
        model = User
        fields = ['email', 'full_name', 'phone_number', 'password', 'confirm_password']
        extra_kwargs = {
            'email': {'required': True, 'validators': []},
            'phone_number': {'required': False},
        }

    def validate_email(self, value):
        return ensure_email_available(value)

    def validate(self, attrs):
        if attrs['password'] != attrs['confirm_password']:
            raise serializers.ValidationError({
                'confirm_password': "Passwords do not match."
            })
        try:
            validate_password(attrs['password'])
        except DjangoValidationError as e:
            raise serializers.ValidationError({
                'password': list(e.messages)
            })
        return attrs

    def create(self, validated_data):
        validated_data.pop('confirm_password')
        password = validated_data.pop('password')
        role = self.context.get('role', 'USER')
        return User.objects.create_user(password=password, role=role, **validated_data)


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)
    password = serializers.CharField(write_only=True, required=True)

    def validate(self, attrs):
        email = attrs.get('email')
        password = attrs.get('password')

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise serializers.ValidationError({
                'non_field_errors': ['Invalid email or password.']
            })
        if not user.check_password(password):
            raise serializers.ValidationError({
                'non_field_errors': ['Invalid email or password.']
            })
        if not user.is_active or user.status == 'INACTIVE':
            raise serializers.ValidationError({
                'non_field_errors': ['Your account has been disabled. Please contact support.']
            })
        attrs['user'] = user
        return attrs


class UserProfileSerializer(serializers.ModelSerializer):
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True)
    sales_manager_email = serializers.EmailField(source='sales_manager.email', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'full_name',
            'phone_number',
            'role',
            'status',
            'roles_access',
            'commission_percent',
            'sales_manager',
            'sales_manager_email',
            'created_by',
            'created_by_email',
            'referral_code',
            'points',
            'is_active',
            'date_joined',
            'last_login',
        ]
        read_only_fields = fields


class UserUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['full_name', 'phone_number']


def validate_capability_list(value):
    unknown = [c for c in value if c not in CAPABILITIES]
    if unknown:
        raise serializers.ValidationError(f"Unknown capabilities: {', '.join(unknown)}")
    return list(dict.fromkeys(value))


class StaffCreateSerializer(serializers.ModelSerializer):
    """Admin-created staff accounts: managers and sales managers"""
    password = serializers.CharField(write_only=True, required=True, min_length=8)
    roles_access = serializers.ListField(child=serializers.CharField(), required=False, default=list)

    class Meta:
        model = User
        fields = ['email', 'full_name', 'phone_number', 'password', 'roles_access', 'commission_percent']
        extra_kwargs = {
            'email': {'validators': []},
            'commission_percent': {'required': False},
        }

    def validate_email(self, value):
        return ensure_email_available(value)

    def validate_roles_access(self, value):
        return validate_capability_list(value)

    def validate_commission_percent(self, value):
        if value < 0:
            raise serializers.ValidationError("Commission percent cannot be negative.")
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(
            password=password,
            role=self.context['role'],
            created_by=self.context['request'].user,
            **validated_data
        )


class SalespersonCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=True, min_length=8)
    sales_manager = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role='SALES_MANAGER'),
        required=False,
        allow_null=True,
        help_text="Required when an admin creates the salesperson"
    )

    class Meta:
        model = User
        fields = ['email', 'full_name', 'phone_number', 'password', 'commission_percent', 'sales_manager']
        extra_kwargs = {
            'email': {'validators': []},
            'commission_percent': {'required': True},
        }

    def validate_email(self, value):
        return ensure_email_available(value)

    def validate_commission_percent(self, value):
        if value < 0:
            raise serializers.ValidationError("Commission percent cannot be negative.")
        return value

    def validate(self, attrs):
        creator = self.context['request'].user
        if creator.is_sales_manager:
            attrs['sales_manager'] = creator
        elif not attrs.get('sales_manager'):
            raise serializers.ValidationError({
                'sales_manager': "A sales manager must be provided."
            })
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(
            password=password,
            role='SALESPERSON',
            created_by=self.context['request'].user,
            **validated_data
        )


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)


class ResetPasswordSerializer(serializers.Serializer):
    otp = serializers.CharField(required=True, max_length=10)
    new_password = serializers.CharField(write_only=True, required=True, min_length=8)
