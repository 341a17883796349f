from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import FileExtensionValidator
from django.db import transaction as db_transaction
from rest_framework import serializers

from authentication.models import User
from authentication.serializers import ensure_email_available
from .models import Business, Branch, BranchMedia, IMAGE_EXTENSIONS, VIDEO_EXTENSIONS


class BusinessSerializer(serializers.ModelSerializer):
    owner_email = serializers.EmailField(source='user.email', read_only=True)
    owner_name = serializers.CharField(source='user.full_name', read_only=True)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True)
    created_by_role = serializers.CharField(source='created_by.role', read_only=True)
    is_self_registered = serializers.BooleanField(read_only=True)
    branches_count = serializers.SerializerMethodField()

    class Meta:
        model = Business
        fields = [
            'id',
            'user',
            'owner_email',
            'owner_name',
            'entity_type',
            'business_name',
            'category',
            'phone',
            'logo',
            'status',
            'created_by',
            'created_by_email',
            'created_by_role',
            'is_self_registered',
            'branches_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_branches_count(self, obj):
        return obj.branches.count()


class EntityCreateSerializer(serializers.Serializer):
    """Creates the owner account and its business in one step.

    ``context['creator']`` is the salesperson or sales manager registering the
    entity; when absent the entity is self-registered and owns itself.
    """
    email = serializers.EmailField(required=True)
    full_name = serializers.CharField(required=True, max_length=150)
    password = serializers.CharField(write_only=True, required=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20, default='')
    entity_type = serializers.ChoiceField(choices=Business.ENTITY_TYPE_CHOICES)
    business_name = serializers.CharField(required=True, max_length=200)
    category = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
    logo = serializers.ImageField(required=False, allow_null=True)
    referral_code = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate_email(self, value):
        return ensure_email_available(value)

    def validate_business_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Business name cannot be empty.")
        return value.strip()

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def create(self, validated_data):
        creator = self.context.get('creator')
        validated_data.pop('referral_code', None)
        with db_transaction.atomic():
            user = User.objects.create_user(
                email=validated_data['email'],
                full_name=validated_data['full_name'],
                password=validated_data['password'],
                role=validated_data['entity_type'],
                phone_number=validated_data.get('phone', ''),
                status='PENDING',
                created_by=creator,
            )
            business = Business.objects.create(
                user=user,
                entity_type=validated_data['entity_type'],
                business_name=validated_data['business_name'],
                category=validated_data.get('category', ''),
                phone=validated_data.get('phone', ''),
                logo=validated_data.get('logo'),
                created_by=creator or user,
            )
        return business


class BusinessUpdateSerializer(serializers.ModelSerializer):
    logo = serializers.ImageField(required=False, allow_null=True)

    class Meta:
        model = Business
        fields = ['business_name', 'category', 'phone', 'logo']

    def validate_business_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Business name cannot be empty.")
        return value.strip()


class BranchMediaSerializer(serializers.ModelSerializer):
    path = serializers.CharField(source='file.name', read_only=True)

    class Meta:
        model = BranchMedia
        fields = ['id', 'media_type', 'path', 'uploaded_at']


class BranchSerializer(serializers.ModelSerializer):
    media = BranchMediaSerializer(many=True, read_only=True)

    class Meta:
        model = Branch
        fields = [
            'id',
            'business',
            'name',
            'phone',
            'category',
            'description',
            'city',
            'country',
            'lat',
            'lng',
            'status',
            'media',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'business', 'status', 'media', 'created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Branch name cannot be empty.")
        return value.strip()


class BranchMediaUploadSerializer(serializers.Serializer):
    images = serializers.ListField(
        child=serializers.ImageField(validators=[FileExtensionValidator(IMAGE_EXTENSIONS)]),
        required=False,
        default=list,
    )
    videos = serializers.ListField(
        child=serializers.FileField(validators=[FileExtensionValidator(VIDEO_EXTENSIONS)]),
        required=False,
        default=list,
    )

    def validate(self, attrs):
        if not attrs.get('images') and not attrs.get('videos'):
            raise serializers.ValidationError("At least one image or video is required.")
        return attrs

    def create(self, validated_data):
        branch = self.context['branch']
        created = []
        with db_transaction.atomic():
            for image in validated_data.get('images', []):
                created.append(BranchMedia.objects.create(branch=branch, media_type='IMAGE', file=image))
            for video in validated_data.get('videos', []):
                created.append(BranchMedia.objects.create(branch=branch, media_type='VIDEO', file=video))
        return created
