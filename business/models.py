from django.conf import settings
from django.core.validators import FileExtensionValidator
from django.db import models
from django.utils import timezone

from backend.ids import new_object_id

IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'gif', 'webp']
VIDEO_EXTENSIONS = ['mp4', 'mov', 'avi', 'mkv', 'webm']


class Business(models.Model):
    ENTITY_TYPE_CHOICES = [
        ('COMPANY', 'Company'),
        ('WHOLESALER', 'Wholesaler'),
        ('SERVICE_PROVIDER', 'Service Provider'),
    ]

    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('APPROVED', 'Approved'),
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='business',
        help_text="Account that owns and logs in as this business"
    )
    entity_type = models.CharField(max_length=20, choices=ENTITY_TYPE_CHOICES, db_index=True)
    business_name = models.CharField(max_length=200, db_index=True)
    category = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='')
    logo = models.ImageField(
        upload_to='uploads/logos/',
        blank=True,
        null=True,
        validators=[FileExtensionValidator(IMAGE_EXTENSIONS)],
        help_text="Business logo"
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default='PENDING',
        db_index=True,
        help_text="PENDING until reviewed, ACTIVE once a subscription is approved"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_businesses',
        help_text="Salesperson, sales manager, or the owner itself for self-signup"
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'businesses'
        verbose_name = 'Business'
        verbose_name_plural = 'Businesses'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.business_name} ({self.get_entity_type_display()})"

    @property
    def is_self_registered(self):
        return self.created_by_id is not None and self.created_by_id == self.user_id


class Branch(models.Model):
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='branches')
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, default='')
    category = models.CharField(max_length=100, blank=True, default='')
    description = models.TextField(blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    country = models.CharField(max_length=100, blank=True, default='')
    lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='PENDING', db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'branches'
        verbose_name = 'Branch'
        verbose_name_plural = 'Branches'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.name} - {self.business.business_name}"


def branch_media_path(instance, filename):
    folder = 'images' if instance.media_type == 'IMAGE' else 'videos'
    return f'uploads/branches/{folder}/{instance.branch_id}_{filename}'


class BranchMedia(models.Model):
    MEDIA_TYPE_CHOICES = [
        ('IMAGE', 'Image'),
        ('VIDEO', 'Video'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    branch = models.ForeignKey(Branch, on_delete=models.CASCADE, related_name='media')
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES)
    file = models.FileField(upload_to=branch_media_path, max_length=255)
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'branch_media'
        verbose_name = 'Branch Media'
        verbose_name_plural = 'Branch Media'
        ordering = ['uploaded_at']

    def __str__(self):
        return self.file.name
