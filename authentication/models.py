import secrets
import string
from decimal import Decimal

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone

from backend.ids import new_object_id


def generate_unique_referral_code():
    alphabet = string.ascii_uppercase + string.digits
    while True:
        code = ''.join(secrets.choice(alphabet) for _ in range(8))
        if not User.objects.filter(referral_code=code).exists():
            return code


class UserManager(BaseUserManager):
    def create_user(self, email, full_name, password=None, role='USER', **extra_fields):
        if not email:
            raise ValueError('The Email field must be set')
        if not full_name:
            raise ValueError('The Full Name field must be set')

        email = self.normalize_email(email)
        extra_fields.setdefault('referral_code', generate_unique_referral_code())
        user = self.model(
            email=email,
            full_name=full_name,
            role=role,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, full_name, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('status', 'ACTIVE')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        if password is None:
            raise ValueError('Superuser must have a password.')

        return self.create_user(email, full_name, password, role='ADMIN', **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = [
        ('ADMIN', 'Admin'),
        ('MANAGER', 'Manager'),
        ('SALES_MANAGER', 'Sales Manager'),
        ('SALESPERSON', 'Salesperson'),
        ('COMPANY', 'Company'),
        ('WHOLESALER', 'Wholesaler'),
        ('SERVICE_PROVIDER', 'Service Provider'),
        ('USER', 'User'),
    ]

    ENTITY_ROLES = ('COMPANY', 'WHOLESALER', 'SERVICE_PROVIDER')

    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
    ]

    id = models.CharField(primary_key=True, max_length=24, default=new_object_id, editable=False)
    email = models.EmailField(unique=True, db_index=True)
    full_name = models.CharField(max_length=150)
    phone_number = models.CharField(max_length=20, blank=True, default='')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='USER', db_index=True)
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default='ACTIVE',
        db_index=True,
        help_text="Lifecycle status; entity owners follow their business"
    )
    roles_access = models.JSONField(
        default=list,
        blank=True,
        help_text="Capabilities granted to managers and sales managers"
    )
    commission_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0'),
        help_text="Commission rate for sales managers and salespersons"
    )
    sales_manager = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='salespersons',
        help_text="Sales manager a salesperson reports to"
    )
    created_by = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='created_users')
    referral_code = models.CharField(max_length=20, unique=True, blank=True, null=True, db_index=True)
    points = models.IntegerField(default=0, help_text="Referral points balance")
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_superuser = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['full_name']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-date_joined']

    def __str__(self):
        return self.email

    @property
    def is_admin(self):
        return self.role == 'ADMIN' or self.is_superuser

    @property
    def is_sales_manager(self):
        return self.role == 'SALES_MANAGER'

    @property
    def is_salesperson(self):
        return self.role == 'SALESPERSON'

    @property
    def is_entity(self):
        return self.role in self.ENTITY_ROLES

    def has_perm(self, perm, obj=None):
        return self.is_superuser

    def has_module_perms(self, app_label):
        return self.is_superuser
