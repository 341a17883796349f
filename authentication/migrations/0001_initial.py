import backend.ids
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('id', models.CharField(default=backend.ids.new_object_id, editable=False, max_length=24, primary_key=True, serialize=False)),
                ('email', models.EmailField(db_index=True, max_length=254, unique=True)),
                ('full_name', models.CharField(max_length=150)),
                ('phone_number', models.CharField(blank=True, default='', max_length=20)),
                ('role', models.CharField(choices=[('ADMIN', 'Admin'), ('MANAGER', 'Manager'), ('SALES_MANAGER', 'Sales Manager'), ('SALESPERSON', 'Salesperson'), ('COMPANY', 'Company'), ('WHOLESALER', 'Wholesaler'), ('SERVICE_PROVIDER', 'Service Provider'), ('USER', 'User')], db_index=True, default='USER', max_length=20)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], db_index=True, default='ACTIVE', help_text='Lifecycle status; entity owners follow their business', max_length=10)),
                ('roles_access', models.JSONField(blank=True, default=list, help_text='Capabilities granted to managers and sales managers')),
                ('commission_percent', models.DecimalField(decimal_places=2, default=Decimal('0'), help_text='Commission rate for sales managers and salespersons', max_digits=5)),
                ('referral_code', models.CharField(blank=True, db_index=True, max_length=20, null=True, unique=True)),
                ('points', models.IntegerField(default=0, help_text='Referral points balance')),
                ('is_active', models.BooleanField(default=True)),
                ('is_staff', models.BooleanField(default=False)),
                ('is_superuser', models.BooleanField(default=False)),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now)),
                ('last_login', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_users', to=settings.AUTH_USER_MODEL)),
                ('sales_manager', models.ForeignKey(blank=True, help_text='Sales manager a salesperson reports to', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='salespersons', to=settings.AUTH_USER_MODEL)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'db_table': 'users',
                'ordering': ['-date_joined'],
            },
        ),
    ]
