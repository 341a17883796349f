import backend.ids
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Voucher',
            fields=[
                ('id', models.CharField(default=backend.ids.new_object_id, editable=False, max_length=24, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('points_cost', models.PositiveIntegerField(help_text='Points needed to buy this voucher', validators=[django.core.validators.MinValueValidator(1)])),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Voucher',
                'verbose_name_plural': 'Vouchers',
                'db_table': 'vouchers',
                'ordering': ['points_cost'],
            },
        ),
        migrations.CreateModel(
            name='Referral',
            fields=[
                ('id', models.CharField(default=backend.ids.new_object_id, editable=False, max_length=24, primary_key=True, serialize=False)),
                ('points_awarded', models.IntegerField(default=5)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('referee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='referrals_received', to=settings.AUTH_USER_MODEL)),
                ('referrer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='referrals_made', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Referral',
                'verbose_name_plural': 'Referrals',
                'db_table': 'referrals',
                'ordering': ['-created_at'],
                'constraints': [models.UniqueConstraint(fields=('referrer', 'referee'), name='unique_referrer_referee')],
            },
        ),
        migrations.CreateModel(
            name='VoucherPurchase',
            fields=[
                ('id', models.CharField(default=backend.ids.new_object_id, editable=False, max_length=24, primary_key=True, serialize=False)),
                ('points_spent', models.PositiveIntegerField()),
                ('purchased_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='voucher_purchases', to=settings.AUTH_USER_MODEL)),
                ('voucher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to='referral.voucher')),
            ],
            options={
                'verbose_name': 'Voucher Purchase',
                'verbose_name_plural': 'Voucher Purchases',
                'db_table': 'voucher_purchases',
                'ordering': ['-purchased_at'],
                'constraints': [models.UniqueConstraint(fields=('voucher', 'user'), name='unique_voucher_purchase')],
            },
        ),
    ]
