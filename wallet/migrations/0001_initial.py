import backend.ids
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('business', '0001_initial'),
        ('subscription', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='WalletTransaction',
            fields=[
                ('id', models.CharField(default=backend.ids.new_object_id, editable=False, max_length=24, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('SUBSCRIPTION_INCOME', 'Subscription Income'), ('WITHDRAWAL_INCOME', 'Withdrawal Income'), ('DIRECT_INCOME', 'Direct Income')], db_index=True, max_length=30)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('entity_type', models.CharField(blank=True, default='', max_length=20)),
                ('description', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('business', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='wallet_transactions', to='business.business')),
            ],
            options={
                'verbose_name': 'Wallet Transaction',
                'verbose_name_plural': 'Wallet Transactions',
                'db_table': 'admin_wallet',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Commission',
            fields=[
                ('id', models.CharField(default=backend.ids.new_object_id, editable=False, max_length=24, primary_key=True, serialize=False)),
                ('plan_price', models.DecimalField(decimal_places=2, max_digits=12)),
                ('salesperson_commission_percent', models.DecimalField(decimal_places=2, max_digits=5)),
                ('salesperson_commission', models.DecimalField(decimal_places=6, help_text='plan_price * salesperson_commission_percent / 100', max_digits=18)),
                ('sales_manager_commission_percent', models.DecimalField(decimal_places=2, max_digits=5)),
                ('sales_manager_commission', models.DecimalField(decimal_places=6, help_text='plan_price * sales_manager_commission_percent / 100', max_digits=18)),
                ('paid', models.BooleanField(db_index=True, default=False)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='commissions', to='business.business')),
                ('plan', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='commissions', to='subscription.subscriptionplan')),
                ('sales_manager', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sales_manager_commissions', to=settings.AUTH_USER_MODEL)),
                ('salesperson', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='salesperson_commissions', to=settings.AUTH_USER_MODEL)),
                ('subscription', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='commission', to='subscription.subscription')),
            ],
            options={
                'verbose_name': 'Commission',
                'verbose_name_plural': 'Commissions',
                'db_table': 'commissions',
                'ordering': ['-created_at'],
            },
        ),
    ]
