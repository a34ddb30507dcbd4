# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DriverDepotOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('litres', models.DecimalField(decimal_places=2, max_digits=10)),
                ('price_per_litre_cents', models.PositiveIntegerField()),
                ('total_price_cents', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('pending_payment', 'Pending Payment'), ('paid', 'Paid'), ('ready_for_pickup', 'Ready for Pickup'), ('awaiting_signature', 'Awaiting Signature'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('payment_verified', 'Payment Verified'), ('payment_failed', 'Payment Failed')], default='pending', max_length=20)),
                ('payment_method', models.CharField(blank=True, choices=[('bank_transfer', 'Bank Transfer'), ('online_payment', 'Online Payment'), ('pay_outside_app', 'Pay Outside App')], max_length=20)),
                ('payment_proof_url', models.URLField(blank=True, max_length=1000)),
                ('pickup_date', models.DateTimeField()),
                ('notes', models.TextField(blank=True)),
                ('driver_signature_url', models.URLField(blank=True, max_length=1000)),
                ('driver_signed_at', models.DateTimeField(blank=True, null=True)),
                ('supplier_signature_url', models.URLField(blank=True, max_length=1000)),
                ('supplier_signed_at', models.DateTimeField(blank=True, null=True)),
                ('actual_litres_delivered', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('payment_confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('released_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('depot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='depot_orders', to='locations.depot')),
                ('driver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='depot_orders', to='parties.driver')),
                ('fuel_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='depot_orders', to='catalog.fueltype')),
                ('payment_confirmed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='confirmed_depot_payments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'driver_depot_orders',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='driverdepotorder',
            index=models.Index(fields=['depot', 'status'], name='depot_order_depot_status_idx'),
        ),
        migrations.AddIndex(
            model_name='driverdepotorder',
            index=models.Index(fields=['driver', 'status'], name='depot_order_drv_status_idx'),
        ),
    ]
