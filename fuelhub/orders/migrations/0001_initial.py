# Generated manually
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('litres', models.DecimalField(decimal_places=2, max_digits=10)),
                ('drop_lat', models.FloatField(blank=True, null=True)),
                ('drop_lng', models.FloatField(blank=True, null=True)),
                ('from_time', models.DateTimeField(blank=True, null=True)),
                ('to_time', models.DateTimeField(blank=True, null=True)),
                ('priority_level', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10)),
                ('access_instructions', models.TextField(blank=True)),
                ('vehicle_registration', models.CharField(blank=True, max_length=20)),
                ('equipment_type', models.CharField(blank=True, max_length=50)),
                ('tank_capacity', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('terms_accepted', models.BooleanField(default=False)),
                ('terms_accepted_at', models.DateTimeField(blank=True, null=True)),
                ('signature_data', models.TextField(blank=True)),
                ('price_per_litre_cents', models.PositiveIntegerField(default=0)),
                ('fuel_price_cents', models.PositiveIntegerField(default=0)),
                ('delivery_fee_cents', models.PositiveIntegerField(default=0)),
                ('service_fee_cents', models.PositiveIntegerField(default=0)),
                ('total_cents', models.PositiveIntegerField(default=0)),
                ('state', models.CharField(choices=[('created', 'Created'), ('awaiting_payment', 'Awaiting Payment'), ('paid', 'Paid'), ('assigned', 'Assigned'), ('en_route', 'En Route'), ('picked_up', 'Picked Up'), ('delivered', 'Delivered'), ('cancelled', 'Cancelled'), ('refunded', 'Refunded')], default='created', max_length=20)),
                ('confirmed_delivery_time', models.DateTimeField(blank=True, null=True)),
                ('regular_dispatch_at', models.DateTimeField(blank=True, help_text='When non-premium drivers become eligible for offers', null=True)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('delivery_signature_data', models.TextField(blank=True)),
                ('delivery_signature_name', models.CharField(blank=True, max_length=255)),
                ('delivery_signed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_orders', to='parties.driver')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to='parties.customer')),
                ('delivery_address', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='parties.deliveryaddress')),
                ('fuel_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='catalog.fueltype')),
                ('payment_method', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='parties.paymentmethod')),
                ('selected_depot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_orders', to='locations.depot')),
            ],
            options={
                'db_table': 'orders',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DispatchOffer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('state', models.CharField(choices=[('offered', 'Offered'), ('pending_customer', 'Pending Customer'), ('accepted', 'Accepted'), ('rejected', 'Rejected'), ('timeout', 'Timed Out')], default='offered', max_length=20)),
                ('is_premium', models.BooleanField(default=False)),
                ('expires_at', models.DateTimeField()),
                ('proposed_delivery_time', models.DateTimeField(blank=True, null=True)),
                ('proposed_price_per_km_cents', models.PositiveIntegerField(blank=True, null=True)),
                ('proposed_delivery_fee_cents', models.PositiveIntegerField(blank=True, null=True)),
                ('proposed_notes', models.CharField(blank=True, max_length=500)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('driver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='offers', to='parties.driver')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='offers', to='orders.order')),
            ],
            options={
                'db_table': 'dispatch_offers',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['state'], name='orders_state_idx'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['regular_dispatch_at'], name='orders_regular_dispatch_idx'),
        ),
        migrations.AddIndex(
            model_name='dispatchoffer',
            index=models.Index(fields=['state', 'expires_at'], name='offers_state_expiry_idx'),
        ),
        migrations.AddConstraint(
            model_name='dispatchoffer',
            constraint=models.UniqueConstraint(fields=('order', 'driver'), name='uniq_offer_order_driver'),
        ),
    ]
