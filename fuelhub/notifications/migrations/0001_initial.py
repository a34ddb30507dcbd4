# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('order_created', 'Order Created'), ('order_updated', 'Order Updated'), ('order_cancelled', 'Order Cancelled'), ('dispatch_offer_received', 'Dispatch Offer Received'), ('driver_quote_received', 'Driver Quote Received'), ('customer_accepted_offer', 'Customer Accepted Offer'), ('customer_declined_offer', 'Customer Declined Offer'), ('driver_assigned', 'Driver Assigned'), ('driver_en_route', 'Driver En Route'), ('driver_picked_up', 'Fuel Picked Up'), ('delivery_complete', 'Delivery Complete'), ('depot_order_placed', 'Depot Order Placed'), ('depot_order_accepted', 'Depot Order Accepted'), ('depot_order_rejected', 'Depot Order Rejected'), ('depot_order_cancelled', 'Depot Order Cancelled'), ('payment_submitted', 'Payment Submitted'), ('payment_verified', 'Payment Verified'), ('payment_rejected', 'Payment Rejected'), ('fuel_released', 'Fuel Released'), ('depot_order_completed', 'Depot Order Completed'), ('stock_low', 'Stock Low'), ('new_message', 'New Message'), ('account_approved', 'Account Approved'), ('account_rejected', 'Account Rejected'), ('system_alert', 'System Alert')], max_length=50)),
                ('title', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('data', models.JSONField(blank=True, default=dict)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10)),
                ('read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['user', 'read'], name='notif_user_read_idx')],
            },
        ),
        migrations.CreateModel(
            name='RealtimeEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(max_length=50)),
                ('payload', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='realtime_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'realtime_events',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['user', 'id'], name='rt_event_user_id_idx')],
            },
        ),
    ]
