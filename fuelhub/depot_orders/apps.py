from django.apps import AppConfig


class DepotOrdersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fuelhub.depot_orders'
