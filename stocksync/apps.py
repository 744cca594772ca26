from django.apps import AppConfig


class StockSyncConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'stocksync'
    verbose_name = 'ERP stock sync'
