import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('stocksync')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()


@app.on_after_configure.connect
def register_daily_stock_sync(sender, **kwargs):
    from stocksync.daily import configured_timezone, daily_beat_entry

    sender.conf.timezone = configured_timezone().key
    sender.conf.beat_schedule = {
        **(sender.conf.beat_schedule or {}),
        'daily-stock-sync': daily_beat_entry(),
    }
