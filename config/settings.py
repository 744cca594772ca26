import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'insecure-dev-key')
DEBUG = os.environ.get('DJANGO_DEBUG', '0') == '1'
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost').split(',')

INSTALLED_APPS = [
    'stocksync.apps.StockSyncConfig',
]

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('DB_USER', ''),
        'PASSWORD': os.environ.get('DB_PASSWORD', ''),
        'HOST': os.environ.get('DB_HOST', ''),
        'PORT': os.environ.get('DB_PORT', ''),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
USE_TZ = True
TIME_ZONE = 'UTC'

# ERP API
ERP_API_BASE_URL = os.environ.get('ERP_API_BASE_URL', '')
ERP_API_KEY = os.environ.get('ERP_API_KEY', '')
ERP_API_TIMEOUT = int(os.environ.get('ERP_API_TIMEOUT', '30'))
ERP_API_RATE_LIMIT = int(os.environ.get('ERP_API_RATE_LIMIT', '5'))
ERP_API_MAX_ATTEMPTS = int(os.environ.get('ERP_API_MAX_ATTEMPTS', '3'))

# Stock sync
STOCK_SYNC_CHUNK_SIZE = int(os.environ.get('STOCK_SYNC_CHUNK_SIZE', '10'))
STOCK_SYNC_CHUNK_INTERVAL_MINUTES = int(os.environ.get('STOCK_SYNC_CHUNK_INTERVAL_MINUTES', '5'))
STOCK_SYNC_TIMEZONE = os.environ.get('STOCK_SYNC_TIMEZONE', '')
STOCK_SYNC_UTC_OFFSET = float(os.environ.get('STOCK_SYNC_UTC_OFFSET', '0'))

# Celery
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'loggers': {
        'stocksync': {
            'handlers': ['console'],
            'level': os.environ.get('STOCK_SYNC_LOG_LEVEL', 'INFO'),
            'propagate': True,
        },
    },
}
