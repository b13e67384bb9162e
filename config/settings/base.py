# config/settings/base.py
"""Base settings for Maintenance Scheduler Service."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'apps.scheduler',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'maintenance_scheduler_db'),
        'USER': os.environ.get('DB_USER', 'maintenance_scheduler_user'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'maintenance_scheduler_password'),
        'HOST': os.environ.get('DB_HOST', 'pgbouncer'),
        'PORT': os.environ.get('DB_PORT', '6432'),
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

SERVICE_NAME = 'maintenance-scheduler'

# Scheduler
MAINTENANCE_SCHEDULER = {
    'AIRCRAFT_BATCH_SIZE': int(os.environ.get('SCHEDULER_AIRCRAFT_BATCH_SIZE', 1000)),
    'ALERT_AIRCRAFT_BATCH_SIZE': int(os.environ.get('SCHEDULER_ALERT_AIRCRAFT_BATCH_SIZE', 100)),
    'DEFAULT_ALERT_LIMIT': int(os.environ.get('SCHEDULER_DEFAULT_ALERT_LIMIT', 50)),
    'AUTO_CREATE_WORK_ORDERS': os.environ.get('SCHEDULER_AUTO_CREATE_WORK_ORDERS', 'False').lower() == 'true',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'json': {'()': 'pythonjsonlogger.jsonlogger.JsonFormatter'},
        'standard': {'format': '%(asctime)s %(levelname)s %(name)s: %(message)s'},
    },
    'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'json'}},
    'root': {'handlers': ['console'], 'level': 'INFO'},
}
