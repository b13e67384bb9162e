# apps/scheduler/apps.py
from django.apps import AppConfig


class SchedulerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.scheduler'
    label = 'scheduler'
    verbose_name = 'Maintenance Scheduling'
