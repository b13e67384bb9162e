# apps/scheduler/conf.py
"""
Scheduler settings with defaults, read from settings.MAINTENANCE_SCHEDULER.
"""

from typing import Any

from django.conf import settings

DEFAULTS = {
    'AIRCRAFT_BATCH_SIZE': 1000,
    'ALERT_AIRCRAFT_BATCH_SIZE': 100,
    'DEFAULT_ALERT_LIMIT': 50,
    'AUTO_CREATE_WORK_ORDERS': False,
}


def get_scheduler_setting(key: str) -> Any:
    scheduler_settings = getattr(settings, 'MAINTENANCE_SCHEDULER', {})
    return scheduler_settings.get(key, DEFAULTS[key])
