# apps/scheduler/models/__init__.py
"""
Maintenance Scheduler Models

Fleet usage, maintenance programs, schedules and work orders.
"""

from .fleet import Aircraft, Component
from .program import MaintenanceProgram, MaintenanceTrigger
from .schedule import MaintenanceSchedule
from .work_order import WorkOrder

__all__ = [
    'Aircraft',
    'Component',
    'MaintenanceProgram',
    'MaintenanceTrigger',
    'MaintenanceSchedule',
    'WorkOrder',
]
