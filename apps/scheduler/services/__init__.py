# apps/scheduler/services/__init__.py
"""
Maintenance Scheduler Business Logic

Trigger calculation, schedule state transitions and the scheduler service.
"""

from .trigger_calculator import (
    CalculationStatus,
    TriggerCalculationResult,
    TriggerCalculator,
    UsageContext,
)
from .schedule_state import next_status
from .scheduler_service import (
    MaintenanceAlert,
    MaintenanceSchedulerService,
    SchedulerRunResult,
)


# Custom Exceptions
class SchedulerServiceError(Exception):
    """Base exception for scheduler service errors."""
    pass


class AircraftNotFoundError(SchedulerServiceError):
    """Aircraft not found."""
    pass


class ScheduleNotFoundError(SchedulerServiceError):
    """Maintenance schedule not found."""
    pass


class TriggerNotFoundError(SchedulerServiceError):
    """Maintenance trigger not found."""
    pass


class ScheduleStateError(SchedulerServiceError):
    """Invalid maintenance schedule state transition."""
    pass


__all__ = [
    # Services
    'TriggerCalculator',
    'MaintenanceSchedulerService',
    'next_status',

    # Results
    'CalculationStatus',
    'TriggerCalculationResult',
    'UsageContext',
    'MaintenanceAlert',
    'SchedulerRunResult',

    # Exceptions
    'SchedulerServiceError',
    'AircraftNotFoundError',
    'ScheduleNotFoundError',
    'TriggerNotFoundError',
    'ScheduleStateError',
]
