# apps/scheduler/services/schedule_state.py
"""
Schedule State Machine

Decides a schedule's next status from its current status and a fresh
calculation. Status only moves forward: a schedule never drops from
OVERDUE, or from DUE back to WARNING, on a later calculation. Clearing
it takes an explicit completion.
"""

from typing import Optional

from apps.scheduler.models import MaintenanceSchedule

from .trigger_calculator import CalculationStatus

ScheduleStatus = MaintenanceSchedule.Status

# Owned by a work order or closed; never changed by the scheduler
FROZEN_STATUSES = frozenset({
    ScheduleStatus.IN_PROGRESS,
    ScheduleStatus.COMPLETED,
    ScheduleStatus.SKIPPED,
})

# (current status, calculated status) -> new status, None = no change
TRANSITIONS = {
    (ScheduleStatus.SCHEDULED, CalculationStatus.OK): None,
    (ScheduleStatus.SCHEDULED, CalculationStatus.WARNING): None,
    (ScheduleStatus.SCHEDULED, CalculationStatus.DUE): ScheduleStatus.DUE,
    (ScheduleStatus.SCHEDULED, CalculationStatus.OVERDUE): ScheduleStatus.OVERDUE,

    (ScheduleStatus.WARNING, CalculationStatus.OK): None,
    (ScheduleStatus.WARNING, CalculationStatus.WARNING): None,
    (ScheduleStatus.WARNING, CalculationStatus.DUE): ScheduleStatus.DUE,
    (ScheduleStatus.WARNING, CalculationStatus.OVERDUE): ScheduleStatus.OVERDUE,

    (ScheduleStatus.DUE, CalculationStatus.OK): None,
    (ScheduleStatus.DUE, CalculationStatus.WARNING): None,
    (ScheduleStatus.DUE, CalculationStatus.DUE): None,
    (ScheduleStatus.DUE, CalculationStatus.OVERDUE): ScheduleStatus.OVERDUE,

    (ScheduleStatus.OVERDUE, CalculationStatus.OK): None,
    (ScheduleStatus.OVERDUE, CalculationStatus.WARNING): None,
    (ScheduleStatus.OVERDUE, CalculationStatus.DUE): None,
    (ScheduleStatus.OVERDUE, CalculationStatus.OVERDUE): None,
}
TRANSITIONS.update({
    (status, calc_status): None
    for status in FROZEN_STATUSES
    for calc_status in CalculationStatus.values
})


def next_status(current_status: str, calc_status: str) -> Optional[str]:
    """New schedule status, or None when the schedule stays as it is."""
    if current_status in FROZEN_STATUSES:
        return None
    return TRANSITIONS.get((current_status, calc_status))
