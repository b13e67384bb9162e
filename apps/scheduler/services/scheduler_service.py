# apps/scheduler/services/scheduler_service.py
"""
Maintenance Scheduler Service

Periodic pass over the fleet: recalculates every open schedule, moves
statuses forward, raises alerts and work orders for due maintenance,
and seeds/rolls over schedules on onboarding and completion.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from apps.scheduler.conf import get_scheduler_setting
from apps.scheduler.models import (
    Aircraft,
    Component,
    MaintenanceProgram,
    MaintenanceTrigger,
    MaintenanceSchedule,
    WorkOrder,
)

from .schedule_state import next_status
from .trigger_calculator import (
    CalculationStatus,
    STATUS_SEVERITY,
    TriggerCalculationResult,
    TriggerCalculator,
    UsageContext,
    json_value,
)

logger = logging.getLogger(__name__)

TriggerType = MaintenanceTrigger.TriggerType
ScheduleStatus = MaintenanceSchedule.Status


@dataclass
class MaintenanceAlert:
    """Dashboard alert for a schedule whose calculation is not OK."""
    id: str
    type: str
    aircraft_id: uuid.UUID
    aircraft_registration: str
    trigger_id: uuid.UUID
    trigger_name: str
    trigger_type: str
    schedule_id: uuid.UUID
    message: str
    due_date: Optional[datetime]
    due_at_value: Any
    current_value: Any
    remaining_value: Any
    remaining_days: Optional[int]
    created_at: datetime
    calculation: TriggerCalculationResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': str(self.type),
            'aircraft_id': str(self.aircraft_id),
            'aircraft_registration': self.aircraft_registration,
            'trigger_id': str(self.trigger_id),
            'trigger_name': self.trigger_name,
            'trigger_type': str(self.trigger_type),
            'schedule_id': str(self.schedule_id),
            'message': self.message,
            'due_date': json_value(self.due_date),
            'due_at_value': json_value(self.due_at_value),
            'current_value': json_value(self.current_value),
            'remaining_value': json_value(self.remaining_value),
            'remaining_days': self.remaining_days,
            'created_at': json_value(self.created_at),
            'calculation': self.calculation.to_dict(),
        }


@dataclass
class SchedulerRunResult:
    timestamp: datetime
    schedules_processed: int = 0
    status_updates: Dict[str, int] = field(
        default_factory=lambda: {'to_due': 0, 'to_overdue': 0}
    )
    work_orders_created: int = 0
    alerts: List[MaintenanceAlert] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    stopped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': json_value(self.timestamp),
            'schedules_processed': self.schedules_processed,
            'status_updates': dict(self.status_updates),
            'work_orders_created': self.work_orders_created,
            'alerts': [alert.to_dict() for alert in self.alerts],
            'errors': list(self.errors),
            'stopped': self.stopped,
        }


class MaintenanceSchedulerService:
    """
    Service driving maintenance schedules.

    Handles:
    - Scheduler runs (status transitions and alerts)
    - Work order generation for due schedules
    - Live alert queries
    - Schedule initialization and completion
    """

    def __init__(
        self,
        calculator: TriggerCalculator = None,
        clock: Callable[[], datetime] = None
    ):
        self.clock = clock or timezone.now
        self.calculator = calculator or TriggerCalculator(clock=self.clock)

    # ==========================================================================
    # Scheduler Run
    # ==========================================================================

    def run(self, should_stop: Callable[[], bool] = None) -> SchedulerRunResult:
        """
        Recalculate all open schedules of the active fleet.

        should_stop is polled before each aircraft; a True return ends the
        pass early with the result flagged as stopped.
        """
        now = self.clock()
        result = SchedulerRunResult(timestamp=now)

        try:
            batch_size = get_scheduler_setting('AIRCRAFT_BATCH_SIZE')
            fleet = list(Aircraft.objects.active()[:batch_size])
        except Exception as e:
            error_msg = f"Scheduler run failed: {e}"
            logger.error(error_msg)
            result.errors.append(error_msg)
            return result

        for aircraft in fleet:
            if should_stop and should_stop():
                result.stopped = True
                logger.info(f"Scheduler run stopped before aircraft {aircraft.registration_number}")
                break

            try:
                self._process_aircraft(aircraft, now, result)
            except Exception as e:
                error_msg = f"Error processing aircraft {aircraft.registration_number}: {e}"
                logger.error(error_msg)
                result.errors.append(error_msg)

        if get_scheduler_setting('AUTO_CREATE_WORK_ORDERS') and not result.stopped:
            result.work_orders_created = len(self.create_work_orders_for_due())

        logger.info(
            f"Scheduler run completed: {result.schedules_processed} schedules processed, "
            f"{result.status_updates['to_due']} to DUE, "
            f"{result.status_updates['to_overdue']} to OVERDUE, "
            f"{result.work_orders_created} work orders created, {len(result.alerts)} alerts"
        )

        return result

    def _process_aircraft(
        self,
        aircraft: Aircraft,
        now: datetime,
        result: SchedulerRunResult
    ) -> None:
        schedules = list(MaintenanceSchedule.objects.open_for_aircraft(aircraft.id))
        result.schedules_processed += len(schedules)

        for schedule in schedules:
            evaluated = self._evaluate(aircraft, schedule, now)
            if evaluated is None:
                continue
            trigger, calculation = evaluated

            new_status = next_status(schedule.status, calculation.status)
            if new_status and new_status != schedule.status:
                schedule.status = new_status
                schedule.due_date = calculation.due_date
                schedule.due_at_value = calculation.due_at_value
                schedule.save(update_fields=['status', 'due_date', 'due_at_value', 'updated_at'])

                if new_status == ScheduleStatus.DUE:
                    result.status_updates['to_due'] += 1
                elif new_status == ScheduleStatus.OVERDUE:
                    result.status_updates['to_overdue'] += 1

            if calculation.status != CalculationStatus.OK:
                result.alerts.append(
                    self._create_alert(aircraft, trigger, schedule, calculation, now)
                )

    def _evaluate(
        self,
        aircraft: Aircraft,
        schedule: MaintenanceSchedule,
        now: datetime
    ) -> Optional[Tuple[MaintenanceTrigger, TriggerCalculationResult]]:
        """Calculate a schedule's trigger; None when the trigger is gone or inactive."""
        trigger = MaintenanceTrigger.objects.filter(id=schedule.trigger_id).first()
        if not trigger or not trigger.is_active:
            return None

        component = None
        if schedule.component_id:
            component = Component.objects.filter(id=schedule.component_id).first()

        context = UsageContext(
            aircraft=aircraft,
            component=component,
            last_completed_at=schedule.last_completed_at,
            last_completed_at_value=schedule.last_completed_at_value,
        )
        return trigger, self.calculator.calculate(trigger, context, now=now)

    def _create_alert(
        self,
        aircraft: Aircraft,
        trigger: MaintenanceTrigger,
        schedule: MaintenanceSchedule,
        calculation: TriggerCalculationResult,
        now: datetime
    ) -> MaintenanceAlert:
        if calculation.status == CalculationStatus.OVERDUE:
            message = f"Maintenance overdue: {trigger.name}"
        elif calculation.status == CalculationStatus.DUE:
            message = f"Maintenance due: {trigger.name}"
        else:
            remaining = calculation.remaining_days or calculation.remaining_value
            message = f"Maintenance due soon: {trigger.name} (remaining {remaining})"

        return MaintenanceAlert(
            id=f"{schedule.id}-{int(now.timestamp() * 1000)}",
            type=calculation.status,
            aircraft_id=aircraft.id,
            aircraft_registration=aircraft.registration_number,
            trigger_id=trigger.id,
            trigger_name=trigger.name,
            trigger_type=trigger.type,
            schedule_id=schedule.id,
            message=message,
            due_date=calculation.due_date,
            due_at_value=calculation.due_at_value,
            current_value=calculation.current_value,
            remaining_value=calculation.remaining_value,
            remaining_days=calculation.remaining_days,
            created_at=now,
            calculation=calculation,
        )

    # ==========================================================================
    # Work Orders
    # ==========================================================================

    def create_work_orders_for_due(self, auto_assign: bool = False) -> List[WorkOrder]:
        """
        Open a work order for every DUE/OVERDUE schedule that has none.

        The schedule moves to IN_PROGRESS. With auto_assign, the schedule's
        assignee is carried over to the work order.
        """
        created_orders = []

        for schedule in list(MaintenanceSchedule.objects.due_without_work_order()):
            try:
                trigger = MaintenanceTrigger.objects.filter(id=schedule.trigger_id).first()
                if not trigger:
                    continue

                aircraft = Aircraft.objects.filter(id=schedule.aircraft_id).first()
                if not aircraft:
                    continue

                work_order = self._create_work_order(schedule, trigger, aircraft, auto_assign)
                created_orders.append(work_order)
                logger.info(
                    f"Created work order {work_order.order_number} for schedule {schedule.id}"
                )
            except Exception as e:
                logger.error(f"Failed to create work order for schedule {schedule.id}: {e}")

        return created_orders

    @transaction.atomic
    def _create_work_order(
        self,
        schedule: MaintenanceSchedule,
        trigger: MaintenanceTrigger,
        aircraft: Aircraft,
        auto_assign: bool
    ) -> WorkOrder:
        now = self.clock()

        assigned_to = schedule.assigned_to if auto_assign else None

        work_order = WorkOrder.objects.create(
            order_number=WorkOrder.generate_order_number(now),
            title=f"{trigger.name} - {aircraft.registration_number}",
            description=trigger.description or f"{trigger.name} scheduled maintenance",
            work_order_type=WorkOrder.WorkOrderType.SCHEDULED,
            status=WorkOrder.Status.PENDING,
            priority=trigger.priority,
            aircraft_id=aircraft.id,
            schedule_id=schedule.id,
            assigned_to=assigned_to,
            assigned_at=now if assigned_to else None,
            aircraft_hours=aircraft.total_flight_hours,
            aircraft_cycles=aircraft.total_flight_cycles,
        )

        schedule.work_order_id = work_order.id
        schedule.status = ScheduleStatus.IN_PROGRESS
        schedule.save(update_fields=['work_order_id', 'status', 'updated_at'])

        return work_order

    # ==========================================================================
    # Alerts
    # ==========================================================================

    def get_alerts(
        self,
        aircraft_id: uuid.UUID = None,
        types: List[str] = None,
        limit: int = None
    ) -> List[MaintenanceAlert]:
        """
        Live alerts, most urgent first (OVERDUE, DUE, WARNING).

        Scoped to one aircraft or the active fleet; types restricts the
        alert types returned.
        """
        if limit is None:
            limit = get_scheduler_setting('DEFAULT_ALERT_LIMIT')
        now = self.clock()
        alerts = []

        if aircraft_id:
            fleet = list(Aircraft.objects.filter(id=aircraft_id))
        else:
            batch_size = get_scheduler_setting('ALERT_AIRCRAFT_BATCH_SIZE')
            fleet = list(Aircraft.objects.active()[:batch_size])

        for aircraft in fleet:
            try:
                for schedule in MaintenanceSchedule.objects.open_for_aircraft(aircraft.id):
                    evaluated = self._evaluate(aircraft, schedule, now)
                    if evaluated is None:
                        continue
                    trigger, calculation = evaluated

                    if calculation.status == CalculationStatus.OK:
                        continue
                    if types is not None and calculation.status not in types:
                        continue

                    alerts.append(
                        self._create_alert(aircraft, trigger, schedule, calculation, now)
                    )
                    if len(alerts) >= limit:
                        break
            except Exception as e:
                logger.error(
                    f"Error collecting alerts for aircraft {aircraft.registration_number}: {e}"
                )

            if len(alerts) >= limit:
                break

        # sort() is stable: discovery order is kept within a type
        alerts.sort(key=lambda alert: STATUS_SEVERITY[alert.type])

        return alerts[:limit]

    # ==========================================================================
    # Schedule Lifecycle
    # ==========================================================================

    def initialize_aircraft_schedules(self, aircraft_id: uuid.UUID) -> List[MaintenanceSchedule]:
        """
        Create schedules for an aircraft from its model's default program.

        Triggers that already have an open schedule on the aircraft are
        skipped. Returns the schedules created.
        """
        aircraft = Aircraft.objects.filter(id=aircraft_id).first()
        if not aircraft:
            from . import AircraftNotFoundError
            raise AircraftNotFoundError(f"Aircraft {aircraft_id} not found")

        program = MaintenanceProgram.objects.default_for_model(aircraft.model)
        if not program:
            logger.warning(f"No default maintenance program found for model {aircraft.model}")
            return []

        triggers = list(MaintenanceTrigger.objects.for_program(program.id))
        if not triggers:
            return []

        scheduled_trigger_ids = set(
            MaintenanceSchedule.objects.open_for_aircraft(aircraft.id)
            .values_list('trigger_id', flat=True)
        )

        now = self.clock()
        schedules = []

        for trigger in triggers:
            if trigger.id in scheduled_trigger_ids:
                continue

            component = self._resolve_component(aircraft, trigger)
            calculation = self.calculator.calculate(
                trigger,
                UsageContext(aircraft=aircraft, component=component),
                now=now,
            )

            schedules.append(MaintenanceSchedule(
                aircraft_id=aircraft.id,
                trigger_id=trigger.id,
                component_id=component.id if component else None,
                status=self._initial_status(calculation),
                due_date=calculation.due_date,
                due_at_value=calculation.due_at_value,
            ))

        schedules = MaintenanceSchedule.objects.bulk_create(schedules)

        logger.info(
            f"Initialized {len(schedules)} maintenance schedules "
            f"for aircraft {aircraft.registration_number}"
        )

        return schedules

    @transaction.atomic
    def complete_schedule(
        self,
        schedule_id: uuid.UUID,
        completed_at_value: Decimal = None
    ) -> MaintenanceSchedule:
        """
        Mark a schedule completed and open the next one for its trigger.

        Without completed_at_value, the aircraft's (or component's) current
        counter for the trigger type is recorded. Returns the completed
        schedule.
        """
        schedule = MaintenanceSchedule.objects.filter(id=schedule_id).first()
        if not schedule:
            from . import ScheduleNotFoundError
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")

        if schedule.is_terminal:
            from . import ScheduleStateError
            raise ScheduleStateError(f"Cannot complete schedule in {schedule.status} status")

        aircraft = Aircraft.objects.filter(id=schedule.aircraft_id).first()
        if not aircraft:
            from . import AircraftNotFoundError
            raise AircraftNotFoundError(f"Aircraft {schedule.aircraft_id} not found")

        trigger = MaintenanceTrigger.objects.filter(id=schedule.trigger_id).first()
        component = None
        if schedule.component_id:
            component = Component.objects.filter(id=schedule.component_id).first()

        now = self.clock()

        if completed_at_value is None and trigger:
            completed_at_value = self._current_usage(trigger, aircraft, component)

        schedule.status = ScheduleStatus.COMPLETED
        schedule.last_completed_at = now
        schedule.last_completed_at_value = completed_at_value
        schedule.save(update_fields=[
            'status', 'last_completed_at', 'last_completed_at_value', 'updated_at'
        ])

        if trigger:
            calculation = self.calculator.calculate(
                trigger,
                UsageContext(
                    aircraft=aircraft,
                    component=component,
                    last_completed_at=now,
                    last_completed_at_value=completed_at_value,
                ),
                now=now,
            )

            MaintenanceSchedule.objects.create(
                aircraft_id=schedule.aircraft_id,
                trigger_id=schedule.trigger_id,
                component_id=schedule.component_id,
                assigned_to=schedule.assigned_to,
                status=self._initial_status(calculation),
                due_date=calculation.due_date,
                due_at_value=calculation.due_at_value,
                last_completed_at=now,
                last_completed_at_value=completed_at_value,
            )

        logger.info(
            f"Completed schedule {schedule.id} for aircraft {aircraft.registration_number}"
        )

        return schedule

    # ==========================================================================
    # Preview
    # ==========================================================================

    def preview_calculation(
        self,
        trigger_id: uuid.UUID,
        total_flight_hours: Decimal,
        total_flight_cycles: int,
        battery_cycles: int = None,
        last_completed_at: datetime = None,
        last_completed_at_value: Decimal = None
    ) -> TriggerCalculationResult:
        """What-if calculation of a trigger against the given counters. Writes nothing."""
        trigger = MaintenanceTrigger.objects.filter(id=trigger_id).first()
        if not trigger:
            from . import TriggerNotFoundError
            raise TriggerNotFoundError(f"Trigger {trigger_id} not found")

        aircraft = Aircraft(
            total_flight_hours=total_flight_hours,
            total_flight_cycles=total_flight_cycles,
        )
        component = None
        if battery_cycles is not None:
            component = Component(battery_cycles=battery_cycles)

        return self.calculator.calculate(
            trigger,
            UsageContext(
                aircraft=aircraft,
                component=component,
                last_completed_at=last_completed_at,
                last_completed_at_value=last_completed_at_value,
            ),
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _resolve_component(
        self,
        aircraft: Aircraft,
        trigger: MaintenanceTrigger
    ) -> Optional[Component]:
        if not trigger.is_component_scoped:
            return None
        return Component.objects.installed_on(
            aircraft.id,
            trigger.applicable_component_type,
            trigger.applicable_component_location,
        ).first()

    @staticmethod
    def _current_usage(trigger, aircraft, component) -> Optional[Decimal]:
        if trigger.type == TriggerType.FLIGHT_HOURS:
            return aircraft.total_flight_hours
        if trigger.type == TriggerType.FLIGHT_CYCLES:
            return aircraft.total_flight_cycles
        if trigger.type == TriggerType.BATTERY_CYCLES and component:
            return component.battery_cycles
        # Calendar triggers are tracked by date only
        return None

    @staticmethod
    def _initial_status(calculation: TriggerCalculationResult) -> str:
        if calculation.status == CalculationStatus.OK:
            return ScheduleStatus.SCHEDULED
        return ScheduleStatus(str(calculation.status))
