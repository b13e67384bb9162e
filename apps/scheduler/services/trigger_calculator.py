# apps/scheduler/services/trigger_calculator.py
"""
Trigger Calculator

Works out, for one maintenance trigger and one usage snapshot, where the
obligation currently stands: due point, remaining amount, percentage of
the interval used and a status of OK / WARNING / DUE / OVERDUE.

Pure: no database access and no reads of the wall clock other than the
injected clock, so the same inputs always give the same result.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.db import models
from django.utils import timezone

from apps.scheduler.models import MaintenanceTrigger

TriggerType = MaintenanceTrigger.TriggerType

ONE_DAY = timedelta(days=1)
DAYS_PER_YEAR = 365


class CalculationStatus(models.TextChoices):
    OK = 'OK', 'OK'
    WARNING = 'WARNING', 'Warning'
    DUE = 'DUE', 'Due'
    OVERDUE = 'OVERDUE', 'Overdue'


# Most urgent first
STATUS_SEVERITY = {
    CalculationStatus.OVERDUE: 0,
    CalculationStatus.DUE: 1,
    CalculationStatus.WARNING: 2,
    CalculationStatus.OK: 3,
}


@dataclass(frozen=True)
class UsageRule:
    """DUE window and daily usage forecast for a usage-counted trigger."""
    due_window: int
    units_per_day: int


def json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass
class UsageContext:
    """
    Inputs for one calculation.

    aircraft needs total_flight_hours and total_flight_cycles; component
    needs battery_cycles and is only read for BATTERY_CYCLES triggers.
    """
    aircraft: Any
    component: Any = None
    last_completed_at: Optional[datetime] = None
    last_completed_at_value: Optional[Decimal] = None


@dataclass
class TriggerCalculationResult:
    trigger_id: Any
    trigger_name: str
    trigger_type: str
    due_date: Optional[datetime]
    due_at_value: Optional[Decimal]
    current_value: Any
    remaining_value: Any
    remaining_days: Optional[int]
    percentage_used: float
    status: str = CalculationStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trigger_id': str(self.trigger_id) if self.trigger_id else None,
            'trigger_name': self.trigger_name,
            'trigger_type': self.trigger_type,
            'due_date': json_value(self.due_date),
            'due_at_value': json_value(self.due_at_value),
            'current_value': json_value(self.current_value),
            'remaining_value': json_value(self.remaining_value),
            'remaining_days': self.remaining_days,
            'percentage_used': self.percentage_used,
            'status': str(self.status),
        }


class TriggerCalculator:
    """
    Calculates due dates/values for maintenance triggers.

    Per type:
    - CALENDAR_DAYS: interval in days from the last completion (or the
      trigger's creation when never completed)
    - FLIGHT_HOURS / FLIGHT_CYCLES / BATTERY_CYCLES: interval in usage
      units from the last completion value (or zero)
    - CALENDAR_DATE: fixed day of the year, rolled to next year once past
    """

    # Fraction of the interval after which a WARNING is raised
    WARNING_THRESHOLD = 0.8

    # CALENDAR_DATE triggers warn this many days ahead
    CALENDAR_DATE_WARNING_DAYS = 30

    USAGE_RULES = {
        TriggerType.FLIGHT_HOURS: UsageRule(due_window=5, units_per_day=2),
        TriggerType.FLIGHT_CYCLES: UsageRule(due_window=10, units_per_day=3),
        TriggerType.BATTERY_CYCLES: UsageRule(due_window=20, units_per_day=1),
    }

    def __init__(self, clock: Callable[[], datetime] = None):
        self.clock = clock or timezone.now

    # ==========================================================================
    # Calculation
    # ==========================================================================

    def calculate(
        self,
        trigger,
        context: UsageContext,
        now: datetime = None
    ) -> TriggerCalculationResult:
        """Calculate the current status of a single trigger."""
        now = now or self.clock()

        interval = trigger.interval_value
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            return self._default_result(trigger)

        if trigger.type == TriggerType.CALENDAR_DAYS:
            return self._calculate_calendar_days(trigger, context, now)

        if trigger.type == TriggerType.FLIGHT_HOURS:
            current = context.aircraft.total_flight_hours or 0
            return self._calculate_usage(trigger, current, context)

        if trigger.type == TriggerType.FLIGHT_CYCLES:
            current = context.aircraft.total_flight_cycles or 0
            return self._calculate_usage(trigger, current, context)

        if trigger.type == TriggerType.BATTERY_CYCLES:
            current = (context.component.battery_cycles or 0) if context.component else 0
            return self._calculate_usage(trigger, current, context)

        if trigger.type == TriggerType.CALENDAR_DATE:
            return self._calculate_calendar_date(trigger, now)

        return self._default_result(trigger)

    def calculate_all(
        self,
        triggers: List,
        context: UsageContext,
        last_completed_map: Dict[Any, Tuple[Optional[datetime], Optional[Decimal]]] = None,
        now: datetime = None
    ) -> List[TriggerCalculationResult]:
        """
        Calculate several triggers against one aircraft.

        last_completed_map maps trigger id -> (completed_at, completed_at_value).
        """
        now = now or self.clock()
        last_completed_map = last_completed_map or {}
        results = []

        for trigger in triggers:
            completed_at, completed_at_value = last_completed_map.get(trigger.id, (None, None))
            trigger_context = replace(
                context,
                last_completed_at=completed_at,
                last_completed_at_value=completed_at_value,
            )
            results.append(self.calculate(trigger, trigger_context, now=now))

        return results

    # ==========================================================================
    # Aggregation
    # ==========================================================================

    @staticmethod
    def overall_status(results: List[TriggerCalculationResult]) -> str:
        """Worst status across results, OK when empty."""
        if not results:
            return CalculationStatus.OK
        return min((r.status for r in results), key=lambda s: STATUS_SEVERITY[s])

    @staticmethod
    def most_urgent(results: List[TriggerCalculationResult]) -> Optional[TriggerCalculationResult]:
        """Result with the fewest remaining days; unknown counts as infinite."""
        if not results:
            return None

        def days(result):
            return result.remaining_days if result.remaining_days is not None else math.inf

        most = results[0]
        for result in results[1:]:
            if days(result) < days(most):
                most = result
        return most

    # ==========================================================================
    # Per-type Calculations
    # ==========================================================================

    def _calculate_calendar_days(
        self,
        trigger,
        context: UsageContext,
        now: datetime
    ) -> TriggerCalculationResult:
        interval = timedelta(days=trigger.interval_value)

        # Never completed: counts from the trigger's creation
        base_date = context.last_completed_at or trigger.created_at or now
        due_date = base_date + interval

        remaining = due_date - now
        remaining_days = math.ceil(remaining.total_seconds() / ONE_DAY.total_seconds())
        elapsed = now - base_date
        percentage_used = self._percentage(
            elapsed.total_seconds() * 100 / interval.total_seconds()
        )

        # remaining <= 0 and remaining_days <= 0 coincide, so OVERDUE wins
        # at the boundary and DUE is not reported for this type
        if remaining <= timedelta(0):
            status = CalculationStatus.OVERDUE
        elif remaining_days <= 0:
            status = CalculationStatus.DUE
        elif percentage_used >= self.WARNING_THRESHOLD * 100:
            status = CalculationStatus.WARNING
        else:
            status = CalculationStatus.OK

        return TriggerCalculationResult(
            trigger_id=trigger.id,
            trigger_name=trigger.name,
            trigger_type=trigger.type,
            due_date=due_date,
            due_at_value=None,
            current_value=elapsed // ONE_DAY,
            remaining_value=max(0, remaining_days),
            remaining_days=remaining_days,
            percentage_used=percentage_used,
            status=status,
        )

    def _calculate_usage(
        self,
        trigger,
        current,
        context: UsageContext
    ) -> TriggerCalculationResult:
        rule = self.USAGE_RULES[trigger.type]

        base_value = context.last_completed_at_value or 0
        if isinstance(current, float) or isinstance(base_value, float):
            current, base_value = float(current), float(base_value)
        due_at_value = base_value + trigger.interval_value

        remaining = due_at_value - current
        elapsed = current - base_value
        percentage_used = self._percentage(float(elapsed) * 100 / trigger.interval_value)

        # Coarse forecast from average fleet usage
        remaining_days = math.ceil(remaining / rule.units_per_day) if remaining > 0 else 0

        if remaining <= 0:
            status = CalculationStatus.OVERDUE
        elif remaining <= rule.due_window:
            status = CalculationStatus.DUE
        elif percentage_used >= self.WARNING_THRESHOLD * 100:
            status = CalculationStatus.WARNING
        else:
            status = CalculationStatus.OK

        return TriggerCalculationResult(
            trigger_id=trigger.id,
            trigger_name=trigger.name,
            trigger_type=trigger.type,
            due_date=None,
            due_at_value=due_at_value,
            current_value=current,
            remaining_value=max(0, remaining),
            remaining_days=remaining_days,
            percentage_used=percentage_used,
            status=status,
        )

    def _calculate_calendar_date(self, trigger, now: datetime) -> TriggerCalculationResult:
        day_of_year = trigger.interval_value
        due_date = self._day_of_year(now.year, day_of_year, now)

        # Already passed this year: next occurrence. Hence no OVERDUE here.
        if due_date < now:
            due_date = self._day_of_year(now.year + 1, day_of_year, now)

        remaining = due_date - now
        remaining_days = math.ceil(remaining.total_seconds() / ONE_DAY.total_seconds())
        percentage_used = self._percentage(100 - remaining_days * 100 / DAYS_PER_YEAR)

        if remaining_days <= 0:
            status = CalculationStatus.DUE
        elif remaining_days <= self.CALENDAR_DATE_WARNING_DAYS:
            status = CalculationStatus.WARNING
        else:
            status = CalculationStatus.OK

        return TriggerCalculationResult(
            trigger_id=trigger.id,
            trigger_name=trigger.name,
            trigger_type=trigger.type,
            due_date=due_date,
            due_at_value=None,
            current_value=DAYS_PER_YEAR - remaining_days,
            remaining_value=remaining_days,
            remaining_days=remaining_days,
            percentage_used=percentage_used,
            status=status,
        )

    def _default_result(self, trigger) -> TriggerCalculationResult:
        """Neutral result for unknown types or malformed intervals."""
        return TriggerCalculationResult(
            trigger_id=getattr(trigger, 'id', None),
            trigger_name=getattr(trigger, 'name', ''),
            trigger_type=getattr(trigger, 'type', ''),
            due_date=None,
            due_at_value=None,
            current_value=0,
            remaining_value=0,
            remaining_days=None,
            percentage_used=0.0,
            status=CalculationStatus.OK,
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _percentage(value: float) -> float:
        return max(0.0, min(100.0, value))

    @staticmethod
    def _day_of_year(year: int, day_of_year: int, now: datetime) -> datetime:
        """Midnight of the given day of the year in now's timezone."""
        start = datetime(year, 1, 1, tzinfo=now.tzinfo)
        return start + timedelta(days=day_of_year - 1)
