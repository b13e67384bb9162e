# conftest.py
"""
Pytest Configuration and Fixtures for the Maintenance Scheduler.
"""

import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.test')

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone


# =============================================================================
# Clock Fixtures
# =============================================================================

@pytest.fixture
def fixed_now():
    """Return a fixed, timezone-aware 'now'."""
    return timezone.now().replace(microsecond=0)


# =============================================================================
# Fleet Fixtures
# =============================================================================

@pytest.fixture
def aircraft(db):
    """Create an active aircraft."""
    from apps.scheduler.models import Aircraft

    return Aircraft.objects.create(
        registration_number='TC-UAV1',
        model='SKY-X4',
        serial_number='SN-0001',
        total_flight_hours=Decimal('43.0'),
        total_flight_cycles=120,
    )


@pytest.fixture
def battery(db, aircraft):
    """Create a battery installed on the aircraft."""
    from apps.scheduler.models import Component

    return Component.objects.create(
        aircraft_id=aircraft.id,
        component_type='BATTERY',
        location='MAIN',
        serial_number='BAT-0001',
        battery_cycles=285,
    )


# =============================================================================
# Program Fixtures
# =============================================================================

@pytest.fixture
def program(db):
    """Create the default program for the SKY-X4 model."""
    from apps.scheduler.models import MaintenanceProgram

    return MaintenanceProgram.objects.create(
        name='SKY-X4 Standard Program',
        aircraft_model='SKY-X4',
        is_default=True,
    )


@pytest.fixture
def flight_hours_trigger(db, program):
    """Create a 50 flight-hour inspection trigger."""
    from apps.scheduler.models import MaintenanceTrigger

    return MaintenanceTrigger.objects.create(
        program=program,
        type=MaintenanceTrigger.TriggerType.FLIGHT_HOURS,
        name='50h Inspection',
        interval_value=50,
        priority=MaintenanceTrigger.Priority.HIGH,
    )


@pytest.fixture
def schedule(db, aircraft, flight_hours_trigger):
    """Create an open schedule for the flight-hour trigger."""
    from apps.scheduler.models import MaintenanceSchedule

    return MaintenanceSchedule.objects.create(
        aircraft_id=aircraft.id,
        trigger_id=flight_hours_trigger.id,
        assigned_to=uuid.uuid4(),
    )


@pytest.fixture
def overdue_schedule(db, schedule):
    """Return the schedule moved to OVERDUE."""
    from apps.scheduler.models import MaintenanceSchedule

    schedule.status = MaintenanceSchedule.Status.OVERDUE
    schedule.due_date = timezone.now() - timedelta(days=1)
    schedule.save()
    return schedule
