# apps/scheduler/models/program.py
"""
Maintenance Program Models

Maintenance programs per aircraft model and the triggers that define
each recurring obligation.
"""

import uuid

from django.db import models


class MaintenanceProgramQuerySet(models.QuerySet):

    def default_for_model(self, aircraft_model: str):
        """Active default program for an aircraft model, or None."""
        return self.filter(
            aircraft_model=aircraft_model,
            is_default=True,
            is_active=True,
        ).order_by('created_at').first()


class MaintenanceProgram(models.Model):
    """
    Maintenance requirements for a specific aircraft model.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    aircraft_model = models.CharField(max_length=100, db_index=True)

    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MaintenanceProgramQuerySet.as_manager()

    class Meta:
        db_table = 'maintenance_programs'
        ordering = ['aircraft_model', 'name']

    def __str__(self):
        return f"{self.name} ({self.aircraft_model})"


class MaintenanceTriggerQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def for_program(self, program_id):
        return self.active().filter(program_id=program_id).order_by('created_at', 'name')


class MaintenanceTrigger(models.Model):
    """
    Recurring maintenance obligation and how its due point is measured.

    interval_value is read according to type: days for CALENDAR_DAYS,
    hours for FLIGHT_HOURS, cycles for the cycle types and the day of the
    year (1-365) for CALENDAR_DATE.
    """

    class TriggerType(models.TextChoices):
        CALENDAR_DAYS = 'CALENDAR_DAYS', 'Every N Days'
        FLIGHT_HOURS = 'FLIGHT_HOURS', 'Every N Flight Hours'
        FLIGHT_CYCLES = 'FLIGHT_CYCLES', 'Every N Flight Cycles'
        BATTERY_CYCLES = 'BATTERY_CYCLES', 'Every N Battery Cycles'
        CALENDAR_DATE = 'CALENDAR_DATE', 'Fixed Day of Year'

    class Priority(models.TextChoices):
        LOW = 'LOW', 'Low'
        MEDIUM = 'MEDIUM', 'Medium'
        HIGH = 'HIGH', 'High'
        CRITICAL = 'CRITICAL', 'Critical'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(
        MaintenanceProgram,
        on_delete=models.CASCADE,
        related_name='triggers'
    )

    type = models.CharField(max_length=20, choices=TriggerType.choices)

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)

    interval_value = models.IntegerField()

    # ==========================================================================
    # Applicability (NULL = whole aircraft)
    # ==========================================================================

    applicable_component_type = models.CharField(max_length=50, blank=True, null=True)
    applicable_component_location = models.CharField(max_length=50, blank=True, null=True)

    priority = models.CharField(
        max_length=20,
        choices=Priority.choices,
        default=Priority.MEDIUM
    )
    required_role = models.CharField(max_length=50, default='INSPECTOR')
    is_rii = models.BooleanField(
        default=False,
        help_text='Required Inspection Item - needs independent inspector sign-off'
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MaintenanceTriggerQuerySet.as_manager()

    class Meta:
        db_table = 'maintenance_triggers'
        ordering = ['program', 'created_at']
        indexes = [
            models.Index(fields=['program', 'is_active']),
        ]

    def __str__(self):
        return f"{self.name} [{self.type} {self.interval_value}]"

    @property
    def is_component_scoped(self) -> bool:
        return bool(self.applicable_component_type)
