# apps/scheduler/models/schedule.py
"""
Maintenance Schedule Model

Live per-aircraft instance of a maintenance trigger.
"""

import uuid
from datetime import datetime, timedelta
from typing import Dict

from django.db import models
from django.db.models import Count


class MaintenanceScheduleQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def open(self):
        return self.active().exclude(status__in=MaintenanceSchedule.TERMINAL_STATUSES)

    def open_for_aircraft(self, aircraft_id):
        """Active, non-terminal schedules of one aircraft."""
        return self.open().filter(aircraft_id=aircraft_id).order_by('due_date', 'created_at')

    def due_or_overdue(self):
        return self.active().filter(
            status__in=[MaintenanceSchedule.Status.DUE, MaintenanceSchedule.Status.OVERDUE]
        ).order_by('due_date', 'created_at')

    def due_without_work_order(self):
        return self.due_or_overdue().filter(work_order_id__isnull=True)

    def due_within_days(self, days: int, now: datetime):
        return self.active().filter(
            status=MaintenanceSchedule.Status.SCHEDULED,
            due_date__lte=now + timedelta(days=days),
        ).order_by('due_date')

    def count_by_status(self) -> Dict[str, int]:
        counts = {status: 0 for status in MaintenanceSchedule.Status.values}
        rows = self.active().values('status').annotate(count=Count('id'))
        for row in rows:
            counts[row['status']] = row['count']
        return counts


class MaintenanceSchedule(models.Model):
    """
    Schedule tying one aircraft to one maintenance trigger.

    Status moves forward only (SCHEDULED -> WARNING/DUE/OVERDUE ->
    IN_PROGRESS -> COMPLETED). COMPLETED and SKIPPED are terminal.
    """

    class Status(models.TextChoices):
        SCHEDULED = 'SCHEDULED', 'Scheduled'
        WARNING = 'WARNING', 'Warning'
        DUE = 'DUE', 'Due'
        OVERDUE = 'OVERDUE', 'Overdue'
        IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
        COMPLETED = 'COMPLETED', 'Completed'
        SKIPPED = 'SKIPPED', 'Skipped'

    TERMINAL_STATUSES = (Status.COMPLETED, Status.SKIPPED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    aircraft_id = models.UUIDField(db_index=True)
    trigger_id = models.UUIDField(db_index=True)
    component_id = models.UUIDField(blank=True, null=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SCHEDULED
    )

    # ==========================================================================
    # Due Point (cached from the last calculation)
    # ==========================================================================

    due_date = models.DateTimeField(blank=True, null=True)
    due_at_value = models.DecimalField(
        max_digits=12, decimal_places=1, blank=True, null=True
    )

    # ==========================================================================
    # Last Completion
    # ==========================================================================

    last_completed_at = models.DateTimeField(blank=True, null=True)
    last_completed_at_value = models.DecimalField(
        max_digits=12, decimal_places=1, blank=True, null=True
    )

    assigned_to = models.UUIDField(blank=True, null=True)
    work_order_id = models.UUIDField(blank=True, null=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MaintenanceScheduleQuerySet.as_manager()

    class Meta:
        db_table = 'maintenance_schedules'
        ordering = ['due_date', 'created_at']
        indexes = [
            models.Index(fields=['aircraft_id', 'is_active']),
            models.Index(fields=['status']),
            models.Index(fields=['due_date']),
        ]

    def __str__(self):
        return f"Schedule {self.id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES
