# apps/scheduler/models/work_order.py
"""
Work Order Model

Work orders raised for due maintenance schedules. Execution of the work
belongs to the maintenance-execution side; this model only carries what
the scheduler creates.
"""

import uuid
from datetime import datetime
from typing import Optional

from django.db import models
from django.db.models.functions import Length
from django.utils import timezone


class WorkOrder(models.Model):
    """
    Maintenance work order.
    """

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        OPEN = 'OPEN', 'Open'
        IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'

    class Priority(models.TextChoices):
        LOW = 'LOW', 'Low'
        MEDIUM = 'MEDIUM', 'Medium'
        HIGH = 'HIGH', 'High'
        CRITICAL = 'CRITICAL', 'Critical'

    class WorkOrderType(models.TextChoices):
        SCHEDULED = 'SCHEDULED', 'Scheduled Maintenance'
        INSPECTION = 'INSPECTION', 'Inspection'
        REPAIR = 'REPAIR', 'Repair'
        MODIFICATION = 'MODIFICATION', 'Modification'
        EMERGENCY = 'EMERGENCY', 'Emergency Repair'

    ORDER_NUMBER_PREFIX = 'WO'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    aircraft_id = models.UUIDField(db_index=True)
    schedule_id = models.UUIDField(blank=True, null=True, db_index=True)

    # ==========================================================================
    # Identification
    # ==========================================================================

    order_number = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)

    work_order_type = models.CharField(
        max_length=20,
        choices=WorkOrderType.choices
    )
    priority = models.CharField(
        max_length=20,
        choices=Priority.choices,
        default=Priority.MEDIUM
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )

    # ==========================================================================
    # Assignment
    # ==========================================================================

    assigned_to = models.UUIDField(blank=True, null=True)
    assigned_at = models.DateTimeField(blank=True, null=True)

    # ==========================================================================
    # Aircraft counters at creation
    # ==========================================================================

    aircraft_hours = models.DecimalField(
        max_digits=10, decimal_places=1, blank=True, null=True
    )
    aircraft_cycles = models.IntegerField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'work_orders'
        ordering = ['-created_at']
        verbose_name = 'Work Order'
        verbose_name_plural = 'Work Orders'
        indexes = [
            models.Index(fields=['aircraft_id']),
            models.Index(fields=['status']),
            models.Index(fields=['order_number']),
        ]

    def __str__(self):
        return f"{self.order_number}: {self.title}"

    @classmethod
    def generate_order_number(cls, now: Optional[datetime] = None) -> str:
        """Next order number for the year, e.g. WO-2026-0042."""
        year = (now or timezone.now()).year
        prefix = f"{cls.ORDER_NUMBER_PREFIX}-{year}-"

        latest = (
            cls.objects.filter(order_number__startswith=prefix)
            .order_by(Length('order_number').desc(), '-order_number')
            .values_list('order_number', flat=True)
            .first()
        )

        next_num = 1
        if latest:
            try:
                next_num = int(latest[len(prefix):]) + 1
            except ValueError:
                next_num = cls.objects.filter(order_number__startswith=prefix).count() + 1

        return f"{prefix}{next_num:04d}"

    @property
    def is_open(self) -> bool:
        return self.status in [
            self.Status.PENDING,
            self.Status.OPEN,
            self.Status.IN_PROGRESS,
        ]
