# apps/scheduler/models/fleet.py
"""
Fleet Models

Usage snapshot of aircraft and installed components. The scheduler only
reads the cumulative counters kept here.
"""

import uuid
from decimal import Decimal

from django.db import models


class AircraftQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True).order_by('registration_number')


class Aircraft(models.Model):
    """
    Aircraft with its cumulative flight hours and cycles.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    registration_number = models.CharField(max_length=20, unique=True)
    model = models.CharField(max_length=100, db_index=True)
    serial_number = models.CharField(max_length=100, blank=True, null=True)

    # ==========================================================================
    # Counters
    # ==========================================================================

    total_flight_hours = models.DecimalField(
        max_digits=10, decimal_places=1, default=Decimal('0.0')
    )
    total_flight_cycles = models.IntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AircraftQuerySet.as_manager()

    class Meta:
        db_table = 'aircraft'
        ordering = ['registration_number']
        verbose_name = 'Aircraft'
        verbose_name_plural = 'Aircraft'

    def __str__(self):
        return f"{self.registration_number} ({self.model})"


class ComponentQuerySet(models.QuerySet):

    def installed_on(self, aircraft_id, component_type: str, location: str = None):
        """Components of a given type currently installed on an aircraft."""
        queryset = self.filter(
            aircraft_id=aircraft_id,
            component_type=component_type,
            is_active=True,
        )
        if location:
            queryset = queryset.filter(location=location)
        return queryset.order_by('serial_number')


class Component(models.Model):
    """
    Installable component (motor, battery, propeller...).

    aircraft_id points at the aircraft it is currently installed on.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    aircraft_id = models.UUIDField(db_index=True, blank=True, null=True)

    component_type = models.CharField(max_length=50, db_index=True)
    location = models.CharField(max_length=50, blank=True, null=True)
    serial_number = models.CharField(max_length=100)
    part_number = models.CharField(max_length=100, blank=True, null=True)

    battery_cycles = models.IntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ComponentQuerySet.as_manager()

    class Meta:
        db_table = 'components'
        ordering = ['component_type', 'serial_number']
        indexes = [
            models.Index(fields=['aircraft_id', 'component_type']),
        ]

    def __str__(self):
        return f"{self.component_type} {self.serial_number}"
