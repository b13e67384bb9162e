# apps/scheduler/tests/test_schedule_state.py
"""
Tests for schedule status transitions
"""

from django.test import SimpleTestCase

from apps.scheduler.models import MaintenanceSchedule
from apps.scheduler.services import CalculationStatus, next_status

Status = MaintenanceSchedule.Status
Calc = CalculationStatus


class NextStatusTest(SimpleTestCase):
    """Tests for next_status()."""

    def test_scheduled(self):
        """Test transitions from SCHEDULED."""
        self.assertIsNone(next_status(Status.SCHEDULED, Calc.OK))
        self.assertIsNone(next_status(Status.SCHEDULED, Calc.WARNING))
        self.assertEqual(next_status(Status.SCHEDULED, Calc.DUE), Status.DUE)
        self.assertEqual(next_status(Status.SCHEDULED, Calc.OVERDUE), Status.OVERDUE)

    def test_warning(self):
        """Test transitions from WARNING."""
        self.assertIsNone(next_status(Status.WARNING, Calc.OK))
        self.assertIsNone(next_status(Status.WARNING, Calc.WARNING))
        self.assertEqual(next_status(Status.WARNING, Calc.DUE), Status.DUE)
        self.assertEqual(next_status(Status.WARNING, Calc.OVERDUE), Status.OVERDUE)

    def test_due_never_downgrades(self):
        """A DUE schedule stays DUE when the calculation drops to WARNING."""
        self.assertIsNone(next_status(Status.DUE, Calc.WARNING))
        self.assertIsNone(next_status(Status.DUE, Calc.OK))
        self.assertIsNone(next_status(Status.DUE, Calc.DUE))
        self.assertEqual(next_status(Status.DUE, Calc.OVERDUE), Status.OVERDUE)

    def test_overdue_is_sticky(self):
        """Test overdue is sticky."""
        for calc in Calc.values:
            self.assertIsNone(next_status(Status.OVERDUE, calc), calc)

    def test_frozen_statuses(self):
        """Test frozen statuses."""
        for status in (Status.IN_PROGRESS, Status.COMPLETED, Status.SKIPPED):
            for calc in Calc.values:
                self.assertIsNone(next_status(status, calc), (status, calc))

    def test_plain_strings(self):
        """Statuses read back from the database are plain strings."""
        self.assertEqual(next_status('WARNING', 'OVERDUE'), 'OVERDUE')
        self.assertIsNone(next_status('IN_PROGRESS', 'OVERDUE'))

    def test_only_forward_moves(self):
        """Test only forward moves."""
        rank = {
            Status.SCHEDULED: 0,
            Status.WARNING: 1,
            Status.DUE: 2,
            Status.OVERDUE: 3,
        }
        for status in rank:
            for calc in Calc.values:
                new_status = next_status(status, calc)
                if new_status is not None:
                    self.assertGreater(rank[new_status], rank[status], (status, calc))
