"""
Tests for scheduling/overlap.py

Tests booking conflict detection and slot marking.
"""

import unittest
from datetime import date

from ff_roster.ff_roster.scheduling.intervals import Interval
from ff_roster.ff_roster.scheduling.overlap import (
	BOOKED_REASON,
	check_overlap,
	find_conflicts,
	has_conflict,
	mark_availability,
)
from ff_roster.ff_roster.scheduling.records import BookingStatus
from ff_roster.ff_roster.scheduling.slots import generate_slots, staff_slots

from .fakes import make_booking, make_staff

MONDAY = date(2026, 1, 12)


class TestOverlap(unittest.TestCase):
	"""Tests for overlap detection against existing bookings."""

	def setUp(self):
		self.bookings = [
			make_booking("EB-1", "RSM-0001", MONDAY, "10:00", "10:30"),
			make_booking("EB-2", "RSM-0001", MONDAY, "11:00", "11:30", status=BookingStatus.CANCELLED),
			make_booking("EB-3", "RSM-0001", MONDAY, "14:00", "15:00"),
		]

	def test_overlap_with_active_booking(self):
		result = check_overlap(Interval.parse("10:15", "10:45"), self.bookings)
		self.assertTrue(result["has_overlap"])
		self.assertEqual(result["overlapping_bookings"], ["EB-1"])

	def test_touching_boundary_is_not_a_conflict(self):
		self.assertFalse(has_conflict(Interval.parse("10:30", "11:00"), self.bookings))
		self.assertFalse(has_conflict(Interval.parse("09:30", "10:00"), self.bookings))

	def test_cancelled_bookings_do_not_block(self):
		self.assertFalse(has_conflict(Interval.parse("11:00", "11:30"), self.bookings))

	def test_find_all_conflicts(self):
		conflicts = find_conflicts(Interval.parse("10:00", "15:00"), self.bookings)
		self.assertEqual([b.id for b in conflicts], ["EB-1", "EB-3"])

	def test_exclude_booking(self):
		"""A booking being edited does not conflict with itself."""
		result = check_overlap(Interval.parse("10:00", "10:30"), self.bookings, exclude_booking="EB-1")
		self.assertFalse(result["has_overlap"])
		self.assertEqual(result["overlapping_bookings"], [])

	def test_mark_availability(self):
		slots = staff_slots(
			make_staff("RSM-0001"), MONDAY, generate_slots(Interval.parse("09:30", "11:30"), 30)
		)
		marked = mark_availability(slots, self.bookings)

		availability = [(str(s.interval), s.is_available, s.reason) for s in marked]
		self.assertEqual(availability, [
			("09:30-10:00", True, None),
			("10:00-10:30", False, BOOKED_REASON),
			("10:30-11:00", True, None),
			("11:00-11:30", True, None),
		])

	def test_booking_spanning_several_slots(self):
		slots = staff_slots(
			make_staff("RSM-0001"), MONDAY, generate_slots(Interval.parse("13:30", "15:30"), 30)
		)
		marked = mark_availability(slots, self.bookings, booked_reason="Booked")
		self.assertEqual([s.is_available for s in marked], [True, False, False, True])
		self.assertEqual(marked[1].reason, "Booked")


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
