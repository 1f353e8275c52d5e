"""
Tests for scheduling/slots.py

Tests partitioning of a working window into fixed-duration slots.
"""

import unittest
from datetime import date

from ff_roster.ff_roster.scheduling.intervals import Interval
from ff_roster.ff_roster.scheduling.slots import generate_slots, staff_slots

from .fakes import make_staff


class TestGenerateSlots(unittest.TestCase):
	"""Tests for generate_slots."""

	def test_full_day_of_thirty_minute_slots(self):
		"""09:00-17:00 with 30 minutes yields 16 consecutive slots."""
		slots = generate_slots(Interval.parse("09:00", "17:00"), 30)

		self.assertEqual(len(slots), 16)
		self.assertEqual(slots[0], Interval.parse("09:00", "09:30"))
		self.assertEqual(slots[-1], Interval.parse("16:30", "17:00"))
		for previous, current in zip(slots, slots[1:]):
			self.assertEqual(previous.end, current.start)

	def test_window_ending_at_midnight(self):
		slots = generate_slots(Interval.parse("22:00", "24:00"), 60)
		self.assertEqual([str(s) for s in slots], ["22:00-23:00", "23:00-24:00"])

	def test_trailing_remainder_is_dropped(self):
		"""09:00-10:10 with 30 minutes yields 2 slots; the last 10 minutes are not offered."""
		slots = generate_slots(Interval.parse("09:00", "10:10"), 30)
		self.assertEqual(slots, [Interval.parse("09:00", "09:30"), Interval.parse("09:30", "10:00")])

	def test_window_shorter_than_duration(self):
		self.assertEqual(generate_slots(Interval.parse("09:00", "09:20"), 30), [])

	def test_slots_align_to_window_start(self):
		slots = generate_slots(Interval.parse("09:10", "10:10"), 20)
		self.assertEqual([s.start for s in slots], [550, 570, 590])

	def test_invalid_duration(self):
		window = Interval.parse("09:00", "17:00")
		for duration in (0, -15, 15.5, True):
			with self.subTest(duration=duration):
				with self.assertRaises(ValueError):
					generate_slots(window, duration)

	def test_staff_slots_carry_staff_details(self):
		staff = make_staff("RSM-0001", full_name="Dr. Vega", role_type="Surgeon")
		slots = staff_slots(staff, date(2026, 1, 12), generate_slots(Interval.parse("09:00", "10:00"), 30))

		self.assertEqual(len(slots), 2)
		self.assertTrue(all(slot.is_available for slot in slots))
		self.assertEqual(slots[0].staff_name, "Dr. Vega")
		self.assertEqual(slots[0].as_dict()["start"], "2026-01-12 09:00:00")
		self.assertNotIn("unavailable_reason", slots[0].as_dict())


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
