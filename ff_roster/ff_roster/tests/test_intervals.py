"""
Tests for scheduling/intervals.py

Tests time parsing, interval construction and half-open overlap semantics.
"""

import unittest
from datetime import date, datetime, time, timedelta

from ff_roster.ff_roster.scheduling.errors import InvalidInterval
from ff_roster.ff_roster.scheduling.intervals import (
	Interval,
	contains,
	format_minutes,
	overlaps,
	to_minutes,
)


class TestToMinutes(unittest.TestCase):
	"""Tests for time value conversion."""

	def test_accepts_supported_formats(self):
		"""HH:MM, HH:MM:SS, time and timedelta all convert to minutes."""
		self.assertEqual(to_minutes("09:30"), 570)
		self.assertEqual(to_minutes("09:30:59"), 570)
		self.assertEqual(to_minutes(time(17, 0)), 1020)
		# Frappe devuelve los campos Time como timedelta
		self.assertEqual(to_minutes(timedelta(hours=8, minutes=15)), 495)
		self.assertEqual(to_minutes(0), 0)

	def test_rejects_malformed_values(self):
		for value in ("9", "ab:cd", "10:75", "24:00", -1, 1440, True, 9.5):
			with self.subTest(value=value):
				with self.assertRaises(InvalidInterval):
					to_minutes(value)

	def test_format_minutes(self):
		self.assertEqual(format_minutes(0), "00:00")
		self.assertEqual(format_minutes(545), "09:05")


class TestInterval(unittest.TestCase):
	"""Tests for the Interval value."""

	def test_start_must_precede_end(self):
		"""Zero-length and inverted intervals are rejected at construction."""
		with self.assertRaises(InvalidInterval):
			Interval(600, 600)
		with self.assertRaises(InvalidInterval):
			Interval(660, 600)

	def test_bounds_must_be_within_the_day(self):
		with self.assertRaises(InvalidInterval):
			Interval(1380, 1441)
		with self.assertRaises(InvalidInterval):
			Interval(1440, 1441)
		with self.assertRaises(InvalidInterval):
			Interval(-15, 30)

	def test_window_until_midnight(self):
		"""An interval may end at 24:00; only its end can take that value."""
		evening = Interval.parse("18:00", "24:00")

		self.assertEqual(evening, Interval(1080, 1440))
		self.assertEqual(evening.duration, 360)
		self.assertEqual(str(evening), "18:00-24:00")
		self.assertEqual(evening.at(date(2026, 1, 12))[1], datetime(2026, 1, 13, 0, 0))
		self.assertEqual(Interval.parse("23:30", timedelta(hours=24)).end, 1440)
		self.assertEqual(to_minutes("24:00", end_of_day=True), 1440)

		with self.assertRaises(InvalidInterval):
			Interval.parse("24:00", "24:00")

	def test_parse_and_duration(self):
		interval = Interval.parse("09:00", "17:00")
		self.assertEqual(interval, Interval(540, 1020))
		self.assertEqual(interval.duration, 480)
		self.assertEqual(str(interval), "09:00-17:00")

	def test_at_date(self):
		start, end = Interval(540, 570).at(date(2026, 1, 12))
		self.assertEqual(start, datetime(2026, 1, 12, 9, 0))
		self.assertEqual(end, datetime(2026, 1, 12, 9, 30))


class TestOverlap(unittest.TestCase):
	"""Tests for overlaps / contains."""

	def test_overlapping_intervals(self):
		self.assertTrue(overlaps(Interval(600, 660), Interval(630, 690)))
		self.assertTrue(overlaps(Interval(630, 690), Interval(600, 660)))

	def test_interval_overlaps_itself(self):
		interval = Interval(600, 615)
		self.assertTrue(overlaps(interval, interval))

	def test_containment_is_overlap(self):
		self.assertTrue(overlaps(Interval(540, 1020), Interval(600, 630)))

	def test_touching_intervals_do_not_overlap(self):
		"""[10:00, 10:30) and [10:30, 11:00) share only an endpoint."""
		self.assertFalse(overlaps(Interval(600, 630), Interval(630, 660)))
		self.assertFalse(overlaps(Interval(630, 660), Interval(600, 630)))

	def test_disjoint_intervals(self):
		self.assertFalse(overlaps(Interval(540, 600), Interval(700, 760)))

	def test_contains(self):
		window = Interval(540, 1020)
		self.assertTrue(contains(window, Interval(540, 1020)))
		self.assertTrue(contains(window, Interval(600, 630)))
		self.assertFalse(contains(window, Interval(1000, 1030)))


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
