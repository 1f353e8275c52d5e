"""
Tests for scheduling/resolver.py

Tests weekly rule selection, exception precedence and the resolved window.
"""

import unittest
from datetime import date, datetime

from ff_roster.ff_roster.scheduling.intervals import Interval
from ff_roster.ff_roster.scheduling.records import ExceptionKind, day_of_week
from ff_roster.ff_roster.scheduling.resolver import (
	MARKED_UNAVAILABLE,
	NO_SCHEDULE,
	ScheduleResolver,
	Unavailable,
	effective_ranges_overlap,
	resolve,
	select_weekly_rule,
)

from .fakes import InMemoryRoster, make_exception, make_rule, make_staff

MONDAY = date(2026, 1, 12)
STAFF = "RSM-0001"


class TestDayOfWeek(unittest.TestCase):

	def test_sunday_is_zero(self):
		self.assertEqual(day_of_week(date(2026, 1, 11)), 0)
		self.assertEqual(day_of_week(MONDAY), 1)
		self.assertEqual(day_of_week(date(2026, 1, 17)), 6)


class TestSelectWeeklyRule(unittest.TestCase):
	"""Tests for picking the effective weekly rule."""

	def test_rule_for_other_weekday_is_ignored(self):
		rules = [make_rule("WS-1", STAFF, 2, "09:00", "17:00")]
		self.assertIsNone(select_weekly_rule(rules, STAFF, MONDAY))

	def test_effective_range_is_inclusive(self):
		rule = make_rule("WS-1", STAFF, 1, "09:00", "17:00", effective_from=MONDAY, effective_until=MONDAY)
		self.assertEqual(select_weekly_rule([rule], STAFF, MONDAY), rule)

	def test_expired_and_future_rules_are_ignored(self):
		rules = [
			make_rule("WS-1", STAFF, 1, "09:00", "17:00", effective_until=date(2026, 1, 5)),
			make_rule("WS-2", STAFF, 1, "09:00", "17:00", effective_from=date(2026, 2, 1)),
			make_rule("WS-3", STAFF, 1, "09:00", "17:00", is_active=False),
		]
		self.assertIsNone(select_weekly_rule(rules, STAFF, MONDAY))

	def test_latest_effective_from_wins(self):
		rules = [
			make_rule("WS-1", STAFF, 1, "09:00", "17:00", effective_from=date(2026, 1, 1)),
			make_rule("WS-2", STAFF, 1, "10:00", "14:00", effective_from=date(2026, 1, 5)),
		]
		self.assertEqual(select_weekly_rule(rules, STAFF, MONDAY).id, "WS-2")

	def test_tie_on_effective_from_uses_creation_then_id(self):
		rules = [
			make_rule("WS-1", STAFF, 1, "09:00", "17:00", created=datetime(2026, 1, 2, 12, 0)),
			make_rule("WS-2", STAFF, 1, "10:00", "14:00", created=datetime(2026, 1, 1, 12, 0)),
		]
		self.assertEqual(select_weekly_rule(rules, STAFF, MONDAY).id, "WS-1")

		same_created = [
			make_rule("WS-1", STAFF, 1, "09:00", "17:00"),
			make_rule("WS-2", STAFF, 1, "10:00", "14:00"),
		]
		self.assertEqual(select_weekly_rule(same_created, STAFF, MONDAY).id, "WS-2")

	def test_effective_ranges_overlap(self):
		open_ended = make_rule("WS-1", STAFF, 1, "09:00", "17:00")
		january = make_rule(
			"WS-2", STAFF, 1, "09:00", "12:00",
			effective_from=date(2025, 1, 1), effective_until=date(2025, 12, 31)
		)
		later = make_rule("WS-3", STAFF, 1, "09:00", "12:00", effective_from=date(2026, 6, 1))
		other_day = make_rule("WS-4", STAFF, 2, "09:00", "12:00")

		self.assertFalse(effective_ranges_overlap(open_ended, january))
		self.assertTrue(effective_ranges_overlap(open_ended, later))
		self.assertFalse(effective_ranges_overlap(open_ended, other_day))


class TestResolve(unittest.TestCase):
	"""Tests for the resolution chain."""

	def setUp(self):
		self.rules = [make_rule("WS-1", STAFF, 1, "09:00", "17:00")]

	def test_weekly_rule_window(self):
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, []), Interval.parse("09:00", "17:00"))

	def test_no_rule(self):
		self.assertEqual(resolve(STAFF, MONDAY, [], []), Unavailable(NO_SCHEDULE))

	def test_no_rule_wins_over_special_hours(self):
		"""Special hours on a day with no weekly rule do not open the day."""
		exceptions = [make_exception("SE-1", STAFF, MONDAY, "special_hours", "10:00", "12:00")]
		self.assertEqual(resolve(STAFF, MONDAY, [], exceptions), Unavailable(NO_SCHEDULE))

	def test_rule_marked_unavailable(self):
		rules = [make_rule("WS-1", STAFF, 1, "09:00", "17:00", is_available=False)]
		result = resolve(STAFF, MONDAY, rules, [])

		self.assertIsInstance(result, Unavailable)
		self.assertEqual(result.reason, MARKED_UNAVAILABLE)
		self.assertEqual(result.window, Interval.parse("09:00", "17:00"))

	def test_blocking_exception(self):
		exceptions = [make_exception("SE-1", STAFF, MONDAY, "sick_leave")]
		result = resolve(STAFF, MONDAY, self.rules, exceptions)
		self.assertEqual(result.reason, "sick_leave")

	def test_blocking_exception_beats_special_hours(self):
		exceptions = [
			make_exception("SE-1", STAFF, MONDAY, "special_hours", "10:00", "12:00",
				created=datetime(2026, 1, 10)),
			make_exception("SE-2", STAFF, MONDAY, "vacation", created=datetime(2026, 1, 1)),
		]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions).reason, "vacation")

	def test_special_hours_replace_the_window(self):
		exceptions = [make_exception("SE-1", STAFF, MONDAY, "special_hours", "10:00", "13:00")]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions), Interval.parse("10:00", "13:00"))

	def test_special_hours_without_times_defer(self):
		exceptions = [make_exception("SE-1", STAFF, MONDAY, "custom")]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions), Interval.parse("09:00", "17:00"))

	def test_entity_wide_holiday(self):
		exceptions = [make_exception("SE-1", None, MONDAY, "holiday")]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions).reason, "holiday")

	def test_staff_specific_hours_beat_entity_wide_hours(self):
		exceptions = [
			make_exception("SE-1", None, MONDAY, "special_hours", "08:00", "12:00",
				created=datetime(2026, 1, 11)),
			make_exception("SE-2", STAFF, MONDAY, "special_hours", "13:00", "18:00",
				created=datetime(2026, 1, 1)),
		]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions), Interval.parse("13:00", "18:00"))

	def test_latest_special_hours_wins(self):
		exceptions = [
			make_exception("SE-1", STAFF, MONDAY, "special_hours", "08:00", "12:00",
				created=datetime(2026, 1, 1)),
			make_exception("SE-2", STAFF, MONDAY, "special_hours", "13:00", "18:00",
				created=datetime(2026, 1, 5)),
		]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions), Interval.parse("13:00", "18:00"))

	def test_inactive_and_foreign_exceptions_are_ignored(self):
		exceptions = [
			make_exception("SE-1", STAFF, MONDAY, "holiday", is_active=False),
			make_exception("SE-2", "RSM-0002", MONDAY, "holiday"),
			make_exception("SE-3", STAFF, date(2026, 1, 13), "holiday"),
		]
		self.assertEqual(resolve(STAFF, MONDAY, self.rules, exceptions), Interval.parse("09:00", "17:00"))

	def test_unknown_kind_fails_closed(self):
		"""An exception kind that cannot be interpreted blocks the day."""
		with self.assertLogs("ff_roster.ff_roster.scheduling.records", level="WARNING"):
			exc = make_exception("SE-1", STAFF, MONDAY, "conference")

		self.assertEqual(exc.kind, ExceptionKind.UNAVAILABLE)
		self.assertIsInstance(resolve(STAFF, MONDAY, self.rules, [exc]), Unavailable)

	def test_custom_steps(self):
		"""The chain accepts extra steps in precedence order."""
		lunch_only = lambda context: Interval.parse("12:00", "13:00")
		result = resolve(STAFF, MONDAY, self.rules, [], steps=(lunch_only,))
		self.assertEqual(result, Interval.parse("12:00", "13:00"))


class TestScheduleResolver(unittest.TestCase):
	"""Tests for ScheduleResolver against a repository."""

	def test_resolve_window_from_repository(self):
		roster = InMemoryRoster()
		staff = make_staff(STAFF)
		roster.staff.append(staff)
		roster.rules.append(make_rule("WS-1", STAFF, 1, "09:00", "17:00"))
		roster.exceptions.append(make_exception("SE-1", None, date(2026, 1, 19), "holiday"))

		resolver = ScheduleResolver(roster)
		self.assertEqual(resolver.resolve_window(staff, MONDAY), Interval.parse("09:00", "17:00"))
		self.assertEqual(resolver.resolve_window(staff, date(2026, 1, 19)).reason, "holiday")


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
