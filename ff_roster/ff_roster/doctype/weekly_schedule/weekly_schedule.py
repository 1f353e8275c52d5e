# Copyright (c) 2026, Furfield and contributors
# For license information, please see license.txt

"""
Weekly Schedule DocType

Recurring working hours of a staff member for one day of the week
(0 = Sunday ... 6 = Saturday), valid from effective_from until
effective_until (empty = open ended).
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import getdate

from ff_roster.ff_roster.scheduling.errors import InvalidInterval
from ff_roster.ff_roster.scheduling.resolver import effective_ranges_overlap
from ff_roster.ff_roster.scheduling.store import RULE_FIELDS, rule_from_row

WEEKDAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class WeeklySchedule(Document):
	"""
	Weekly Schedule con validaciones.

	Validations:
	- staff_member required
	- day_of_week in 0..6
	- start_time < end_time
	- effective_from <= effective_until (if present)
	- No other active schedule for the same staff/day with overlapping validity
	"""

	def validate(self) -> None:
		self._validate_required_fields()
		self._validate_day_of_week()
		self._validate_times()
		self._validate_effective_dates()
		self._validate_no_conflicting_schedule()

	def _validate_required_fields(self) -> None:
		if not self.staff_member:
			frappe.throw(_("Staff Member is required"))

		if not self.effective_from:
			frappe.throw(_("Effective From is required"))

	def _validate_day_of_week(self) -> None:
		if self.day_of_week is None or not 0 <= int(self.day_of_week) <= 6:
			frappe.throw(_("Day of Week must be between 0 (Sunday) and 6 (Saturday)"))

	def _validate_times(self) -> None:
		"""Valida que start_time < end_time."""
		try:
			self._as_rule()
		except InvalidInterval as e:
			frappe.throw(_("Start time must be before end time: {0}").format(str(e)))

	def _validate_effective_dates(self) -> None:
		if self.effective_until and getdate(self.effective_from) > getdate(self.effective_until):
			frappe.throw(_("Effective From must be on or before Effective Until"))

	def _validate_no_conflicting_schedule(self) -> None:
		"""
		Rechaza otra regla activa del mismo staff y día con vigencia cruzada.

		El resolver tolera estos casos (tie-break), pero no se permite crearlos.
		"""
		if not self.is_active:
			return

		existing = frappe.get_all(
			"Weekly Schedule",
			filters={
				"staff_member": self.staff_member,
				"day_of_week": self.day_of_week,
				"is_active": 1,
				"name": ["!=", self.name] if self.name else ["is", "set"],
			},
			fields=RULE_FIELDS
		)

		this_rule = self._as_rule()
		for row in existing:
			other = rule_from_row(row)
			if effective_ranges_overlap(this_rule, other):
				frappe.throw(
					_("Schedule conflict: {0} already has schedule {1} on {2} for an overlapping period").format(
						self.staff_member, other.id, WEEKDAYS[other.day_of_week]
					),
					frappe.DuplicateEntryError
				)

	def _as_rule(self):
		return rule_from_row({
			"name": self.name or "",
			"staff_member": self.staff_member,
			"day_of_week": self.day_of_week,
			"start_time": self.start_time,
			"end_time": self.end_time,
			"is_available": self.is_available,
			"effective_from": self.effective_from,
			"effective_until": self.effective_until,
			"is_active": self.is_active,
			"creation": self.creation,
		})
