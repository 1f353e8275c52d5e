# Copyright (c) 2026, Furfield and contributors
# For license information, please see license.txt

"""
Schedule Exception DocType

Override of the weekly schedule for a specific date:
- Blocking kinds (holiday, sick_leave, vacation, ...) close the whole day
- special_hours / custom with a time range replace the working hours
- Without staff_member the exception applies to the whole entity
"""

import frappe
from frappe import _
from frappe.model.document import Document

from ff_roster.ff_roster.scheduling.errors import InvalidInterval
from ff_roster.ff_roster.scheduling.intervals import Interval, overlaps
from ff_roster.ff_roster.scheduling.records import ExceptionKind


class ScheduleException(Document):
	"""
	Schedule Exception con validaciones.

	Validations:
	- entity, exception_date, exception_type required
	- exception_type must be a known kind
	- start_time and end_time both set or both empty, start < end
	- special_hours requires a time range
	- staff_member (if set) belongs to the entity
	- Warn on other exceptions for the same date and staff
	"""

	def validate(self) -> None:
		self._validate_required_fields()
		self._validate_exception_type()
		self._validate_times()
		self._validate_special_hours()
		self._validate_staff_member()
		self._check_duplicate_exceptions()

	def _validate_required_fields(self) -> None:
		if not self.entity_platform_id:
			frappe.throw(_("Entity is required"))

		if not self.exception_date:
			frappe.throw(_("Exception Date is required"))

		if not self.exception_type:
			frappe.throw(_("Exception Type is required"))

	def _validate_exception_type(self) -> None:
		valid = [kind.value for kind in ExceptionKind]
		if self.exception_type not in valid:
			frappe.throw(
				_("Exception Type must be one of: {0}").format(", ".join(valid))
			)

	def _validate_times(self) -> None:
		"""Ambos horarios o ninguno; si están, start < end."""
		if self._has_time(self.start_time) != self._has_time(self.end_time):
			frappe.throw(_("Start Time and End Time must both be set for a partial day exception"))

		if self._has_time(self.start_time) and self._has_time(self.end_time):
			try:
				Interval.parse(self.start_time, self.end_time)
			except InvalidInterval as e:
				frappe.throw(_("Start time must be before end time: {0}").format(str(e)))

	def _validate_special_hours(self) -> None:
		"""special_hours sin rango no tiene sentido: no reemplaza nada."""
		if self.exception_type == ExceptionKind.SPECIAL_HOURS.value and not self._has_time(self.start_time):
			frappe.throw(_("Special hours require Start Time and End Time"))

	def _validate_staff_member(self) -> None:
		if not self.staff_member:
			return

		if not frappe.db.exists(
			"Roster Staff Member",
			{"name": self.staff_member, "entity_platform_id": self.entity_platform_id, "is_active": 1}
		):
			frappe.throw(
				_("Staff member not found or does not belong to this entity"),
				frappe.DoesNotExistError
			)

	def _check_duplicate_exceptions(self) -> None:
		"""
		Advierte si ya existe una excepción para el mismo día y staff.
		No bloquea: el resolver define la precedencia entre ellas.
		"""
		existing = frappe.get_all(
			"Schedule Exception",
			filters={
				"entity_platform_id": self.entity_platform_id,
				"staff_member": self.staff_member or ["is", "not set"],
				"exception_date": self.exception_date,
				"is_active": 1,
				"name": ["!=", self.name] if self.name else ["is", "set"],
			},
			fields=["name", "exception_type", "start_time", "end_time"]
		)

		if not existing:
			return

		if not self._has_time(self.start_time):
			frappe.msgprint(
				_("There are already {0} exception(s) on {1}. This full day '{2}' exception covers the whole day.").format(
					len(existing), self.exception_date, self.exception_type
				),
				indicator="orange",
				alert=True
			)
			return

		new_range = Interval.parse(self.start_time, self.end_time)
		for exc in existing:
			if exc.start_time is None or exc.end_time is None:
				continue
			exc_range = Interval.parse(exc.start_time, exc.end_time)
			if overlaps(new_range, exc_range):
				frappe.msgprint(
					_("This exception ({0}) overlaps with {1} ({2})").format(new_range, exc.name, exc_range),
					indicator="orange",
					alert=True
				)

	@staticmethod
	def _has_time(value) -> bool:
		# 00:00 llega como timedelta(0), que es falsy
		return value not in (None, "")
