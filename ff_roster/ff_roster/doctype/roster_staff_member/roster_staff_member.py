# Copyright (c) 2026, Furfield and contributors
# For license information, please see license.txt

"""
Roster Staff Member DocType

Person that can be scheduled and booked for appointments within an entity.
"""

import frappe
from frappe import _
from frappe.model.document import Document

MIN_SLOT_DURATION = 5
MAX_SLOT_DURATION = 480


class RosterStaffMember(Document):
	def validate(self) -> None:
		self._validate_required_fields()
		self._validate_slot_duration()

	def _validate_required_fields(self) -> None:
		if not self.entity_platform_id:
			frappe.throw(_("Entity is required"))

		if not self.full_name:
			frappe.throw(_("Full Name is required"))

		if not self.role_type:
			frappe.throw(_("Role Type is required"))

	def _validate_slot_duration(self) -> None:
		"""Duración por defecto de cita entre 5 y 480 minutos."""
		if not self.slot_duration_minutes:
			self.slot_duration_minutes = 15

		if not MIN_SLOT_DURATION <= self.slot_duration_minutes <= MAX_SLOT_DURATION:
			frappe.throw(
				_("Slot Duration must be between {0} and {1} minutes").format(
					MIN_SLOT_DURATION, MAX_SLOT_DURATION
				)
			)
