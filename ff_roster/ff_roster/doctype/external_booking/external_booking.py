# Copyright (c) 2026, Furfield and contributors
# For license information, please see license.txt

"""
External Booking DocType

Appointment booked by another service (ff-hms, ff-pa, ...) against a staff
member. Bookings are admitted through the roster engine; the controller
repeats the overlap check under a row lock and the table carries a unique
key on (external_booking_id, source_service), so concurrent admissions that
slip past the engine's checks are still rejected here.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from ff_roster.exceptions import BookingOverlapError
from ff_roster.ff_roster.scheduling.errors import InvalidInterval
from ff_roster.ff_roster.scheduling.intervals import Interval
from ff_roster.ff_roster.scheduling.overlap import check_overlap
from ff_roster.ff_roster.scheduling.records import BookingStatus
from ff_roster.ff_roster.scheduling.store import BOOKING_FIELDS, booking_from_row


class ExternalBooking(Document):
	def validate(self) -> None:
		"""
		Validación antes de guardar.

		Ejecuta:
		1. Validar status
		2. Validar booking_time < booking_end_time y calcular duration_minutes
		3. Bloquear si se solapa con otra reserva activa (con FOR UPDATE)
		"""
		self._validate_status()
		interval = self._validate_times()
		self._validate_no_overlap(interval)

	def _validate_status(self) -> None:
		if not self.status:
			self.status = BookingStatus.ACTIVE.value

		valid = [status.value for status in BookingStatus]
		if self.status not in valid:
			frappe.throw(_("Status must be one of: {0}").format(", ".join(valid)))

	def _validate_times(self) -> Interval:
		try:
			interval = Interval.parse(self.booking_time, self.booking_end_time)
		except InvalidInterval as e:
			frappe.throw(_("Booking time must be before booking end time: {0}").format(str(e)))

		self.duration_minutes = interval.duration
		return interval

	def _validate_no_overlap(self, interval: Interval) -> None:
		"""Solo las reservas activas bloquean; tocar un extremo no es overlap."""
		if self.status != BookingStatus.ACTIVE.value:
			return

		rows = frappe.get_all(
			"External Booking",
			filters={
				"staff_member": self.staff_member,
				"booking_date": self.booking_date,
				"status": BookingStatus.ACTIVE.value,
			},
			fields=BOOKING_FIELDS,
			for_update=True
		)

		overlap_result = check_overlap(
			interval,
			[booking_from_row(row) for row in rows],
			exclude_booking=self.name
		)

		if overlap_result["has_overlap"]:
			frappe.throw(
				_("Time slot conflicts with existing booking {0}").format(
					", ".join(overlap_result["overlapping_bookings"])
				),
				BookingOverlapError
			)


def on_doctype_update():
	frappe.db.add_unique(
		"External Booking",
		["external_booking_id", "source_service"],
		constraint_name="unique_external_booking_source"
	)
	frappe.db.add_index("External Booking", ["staff_member", "booking_date"])
