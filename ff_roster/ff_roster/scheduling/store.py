"""
Frappe Roster Store

Repository implementations backed by the app DocTypes:
- Roster Staff Member
- Weekly Schedule
- Schedule Exception
- External Booking
"""

from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional

import frappe
from frappe.utils import get_datetime, getdate

from ff_roster.exceptions import BookingOverlapError

from .errors import ConflictError, DuplicateError
from .intervals import Interval, format_minutes
from .records import (
	Booking,
	BookingRequest,
	BookingStatus,
	ExceptionKind,
	ScheduleException,
	StaffMember,
	WeeklyScheduleRule,
)
from .repositories import BookingRepository, ScheduleRepository, StaffDirectory

STAFF_FIELDS = [
	"name", "entity_platform_id", "full_name", "role_type",
	"is_active", "can_take_appointments", "slot_duration_minutes"
]
RULE_FIELDS = [
	"name", "staff_member", "day_of_week", "start_time", "end_time",
	"is_available", "effective_from", "effective_until", "is_active", "creation"
]
EXCEPTION_FIELDS = [
	"name", "entity_platform_id", "staff_member", "exception_date", "exception_type",
	"start_time", "end_time", "reason", "is_active", "creation"
]
BOOKING_FIELDS = [
	"name", "entity_platform_id", "staff_member", "booking_date", "booking_time",
	"booking_end_time", "external_booking_id", "source_service", "status",
	"metadata", "creation"
]


@contextmanager
def site_context(site: str) -> Iterator[None]:
	"""Abre una conexión al site dentro de un thread del pool del engine."""
	frappe.init(site=site)
	frappe.connect()
	try:
		yield
	finally:
		frappe.destroy()


def staff_from_row(row: Dict[str, Any]) -> StaffMember:
	return StaffMember(
		id=row["name"],
		entity_id=row["entity_platform_id"],
		full_name=row.get("full_name") or "",
		role_type=row.get("role_type") or "",
		is_active=bool(row.get("is_active")),
		can_take_appointments=bool(row.get("can_take_appointments")),
		slot_duration_minutes=row.get("slot_duration_minutes") or 15,
	)


def rule_from_row(row: Dict[str, Any]) -> WeeklyScheduleRule:
	"""Raises InvalidInterval si start_time/end_time están mal formados."""
	return WeeklyScheduleRule(
		id=row["name"],
		staff_id=row["staff_member"],
		day_of_week=int(row["day_of_week"]),
		interval=Interval.parse(row["start_time"], row["end_time"]),
		effective_from=getdate(row["effective_from"]),
		effective_until=getdate(row["effective_until"]) if row.get("effective_until") else None,
		is_available=bool(row.get("is_available")),
		is_active=bool(row.get("is_active")),
		created=get_datetime(row["creation"]) if row.get("creation") else None,
	)


def exception_from_row(row: Dict[str, Any]) -> ScheduleException:
	interval = None
	if row.get("start_time") is not None and row.get("end_time") is not None:
		interval = Interval.parse(row["start_time"], row["end_time"])

	return ScheduleException(
		id=row["name"],
		entity_id=row.get("entity_platform_id"),
		staff_id=row.get("staff_member") or None,
		exception_date=getdate(row["exception_date"]),
		kind=ExceptionKind.parse(row["exception_type"]),
		interval=interval,
		reason=row.get("reason") or "",
		is_active=bool(row.get("is_active")),
		created=get_datetime(row["creation"]) if row.get("creation") else None,
	)


def booking_from_row(row: Dict[str, Any]) -> Booking:
	return Booking(
		id=row["name"],
		entity_id=row["entity_platform_id"],
		staff_id=row["staff_member"],
		booking_date=getdate(row["booking_date"]),
		interval=Interval.parse(row["booking_time"], row["booking_end_time"]),
		external_id=row["external_booking_id"],
		source_system=row["source_service"],
		status=BookingStatus(row.get("status") or BookingStatus.ACTIVE.value),
		metadata=frappe.parse_json(row.get("metadata")) or {},
		created=get_datetime(row["creation"]) if row.get("creation") else None,
	)


class FrappeRosterStore(StaffDirectory, ScheduleRepository, BookingRepository):
	"""Los tres repositorios sobre frappe.get_all / frappe.get_doc."""

	# ===== STAFF =====

	def list_bookable_staff(
		self,
		entity_id: str,
		staff_id: Optional[str] = None,
		role_type: Optional[str] = None
	) -> List[StaffMember]:
		filters = {
			"entity_platform_id": entity_id,
			"is_active": 1,
			"can_take_appointments": 1,
		}
		if staff_id:
			filters["name"] = staff_id
		if role_type:
			filters["role_type"] = role_type

		rows = frappe.get_all(
			"Roster Staff Member",
			filters=filters,
			fields=STAFF_FIELDS,
			order_by="full_name asc"
		)
		return [staff_from_row(row) for row in rows]

	def get_active_staff(self, entity_id: str, staff_id: str) -> Optional[StaffMember]:
		rows = frappe.get_all(
			"Roster Staff Member",
			filters={"name": staff_id, "entity_platform_id": entity_id, "is_active": 1},
			fields=STAFF_FIELDS,
			limit=1
		)
		return staff_from_row(rows[0]) if rows else None

	# ===== SCHEDULES =====

	def get_weekly_rules(self, staff_id: str, weekday: int, on_date: date) -> List[WeeklyScheduleRule]:
		# Vigencia: effective_from <= fecha AND (effective_until IS NULL OR effective_until >= fecha)
		rows = frappe.get_all(
			"Weekly Schedule",
			filters={
				"staff_member": staff_id,
				"day_of_week": weekday,
				"is_active": 1,
				"effective_from": ["<=", on_date],
			},
			or_filters=[
				["effective_until", "is", "not set"],
				["effective_until", ">=", on_date],
			],
			fields=RULE_FIELDS,
			order_by="effective_from desc, creation desc"
		)
		return [rule_from_row(row) for row in rows]

	def get_exceptions(self, entity_id: str, staff_id: str, on_date: date) -> List[ScheduleException]:
		# Excepciones del staff + excepciones de toda la entity (staff_member vacío)
		rows = frappe.get_all(
			"Schedule Exception",
			filters={
				"entity_platform_id": entity_id,
				"exception_date": on_date,
				"is_active": 1,
			},
			or_filters=[
				["staff_member", "=", staff_id],
				["staff_member", "is", "not set"],
			],
			fields=EXCEPTION_FIELDS
		)
		return [exception_from_row(row) for row in rows]

	# ===== BOOKINGS =====

	def get_bookings(self, staff_id: str, on_date: date) -> List[Booking]:
		rows = frappe.get_all(
			"External Booking",
			filters={"staff_member": staff_id, "booking_date": on_date},
			fields=BOOKING_FIELDS,
			order_by="booking_time asc"
		)
		return [booking_from_row(row) for row in rows]

	def find_by_external_id(self, external_id: str, source_system: str) -> Optional[Booking]:
		rows = frappe.get_all(
			"External Booking",
			filters={"external_booking_id": external_id, "source_service": source_system},
			fields=BOOKING_FIELDS,
			limit=1
		)
		return booking_from_row(rows[0]) if rows else None

	def insert(self, request: BookingRequest) -> Booking:
		"""
		Inserta el External Booking.

		El controller del DocType repite el chequeo de overlap con FOR UPDATE y
		la tabla tiene unique (external_booking_id, source_service); ambas
		violaciones se traducen a la taxonomía del engine.
		"""
		doc = frappe.get_doc({
			"doctype": "External Booking",
			"entity_platform_id": request.entity_id,
			"staff_member": request.staff_id,
			"booking_date": request.booking_date,
			"booking_time": format_minutes(request.interval.start),
			"booking_end_time": format_minutes(request.interval.end),
			"duration_minutes": request.interval.duration,
			"external_booking_id": request.external_id,
			"source_service": request.source_system,
			"status": BookingStatus.ACTIVE.value,
			"metadata": frappe.as_json(request.metadata or {}),
		})

		try:
			doc.insert(ignore_permissions=True)
		except BookingOverlapError as e:
			raise ConflictError(str(e)) from e
		except (frappe.DuplicateEntryError, frappe.UniqueValidationError) as e:
			raise DuplicateError(request.external_id, request.source_system) from e
		except Exception as e:
			if frappe.db.is_duplicate_entry(e):
				raise DuplicateError(request.external_id, request.source_system) from e
			raise

		frappe.logger("ff_roster").info(
			f"External Booking {doc.name} created for {request.staff_id} "
			f"({request.source_system}/{request.external_id})"
		)

		return booking_from_row(doc.as_dict())
