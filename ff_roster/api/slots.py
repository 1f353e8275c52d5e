"""
Roster Slots API

Whitelisted endpoints for listing appointment slots and admitting external
bookings. All endpoints require an authenticated session; entitlement to the
roster module is checked through the `roster_access_validators` hook.

Error mapping:
- NotFound           -> frappe.DoesNotExistError (404)
- DuplicateError     -> frappe.DuplicateEntryError (409)
- ConflictError      -> BookingOverlapError (409)
- InvalidInterval    -> frappe.ValidationError (417)
- UpstreamError      -> RosterUpstreamError (503)
"""

from datetime import date, datetime
from functools import partial
from typing import Any, Dict, Optional

import frappe
import pytz
from frappe import _
from frappe.utils import get_system_timezone, now_datetime

from ff_roster import __version__
from ff_roster.api.shared import (
	check_roster_access,
	validate_date_string,
	validate_docname,
	validate_duration,
	validate_time_string,
)
from ff_roster.exceptions import BookingOverlapError, RosterUpstreamError
from ff_roster.ff_roster.scheduling.config import EngineConfig
from ff_roster.ff_roster.scheduling.engine import RosterEngine
from ff_roster.ff_roster.scheduling.errors import (
	ConflictError,
	DuplicateError,
	NotFound,
	RosterError,
	UpstreamError,
)
from ff_roster.ff_roster.scheduling.intervals import Interval, format_minutes
from ff_roster.ff_roster.scheduling.records import BookingRequest
from ff_roster.ff_roster.scheduling.resolver import Unavailable
from ff_roster.ff_roster.scheduling.store import FrappeRosterStore, site_context

# Errores de Frappe ya lanzados con frappe.throw: se propagan tal cual
FRAPPE_ERRORS = (
	frappe.ValidationError,
	frappe.PermissionError,
	frappe.DuplicateEntryError,
	frappe.DoesNotExistError,
)


def get_engine() -> RosterEngine:
	"""Engine sobre los DocTypes del site actual, configurado desde site_config."""
	store = FrappeRosterStore()
	return RosterEngine(
		staff_directory=store,
		schedules=store,
		bookings=store,
		config=EngineConfig.from_conf(frappe.conf),
		task_context=partial(site_context, frappe.local.site)
	)


def _today() -> date:
	"""Fecha actual en el timezone del roster (roster_timezone o el del sistema)."""
	tz_name = frappe.conf.get("roster_timezone") or get_system_timezone()
	try:
		tz = pytz.timezone(tz_name)
	except pytz.UnknownTimeZoneError:
		frappe.log_error(f"Unknown roster_timezone {tz_name!r}, using UTC", "Roster Config")
		tz = pytz.UTC
	return datetime.now(tz).date()


def _throw_roster_error(e: RosterError) -> None:
	"""Traduce la taxonomía del engine a excepciones HTTP de Frappe."""
	if isinstance(e, NotFound):
		frappe.throw(str(e), frappe.DoesNotExistError)
	if isinstance(e, DuplicateError):
		frappe.throw(str(e), frappe.DuplicateEntryError)
	if isinstance(e, ConflictError):
		frappe.throw(str(e), BookingOverlapError)
	if isinstance(e, UpstreamError):
		frappe.log_error(str(e), "Roster Upstream Error")
		frappe.throw(_("Roster data is temporarily unavailable: {0}").format(str(e)), RosterUpstreamError)
	frappe.throw(str(e), frappe.ValidationError)


def _parse_metadata(metadata: Any) -> Dict[str, Any]:
	if not metadata:
		return {}
	parsed = frappe.parse_json(metadata)
	if not isinstance(parsed, dict):
		frappe.throw(_("metadata must be a JSON object"), frappe.ValidationError)
	return parsed


def _booking_request(
	entity_id: str,
	staff_member: str,
	booking_date: str,
	booking_time: str,
	booking_end_time: str,
	external_booking_id: str,
	source_service: str,
	metadata: Any = None
) -> BookingRequest:
	"""Valida los parámetros de una reserva y construye el BookingRequest."""
	interval = Interval.parse(
		validate_time_string(booking_time, "booking_time"),
		validate_time_string(booking_end_time, "booking_end_time")
	)
	validate_duration(interval.duration, "duration_minutes")

	return BookingRequest(
		entity_id=validate_docname(entity_id, "entity_id"),
		staff_id=validate_docname(staff_member, "staff_member"),
		booking_date=validate_date_string(booking_date, "booking_date"),
		interval=interval,
		external_id=validate_docname(external_booking_id, "external_booking_id"),
		source_system=validate_docname(source_service, "source_service"),
		metadata=_parse_metadata(metadata),
	)


@frappe.whitelist(methods=["GET"])
def get_available_slots(
	entity_id: str,
	date: Optional[str] = None,
	duration: int = 15,
	staff_id: Optional[str] = None,
	role_type: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Obtiene los slots de todo el staff reservable de una entity para una fecha.

	Args:
		entity_id: Entity (hospital / clínica)
		date: Fecha en formato YYYY-MM-DD (default: hoy en roster_timezone)
		duration: Duración de cada slot en minutos (5-480, default 15)
		staff_id: Filtrar a un staff member
		role_type: Filtrar por rol

	Returns:
		dict: {
			"date": "2026-01-15",
			"duration": 30,
			"slots": [{"start", "end", "is_available", "staff_id", "staff_name", "staff_role", "unavailable_reason"?}],
			"per_staff_errors": {staff_id: error},
			"unavailable_staff": {staff_id: reason}
		}
	"""
	try:
		entity_id = validate_docname(entity_id, "entity_id")
		check_roster_access(entity_id)

		on_date = validate_date_string(date, "date") if date else _today()
		duration = validate_duration(duration)
		if staff_id:
			staff_id = validate_docname(staff_id, "staff_id")

		listing = get_engine().list_available_slots(
			entity_id, on_date, duration, staff_id=staff_id, role_type=role_type or None
		)
		return listing.as_dict()

	except RosterError as e:
		_throw_roster_error(e)
	except FRAPPE_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in get_available_slots: {str(e)}", "API Error")
		frappe.throw(_("Error getting available slots: {0}").format(str(e)))


@frappe.whitelist(methods=["POST"])
def book_slot(
	entity_id: str,
	staff_member: str,
	booking_date: str,
	booking_time: str,
	booking_end_time: str,
	external_booking_id: str,
	source_service: str,
	metadata: Any = None
) -> Dict[str, Any]:
	"""
	Registra una reserva externa (ya pagada/confirmada en el sistema origen).

	Idempotencia: (external_booking_id, source_service) es único. Un reintento
	con la misma clave responde 409 sin crear un segundo registro.

	Returns:
		dict: External Booking creado (HTTP 201)
	"""
	try:
		request = _booking_request(
			entity_id, staff_member, booking_date, booking_time,
			booking_end_time, external_booking_id, source_service, metadata
		)
		check_roster_access(request.entity_id)

		booking = get_engine().admit_booking(request)

		frappe.local.response.http_status_code = 201
		return booking.as_dict()

	except RosterError as e:
		_throw_roster_error(e)
	except FRAPPE_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in book_slot: {str(e)}", "API Error")
		frappe.throw(_("Error creating booking: {0}").format(str(e)))


@frappe.whitelist(methods=["POST"])
def validate_booking(
	entity_id: str,
	staff_member: str,
	booking_date: str,
	booking_time: str,
	booking_end_time: str,
	external_booking_id: str,
	source_service: str,
	metadata: Any = None
) -> Dict[str, Any]:
	"""
	Valida una reserva sin crearla.

	Returns:
		dict: {"valid": bool, "errors": [...], "warnings": [...], "overlap_info": {...}}
	"""
	try:
		request = _booking_request(
			entity_id, staff_member, booking_date, booking_time,
			booking_end_time, external_booking_id, source_service, metadata
		)
		check_roster_access(request.entity_id)

		return get_engine().check_booking(request)

	except RosterError as e:
		_throw_roster_error(e)
	except FRAPPE_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in validate_booking: {str(e)}", "API Error")
		frappe.throw(_("Error validating booking: {0}").format(str(e)))


@frappe.whitelist(methods=["GET"])
def get_working_window(entity_id: str, staff_member: str, date: Optional[str] = None) -> Dict[str, Any]:
	"""
	Ventana de trabajo resuelta de un staff member para una fecha.

	Returns:
		dict: {
			"staff_member": "RSM-0001",
			"date": "2026-01-15",
			"available": true,
			"start": "09:00",
			"end": "17:00",
			"reason": null
		}
	"""
	try:
		entity_id = validate_docname(entity_id, "entity_id")
		staff_member = validate_docname(staff_member, "staff_member")
		check_roster_access(entity_id)

		on_date = validate_date_string(date, "date") if date else _today()
		window = get_engine().resolve_window(entity_id, staff_member, on_date)

		result = {
			"staff_member": staff_member,
			"date": on_date.isoformat(),
			"available": not isinstance(window, Unavailable),
			"start": None,
			"end": None,
			"reason": None,
		}
		if isinstance(window, Unavailable):
			result["reason"] = window.reason
		else:
			result["start"] = format_minutes(window.start)
			result["end"] = format_minutes(window.end)
		return result

	except RosterError as e:
		_throw_roster_error(e)
	except FRAPPE_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in get_working_window: {str(e)}", "API Error")
		frappe.throw(_("Error resolving working window: {0}").format(str(e)))


@frappe.whitelist(allow_guest=True, methods=["GET"])
def health() -> Dict[str, Any]:
	"""Liveness del módulo de roster."""
	return {
		"status": "healthy",
		"service": "ff-roster",
		"version": __version__,
		"timestamp": now_datetime().isoformat(),
	}
