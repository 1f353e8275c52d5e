"""
Roster Records

Plain data records exchanged between the engine and its repositories:
staff members, weekly schedule rules, schedule exceptions, bookings and the
transient slot values returned to callers.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .intervals import Interval, format_minutes

logger = logging.getLogger(__name__)


def day_of_week(on_date: date) -> int:
	"""Día de la semana con 0=Sunday .. 6=Saturday."""
	return (on_date.weekday() + 1) % 7


class ExceptionKind(str, Enum):
	"""Tipos de excepción de horario. Cerrado: cada valor bloquea o no."""

	HOLIDAY = "holiday"
	SICK_LEAVE = "sick_leave"
	VACATION = "vacation"
	UNAVAILABLE = "unavailable"
	PERSONAL_LEAVE = "personal_leave"
	EMERGENCY = "emergency"
	TRAINING = "training"
	SPECIAL_HOURS = "special_hours"
	CUSTOM = "custom"

	@property
	def is_blocking(self) -> bool:
		return self in BLOCKING_KINDS

	@classmethod
	def parse(cls, value: Any) -> "ExceptionKind":
		"""
		Convierte el valor almacenado a ExceptionKind.

		Valores desconocidos se tratan como UNAVAILABLE: nunca se ofrecen
		slots en un día con un override que no sabemos interpretar.
		"""
		if isinstance(value, cls):
			return value
		try:
			return cls(str(value).strip().lower())
		except ValueError:
			logger.warning("Unknown schedule exception kind %r, treating as unavailable", value)
			return cls.UNAVAILABLE


BLOCKING_KINDS = frozenset({
	ExceptionKind.HOLIDAY,
	ExceptionKind.SICK_LEAVE,
	ExceptionKind.VACATION,
	ExceptionKind.UNAVAILABLE,
	ExceptionKind.PERSONAL_LEAVE,
	ExceptionKind.EMERGENCY,
	ExceptionKind.TRAINING,
})


class BookingStatus(str, Enum):
	ACTIVE = "active"
	CANCELLED = "cancelled"
	COMPLETED = "completed"
	NO_SHOW = "no_show"


@dataclass(frozen=True)
class StaffMember:
	id: str
	entity_id: str
	full_name: str = ""
	role_type: str = ""
	is_active: bool = True
	can_take_appointments: bool = True
	slot_duration_minutes: int = 15


@dataclass(frozen=True)
class WeeklyScheduleRule:
	"""
	Regla semanal de un staff member.

	effective_until=None significa vigencia indefinida.
	"""

	id: str
	staff_id: str
	day_of_week: int
	interval: Interval
	effective_from: date
	effective_until: Optional[date] = None
	is_available: bool = True
	is_active: bool = True
	created: Optional[datetime] = None

	def covers(self, on_date: date) -> bool:
		"""True si la vigencia de la regla incluye la fecha."""
		if self.effective_from > on_date:
			return False
		return self.effective_until is None or self.effective_until >= on_date


@dataclass(frozen=True)
class ScheduleException:
	"""
	Override de horario para una fecha.

	staff_id=None indica una excepción de toda la entity (p.ej. feriado del hospital).
	interval=None indica día completo.
	"""

	id: str
	entity_id: str
	staff_id: Optional[str]
	exception_date: date
	kind: ExceptionKind
	interval: Optional[Interval] = None
	reason: str = ""
	is_active: bool = True
	created: Optional[datetime] = None

	@property
	def is_blocking(self) -> bool:
		return self.kind.is_blocking


@dataclass(frozen=True)
class Booking:
	id: str
	entity_id: str
	staff_id: str
	booking_date: date
	interval: Interval
	external_id: str
	source_system: str
	status: BookingStatus = BookingStatus.ACTIVE
	metadata: Dict[str, Any] = field(default_factory=dict, compare=False)
	created: Optional[datetime] = None

	@property
	def is_active(self) -> bool:
		return self.status == BookingStatus.ACTIVE

	@property
	def duration_minutes(self) -> int:
		return self.interval.duration

	def as_dict(self) -> Dict[str, Any]:
		return {
			"name": self.id,
			"entity_platform_id": self.entity_id,
			"staff_member": self.staff_id,
			"booking_date": self.booking_date.isoformat(),
			"booking_time": format_minutes(self.interval.start),
			"booking_end_time": format_minutes(self.interval.end),
			"duration_minutes": self.duration_minutes,
			"external_booking_id": self.external_id,
			"source_service": self.source_system,
			"status": self.status.value,
			"metadata": dict(self.metadata),
		}


@dataclass(frozen=True)
class BookingRequest:
	"""Reserva propuesta, todavía sin persistir."""

	entity_id: str
	staff_id: str
	booking_date: date
	interval: Interval
	external_id: str
	source_system: str
	metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Slot:
	"""Slot candidato. Transitorio: se recalcula en cada consulta."""

	staff_id: str
	slot_date: date
	interval: Interval
	is_available: bool = True
	reason: Optional[str] = None
	staff_name: str = ""
	staff_role: str = ""

	def as_dict(self) -> Dict[str, Any]:
		start, end = self.interval.at(self.slot_date)
		slot = {
			"start": start.strftime("%Y-%m-%d %H:%M:%S"),
			"end": end.strftime("%Y-%m-%d %H:%M:%S"),
			"is_available": self.is_available,
			"staff_id": self.staff_id,
			"staff_name": self.staff_name,
			"staff_role": self.staff_role,
		}
		if self.reason:
			slot["unavailable_reason"] = self.reason
		return slot


@dataclass
class SlotListing:
	slot_date: date
	duration_minutes: int
	slots: List[Slot] = field(default_factory=list)
	per_staff_errors: Dict[str, str] = field(default_factory=dict)
	# staff sin ventana reservable -> razón (haya o no placeholder)
	unavailable_staff: Dict[str, str] = field(default_factory=dict)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"date": self.slot_date.isoformat(),
			"duration": self.duration_minutes,
			"slots": [slot.as_dict() for slot in self.slots],
			"per_staff_errors": dict(self.per_staff_errors),
			"unavailable_staff": dict(self.unavailable_staff),
		}
