"""
Repository Interfaces

Read/write capabilities the engine needs from the outside world. The Frappe
implementation lives in store.py; tests use in-memory fakes.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from .records import (
	Booking,
	BookingRequest,
	ScheduleException,
	StaffMember,
	WeeklyScheduleRule,
)


class StaffDirectory(ABC):
	"""Acceso al roster de staff de una entity."""

	@abstractmethod
	def list_bookable_staff(
		self,
		entity_id: str,
		staff_id: Optional[str] = None,
		role_type: Optional[str] = None
	) -> List[StaffMember]:
		"""
		Staff activo que puede tomar citas, filtrado por entity/staff/rol.

		Returns:
			list[StaffMember]: puede ser vacía
		"""
		pass

	@abstractmethod
	def get_active_staff(self, entity_id: str, staff_id: str) -> Optional[StaffMember]:
		"""Staff activo que pertenece a la entity, o None."""
		pass


class ScheduleRepository(ABC):
	"""Acceso de solo lectura a reglas semanales y excepciones."""

	@abstractmethod
	def get_weekly_rules(
		self,
		staff_id: str,
		weekday: int,
		on_date: date
	) -> List[WeeklyScheduleRule]:
		"""
		Reglas candidatas para (staff, weekday) en la fecha.

		Puede devolver un superconjunto; el resolver vuelve a filtrar.

		Raises:
			InvalidInterval: si una regla tiene horario mal formado
		"""
		pass

	@abstractmethod
	def get_exceptions(
		self,
		entity_id: str,
		staff_id: str,
		on_date: date
	) -> List[ScheduleException]:
		"""Excepciones del staff y de toda la entity para la fecha."""
		pass


class BookingRepository(ABC):
	"""Acceso a reservas, incluida la creación."""

	@abstractmethod
	def get_bookings(self, staff_id: str, on_date: date) -> List[Booking]:
		"""Reservas del staff en la fecha (cualquier status)."""
		pass

	@abstractmethod
	def find_by_external_id(self, external_id: str, source_system: str) -> Optional[Booking]:
		pass

	@abstractmethod
	def insert(self, request: BookingRequest) -> Booking:
		"""
		Persiste la reserva con status active.

		Raises:
			DuplicateError: violación de (external id, source system) en storage
			ConflictError: violación de no-solapamiento en storage
		"""
		pass
