"""
Roster Scheduling Errors

Typed failures raised by the availability and booking engine.
The API layer maps each one to a Frappe exception / HTTP status.
"""

from typing import List, Optional


class RosterError(Exception):
	"""Excepción base del motor de roster."""

	retryable = False


class NotFound(RosterError):
	"""Staff member o entity no resuelto."""
	pass


class InvalidInterval(RosterError):
	"""Datos de tiempo mal formados (start >= end o fuera del día)."""
	pass


class ConflictError(RosterError):
	"""La reserva propuesta se solapa con una reserva activa."""

	def __init__(self, message: str, conflicting: Optional[List[str]] = None):
		super().__init__(message)
		self.conflicting = conflicting or []


class DuplicateError(RosterError):
	"""El external id ya está registrado para ese source system."""

	def __init__(self, external_id: str, source_system: str):
		super().__init__(
			f"Booking {external_id!r} from {source_system!r} already exists"
		)
		self.external_id = external_id
		self.source_system = source_system


class UpstreamError(RosterError):
	"""Una fuente de datos externa falló o no respondió a tiempo."""

	retryable = True
