"""
Overlap Detection Service

Detects conflicts between candidate slots / proposed bookings and existing
bookings of the same staff member and date. Only active bookings block;
bookings that merely touch at an endpoint do not conflict.
"""

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .intervals import Interval, overlaps
from .records import Booking, Slot

BOOKED_REASON = "Already booked"


def _blocking(bookings: Iterable[Booking], exclude_booking: Optional[str] = None) -> Iterable[Booking]:
	for booking in bookings:
		if not booking.is_active:
			continue
		if exclude_booking and booking.id == exclude_booking:
			continue
		yield booking


def has_conflict(proposed: Interval, bookings: Iterable[Booking]) -> bool:
	"""True en cuanto encuentra una reserva activa que se solapa."""
	return any(overlaps(proposed, booking.interval) for booking in _blocking(bookings))


def find_conflicts(
	proposed: Interval,
	bookings: Iterable[Booking],
	exclude_booking: Optional[str] = None
) -> List[Booking]:
	"""Todas las reservas activas que se solapan con proposed."""
	return [
		booking for booking in _blocking(bookings, exclude_booking)
		if overlaps(proposed, booking.interval)
	]


def check_overlap(
	proposed: Interval,
	bookings: Iterable[Booking],
	exclude_booking: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Detecta overlaps con reservas existentes.

	Args:
		proposed: intervalo a validar
		bookings: reservas del mismo staff y fecha
		exclude_booking: id de la reserva a excluir (para ediciones)

	Returns:
		dict: {
			"has_overlap": bool,
			"overlapping_bookings": [list of booking ids]
		}
	"""
	conflicts = find_conflicts(proposed, bookings, exclude_booking)

	return {
		"has_overlap": bool(conflicts),
		"overlapping_bookings": [booking.id for booking in conflicts],
	}


def mark_availability(
	slots: Sequence[Slot],
	bookings: Sequence[Booking],
	booked_reason: str = BOOKED_REASON
) -> List[Slot]:
	"""
	Marca cada slot contra todas las reservas activas.

	O(slots x bookings): ambos conjuntos son de un staff y un día.
	"""
	active = list(_blocking(bookings))
	marked = []

	for slot in slots:
		is_booked = any(overlaps(slot.interval, booking.interval) for booking in active)
		if is_booked:
			slot = replace(slot, is_available=False, reason=booked_reason)
		marked.append(slot)

	return marked
