"""
Slot Generation Service

Partitions a working window into fixed-duration candidate slots, aligned to
the window start. A trailing remainder shorter than the duration is dropped.
"""

from datetime import date
from typing import List

from .intervals import Interval
from .records import Slot, StaffMember


def generate_slots(window: Interval, duration_minutes: int) -> List[Interval]:
	"""
	Genera slots consecutivos de duration_minutes dentro de window.

	Args:
		window: ventana de trabajo resuelta
		duration_minutes: duración de cada slot (> 0)

	Returns:
		list[Interval]: floor(window.duration / duration_minutes) slots

	Raises:
		ValueError: si duration_minutes no es un entero positivo
	"""
	if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
		raise ValueError(f"Slot duration must be a positive integer, got {duration_minutes!r}")

	slots = []
	current_slot_start = window.start

	while current_slot_start < window.end:
		current_slot_end = current_slot_start + duration_minutes

		# Si el slot se pasa de la ventana, se descarta el resto
		if current_slot_end > window.end:
			break

		slots.append(Interval(current_slot_start, current_slot_end))
		current_slot_start = current_slot_end

	return slots


def staff_slots(staff: StaffMember, on_date: date, intervals: List[Interval]) -> List[Slot]:
	"""Envuelve intervalos como Slots disponibles de un staff member."""
	return [
		Slot(
			staff_id=staff.id,
			slot_date=on_date,
			interval=interval,
			staff_name=staff.full_name,
			staff_role=staff.role_type,
		)
		for interval in intervals
	]
