"""
Interval Model

Time-of-day values are integer minutes since midnight in [0, 1440). An
interval end may also be 1440 (24:00), so a window can run until midnight.
Intervals are half-open: [start, end). Two intervals that only share an
endpoint do not overlap.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Union

from .errors import InvalidInterval

MINUTES_PER_DAY = 24 * 60

TimeValue = Union[int, str, time, timedelta]


def to_minutes(time_value: TimeValue, end_of_day: bool = False) -> int:
	"""
	Convierte diferentes formatos de tiempo a minutos desde medianoche.

	Args:
		time_value: int (minutos), "HH:MM", "HH:MM:SS", time, o timedelta
			(Frappe devuelve los campos Time como timedelta desde medianoche)
		end_of_day: acepta 24:00 (1440), solo válido como fin de intervalo

	Returns:
		int: minutos desde medianoche

	Raises:
		InvalidInterval: si el valor no se puede interpretar o está fuera del día
	"""
	if isinstance(time_value, bool):
		raise InvalidInterval(f"Cannot convert {time_value!r} to a time of day")

	if isinstance(time_value, int):
		minutes = time_value
	elif isinstance(time_value, time):
		minutes = time_value.hour * 60 + time_value.minute
	elif isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche
		minutes = int(time_value.total_seconds()) // 60
	elif isinstance(time_value, str):
		parts = time_value.strip().split(":")
		if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
			raise InvalidInterval(f"Invalid time {time_value!r}, expected HH:MM")
		hours, mins = int(parts[0]), int(parts[1])
		if mins >= 60:
			raise InvalidInterval(f"Invalid time {time_value!r}, expected HH:MM")
		minutes = hours * 60 + mins
	else:
		raise InvalidInterval(f"Cannot convert {type(time_value)} to a time of day")

	upper = MINUTES_PER_DAY if end_of_day else MINUTES_PER_DAY - 1
	if not 0 <= minutes <= upper:
		raise InvalidInterval(f"Time {time_value!r} is outside a single day")

	return minutes


def format_minutes(minutes: int) -> str:
	"""Formatea minutos desde medianoche como HH:MM."""
	return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class Interval:
	"""
	Franja [start, end) dentro de un día, en minutos desde medianoche.

	Representa tanto una ventana de trabajo como el tramo de una reserva.
	"""

	start: int
	end: int

	def __post_init__(self):
		for value, upper in ((self.start, MINUTES_PER_DAY - 1), (self.end, MINUTES_PER_DAY)):
			if isinstance(value, bool) or not isinstance(value, int):
				raise InvalidInterval(f"Interval bounds must be integers, got {value!r}")
			if not 0 <= value <= upper:
				raise InvalidInterval(f"Interval bound {value} is outside a single day")

		if self.start >= self.end:
			raise InvalidInterval(
				f"Interval start ({format_minutes(self.start)}) must be before "
				f"end ({format_minutes(self.end)})"
			)

	@classmethod
	def parse(cls, start: TimeValue, end: TimeValue) -> "Interval":
		"""Construye un Interval desde strings, time o timedelta."""
		return cls(to_minutes(start), to_minutes(end, end_of_day=True))

	@property
	def duration(self) -> int:
		return self.end - self.start

	def at(self, on_date) -> tuple:
		"""Devuelve (start, end) como datetimes naive en la fecha dada."""
		midnight = datetime.combine(on_date, time.min)
		return (
			midnight + timedelta(minutes=self.start),
			midnight + timedelta(minutes=self.end),
		)

	def __str__(self) -> str:
		return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


def overlaps(a: Interval, b: Interval) -> bool:
	"""
	True si los intervalos se solapan.

	Condición de overlap: a.start < b.end AND b.start < a.end
	Compartir un extremo (uno termina cuando empieza el otro) NO es overlap.
	"""
	return a.start < b.end and b.start < a.end


def contains(outer: Interval, inner: Interval) -> bool:
	"""True si inner cae completamente dentro de outer."""
	return outer.start <= inner.start and inner.end <= outer.end
