"""
Schedule Resolver

Determines the single authoritative working window of a staff member for one
civil date, from layered data:
- Weekly Schedule rules (recurring base)
- Schedule Exceptions (date-specific overrides, staff or entity wide)

Resolution is an ordered chain of steps. Each step either returns a final
result or defers (None) to the next one; the weekly rule is the base case.

Tie-break when several weekly rules are effective on the same date: latest
effective_from wins, then the most recently created rule, then the highest id.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Union

from .intervals import Interval
from .records import ScheduleException, StaffMember, WeeklyScheduleRule, day_of_week
from .repositories import ScheduleRepository

logger = logging.getLogger(__name__)

NO_SCHEDULE = "no schedule defined"
MARKED_UNAVAILABLE = "marked unavailable"


@dataclass(frozen=True)
class Unavailable:
	"""
	Estado resuelto sin ventana reservable. No es un error.

	window lleva la ventana que habría aplicado (si se conoce), para placeholders.
	"""

	reason: str
	window: Optional[Interval] = None


Resolution = Union[Interval, Unavailable]


@dataclass(frozen=True)
class ResolutionContext:
	staff_id: str
	on_date: date
	rule: WeeklyScheduleRule
	exceptions: Sequence[ScheduleException]


ResolverStep = Callable[[ResolutionContext], Optional[Resolution]]


def _sort_key_created(value: Optional[datetime]) -> datetime:
	return value or datetime.min


def select_weekly_rule(
	rules: Sequence[WeeklyScheduleRule],
	staff_id: str,
	on_date: date
) -> Optional[WeeklyScheduleRule]:
	"""
	Selecciona la regla semanal vigente para (staff, fecha).

	Algoritmo:
		1. Filtrar reglas activas del staff para el weekday de la fecha
		2. Filtrar por vigencia (effective_from <= fecha <= effective_until)
		3. Si hay más de una, la de effective_from más reciente;
		   empate -> la creada más recientemente; empate -> id mayor

	Returns:
		WeeklyScheduleRule o None si no hay regla vigente
	"""
	weekday = day_of_week(on_date)

	candidates = [
		rule for rule in rules
		if rule.is_active
		and rule.staff_id == staff_id
		and rule.day_of_week == weekday
		and rule.covers(on_date)
	]

	if not candidates:
		return None

	if len(candidates) > 1:
		logger.warning(
			"Staff %s has %d weekly rules effective on %s, using tie-break policy",
			staff_id, len(candidates), on_date
		)

	return max(
		candidates,
		key=lambda rule: (rule.effective_from, _sort_key_created(rule.created), rule.id)
	)


def effective_ranges_overlap(a: WeeklyScheduleRule, b: WeeklyScheduleRule) -> bool:
	"""
	True si dos reglas del mismo staff y weekday tienen vigencias que se cruzan.

	Usado al guardar un Weekly Schedule para rechazar reglas en conflicto.
	"""
	if a.staff_id != b.staff_id or a.day_of_week != b.day_of_week:
		return False

	a_until = a.effective_until or date.max
	b_until = b.effective_until or date.max
	return a.effective_from <= b_until and b.effective_from <= a_until


def _applicable_exceptions(context: ResolutionContext) -> List[ScheduleException]:
	"""
	Excepciones activas de la fecha, staff-specific primero y luego entity-wide.
	Dentro de cada grupo, la más reciente primero.
	"""
	applicable = [
		exc for exc in context.exceptions
		if exc.is_active
		and exc.exception_date == context.on_date
		and exc.staff_id in (None, context.staff_id)
	]
	applicable.sort(
		key=lambda exc: (exc.staff_id is not None, _sort_key_created(exc.created), exc.id),
		reverse=True
	)
	return applicable


def blocking_exception_step(context: ResolutionContext) -> Optional[Resolution]:
	"""Una excepción bloqueante (holiday, sick_leave, ...) gana siempre."""
	for exc in _applicable_exceptions(context):
		if exc.is_blocking:
			return Unavailable(exc.kind.value, window=context.rule.interval)
	return None


def partial_day_step(context: ResolutionContext) -> Optional[Resolution]:
	"""Una excepción no bloqueante con horario (special_hours) reemplaza la ventana."""
	for exc in _applicable_exceptions(context):
		if not exc.is_blocking and exc.interval is not None:
			return exc.interval
	return None


def weekly_rule_base(context: ResolutionContext) -> Resolution:
	"""Caso base: la ventana de la regla semanal."""
	if not context.rule.is_available:
		return Unavailable(MARKED_UNAVAILABLE, window=context.rule.interval)
	return context.rule.interval


RESOLVER_STEPS: Sequence[ResolverStep] = (
	blocking_exception_step,
	partial_day_step,
)


def resolve(
	staff_id: str,
	on_date: date,
	rules: Sequence[WeeklyScheduleRule],
	exceptions: Sequence[ScheduleException],
	steps: Sequence[ResolverStep] = RESOLVER_STEPS
) -> Resolution:
	"""
	Resuelve la ventana de trabajo a partir de datos ya cargados.

	Args:
		staff_id: id del staff member
		on_date: fecha civil consultada
		rules: reglas semanales candidatas (se filtran aquí)
		exceptions: excepciones candidatas (se filtran aquí)
		steps: cadena de overrides, en orden de precedencia

	Returns:
		Interval o Unavailable(reason)
	"""
	rule = select_weekly_rule(rules, staff_id, on_date)
	if rule is None:
		return Unavailable(NO_SCHEDULE)

	context = ResolutionContext(staff_id, on_date, rule, tuple(exceptions))

	for step in steps:
		result = step(context)
		if result is not None:
			return result

	return weekly_rule_base(context)


class ScheduleResolver:
	"""Resolver que obtiene reglas y excepciones desde un ScheduleRepository."""

	def __init__(self, schedules: ScheduleRepository):
		self.schedules = schedules

	def resolve_window(self, staff: StaffMember, on_date: date) -> Resolution:
		rules = self.schedules.get_weekly_rules(staff.id, day_of_week(on_date), on_date)
		exceptions = self.schedules.get_exceptions(staff.entity_id, staff.id, on_date)
		return resolve(staff.id, on_date, rules, exceptions)
