"""
Engine Configuration

Tunables for the roster engine. In a Frappe site they come from
site_config.json (frappe.conf), e.g.:

	{
		"roster_max_workers": 8,
		"roster_call_timeout": 5,
		"roster_unavailable_placeholders": 0
	}
"""

from dataclasses import dataclass
from typing import Any, Mapping

from .intervals import to_minutes
from .overlap import BOOKED_REASON


def _as_bool(value: Any) -> bool:
	if isinstance(value, str):
		return value.strip().lower() in ("1", "true", "yes", "on")
	return bool(value)


@dataclass(frozen=True)
class EngineConfig:
	max_workers: int = 4
	# segundos por llamada externa / por staff member en un listado
	call_timeout: float = 10.0
	# emitir un slot no disponible por cada staff sin ventana reservable
	unavailable_placeholders: bool = True
	# inicio del placeholder cuando no se conoce ninguna ventana (09:00)
	placeholder_start: int = 9 * 60
	booked_reason: str = BOOKED_REASON

	def __post_init__(self):
		if self.max_workers < 1:
			raise ValueError("max_workers must be at least 1")
		if self.call_timeout <= 0:
			raise ValueError("call_timeout must be positive")

	@classmethod
	def from_conf(cls, conf: Mapping[str, Any]) -> "EngineConfig":
		"""Construye la configuración desde frappe.conf (o cualquier mapping)."""
		defaults = cls()
		placeholder_start = conf.get("roster_placeholder_start")

		return cls(
			max_workers=int(conf.get("roster_max_workers") or defaults.max_workers),
			call_timeout=float(conf.get("roster_call_timeout") or defaults.call_timeout),
			unavailable_placeholders=_as_bool(
				conf.get("roster_unavailable_placeholders", defaults.unavailable_placeholders)
			),
			placeholder_start=(
				to_minutes(placeholder_start) if placeholder_start is not None
				else defaults.placeholder_start
			),
		)
