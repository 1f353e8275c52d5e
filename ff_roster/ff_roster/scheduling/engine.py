"""
Slot Availability Orchestrator

Composes resolver, slot generator and conflict checker across the staff of an
entity, and performs the admission-time checks before a booking is stored.

External reads run on worker threads so they can be bounded by
EngineConfig.call_timeout. In a listing every staff member gets its own
deadline, counted from the moment its task starts; a failure or timeout is
reported for that staff member only. Admission, pre-validation and window
lookups run all their reads as a single task, so one request opens a single
task context (one site connection in Frappe).
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FuturesTimeout
from contextlib import nullcontext
from datetime import date
from typing import Any, Callable, ContextManager, Dict, List, Optional, Tuple

from .config import EngineConfig
from .errors import ConflictError, DuplicateError, NotFound, RosterError, UpstreamError
from .intervals import MINUTES_PER_DAY, Interval, contains
from .overlap import check_overlap, find_conflicts, mark_availability
from .records import Booking, BookingRequest, Slot, SlotListing, StaffMember
from .repositories import BookingRepository, ScheduleRepository, StaffDirectory
from .resolver import Resolution, ScheduleResolver, Unavailable
from .slots import generate_slots, staff_slots

logger = logging.getLogger(__name__)

TaskContext = Callable[[], ContextManager[Any]]


class RosterEngine:
	"""
	Motor de disponibilidad y admisión de reservas.

	Recibe los stores como dependencias explícitas (ver repositories.py).
	task_context envuelve cada tarea ejecutada en un worker; la integración con
	Frappe lo usa para abrir la conexión del site dentro del thread.
	"""

	def __init__(
		self,
		staff_directory: StaffDirectory,
		schedules: ScheduleRepository,
		bookings: BookingRepository,
		config: Optional[EngineConfig] = None,
		task_context: TaskContext = nullcontext
	):
		self.staff_directory = staff_directory
		self.schedules = schedules
		self.bookings = bookings
		self.config = config or EngineConfig()
		self.task_context = task_context
		self.resolver = ScheduleResolver(schedules)

	# ===== EXTERNAL CALLS =====

	def _run(self, fn: Callable, *args):
		with self.task_context():
			return fn(*args)

	def _timed_out(self, label: str) -> UpstreamError:
		return UpstreamError(f"{label} timed out after {self.config.call_timeout}s")

	def _result(self, future, label: str):
		try:
			return future.result(timeout=self.config.call_timeout)
		except FuturesTimeout:
			raise self._timed_out(label) from None
		except RosterError:
			raise
		except Exception as e:
			raise UpstreamError(f"{label} failed: {e}") from e

	def _call(self, label: str, fn: Callable, *args):
		"""Ejecuta fn en un worker, dentro de task_context, con timeout."""
		pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="roster")
		try:
			return self._result(pool.submit(self._run, fn, *args), label)
		finally:
			# no esperar a una llamada colgada
			pool.shutdown(wait=False, cancel_futures=True)

	def _require_staff(self, entity_id: str, staff_id: str) -> StaffMember:
		"""Lectura directa; se llama desde dentro de un task."""
		staff = self.staff_directory.get_active_staff(entity_id, staff_id)
		if staff is None:
			raise NotFound(f"Staff member {staff_id} not found or inactive for entity {entity_id}")
		return staff

	# ===== LISTING =====

	def list_available_slots(
		self,
		entity_id: str,
		on_date: date,
		duration_minutes: int,
		staff_id: Optional[str] = None,
		role_type: Optional[str] = None
	) -> SlotListing:
		"""
		Lista los slots de todo el staff elegible para una fecha.

		Algoritmo:
			1. Obtener staff elegible (activo, puede tomar citas, filtros)
			2. Para cada staff, en paralelo (máx. max_workers tareas vivas):
				a. Resolver ventana de trabajo
				b. Si no hay ventana, placeholder no disponible con la razón
				c. Generar slots y marcar los ya reservados
			3. Errores y timeouts por staff se adjuntan a per_staff_errors
			4. Ordenar por hora de inicio y luego staff id

		Raises:
			ValueError: duración no positiva
			UpstreamError: si no se pudo obtener el roster
		"""
		if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
			raise ValueError(f"Slot duration must be a positive integer, got {duration_minutes!r}")

		# 1. Staff elegible
		staff_members = self._call(
			"staff roster",
			self.staff_directory.list_bookable_staff,
			entity_id, staff_id, role_type
		)

		listing = SlotListing(on_date, duration_minutes)
		if not staff_members:
			return listing

		# 2-3. Fan-out por staff
		for staff, outcome in self._fan_out(staff_members, on_date, duration_minutes):
			if isinstance(outcome, RosterError):
				# Un staff que falla no tumba el listado
				logger.warning("Slot computation failed for staff %s on %s: %s", staff.id, on_date, outcome)
				listing.per_staff_errors[staff.id] = str(outcome)
				continue

			slots, unavailable_reason = outcome
			listing.slots.extend(slots)
			if unavailable_reason:
				listing.unavailable_staff[staff.id] = unavailable_reason

		# 4. Orden determinista
		listing.slots.sort(key=lambda slot: (slot.interval.start, slot.staff_id))

		return listing

	def _fan_out(self, staff_members: List[StaffMember], on_date: date, duration_minutes: int):
		"""
		Calcula los slots de cada staff con un deadline propio.

		Como mucho max_workers tareas vivas a la vez. El pool tiene un thread
		por staff, así una tarea arranca al enviarse y su deadline corre desde
		ahí. Una tarea vencida se abandona y libera su lugar: un staff colgado
		no consume el tiempo de los que esperan en cola.

		Yields:
			(staff, (slots, unavailable_reason)) o (staff, RosterError)
		"""
		queue = list(staff_members)
		in_flight = {}
		pool = ThreadPoolExecutor(max_workers=len(staff_members), thread_name_prefix="roster")
		try:
			while queue or in_flight:
				while queue and len(in_flight) < self.config.max_workers:
					staff = queue.pop(0)
					future = pool.submit(self._run, self._slots_for_staff, staff, on_date, duration_minutes)
					in_flight[future] = (staff, time.monotonic() + self.config.call_timeout)

				next_deadline = min(deadline for _, deadline in in_flight.values())
				wait(
					list(in_flight),
					timeout=max(0.0, next_deadline - time.monotonic()),
					return_when=FIRST_COMPLETED
				)

				now = time.monotonic()
				for future, (staff, deadline) in list(in_flight.items()):
					if future.done():
						del in_flight[future]
						try:
							yield staff, self._result(future, f"staff {staff.id}")
						except RosterError as e:
							yield staff, e
					elif now >= deadline:
						del in_flight[future]
						future.cancel()
						yield staff, self._timed_out(f"staff {staff.id}")
		finally:
			pool.shutdown(wait=False, cancel_futures=True)

	def _slots_for_staff(
		self,
		staff: StaffMember,
		on_date: date,
		duration_minutes: int
	) -> Tuple[List[Slot], Optional[str]]:
		window = self.resolver.resolve_window(staff, on_date)

		if isinstance(window, Unavailable):
			return self._placeholder(staff, on_date, duration_minutes, window), window.reason

		candidates = staff_slots(staff, on_date, generate_slots(window, duration_minutes))
		if not candidates:
			return [], None

		bookings = self.bookings.get_bookings(staff.id, on_date)
		return mark_availability(candidates, bookings, self.config.booked_reason), None

	def _placeholder(
		self,
		staff: StaffMember,
		on_date: date,
		duration_minutes: int,
		unavailable: Unavailable
	) -> List[Slot]:
		"""
		Slot no disponible que representa al staff sin ventana reservable.

		Usa la ventana que habría aplicado; si no hay ninguna, placeholder_start
		más la duración pedida.
		"""
		if not self.config.unavailable_placeholders:
			return []

		window = unavailable.window
		if window is None:
			end = min(self.config.placeholder_start + duration_minutes, MINUTES_PER_DAY)
			window = Interval(min(self.config.placeholder_start, end - 1), end)

		return [Slot(
			staff_id=staff.id,
			slot_date=on_date,
			interval=window,
			is_available=False,
			reason=unavailable.reason,
			staff_name=staff.full_name,
			staff_role=staff.role_type,
		)]

	# ===== WINDOW =====

	def resolve_window(self, entity_id: str, staff_id: str, on_date: date) -> Resolution:
		"""
		Ventana de trabajo de un staff para una fecha.

		Raises:
			NotFound: staff inexistente, inactivo o de otra entity
			InvalidInterval: datos de horario mal formados
		"""
		return self._call("schedule lookup", self._lookup_window, entity_id, staff_id, on_date)

	def _lookup_window(self, entity_id: str, staff_id: str, on_date: date) -> Resolution:
		staff = self._require_staff(entity_id, staff_id)
		return self.resolver.resolve_window(staff, on_date)

	# ===== ADMISSION =====

	def admit_booking(self, request: BookingRequest) -> Booking:
		"""
		Admite una reserva nueva si no crea solapamientos.

		Algoritmo:
			1. Staff pertenece a la entity y está activo -> NotFound si no
			2. (external id, source system) no registrado -> DuplicateError si ya existe
			3. Ninguna reserva activa del staff/fecha se solapa -> ConflictError si hay
			4. Persistir y retornar la reserva guardada

		Los pasos 1-3 son lecturas y corren juntos en un solo task. El insert
		corre en el thread del llamador, dentro de su transacción.

		Sin reintentos: cualquier fallo se reporta inmediatamente.
		"""
		# 1-2. Staff y duplicados
		bookings = self._call("booking admission", self._admission_reads, request)

		# 3. Conflictos
		conflicts = find_conflicts(request.interval, bookings)
		if conflicts:
			raise ConflictError(
				f"Time slot {request.interval} conflicts with existing booking",
				[booking.id for booking in conflicts]
			)

		# 4. Persistir (el store repite los chequeos a nivel de storage)
		try:
			booking = self.bookings.insert(request)
		except RosterError:
			raise
		except Exception as e:
			raise UpstreamError(f"Failed to create booking: {e}") from e

		logger.info(
			"Booking %s admitted for staff %s on %s %s (%s/%s)",
			booking.id, booking.staff_id, booking.booking_date, booking.interval,
			booking.source_system, booking.external_id
		)
		return booking

	def _admission_reads(self, request: BookingRequest) -> List[Booking]:
		self._require_staff(request.entity_id, request.staff_id)

		# La clave de idempotencia manda, no el horario
		if self.bookings.find_by_external_id(request.external_id, request.source_system) is not None:
			raise DuplicateError(request.external_id, request.source_system)

		return self.bookings.get_bookings(request.staff_id, request.booking_date)

	def check_booking(self, request: BookingRequest) -> Dict[str, Any]:
		"""
		Valida una reserva ANTES de crearla. No persiste nada.

		Returns:
			dict: {
				"valid": bool,
				"errors": list[str],
				"warnings": list[str],
				"overlap_info": dict
			}
		"""
		errors = []
		warnings = []

		try:
			staff, existing, bookings, window = self._call(
				"booking validation", self._validation_reads, request
			)
		except NotFound as e:
			return {"valid": False, "errors": [str(e)], "warnings": [], "overlap_info": {}}

		if existing is not None:
			errors.append(str(DuplicateError(request.external_id, request.source_system)))

		overlap_info = check_overlap(request.interval, bookings)
		if overlap_info["has_overlap"]:
			errors.append(f"Time slot {request.interval} conflicts with existing booking")

		if isinstance(window, Unavailable):
			warnings.append(f"Staff member is unavailable on {request.booking_date}: {window.reason}")
		elif not contains(window, request.interval):
			warnings.append(f"Booking {request.interval} is outside working hours {window}")

		slot_duration = staff.slot_duration_minutes or 15
		if request.interval.duration % slot_duration != 0:
			warnings.append(
				f"Duration ({request.interval.duration} min) is not a multiple of "
				f"the slot duration ({slot_duration} min)"
			)

		return {
			"valid": not errors,
			"errors": errors,
			"warnings": warnings,
			"overlap_info": overlap_info,
		}

	def _validation_reads(
		self,
		request: BookingRequest
	) -> Tuple[StaffMember, Optional[Booking], List[Booking], Resolution]:
		staff = self._require_staff(request.entity_id, request.staff_id)
		existing = self.bookings.find_by_external_id(request.external_id, request.source_system)
		bookings = self.bookings.get_bookings(staff.id, request.booking_date)
		window = self.resolver.resolve_window(staff, request.booking_date)
		return staff, existing, bookings, window
