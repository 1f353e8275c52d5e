"""
Frappe exceptions raised by the roster app.

Each one carries the HTTP status returned to API callers.
"""

import frappe


class BookingOverlapError(frappe.ValidationError):
	"""Un External Booking activo se solapa con otro del mismo staff y fecha."""

	http_status_code = 409


class RosterUpstreamError(frappe.ValidationError):
	"""Una fuente de datos no respondió; el cliente puede reintentar."""

	http_status_code = 503


class RosterAccessDenied(frappe.PermissionError):
	"""La entity no tiene acceso al módulo de roster."""

	http_status_code = 403
