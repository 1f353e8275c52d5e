"""
Roster API Validators

Input validation for the roster endpoints. Every validator raises
frappe.ValidationError through frappe.throw and returns the normalized value.
"""

import re
from datetime import date

import frappe
from frappe import _
from frappe.utils import cint, getdate

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 480


def validate_date_string(date_str: str, field_name: str = "date") -> date:
    """
    Validate date string format (YYYY-MM-DD).

    Args:
        date_str: Date string to validate
        field_name: Name of field for error messages

    Returns:
        date: Parsed civil date

    Raises:
        frappe.ValidationError: If date format is invalid
    """
    if not date_str:
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)

    date_str = str(date_str).strip()

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        frappe.throw(
            _("Invalid {0} format. Use YYYY-MM-DD").format(field_name), frappe.ValidationError
        )

    try:
        return getdate(date_str)
    except Exception:
        frappe.throw(_("Invalid {0}: {1}").format(field_name, date_str), frappe.ValidationError)


def validate_time_string(time_str: str, field_name: str = "time") -> str:
    """
    Validate time string format (HH:MM, 24h). 24:00 is accepted as an end time.

    Returns:
        str: Validated time string
    """
    if not time_str:
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)

    time_str = str(time_str).strip()

    if not re.match(r"^(([0-1]?[0-9]|2[0-3]):[0-5][0-9]|24:00)$", time_str):
        frappe.throw(
            _("Invalid {0} format. Use HH:MM").format(field_name), frappe.ValidationError
        )

    return time_str


def validate_duration(duration, field_name: str = "duration") -> int:
    """
    Validate an appointment duration in minutes (5-480).

    Returns:
        int: Duration in minutes
    """
    if duration in (None, ""):
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)

    if not re.match(r"^\d+$", str(duration).strip()):
        frappe.throw(_("{0} must be a whole number of minutes").format(field_name), frappe.ValidationError)

    minutes = cint(duration)
    if not MIN_DURATION_MINUTES <= minutes <= MAX_DURATION_MINUTES:
        frappe.throw(
            _("{0} must be between {1} and {2} minutes").format(
                field_name, MIN_DURATION_MINUTES, MAX_DURATION_MINUTES
            ),
            frappe.ValidationError,
        )

    return minutes


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Ensures the name is not too long and doesn't contain injection patterns.

    Raises:
        frappe.ValidationError: If name is invalid
    """
    if not name:
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)

    name = str(name).strip()

    if len(name) > 140:
        frappe.throw(_("{0} is too long").format(field_name), frappe.ValidationError)

    dangerous_patterns = [
        r"<script",
        r"javascript:",
        r"SELECT\s+",
        r"INSERT\s+",
        r"UPDATE\s+",
        r"DELETE\s+",
        r"DROP\s+",
        r"UNION\s+",
        r"--",
        r";",
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_("Invalid {0}").format(field_name), frappe.ValidationError)

    return name
