"""
Roster module access.

Subscription / entitlement checks are owned by other apps. They plug in
through the `roster_access_validators` hook; each validator receives the
entity id and raises to deny access.
"""

import frappe
from frappe import _

from ff_roster.exceptions import RosterAccessDenied


def check_roster_access(entity_id: str) -> None:
    """
    Run every registered access validator for the entity.

    Raises:
        RosterAccessDenied: If a validator denies access
    """
    for method in frappe.get_hooks("roster_access_validators"):
        try:
            frappe.get_attr(method)(entity_id)
        except frappe.PermissionError as e:
            frappe.throw(
                _("Access denied to roster module: {0}").format(str(e)),
                RosterAccessDenied,
            )
