"""
Shared utilities for the roster API: input validators and module access.
"""

from .access import check_roster_access
from .validators import (
    validate_date_string,
    validate_docname,
    validate_duration,
    validate_time_string,
)

__all__ = [
    "check_roster_access",
    "validate_date_string",
    "validate_docname",
    "validate_duration",
    "validate_time_string",
]
