app_name = "ff_roster"
app_title = "FF Roster"
app_publisher = "Furfield"
app_description = "Staff rostering, appointment slots and conflict-safe external bookings"
app_email = "dev@furfield.app"
app_license = "mit"

# Roster access
# -------------
# Dotted paths to callables `fn(entity_id) -> None` that raise when the entity
# has no access to the roster module (subscription / entitlement checks).
# Other apps can append to this list from their own hooks.py.

roster_access_validators = []

# Document Events
# ---------------

# doc_events = {
# 	"External Booking": {
# 		"on_update": "method",
# 	}
# }

# Testing
# -------

# before_tests = "ff_roster.install.before_tests"
