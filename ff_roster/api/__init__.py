"""
FF Roster API

Whitelisted endpoints live in slots.py; shared validators and access checks
in shared/.
"""
