"""
Scheduling Services Module

This module provides the core logic for staff appointment slots:
- Interval model (intervals.py)
- Working window resolution (resolver.py)
- Slot generation (slots.py)
- Overlap detection (overlap.py)
- Listing and booking admission (engine.py)
- Frappe-backed repositories (store.py)
"""
