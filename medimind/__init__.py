"""
MediMind - Medication Reminders

Layers:
- core:   pure active-window / due / overdue evaluation
- memory: schedule storage (JSON file, REST)
- agents: reminder service and minute ticker
"""

__version__ = "0.1.0"
