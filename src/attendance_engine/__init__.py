"""Attendance & leave accrual engine.

Feature modules (attendance, corrections, leave, calendars, ...) each keep a
domain model, a repository port, a MySQL adapter and a service layer; a thin
Flask controller layer exposes them as JSON endpoints.
"""

__version__ = "1.0.0"
