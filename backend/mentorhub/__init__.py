"""MentorHub backend: role-based access control and mentor session booking."""

__version__ = "0.1.0"
