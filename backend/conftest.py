# backend/conftest.py
import os

# Settings are read at import time; set test values before any mentorhub import
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BOOKING_LOCK_ENABLED", "false")
os.environ.setdefault("NOTIFICATIONS_ASYNC_DISPATCH", "false")
os.environ.setdefault("CI", "true")
