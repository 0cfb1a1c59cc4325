# backend/mentorhub/core/enums.py
"""
Core enums for the MentorHub platform.

Roles, permissions and the resource/action vocabulary used by the
permission checker. The role -> permission mapping itself lives in
``mentorhub.core.rbac``.
"""

from enum import Enum


class RoleName(str, Enum):
    """Coarse identity classification. Immutable per user."""

    STUDENT = "student"
    MENTOR = "mentor"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class PermissionName(str, Enum):
    """
    Fine-grained capabilities.

    Permissions are never combined at runtime; a role's set is always looked
    up from the static catalog.
    """

    # Profile permissions
    VIEW_PROFILE = "view_profile"
    EDIT_PROFILE = "edit_profile"
    DELETE_PROFILE = "delete_profile"

    # Session permissions
    BOOK_SESSION = "book_session"
    VIEW_OWN_SESSIONS = "view_own_sessions"
    VIEW_ALL_SESSIONS = "view_all_sessions"
    MANAGE_SESSIONS = "manage_sessions"
    CANCEL_SESSION = "cancel_session"
    RESCHEDULE_SESSION = "reschedule_session"

    # Mentor-specific permissions
    SET_AVAILABILITY = "set_availability"
    MANAGE_STUDENT_SESSIONS = "manage_student_sessions"
    VIEW_MENTOR_ANALYTICS = "view_mentor_analytics"
    RESPOND_TO_REVIEWS = "respond_to_reviews"

    # Review permissions
    WRITE_REVIEWS = "write_reviews"
    EDIT_OWN_REVIEWS = "edit_own_reviews"
    DELETE_OWN_REVIEWS = "delete_own_reviews"
    VIEW_REVIEWS = "view_reviews"
    MODERATE_REVIEWS = "moderate_reviews"
    DELETE_ANY_REVIEW = "delete_any_review"

    # Payment permissions
    MAKE_PAYMENTS = "make_payments"
    VIEW_OWN_PAYMENTS = "view_own_payments"
    VIEW_ALL_PAYMENTS = "view_all_payments"
    MANAGE_PAYMENTS = "manage_payments"

    # Admin permissions
    VIEW_ALL_USERS = "view_all_users"
    MANAGE_USERS = "manage_users"
    VIEW_MENTOR_PROFILES = "view_mentor_profiles"
    VIEW_ANALYTICS = "view_analytics"
    MODERATE_CONTENT = "moderate_content"
    MANAGE_DISPUTES = "manage_disputes"
    MANAGE_PLATFORM = "manage_platform"

    # Super admin permissions
    MANAGE_ADMINS = "manage_admins"
    SYSTEM_SETTINGS = "system_settings"
    DATABASE_ACCESS = "database_access"


class ResourceType(str, Enum):
    USER = "user"
    SESSION = "session"
    REVIEW = "review"
    PAYMENT = "payment"
    ANALYTICS = "analytics"
    PLATFORM = "platform"


class ActionType(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
