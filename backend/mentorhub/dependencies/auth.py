# backend/mentorhub/dependencies/auth.py
"""
Caller identity.

Authentication happens upstream. The gateway forwards the verified identity
in ``X-User-Id`` / ``X-User-Role`` (and optionally ``X-User-Name``); a
request without a usable identity is rejected with 401 before any handler
runs.
"""

import logging
from typing import Optional

from fastapi import Header

from ..core.enums import RoleName
from ..core.exceptions import UnauthorizedException
from ..core.rbac import AccessContext

logger = logging.getLogger(__name__)


def get_access_context(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> AccessContext:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise UnauthorizedException("Authentication required").to_http_exception()

    try:
        role = RoleName((x_user_role or "").strip().lower())
    except ValueError:
        logger.warning(f"Rejected request from {user_id} with unknown role {x_user_role!r}")
        raise UnauthorizedException("Invalid identity role").to_http_exception()

    return AccessContext(user_id=user_id, role=role)
