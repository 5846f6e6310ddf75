# khanya/utils/auth.py
import logging
from functools import wraps

from flask import g, request

from ..errors import Forbidden, Unauthorized
from ..models import UserRole

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return ""
    return header[len("Bearer "):].strip()


def require_admin(auth_connector) -> dict:
    """
    Resolve the caller's bearer token and check the admin role.

    Args:
        auth_connector: connector able to turn an access token into a user

    Returns:
        dict: the authenticated user

    Raises:
        Unauthorized: no token, or the token does not resolve to a user
        Forbidden: the user does not hold the admin role
    """
    token = bearer_token()
    if not token:
        raise Unauthorized("Unauthorized: missing authorization header")

    user = auth_connector.get_user(token)
    if not user or not user.get("id"):
        raise Unauthorized("Unauthorized")

    if not UserRole.has_role(str(user["id"]), ADMIN_ROLE):
        logger.warning(f"User {user['id']} attempted an admin action without the admin role")
        raise Forbidden("Unauthorized: Admin access required")
    return user


def admin_required(view):
    """Route decorator gating a view on the admin role."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        from ..services import get_services

        g.current_user = require_admin(get_services().auth)
        return view(*args, **kwargs)

    return wrapper
