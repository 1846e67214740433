"""
Route guards. Each guard verifies the bearer access token and hands the caller's
identity to the view as keyword arguments (`auth`, and `admin` for admin
guards) instead of stashing it on shared request state.

Only `jwt_required` guards a route in this service (`/auth/me`). The role,
admin and permission guards are for the marketplace's admin and vendor
blueprints (category, vendor-approval and admin management), which mount on
top of this app.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import request, current_app

from models.admin_profile import AdminProfile
from models.enums import ADMIN_ROLES, UserRole
from services.errors import AuthError, ForbiddenError, InvalidTokenError


@dataclass(frozen=True)
class AuthContext:
    sub: str
    role: str | None


def _services():
    return current_app.extensions["auth_services"]


def authenticate_request() -> AuthContext:
    """Verify `Authorization: Bearer <token>`; every failure is a plain 401."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise InvalidTokenError()
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise InvalidTokenError()
    try:
        payload = _services().issuer.verify_access_token(token)
    except AuthError:
        # expired vs. forged are not told apart
        raise InvalidTokenError() from None
    return AuthContext(sub=payload.sub, role=payload.role)


def _load_active_admin(auth: AuthContext) -> AdminProfile:
    if auth.role not in ADMIN_ROLES:
        raise ForbiddenError("Forbidden: Admins only")
    session = _services().storage.get_session()
    profile = session.query(AdminProfile).filter(AdminProfile.user_id == auth.sub).first()
    if not profile or not profile.is_active:
        raise ForbiddenError("Forbidden: Inactive admin account")
    return profile


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            kwargs["auth"] = authenticate_request()
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(*required_roles):
    """
    Allow access if the token's role is ANY of the required roles.
    """
    req = {str(getattr(r, "value", r)) for r in required_roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = authenticate_request()
            if auth.role not in req:
                raise ForbiddenError()
            kwargs["auth"] = auth
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def admin_required():
    """ADMIN or SUPER_ADMIN with an active admin profile."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = authenticate_request()
            kwargs["admin"] = _load_active_admin(auth)
            kwargs["auth"] = auth
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def permission_required(*permissions):
    """
    Admin guard plus permission check. SUPER_ADMIN passes regardless;
    other admins need ANY of the listed permissions.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = authenticate_request()
            admin = _load_active_admin(auth)
            if auth.role != UserRole.SUPER_ADMIN.value and not admin.has_any_permission(*permissions):
                raise ForbiddenError("Forbidden: Insufficient permissions")
            kwargs["auth"] = auth
            kwargs["admin"] = admin
            return fn(*args, **kwargs)

        return wrapper

    return decorator
