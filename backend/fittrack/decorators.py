# Overview: Request authentication and policy decorators for API routes.

from functools import wraps
from flask import request, g

from .errors import AuthenticationError
from .services import session_service, permission_service


def current_principal():
    principal = getattr(g, "principal", None)
    if principal is None:
        raise AuthenticationError("Authentication required")
    return principal


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.principal (session_service.Principal). Returns 401 through the
    app error handler when the header is missing or malformed, or when the
    token is invalid or expired. No database access happens here.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.principal = session_service.require_auth(request)
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Require authentication and membership in one of `roles` (403 otherwise)."""
    check = session_service.require_role(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            g.principal = check(request)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_access(resource: str, action: str):
    """
    Evaluate the policy table for the current principal.

    Must be stacked under @require_auth. Denied roles get 403; otherwise
    g.access is set to ALLOW or SELF for the view to apply row-level rules.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            g.access = permission_service.check_access(current_principal(), resource, action)
            return f(*args, **kwargs)
        return decorated_function
    return decorator
