from functools import wraps

from flask import current_app, g, request

from errors import Forbidden, Unauthenticated


def _extract_token() -> str:
    # only "Bearer <token>" in the Authorization header is accepted
    hdr = request.headers.get("Authorization", "")
    parts = hdr.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1].strip():
        return ""
    return parts[1].strip()


def auth_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        tok = _extract_token()
        if not tok:
            raise Unauthenticated("Missing token")
        tokens = current_app.extensions["clinic"].tokens
        g.user = tokens.verify(tok)
        return f(*args, **kwargs)
    return wrapper


def require_role(role: str):
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            user = g.get("user")
            if user is None or user.role != role:
                raise Forbidden("Forbidden")
            return f(*args, **kwargs)
        return wrapper
    return decorator


def current_user():
    return g.get("user")
