from __future__ import annotations

import hmac
import re
import uuid
from functools import wraps

from flask import Flask, current_app, g, request

from ..core.constants import DEFAULT_USER_COOKIE_MAX_AGE_DAYS, USER_COOKIE_NAME

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def current_user_id() -> str:
    return g.user_id


def base_url() -> str:
    """Absolute site URL (scheme + host) as seen by the visitor behind any proxy."""
    return request.host_url.rstrip("/")


def admin_required(view):
    """HTTP Basic authentication against ADMIN_USER / ADMIN_PASS."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        auth = request.authorization
        expected_user = str(current_app.config.get("ADMIN_USER", ""))
        expected_pass = str(current_app.config.get("ADMIN_PASS", ""))

        ok = (
            auth is not None
            and auth.type == "basic"
            and hmac.compare_digest(str(auth.username or ""), expected_user)
            and hmac.compare_digest(str(auth.password or ""), expected_pass)
        )
        if not ok:
            current_app.logger.info(f"Admin authentication failed for {request.path}")
            return (
                "Authentication required",
                401,
                {"WWW-Authenticate": 'Basic realm="Admin Area"'},
            )
        return view(*args, **kwargs)

    return wrapper


def register(app: Flask) -> None:
    """Give every visitor a stable anonymous id kept in the userId cookie."""

    @app.before_request
    def _load_user_id():
        user_id = request.cookies.get(USER_COOKIE_NAME, "")
        if _USER_ID_RE.match(user_id):
            g.user_id = user_id
            g.issue_user_cookie = False
        else:
            g.user_id = str(uuid.uuid4())
            g.issue_user_cookie = True

    @app.after_request
    def _issue_user_cookie(response):
        if g.get("issue_user_cookie"):
            max_age_days = int(app.config.get("USER_COOKIE_MAX_AGE_DAYS", DEFAULT_USER_COOKIE_MAX_AGE_DAYS))
            response.set_cookie(
                USER_COOKIE_NAME,
                g.user_id,
                max_age=max_age_days * 24 * 60 * 60,
                httponly=True,
                samesite="Lax",
                secure=bool(app.config.get("USER_COOKIE_SECURE", False)),
                path="/",
            )
        return response
