# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
CSRF protection middleware for state-changing endpoints.
"""

from functools import wraps
from flask import request, current_app, Response
from typing import Callable
import logging

from middleware.error_handler import ForbiddenException
from services.csrf import CsrfTokenService, CSRF_COOKIE_NAME, CSRF_HEADER_NAME

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset(["GET", "HEAD", "OPTIONS"])


def set_csrf_cookie(response: Response, token: str, secure: bool, max_age: int) -> Response:
    """Attach the cookie half of a double-submit token."""
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        samesite="Strict",
        secure=secure
    )
    return response


def check_csrf(csrf_service: CsrfTokenService) -> None:
    """
    Verify the current request's CSRF token pair.

    Raises:
        ForbiddenException: If the header token and cookie token do not verify
    """
    if request.method in SAFE_METHODS:
        return

    request_token = request.headers.get(CSRF_HEADER_NAME)
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME)

    if not csrf_service.verify(request_token, cookie_token):
        logger.warning(
            "CSRF verification failed",
            extra={
                "path": request.path,
                "method": request.method,
                "ip_address": request.remote_addr,
                "has_header_token": bool(request_token),
                "has_cookie_token": bool(cookie_token)
            }
        )
        raise ForbiddenException("Invalid CSRF token")


def require_csrf(f: Callable) -> Callable:
    """Enforce CSRF verification when CSRF_ENABLED is set."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_app.config.get('CSRF_ENABLED', False):
            check_csrf(current_app.csrf_service)
        return f(*args, **kwargs)
    return decorated_function
