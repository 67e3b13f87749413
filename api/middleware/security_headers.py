# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Security response headers for every API response.
"""

from flask import Flask, request
from typing import Dict, Optional

DOCS_PREFIX = '/openapi'

DEFAULT_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'SAMEORIGIN',
    'X-XSS-Protection': '0',
    'X-DNS-Prefetch-Control': 'off',
    'X-Download-Options': 'noopen',
    'X-Permitted-Cross-Domain-Policies': 'none',
    'Referrer-Policy': 'no-referrer',
    'Cross-Origin-Opener-Policy': 'same-origin',
    'Cross-Origin-Resource-Policy': 'same-origin'
}

CONTENT_SECURITY_POLICY = "default-src 'none'; frame-ancestors 'self'; base-uri 'self'"
HSTS_VALUE = 'max-age=15552000; includeSubDomains'


class SecurityHeadersMiddleware:
    """Adds hardening headers to responses."""

    def __init__(self, app: Flask, headers: Optional[Dict[str, str]] = None, hsts: bool = False):
        """
        Initialize security headers middleware.

        Args:
            app: Flask application
            headers: Headers to set; defaults to DEFAULT_HEADERS
            hsts: Whether to send Strict-Transport-Security
        """
        self.app = app
        self.headers = dict(DEFAULT_HEADERS if headers is None else headers)
        if hsts:
            self.headers['Strict-Transport-Security'] = HSTS_VALUE

        self.app.after_request(self.add_security_headers)

    def add_security_headers(self, response):
        """Set hardening headers without overriding ones a route already set."""
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)

        # The docs UI loads its own scripts and styles
        if not request.path.startswith(DOCS_PREFIX):
            response.headers.setdefault('Content-Security-Policy', CONTENT_SECURITY_POLICY)

        return response


def configure_security_headers(app: Flask, **kwargs) -> SecurityHeadersMiddleware:
    """
    Configure security headers for Flask application.

    Args:
        app: Flask application
        **kwargs: SecurityHeadersMiddleware options

    Returns:
        Configured SecurityHeadersMiddleware instance
    """
    return SecurityHeadersMiddleware(app, **kwargs)
