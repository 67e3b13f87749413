# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
CORS (Cross-Origin Resource Sharing) middleware for the signup frontend.
"""

from flask import Flask, request, make_response
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class CORSMiddleware:
    """CORS middleware for Flask applications."""

    def __init__(
        self,
        app: Flask,
        allowed_origins: Optional[List[str]] = None,
        allowed_methods: Optional[List[str]] = None,
        allowed_headers: Optional[List[str]] = None,
        allow_credentials: bool = True,
        max_age: int = 86400  # 24 hours
    ):
        """
        Initialize CORS middleware.

        Args:
            app: Flask application
            allowed_origins: List of allowed origins; defaults to CORS_ORIGIN from app config
            allowed_methods: List of allowed HTTP methods
            allowed_headers: List of allowed headers
            allow_credentials: Whether to allow credentials (cookies carry the CSRF token)
            max_age: Preflight cache duration in seconds
        """
        self.app = app
        self.allowed_origins = allowed_origins or self._get_default_origins()
        self.allowed_methods = allowed_methods or ['GET', 'POST', 'OPTIONS', 'HEAD']
        self.allowed_headers = allowed_headers or [
            'Accept',
            'Content-Type',
            'X-CSRF-Token',
            'X-Requested-With',
            'X-Request-ID'
        ]
        self.expose_headers = ['Content-Length', 'Content-Type', 'X-Trace-Id']
        self.allow_credentials = allow_credentials
        self.max_age = max_age

        self.register_cors_handlers()

    def _get_default_origins(self) -> List[str]:
        """Get default allowed origins from configuration."""
        origins = self.app.config.get('CORS_ORIGIN', 'http://localhost:3000')
        return [origin.strip() for origin in origins.split(',') if origin.strip()]

    def is_origin_allowed(self, origin: str) -> bool:
        """
        Check if origin is allowed.

        Args:
            origin: Request origin

        Returns:
            True if origin is allowed
        """
        if not origin:
            return False

        if origin in self.allowed_origins:
            return True

        return '*' in self.allowed_origins and not self.allow_credentials

    def add_cors_headers(self, response, origin: str):
        """
        Add CORS headers to response.

        Args:
            response: Flask response object
            origin: Request origin
        """
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Vary'] = 'Origin'

        if self.allow_credentials:
            response.headers['Access-Control-Allow-Credentials'] = 'true'

        response.headers['Access-Control-Allow-Methods'] = ', '.join(self.allowed_methods)
        response.headers['Access-Control-Allow-Headers'] = ', '.join(self.allowed_headers)
        response.headers['Access-Control-Expose-Headers'] = ', '.join(self.expose_headers)
        response.headers['Access-Control-Max-Age'] = str(self.max_age)

        return response

    def register_cors_handlers(self):
        """Register CORS handlers with Flask application."""

        @self.app.before_request
        def handle_preflight():
            """Handle CORS preflight requests."""
            if request.method == 'OPTIONS':
                origin = request.headers.get('Origin')

                if not origin or not self.is_origin_allowed(origin):
                    logger.warning(f"CORS preflight rejected for origin: {origin}")
                    return make_response('', 403)

                response = make_response('', 204)
                self.add_cors_headers(response, origin)
                return response

        @self.app.after_request
        def add_cors_headers_to_response(response):
            """Add CORS headers to allowed cross-origin responses."""
            origin = request.headers.get('Origin')

            if origin and self.is_origin_allowed(origin):
                self.add_cors_headers(response, origin)
            elif origin and request.method != 'OPTIONS':
                logger.warning(f"CORS rejected for origin: {origin}")

            return response


def configure_cors(app: Flask, **kwargs) -> CORSMiddleware:
    """
    Configure CORS for Flask application.

    Args:
        app: Flask application
        **kwargs: CORS configuration options

    Returns:
        Configured CORSMiddleware instance
    """
    return CORSMiddleware(app, **kwargs)
