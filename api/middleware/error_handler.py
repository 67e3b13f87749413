# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with uniform JSON envelopes.
Provides the application exception taxonomy and centralized error rendering.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Dict, Any, List, Optional, Tuple
from opentelemetry import trace
import logging

from services.envelope import EnvelopeFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class CustomException(Exception):
    """Base class for custom application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for malformed or missing input."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class InvalidIdException(CustomException):
    """Exception for identifiers that do not match the store's ID shape."""

    def __init__(self, message: str = "Invalid ID format"):
        super().__init__(message, 400, "invalid-id")


class ForbiddenException(CustomException):
    """Exception for anti-forgery token failures."""

    def __init__(self, message: str = "Invalid CSRF token"):
        super().__init__(message, 403, "forbidden")


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class DuplicateKeyException(CustomException):
    """Exception for unique-constraint violations."""

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message, 409, "duplicate-key")


class StoreException(CustomException):
    """Exception for connectivity, timeout and unexpected store failures."""

    def __init__(self, message: str = "Internal server error", retryable: bool = True):
        super().__init__(message, 500, "store-error")
        self.retryable = retryable


class ErrorHandlerMiddleware:
    """Centralized error handling middleware rendering the response envelope."""

    def __init__(self, app: Flask, formatter: EnvelopeFormatter):
        self.app = app
        self.formatter = formatter
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(CustomException)
        def handle_custom_exception(error: CustomException):
            return self.handle_custom_exception(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            return self.handle_http_exception(error)

        # Handle generic exceptions
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def _request_extra(self) -> Dict[str, Any]:
        return {
            "path": request.path,
            "method": request.method,
            "user_agent": request.headers.get('User-Agent'),
            "ip_address": request.remote_addr
        }

    def handle_custom_exception(self, error: CustomException) -> Tuple[Any, int]:
        """
        Handle application exceptions raised by routes, domain and store layers.

        Args:
            error: Application exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            errors: Optional[List[Dict[str, Any]]] = None
            if isinstance(error, ValidationException):
                errors = error.validation_errors

            if error.status_code >= 500:
                span.record_exception(error)
                logger.error(
                    f"Server error: {error.error_type}",
                    extra={
                        "error_type": error.error_type,
                        "status_code": error.status_code,
                        "error_message": error.message,
                        **self._request_extra()
                    },
                    exc_info=True
                )
                body = self.formatter.error(error.message, errors, exception=error)
            else:
                logger.warning(
                    f"Client error: {error.error_type}",
                    extra={
                        "error_type": error.error_type,
                        "status_code": error.status_code,
                        "error_message": error.message,
                        **self._request_extra()
                    }
                )
                body = self.formatter.error(error.message, errors)

            return jsonify(body), error.status_code

    def handle_http_exception(self, error: HTTPException) -> Tuple[Any, int]:
        """
        Handle werkzeug HTTP exceptions (unknown routes, bad methods, oversized bodies).

        Args:
            error: HTTP exception

        Returns:
            Tuple of (JSON response, status code)
        """
        status_code = error.code or 500

        if status_code == 404:
            message = f"Can't find {request.path} on this server!"
        elif status_code == 413:
            message = "Request body too large"
        else:
            message = error.description or error.name

        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"HTTP error: {error.name}",
            extra={
                "status_code": status_code,
                "detail": message,
                **self._request_extra()
            }
        )

        return jsonify(self.formatter.error(message)), status_code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (JSON response, status code)
        """
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    **self._request_extra()
                },
                exc_info=True
            )

            body = self.formatter.error("Internal server error", exception=error)
            return jsonify(body), 500
