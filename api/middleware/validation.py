# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation helpers for the membership endpoints.
Parses request bodies and query strings and hands them to the domain layer.
"""

from flask import request
from typing import Any, Dict, List
from pydantic import ValidationError
from opentelemetry import trace
import logging

from domain.members import translate_query, validate_signup, MAX_PAGE_SIZE
from middleware.error_handler import ValidationException
from models.entities import MemberCreate, QueryDescriptor

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ValidationMiddleware:
    """Request validation at the HTTP boundary; nothing invalid reaches the store."""

    def __init__(self, max_page_size: int = MAX_PAGE_SIZE):
        self.max_page_size = max_page_size

    def format_validation_errors(self, validation_error: ValidationError) -> List[Dict[str, Any]]:
        """
        Format Pydantic validation errors for API response.

        Args:
            validation_error: Pydantic ValidationError

        Returns:
            List of formatted error dictionaries
        """
        errors = []

        for error in validation_error.errors():
            field_path = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"]
            })

        return errors

    def json_body(self) -> Any:
        """
        Decode the JSON request body.

        Raises:
            ValidationException: If the body is not JSON
        """
        if not request.is_json:
            raise ValidationException(
                "Request must have Content-Type: application/json",
                [{
                    "field": "content-type",
                    "message": "Expected application/json",
                    "input": request.content_type
                }]
            )

        payload = request.get_json(silent=True)
        if payload is None:
            raise ValidationException(
                "Invalid JSON in request body",
                [{"field": "body", "message": "Malformed JSON"}]
            )
        return payload

    def signup_record(self) -> MemberCreate:
        """
        Validate and sanitize the signup payload of the current request.

        Raises:
            ValidationException: With field-level reasons on any failure
        """
        with tracer.start_as_current_span("validation.signup") as span:
            payload = self.json_body()

            try:
                result = validate_signup(payload)
            except ValidationError as e:
                # Sanitized values that no longer satisfy the record model
                span.set_attribute("validation.result", "record_error")
                raise ValidationException("Invalid signup payload", self.format_validation_errors(e))

            span.set_attribute("validation.result", "success" if result.success else "validation_error")

            if not result.success:
                logger.warning(
                    "Signup validation failed",
                    extra={
                        "path": request.path,
                        "method": request.method,
                        "reason": result.message,
                        "fields": [error.get("field") for error in result.errors]
                    }
                )

            return result.raise_for_errors()

    def list_query(self) -> QueryDescriptor:
        """
        Translate the current request's query string into a query descriptor.

        Raises:
            ValidationException: For disallowed sort fields or bad dates
        """
        with tracer.start_as_current_span("validation.list_query") as span:
            try:
                descriptor = translate_query(request.args, max_page_size=self.max_page_size)
            except ValidationException as e:
                span.set_attribute("validation.result", "validation_error")
                logger.warning(
                    "Query parameter validation failed",
                    extra={
                        "path": request.path,
                        "params": request.args.to_dict(),
                        "reason": e.message
                    }
                )
                raise

            span.set_attributes({
                "validation.result": "success",
                "pagination.page": descriptor.page,
                "pagination.limit": descriptor.limit,
                "sort.field": descriptor.sort_field
            })
            return descriptor
