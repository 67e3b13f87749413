# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Uniform JSON response envelope formatting.

Success responses look like ``{"status": "success", "data": {...}}``;
errors look like ``{"status": "error", "message": "..."}`` with optional
field errors and, outside production, debugging detail.
"""

from typing import Dict, List, Any, Optional
import traceback

from models.entities import Member, PaginationInfo
from models.enums import ResponseStatus


class EnvelopeFormatter:
    """Builds response envelopes for every endpoint."""

    def __init__(self, include_debug: bool = False):
        self.include_debug = include_debug

    def success(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Wrap a payload in a success envelope."""
        return {
            "status": ResponseStatus.SUCCESS.value,
            "data": data
        }

    def error(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        exception: Optional[BaseException] = None
    ) -> Dict[str, Any]:
        """
        Build an error envelope.

        Args:
            message: Stable error message
            errors: Optional field-level errors
            exception: Underlying exception, rendered only when debug detail is enabled

        Returns:
            Error envelope dictionary
        """
        body = {
            "status": ResponseStatus.ERROR.value,
            "message": message
        }

        if errors:
            body["errors"] = errors

        if exception is not None and self.include_debug:
            body["error"] = exception.__class__.__name__
            body["stack"] = "".join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            )

        return body

    def format_member(self, member: Member) -> Dict[str, Any]:
        """Envelope for a single stored member."""
        return self.success({"member": member.to_api()})

    def format_created_member(self, member: Member) -> Dict[str, Any]:
        """Envelope for a freshly created member."""
        return self.success({"member": member.to_signup_response()})

    def format_member_page(self, members: List[Member], pagination: PaginationInfo) -> Dict[str, Any]:
        """Envelope for a page of members."""
        return self.success({
            "members": [member.to_api() for member in members],
            "pagination": pagination.to_api()
        })


def create_envelope_formatter(environment: str) -> EnvelopeFormatter:
    """
    Create envelope formatter for the given environment.

    Args:
        environment: Deployment environment name

    Returns:
        EnvelopeFormatter that includes debug detail outside production
    """
    return EnvelopeFormatter(include_debug=environment != "production")
