# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the Membership API.
"""

# Base models
from .base import BaseEntity, CamelModel

# Enumerations
from .enums import SortField, SortOrder, ResponseStatus

# Core entities
from .entities import (
    Member,
    MemberCreate,
    QueryDescriptor,
    PaginationInfo
)

# Response models
from .responses import (
    MemberResponse,
    MemberEnvelope,
    MemberListEnvelope,
    CsrfTokenResponse,
    HealthCheckResponse,
    ErrorResponse
)

__all__ = [
    # Base models
    "BaseEntity",
    "CamelModel",

    # Enumerations
    "SortField",
    "SortOrder",
    "ResponseStatus",

    # Core entities
    "Member",
    "MemberCreate",
    "QueryDescriptor",
    "PaginationInfo",

    # Response models
    "MemberResponse",
    "MemberEnvelope",
    "MemberListEnvelope",
    "CsrfTokenResponse",
    "HealthCheckResponse",
    "ErrorResponse"
]
