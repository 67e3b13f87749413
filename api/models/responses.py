# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response envelope models for API endpoints.

Every response carries a top-level ``status`` of ``success`` or ``error``;
error responses add a ``message``.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

from .entities import PaginationInfo


class MemberResponse(BaseModel):
    """Member as rendered by the API."""

    id: str = Field(..., description="Member ID")
    firstName: str = Field(..., description="First name")
    lastName: str = Field(..., description="Last name")
    email: str = Field(..., description="Normalized email address")
    phoneNumber: str = Field(..., description="Phone number")
    acceptedTerms: Optional[bool] = Field(None, description="Terms acceptance flag")
    newsletterSubscription: bool = Field(False, description="Newsletter opt-in")
    createdAt: datetime = Field(..., description="Creation timestamp")


class MemberData(BaseModel):
    """Payload of single-member responses."""

    member: MemberResponse


class MemberListData(BaseModel):
    """Payload of member list responses."""

    members: List[MemberResponse] = Field(default_factory=list)
    pagination: PaginationInfo


class MemberEnvelope(BaseModel):
    """Success envelope wrapping a single member."""

    status: str = Field("success", description="Response status")
    data: MemberData


class MemberListEnvelope(BaseModel):
    """Success envelope wrapping a page of members."""

    status: str = Field("success", description="Response status")
    data: MemberListData


class CsrfTokenResponse(BaseModel):
    """Anti-forgery token response."""

    token: str = Field(..., description="Signed CSRF token")


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="success when healthy, error otherwise")
    timestamp: str = Field(..., description="Check timestamp (ISO 8601)")
    environment: str = Field(..., description="Deployment environment name")
    database: Dict[str, Any] = Field(default_factory=dict, description="Store health details")


class ErrorResponse(BaseModel):
    """Error envelope."""

    status: str = Field("error", description="Response status")
    message: str = Field(..., description="Stable, human-readable error message")
    errors: Optional[List[Dict[str, Any]]] = Field(None, description="Field-level validation errors")
