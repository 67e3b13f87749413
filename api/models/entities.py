# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the Membership API.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
from pydantic import Field, field_validator
from .base import BaseEntity, CamelModel
from .enums import SortField, SortOrder


class MemberCreate(CamelModel):
    """Sanitized signup record, ready to be persisted."""

    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: str = Field(..., description="Lowercased, canonical email address")
    phone_number: str = Field(..., alias="phoneNumber")
    accepted_terms: bool = Field(..., alias="acceptedTerms")
    newsletter_subscription: bool = Field(default=False, alias="newsletterSubscription")

    def to_document(self, created_at: datetime) -> Dict[str, Any]:
        """Build the MongoDB document for this record."""
        document = self.model_dump(by_alias=True)
        document["createdAt"] = created_at
        return document


class Member(BaseEntity):
    """Persisted member record."""

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str = Field(...)
    phone_number: str = Field(..., alias="phoneNumber")
    accepted_terms: bool = Field(..., alias="acceptedTerms")
    newsletter_subscription: bool = Field(default=False, alias="newsletterSubscription")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Member":
        """Build a Member from a raw MongoDB document."""
        data = {key: value for key, value in document.items() if key not in ("_id", "__v")}
        data["id"] = str(document["_id"])
        return cls(**data)

    def to_signup_response(self) -> Dict[str, Any]:
        """Member as returned by the signup endpoint (terms flag omitted)."""
        data = self.to_api()
        data.pop("acceptedTerms", None)
        return data


class QueryDescriptor(CamelModel):
    """Resolved parameters for a single member list request."""

    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=10, ge=1, description="Items per page")
    sort_field: SortField = Field(default=SortField.CREATED_AT, alias="sortField")
    sort_order: SortOrder = Field(default=SortOrder.DESC, alias="sortOrder")
    search: Optional[str] = Field(None, description="Case-insensitive substring filter")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    filters: Dict[str, Any] = Field(default_factory=dict, description="MongoDB filter document")

    @field_validator("search")
    @classmethod
    def validate_search(cls, v):
        """Treat blank search text as no search."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def skip(self) -> int:
        """Number of documents to skip for the requested page."""
        return (self.page - 1) * self.limit

    @property
    def sort(self) -> List[Tuple[str, int]]:
        """MongoDB sort specification."""
        return [(SortField(self.sort_field).value, SortOrder(self.sort_order).direction)]


class PaginationInfo(CamelModel):
    """Pagination metadata for list responses."""

    current_page: int = Field(..., alias="currentPage")
    total_pages: int = Field(..., alias="totalPages")
    total_count: int = Field(..., alias="totalCount")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")
    limit: int = Field(...)
