# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Membership endpoints: CSRF token issuance, signup, listing and lookup.
"""

from flask import jsonify, current_app, make_response
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel, Field
import logging

from domain.members import build_pagination
from middleware.csrf import require_csrf, set_csrf_cookie
from models.responses import (
    CsrfTokenResponse,
    MemberEnvelope,
    MemberListEnvelope,
    ErrorResponse
)

# Set up logging and tracing
logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class MemberPath(BaseModel):
    """Path parameters for single-member lookup."""

    member_id: str = Field(..., description="Member ID")


# Create API blueprint
membership_tag = Tag(name="Membership", description="Member signup and retrieval")
membership_bp = APIBlueprint(
    'membership',
    __name__,
    url_prefix='/api/v1/membership',
    abp_tags=[membership_tag]
)


@membership_bp.get('/csrf-token', responses={"200": CsrfTokenResponse})
def get_csrf_token():
    """
    Issue an anti-forgery token.

    The token is returned in the body and set as an httpOnly, SameSite=Strict
    cookie; signup requests echo it back in the X-CSRF-Token header.
    """
    csrf_service = current_app.csrf_service
    token = csrf_service.issue()

    response = make_response(jsonify({"token": token}), 200)
    return set_csrf_cookie(
        response,
        token,
        secure=current_app.config['ENVIRONMENT'] == 'production',
        max_age=csrf_service.ttl_seconds
    )


@membership_bp.post(
    '/signup',
    responses={"201": MemberEnvelope, "400": ErrorResponse, "403": ErrorResponse, "409": ErrorResponse}
)
@require_csrf
def signup():
    """
    Register a new member.

    The payload is validated and sanitized before anything is written;
    a second signup with the same normalized email returns 409.
    """
    with tracer.start_as_current_span(
        "membership.signup",
        attributes={"operation": "signup"}
    ) as span:
        record = current_app.validation_middleware.signup_record()

        member = current_app.member_store.create(record)

        logger.info(
            "Member created successfully",
            extra={
                "member_id": member.id,
                "newsletter_subscription": member.newsletter_subscription
            }
        )

        span.set_attribute("member.id", member.id)
        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.envelope_formatter.format_created_member(member)), 201


@membership_bp.get('', responses={"200": MemberListEnvelope, "400": ErrorResponse})
def list_members():
    """
    List members with pagination, sorting, search and creation-date filtering.

    Query parameters: page, limit, sortField, sortOrder, search, startDate, endDate.
    """
    with tracer.start_as_current_span(
        "membership.list",
        attributes={"operation": "list_members"}
    ) as span:
        descriptor = current_app.validation_middleware.list_query()

        span.set_attributes({
            "pagination.page": descriptor.page,
            "pagination.limit": descriptor.limit,
            "search.enabled": descriptor.search is not None
        })

        members, total_count = current_app.member_store.find_page(descriptor)
        pagination = build_pagination(descriptor.page, descriptor.limit, total_count)

        logger.info(
            "Members listed successfully",
            extra={
                "total_count": total_count,
                "page": descriptor.page,
                "returned": len(members)
            }
        )

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.envelope_formatter.format_member_page(members, pagination)), 200


@membership_bp.get(
    '/<member_id>',
    responses={"200": MemberEnvelope, "400": ErrorResponse, "404": ErrorResponse}
)
def get_member(path: MemberPath):
    """
    Get member by ID.
    """
    with tracer.start_as_current_span(
        "membership.get",
        attributes={"operation": "get_member", "member.id": path.member_id}
    ) as span:
        member = current_app.member_store.find_by_id(path.member_id)

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.envelope_formatter.format_member(member)), 200
