# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Member store gateway - the only component performing I/O against MongoDB.
"""

import logging
from datetime import datetime, timezone
from typing import List, Tuple
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError
from bson import ObjectId
from opentelemetry import trace

from models.entities import Member, MemberCreate, QueryDescriptor
from middleware.error_handler import (
    DuplicateKeyException,
    InvalidIdException,
    NotFoundException,
    StoreException
)
from services.mongodb import MongoDBService

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

MEMBERS_COLLECTION = "members"
MEMBER_PROJECTION = {"__v": 0}


class MemberStore:
    """Create, fetch and page through members."""

    def __init__(self, mongodb_service: MongoDBService, collection_name: str = MEMBERS_COLLECTION):
        self.mongodb_service = mongodb_service
        self.collection_name = collection_name

    @property
    def collection(self) -> Collection:
        return self.mongodb_service.get_collection(self.collection_name)

    def create(self, record: MemberCreate) -> Member:
        """
        Insert a new member.

        Email uniqueness is enforced by the unique index; a concurrent
        duplicate loses with DuplicateKeyException.

        Args:
            record: Sanitized signup record

        Returns:
            Stored member

        Raises:
            DuplicateKeyException: If the email is already registered
            StoreException: On connectivity, timeout or unexpected store failure
        """
        with tracer.start_as_current_span("db.members.insert_one") as span:
            span.set_attributes({
                "db.collection": self.collection_name,
                "db.operation": "insert_one"
            })

            # BSON dates carry millisecond precision
            now = datetime.now(timezone.utc)
            created_at = now.replace(microsecond=now.microsecond // 1000 * 1000)
            document = record.to_document(created_at)

            try:
                result = self.collection.insert_one(document)
            except DuplicateKeyError:
                span.set_attribute("db.duplicate_key", True)
                logger.warning(
                    "Duplicate member email rejected",
                    extra={"collection": self.collection_name}
                )
                raise DuplicateKeyException("Email already exists")
            except PyMongoError as e:
                span.record_exception(e)
                logger.error(f"Failed to create member: {e}")
                raise StoreException("Internal server error")

            document["_id"] = result.inserted_id
            logger.info(f"Created member {result.inserted_id}")
            return Member.from_document(document)

    def find_by_id(self, member_id: str) -> Member:
        """
        Fetch one member by ID.

        Raises:
            InvalidIdException: If the ID is not a valid ObjectId (no store access)
            NotFoundException: If no member has this ID
            StoreException: On store failure
        """
        if not ObjectId.is_valid(member_id):
            raise InvalidIdException("Invalid ID format")

        with tracer.start_as_current_span("db.members.find_one") as span:
            span.set_attributes({
                "db.collection": self.collection_name,
                "db.operation": "find_one"
            })

            try:
                document = self.collection.find_one({"_id": ObjectId(member_id)}, MEMBER_PROJECTION)
            except PyMongoError as e:
                span.record_exception(e)
                logger.error(f"Failed to find member {member_id}: {e}")
                raise StoreException("Internal server error")

            span.set_attribute("db.found", document is not None)

        if document is None:
            logger.debug(f"Member {member_id} not found")
            raise NotFoundException("Member not found")

        return Member.from_document(document)

    def find_page(self, descriptor: QueryDescriptor) -> Tuple[List[Member], int]:
        """
        Run the filtered, sorted, paginated query and a count query.

        The count and the page are separate reads and may reflect slightly
        different moments under concurrent writes.

        Returns:
            Tuple of (members on the page, total matching count)

        Raises:
            StoreException: On store failure
        """
        with tracer.start_as_current_span("db.members.paginate") as span:
            span.set_attributes({
                "db.collection": self.collection_name,
                "db.operation": "paginate",
                "pagination.page": descriptor.page,
                "pagination.limit": descriptor.limit
            })

            try:
                total_count = self.collection.count_documents(descriptor.filters)
                cursor = (
                    self.collection.find(descriptor.filters, MEMBER_PROJECTION)
                    .sort(descriptor.sort)
                    .skip(descriptor.skip)
                    .limit(descriptor.limit)
                )
                documents = list(cursor)
            except PyMongoError as e:
                span.record_exception(e)
                logger.error(f"Failed to paginate members: {e}")
                raise StoreException("Internal server error")

            span.set_attributes({
                "db.total_count": total_count,
                "db.returned_count": len(documents)
            })

        logger.debug(f"Paginated {len(documents)} members (page {descriptor.page})")
        return [Member.from_document(doc) for doc in documents], total_count

    def ensure_indexes(self) -> None:
        """Create the unique email index and the createdAt index."""
        logger.info("Creating member indexes...")
        self.collection.create_index([("email", ASCENDING)], unique=True, name="email_unique")
        self.collection.create_index([("createdAt", DESCENDING)], name="created_at_desc")
        logger.info("Member indexes created successfully")
