# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the member store gateway.
"""

import pytest
from unittest.mock import Mock, MagicMock
from datetime import datetime, timezone
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError, OperationFailure

from domain.members import translate_query, validate_signup
from middleware.error_handler import (
    DuplicateKeyException,
    InvalidIdException,
    NotFoundException,
    StoreException
)
from services.members import MemberStore, MEMBER_PROJECTION


@pytest.fixture
def store(mock_mongodb_service):
    return MemberStore(mock_mongodb_service)


@pytest.fixture
def signup_record(sample_signup_payload):
    return validate_signup(sample_signup_payload).record


class TestMemberStoreCreate:
    """Test member insertion."""

    def test_create_success(self, store, members_collection, signup_record):
        """Inserted members come back with an ID and creation time."""
        inserted_id = ObjectId()
        members_collection.insert_one.return_value = Mock(inserted_id=inserted_id)

        member = store.create(signup_record)

        assert member.id == str(inserted_id)
        assert member.email == "john.doe@example.com"
        assert member.created_at.tzinfo is not None
        assert member.created_at.microsecond % 1000 == 0

        document = members_collection.insert_one.call_args[0][0]
        assert document["firstName"] == "John"
        assert document["acceptedTerms"] is True
        assert isinstance(document["createdAt"], datetime)

    def test_create_duplicate_email(self, store, members_collection, signup_record):
        members_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key error")

        with pytest.raises(DuplicateKeyException) as exc_info:
            store.create(signup_record)

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Email already exists"

    def test_create_store_timeout(self, store, members_collection, signup_record):
        """Timeouts surface as a generic store failure."""
        members_collection.insert_one.side_effect = ServerSelectionTimeoutError("timed out")

        with pytest.raises(StoreException) as exc_info:
            store.create(signup_record)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal server error"


class TestMemberStoreFindById:
    """Test single-member lookup."""

    @pytest.mark.parametrize("member_id", ["abc", "123", "65a1b2c3d4e5f6a7b8c9d0eZ", ""])
    def test_invalid_id_never_reaches_store(self, store, members_collection, member_id):
        with pytest.raises(InvalidIdException):
            store.find_by_id(member_id)

        members_collection.find_one.assert_not_called()

    def test_not_found(self, store, members_collection):
        members_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            store.find_by_id(str(ObjectId()))

        assert exc_info.value.message == "Member not found"

    def test_found(self, store, members_collection, sample_member_document):
        members_collection.find_one.return_value = sample_member_document
        member_id = str(sample_member_document["_id"])

        member = store.find_by_id(member_id)

        assert member.id == member_id
        assert member.first_name == "Jane"
        members_collection.find_one.assert_called_once_with(
            {"_id": ObjectId(member_id)}, MEMBER_PROJECTION
        )

    def test_store_failure(self, store, members_collection):
        members_collection.find_one.side_effect = OperationFailure("boom")

        with pytest.raises(StoreException):
            store.find_by_id(str(ObjectId()))


class TestMemberStoreFindPage:
    """Test paginated listing."""

    def _cursor(self, members_collection, documents):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.skip.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.__iter__.return_value = iter(documents)
        members_collection.find.return_value = cursor
        return cursor

    def test_find_page(self, store, members_collection, sample_member_document):
        """Filter, sort, skip and limit all come from the descriptor."""
        cursor = self._cursor(members_collection, [sample_member_document])
        members_collection.count_documents.return_value = 21
        descriptor = translate_query({'page': '3', 'limit': '10', 'sortField': 'email', 'sortOrder': 'asc', 'search': 'jane'})

        members, total_count = store.find_page(descriptor)

        assert total_count == 21
        assert [member.email for member in members] == ["jane.smith@example.com"]
        members_collection.count_documents.assert_called_once_with(descriptor.filters)
        members_collection.find.assert_called_once_with(descriptor.filters, MEMBER_PROJECTION)
        cursor.sort.assert_called_once_with([("email", 1)])
        cursor.skip.assert_called_once_with(20)
        cursor.limit.assert_called_once_with(10)

    def test_find_page_store_failure(self, store, members_collection):
        members_collection.count_documents.side_effect = ServerSelectionTimeoutError("timed out")

        with pytest.raises(StoreException):
            store.find_page(translate_query({}))


class TestMemberStoreIndexes:
    """Test index provisioning."""

    def test_ensure_indexes(self, store, members_collection):
        store.ensure_indexes()

        calls = members_collection.create_index.call_args_list
        assert calls[0].args[0] == [("email", 1)]
        assert calls[0].kwargs == {"unique": True, "name": "email_unique"}
        assert calls[1].args[0] == [("createdAt", -1)]
