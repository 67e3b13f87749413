# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import pytest
from datetime import datetime, timezone
from typing import Dict, Any
from unittest.mock import Mock, MagicMock
from bson import ObjectId

from app import create_app
from config import load_config
from services.mongodb import MongoDBService

TEST_CSRF_SECRET = 'test-csrf-secret-0123456789abcdef0123456789'


@pytest.fixture
def test_env() -> Dict[str, str]:
    """Environment variables for a test application."""
    return {
        'ENVIRONMENT': 'test',
        'MONGODB_URI': 'mongodb://localhost:27017/membership_test',
        'MONGODB_DB_NAME': 'membership_test',
        'CSRF_SECRET': TEST_CSRF_SECRET,
        'OTEL_ENABLED': 'false',
        'DOCS_ENABLED': 'false'
    }


@pytest.fixture
def app_config(test_env):
    """Application configuration built from the test environment."""
    config = load_config(test_env)
    config['TESTING'] = True
    return config


@pytest.fixture
def members_collection():
    """Mocked members collection."""
    return MagicMock()


@pytest.fixture
def mock_mongodb_service(members_collection):
    """MongoDB handle whose collections are mocks."""
    service = Mock(spec=MongoDBService)
    service.database_name = 'membership_test'
    service.get_collection.return_value = members_collection
    service.ping.return_value = {
        'isHealthy': True,
        'status': 'Connected',
        'host': 'localhost:27017',
        'database': 'membership_test'
    }
    return service


@pytest.fixture
def app(app_config, mock_mongodb_service):
    """Flask application wired to the mocked store."""
    return create_app(app_config, mongodb_service=mock_mongodb_service)


@pytest.fixture
def client(app):
    """Test client."""
    return app.test_client()


@pytest.fixture
def sample_signup_payload() -> Dict[str, Any]:
    """Valid signup request body."""
    return {
        "firstName": "John",
        "lastName": "Doe",
        "email": "John.Doe@Example.com",
        "phoneNumber": "+1 555-123-4567",
        "acceptedTerms": True,
        "newsletterSubscription": True
    }


@pytest.fixture
def sample_member_document() -> Dict[str, Any]:
    """Stored member document as MongoDB returns it."""
    return {
        "_id": ObjectId("65a1b2c3d4e5f6a7b8c9d0e1"),
        "firstName": "Jane",
        "lastName": "Smith",
        "email": "jane.smith@example.com",
        "phoneNumber": "+44 20 7946 0958",
        "acceptedTerms": True,
        "newsletterSubscription": False,
        "createdAt": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    }
