# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for CSRF token issuance and verification.
"""

import jwt
import pytest

from services.csrf import CsrfTokenService, TOKEN_TYPE

SECRET = 'csrf-test-secret-0123456789abcdef0123456789'
OTHER_SECRET = 'another-secret-0123456789abcdef0123456789ab'


class TestCsrfTokenService:
    """Test CsrfTokenService."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = CsrfTokenService(SECRET)

    def test_requires_secret(self):
        with pytest.raises(ValueError):
            CsrfTokenService('')

    def test_issue_and_verify(self):
        token = self.service.issue()

        assert self.service.verify(token, token)

    def test_tokens_are_unique(self):
        assert self.service.issue() != self.service.issue()

    def test_payload(self):
        payload = self.service.decode(self.service.issue())

        assert payload["type"] == TOKEN_TYPE
        assert payload["nonce"]
        assert payload["exp"] - payload["iat"] == 3600

    def test_missing_half(self):
        token = self.service.issue()

        assert not self.service.verify(token, None)
        assert not self.service.verify(None, token)
        assert not self.service.verify('', '')

    def test_mismatched_pair(self):
        """Two individually valid tokens do not verify each other."""
        assert not self.service.verify(self.service.issue(), self.service.issue())

    def test_expired_token(self):
        expired = CsrfTokenService(SECRET, ttl_seconds=-10).issue()

        assert not self.service.verify(expired, expired)

    def test_tampered_token(self):
        token = self.service.issue()
        tampered = token[:-2] + ('AA' if token[-2:] != 'AA' else 'BB')

        assert not self.service.verify(tampered, tampered)

    def test_wrong_secret(self):
        token = CsrfTokenService(OTHER_SECRET).issue()

        assert not self.service.verify(token, token)

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"nonce": "n", "iat": 1700000000, "exp": 4102444800, "type": "access"},
            SECRET,
            algorithm="HS256"
        )

        assert not self.service.verify(token, token)
