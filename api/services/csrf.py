# SPDX-License-Identifier: Apache-2.0

"""
CSRF token service for double-submit anti-forgery protection.

Tokens are HS256-signed JWTs carrying a random nonce and an expiry. The
same token is handed to the client in the response body and in an
httpOnly cookie; state-changing requests echo it back in a header, and
verification requires both copies to match and the signature to hold.
"""

import hmac
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "x-csrf-token"
CSRF_HEADER_NAME = "X-CSRF-Token"
TOKEN_TYPE = "csrf"


class CsrfTokenService:
    """Issues and verifies signed anti-forgery tokens."""

    def __init__(self, secret: str, ttl_seconds: int = 3600, nonce_bytes: int = 32):
        """
        Initialize the CSRF token service.

        Args:
            secret: Server-side signing secret
            ttl_seconds: Token lifetime
            nonce_bytes: Size of the random nonce embedded in each token
        """
        if not secret:
            raise ValueError("CSRF signing secret is required")
        self.secret = secret
        self.ttl_seconds = ttl_seconds
        self.nonce_bytes = nonce_bytes
        self.algorithm = "HS256"

    def issue(self) -> str:
        """Issue a new signed token."""
        with tracer.start_as_current_span("csrf.issue") as span:
            now = datetime.now(timezone.utc)
            payload = {
                "nonce": secrets.token_urlsafe(self.nonce_bytes),
                "iat": now,
                "exp": now + timedelta(seconds=self.ttl_seconds),
                "type": TOKEN_TYPE
            }
            token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
            span.set_attribute("csrf.ttl_seconds", self.ttl_seconds)
            logger.debug("CSRF token issued")
            return token

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Decode and check a token's signature, expiry and type.

        Raises:
            jwt.InvalidTokenError: If the token is not a valid CSRF token
        """
        payload = jwt.decode(
            token,
            self.secret,
            algorithms=[self.algorithm],
            options={"require": ["exp", "iat", "nonce"]}
        )
        if payload.get("type") != TOKEN_TYPE:
            raise jwt.InvalidTokenError("Invalid token type")
        return payload

    def verify(self, request_token: Optional[str], cookie_token: Optional[str]) -> bool:
        """
        Verify a submitted token against its cookie counterpart.

        Args:
            request_token: Token sent in the request header
            cookie_token: Token held in the CSRF cookie

        Returns:
            True when both copies are present, identical and validly signed
        """
        with tracer.start_as_current_span("csrf.verify") as span:
            if not request_token or not cookie_token:
                span.set_attribute("csrf.result", "missing")
                return False

            if not hmac.compare_digest(request_token.encode(), cookie_token.encode()):
                span.set_attribute("csrf.result", "mismatch")
                return False

            try:
                self.decode(request_token)
            except jwt.ExpiredSignatureError:
                span.set_attribute("csrf.result", "expired")
                logger.warning("CSRF token expired")
                return False
            except jwt.InvalidTokenError as e:
                span.set_attribute("csrf.result", "invalid")
                logger.warning(f"CSRF token invalid: {str(e)}")
                return False

            span.set_attribute("csrf.result", "valid")
            return True
