# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Environment configuration for the Membership API.
"""

import os
from typing import Dict, Any, List, Mapping, Optional

REQUIRED_ENV_VARS = ['MONGODB_URI', 'CSRF_SECRET']


class ConfigurationError(Exception):
    """Raised when required configuration is missing or malformed."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


def _flag(env: Mapping[str, str], name: str, default: str) -> bool:
    return env.get(name, default).lower() == 'true'


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    try:
        return int(value) if value else default
    except ValueError:
        return default


def validate_environment(env: Optional[Mapping[str, str]] = None) -> None:
    """
    Check that every required variable is set.

    Raises:
        ConfigurationError: Listing each missing variable
    """
    env = os.environ if env is None else env
    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
    if missing:
        raise ConfigurationError(missing)


def load_config(env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Build application configuration from environment variables.

    Args:
        env: Variable source, defaults to os.environ

    Returns:
        Dictionary suitable for app.config.update()
    """
    env = os.environ if env is None else env
    environment = env.get('ENVIRONMENT') or env.get('NODE_ENV') or 'development'

    return {
        # Environment configuration
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'PORT': _int(env, 'PORT', 3000),

        # Database configuration
        'MONGODB_URI': env.get('MONGODB_URI'),
        'MONGODB_DB_NAME': env.get('MONGODB_DB_NAME', 'membership_db'),
        'MONGODB_USERNAME': env.get('MONGODB_USERNAME'),
        'MONGODB_PASSWORD': env.get('MONGODB_PASSWORD'),
        'MONGODB_POOL_SIZE': _int(env, 'MONGODB_POOL_SIZE', 10),
        'MONGODB_MIN_POOL_SIZE': _int(env, 'MONGODB_MIN_POOL_SIZE', 5),

        # Security configuration
        'CSRF_SECRET': env.get('CSRF_SECRET'),
        'CSRF_ENABLED': _flag(env, 'CSRF_ENABLED', 'false'),
        'CSRF_TOKEN_TTL': _int(env, 'CSRF_TOKEN_TTL', 3600),
        'CORS_ORIGIN': env.get('CORS_ORIGIN', 'http://localhost:3000'),

        # Request handling
        'MAX_CONTENT_LENGTH': 10 * 1024,
        'MAX_PAGE_SIZE': _int(env, 'MAX_PAGE_SIZE', 100),
        'HEALTH_CHECK_INTERVAL': _int(env, 'HEALTH_CHECK_INTERVAL', 30),

        # Feature flags
        'OTEL_ENABLED': _flag(env, 'OTEL_ENABLED', 'true'),
        'OTLP_ENDPOINT': env.get('OTEL_EXPORTER_OTLP_ENDPOINT'),
        'DOCS_ENABLED': _flag(env, 'DOCS_ENABLED', 'true')
    }
