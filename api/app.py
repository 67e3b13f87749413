"""
Membership API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support,
wires the store handle, services and middleware together, and runs the
development server with fail-fast startup checks.
"""

import sys
import logging
from typing import Any, Dict, Optional
from flask import g, jsonify
from flask_openapi3 import OpenAPI, Info, Tag
from pymongo.errors import PyMongoError

from config import ConfigurationError, load_config, validate_environment
from observability.config import setup_observability
from observability.middleware import add_observability_middleware
from middleware.cors import configure_cors
from middleware.error_handler import ErrorHandlerMiddleware
from middleware.security_headers import configure_security_headers
from middleware.validation import ValidationMiddleware
from models.responses import HealthCheckResponse
from services.csrf import CsrfTokenService
from services.envelope import create_envelope_formatter
from services.health import HealthMonitor
from services.members import MemberStore
from services.mongodb import MongoDBService

logger = logging.getLogger(__name__)

# OpenAPI info
info = Info(
    title="Membership API",
    version="1.0.0",
    description="API for managing membership signups and retrieving member information"
)

# Membership routes carry their own tag on the blueprint
health_tag = Tag(name="Health", description="System health and status")


def create_app(
    config: Optional[Dict[str, Any]] = None,
    mongodb_service: Optional[MongoDBService] = None
) -> OpenAPI:
    """
    Build the Flask application.

    Args:
        config: Application configuration; read from the environment when omitted
        mongodb_service: Store handle; built from configuration when omitted

    Returns:
        Configured application
    """
    if config is None:
        validate_environment()
        config = load_config()

    app = OpenAPI(__name__, info=info, doc_ui=config.get('DOCS_ENABLED', True))
    app.config.update(config)

    # Add observability middleware
    add_observability_middleware(app, instrument=app.config.get('OTEL_ENABLED', True))

    # Initialize services
    mongodb_service = mongodb_service or MongoDBService.from_config(app.config)
    envelope_formatter = create_envelope_formatter(app.config['ENVIRONMENT'])

    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.member_store = MemberStore(mongodb_service)
    app.csrf_service = CsrfTokenService(
        app.config['CSRF_SECRET'],
        ttl_seconds=app.config.get('CSRF_TOKEN_TTL', 3600)
    )
    app.health_monitor = HealthMonitor(
        mongodb_service,
        interval_seconds=app.config.get('HEALTH_CHECK_INTERVAL', 30)
    )
    app.envelope_formatter = envelope_formatter
    app.validation_middleware = ValidationMiddleware(app.config.get('MAX_PAGE_SIZE', 100))

    # Initialize middleware
    ErrorHandlerMiddleware(app, envelope_formatter)
    configure_cors(app, allow_credentials=True)
    configure_security_headers(app, hsts=app.config['ENVIRONMENT'] == 'production')

    # Register routes
    from routes.membership import membership_bp
    app.register_api(membership_bp)

    @app.get('/health', tags=[health_tag], responses={"200": HealthCheckResponse, "503": HealthCheckResponse})
    def health_check():
        """Store liveness check; 503 when MongoDB is unreachable."""
        database = app.health_monitor.check_health()
        is_healthy = database['isHealthy']

        body = {
            "status": "success" if is_healthy else "error",
            "timestamp": g.get('request_time'),
            "environment": app.config['ENVIRONMENT'],
            "database": database
        }
        return jsonify(body), 200 if is_healthy else 503

    return app


def main() -> None:
    """Validate configuration, connect to MongoDB and run the server."""
    try:
        validate_environment()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(str(e))
        sys.exit(1)

    config = load_config()
    setup_observability(
        config['ENVIRONMENT'],
        otel_enabled=config['OTEL_ENABLED'],
        otlp_endpoint=config['OTLP_ENDPOINT']
    )

    app = create_app(config)

    try:
        app.mongodb_service.connect()
        app.member_store.ensure_indexes()
    except PyMongoError as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        sys.exit(1)

    app.health_monitor.start()
    logger.info(f"Server running in {config['ENVIRONMENT']} mode on port {config['PORT']}")

    try:
        app.run(
            host='0.0.0.0',
            port=config['PORT'],
            debug=config['DEBUG'],
            use_reloader=False
        )
    finally:
        app.health_monitor.stop(timeout=5)
        app.mongodb_service.close_connection()


if __name__ == '__main__':
    main()
