"""
Observability Middleware

Request timing, access logging and trace correlation for every HTTP
request.
"""

import time
import logging
from datetime import datetime, timezone
from flask import Flask, Response, request, g
from opentelemetry import trace
from opentelemetry.instrumentation.flask import FlaskInstrumentor

logger = logging.getLogger('membership.access')


def _access_line(response: Response, duration_ms: float, verbose: bool) -> str:
    """Short 'dev' line, or a combined-style line with client details."""
    line = f"{request.method} {request.full_path.rstrip('?')} {response.status_code} {duration_ms:.2f} ms"
    if not verbose:
        return line

    return (
        f"{request.remote_addr or '-'} \"{line}\" "
        f"{response.calculate_content_length() or '-'} \"{request.headers.get('User-Agent', '-')}\""
    )


def add_observability_middleware(app: Flask, instrument: bool = True):
    """
    Add tracing and access logging to a Flask app.

    Args:
        app: Flask application
        instrument: Whether to auto-instrument Flask with OpenTelemetry
    """
    if instrument:
        FlaskInstrumentor().instrument_app(app)

    verbose = app.config.get('ENVIRONMENT') != 'development'

    @app.before_request
    def start_request_timer():
        g.start_time = time.perf_counter()
        g.request_time = datetime.now(timezone.utc).isoformat()

        span_context = trace.get_current_span().get_span_context()
        g.trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else None

    @app.after_request
    def log_request(response: Response) -> Response:
        duration_ms = (time.perf_counter() - g.get('start_time', time.perf_counter())) * 1000

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("http.duration_ms", round(duration_ms, 2))

        logger.info(
            _access_line(response, duration_ms, verbose),
            extra={
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "trace_id": g.get('trace_id')
            }
        )

        if g.get('trace_id'):
            response.headers['X-Trace-Id'] = g.trace_id

        return response
