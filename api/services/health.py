"""
Health Monitor Service

Polls MongoDB connectivity on a fixed interval and answers synchronous
health queries for the /health endpoint.
"""

import time
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from opentelemetry import trace

from services.mongodb import MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class HealthMonitor:
    """Store liveness monitor with background polling."""

    def __init__(self, mongodb_service: MongoDBService, interval_seconds: float = 30.0):
        self.mongodb_service = mongodb_service
        self.interval_seconds = interval_seconds
        self.last_result: Optional[Dict[str, Any]] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def check_health(self) -> Dict[str, Any]:
        """
        Check MongoDB and report connection state.

        Returns:
            Dictionary with isHealthy, status and details; never raises
        """
        with tracer.start_as_current_span("health.mongodb_check") as span:
            start_time = time.time()

            try:
                state = self.mongodb_service.ping()
            except Exception as e:
                span.record_exception(e)
                state = {'isHealthy': False, 'status': 'Error', 'error': str(e)}

            response_time = round((time.time() - start_time) * 1000, 2)
            is_healthy = bool(state.get('isHealthy'))

            details = {
                key: value for key, value in state.items()
                if key not in ('isHealthy', 'status')
            }
            details['response_time_ms'] = response_time
            details['last_check'] = datetime.now(timezone.utc).isoformat()

            result = {
                'isHealthy': is_healthy,
                'status': state.get('status', 'Error'),
                'details': details
            }

            span.set_attributes({
                "mongodb.status": "healthy" if is_healthy else "unhealthy",
                "mongodb.response_time_ms": response_time
            })

            self.last_result = result
            return result

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            result = self.check_health()
            if not result['isHealthy']:
                logger.error(
                    "MongoDB health check failed",
                    extra={"status": result['status'], "details": result['details']}
                )

    def start(self) -> None:
        """Start background polling on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="health-monitor", daemon=True)
        self._thread.start()
        logger.info(f"Health monitor started (interval {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop background polling."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Health monitor stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
