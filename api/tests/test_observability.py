# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for request access logging.
"""

import logging

from app import create_app


class TestAccessLogging:
    """Test the per-request access log line."""

    def _access_records(self, caplog):
        return [record for record in caplog.records if record.name == 'membership.access']

    def test_combined_line_outside_development(self, client, caplog):
        caplog.set_level(logging.INFO, logger='membership.access')

        client.get('/health?verbose=1', headers={'User-Agent': 'pytest-agent'})

        [record] = self._access_records(caplog)
        message = record.getMessage()
        assert '"GET /health?verbose=1 200 ' in message
        assert message.endswith('"pytest-agent"')
        assert record.status_code == 200
        assert record.duration_ms >= 0

    def test_short_line_in_development(self, app_config, mock_mongodb_service, caplog):
        app_config['ENVIRONMENT'] = 'development'
        client = create_app(app_config, mongodb_service=mock_mongodb_service).test_client()
        caplog.set_level(logging.INFO, logger='membership.access')

        client.get('/api/v1/unknown')

        [record] = self._access_records(caplog)
        assert record.getMessage().startswith('GET /api/v1/unknown 404 ')
        assert record.getMessage().endswith(' ms')
