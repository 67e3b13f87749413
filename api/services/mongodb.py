# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB connection handle with connection pooling and bounded timeouts.
"""

import logging
import threading
from typing import Dict, Optional, Any
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ConfigurationError,
    PyMongoError
)

logger = logging.getLogger(__name__)


class MongoDBService:
    """Explicit MongoDB connection handle, created once at startup and injected."""

    def __init__(
        self,
        connection_string: str,
        database_name: str = 'membership_db',
        username: Optional[str] = None,
        password: Optional[str] = None,
        max_pool_size: int = 10,
        min_pool_size: int = 5,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 30000,
        socket_timeout_ms: int = 45000,
        heartbeat_frequency_ms: int = 10000
    ):
        """Initialize MongoDB service; no connection is made until connect()."""
        self.connection_string = connection_string
        self.database_name = database_name
        self.username = username
        self.password = password
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None
        self._lock = threading.Lock()

        # Connection pool settings
        self.max_pool_size = max_pool_size
        self.min_pool_size = min(min_pool_size, max_pool_size)
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.connect_timeout_ms = connect_timeout_ms
        self.socket_timeout_ms = socket_timeout_ms
        self.heartbeat_frequency_ms = heartbeat_frequency_ms

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MongoDBService":
        """Build the handle from application configuration."""
        return cls(
            config['MONGODB_URI'],
            database_name=config.get('MONGODB_DB_NAME', 'membership_db'),
            username=config.get('MONGODB_USERNAME'),
            password=config.get('MONGODB_PASSWORD'),
            max_pool_size=config.get('MONGODB_POOL_SIZE', 10),
            min_pool_size=config.get('MONGODB_MIN_POOL_SIZE', 5)
        )

    def _client_options(self) -> Dict[str, Any]:
        options = {
            'maxPoolSize': self.max_pool_size,
            'minPoolSize': self.min_pool_size,
            'serverSelectionTimeoutMS': self.server_selection_timeout_ms,
            'connectTimeoutMS': self.connect_timeout_ms,
            'socketTimeoutMS': self.socket_timeout_ms,
            'heartbeatFrequencyMS': self.heartbeat_frequency_ms,
            'tz_aware': True,
            'retryWrites': True,
            'retryReads': True
        }

        # Credentials supplied separately from the URI
        if self.username and self.password:
            options['username'] = self.username
            options['password'] = self.password

        return options

    def connect(self) -> MongoClient:
        """
        Open the connection pool and verify it with a ping.

        Safe to call from concurrent request threads; only one client is
        ever kept.

        Raises:
            ConnectionFailure: If no server can be reached
            ConfigurationError: If the connection string is invalid
            PyMongoError: If the ping is rejected (e.g. bad credentials)
        """
        with self._lock:
            if self._client is not None:
                return self._client

            try:
                client = MongoClient(self.connection_string, **self._client_options())
            except ConfigurationError as e:
                logger.error("Invalid MongoDB configuration", extra={"error": str(e)})
                raise

            try:
                client.admin.command('ping')
            except ConnectionFailure as e:
                logger.error(
                    "Could not connect to any MongoDB servers; check MONGODB_URI and that the server is running",
                    extra={"error": str(e)}
                )
                client.close()
                raise
            except PyMongoError as e:
                logger.error("MongoDB rejected the connection ping", extra={"error": str(e)})
                client.close()
                raise

            self._client = client

        logger.info(
            "MongoDB connection established successfully",
            extra={"database": self.database_name, "max_pool_size": self.max_pool_size}
        )
        return client

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client, connecting on first use."""
        if self._client is None:
            return self.connect()
        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        with self._lock:
            client, self._client, self._database = self._client, None, None

        if client:
            client.close()
            logger.info("MongoDB connection closed")

    def ping(self) -> Dict[str, Any]:
        """
        Lightweight liveness check, connecting first if needed.

        Returns:
            Connection state dictionary; never raises
        """
        try:
            client = self.client
            client.admin.command('ping')
            address = client.address
            return {
                'isHealthy': True,
                'status': 'Connected',
                'host': f"{address[0]}:{address[1]}" if address else None,
                'database': self.database_name
            }
        except PyMongoError as e:
            return {
                'isHealthy': False,
                'status': 'Error',
                'error': str(e),
                'database': self.database_name
            }
