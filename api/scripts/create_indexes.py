#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Script to create the member collection indexes.

The unique email index is what enforces one member per normalized email.
"""

import sys
import logging

from pymongo.errors import PyMongoError

from config import ConfigurationError, load_config, validate_environment
from services.members import MemberStore
from services.mongodb import MongoDBService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Create MongoDB indexes."""
    try:
        validate_environment()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    mongodb_service = MongoDBService.from_config(load_config())

    try:
        logger.info("Starting MongoDB index creation...")
        mongodb_service.connect()

        health = mongodb_service.ping()
        logger.info(f"Connected to MongoDB - Database: {health['database']}")

        MemberStore(mongodb_service).ensure_indexes()

        logger.info("MongoDB indexes created successfully!")

    except PyMongoError as e:
        logger.error(f"Failed to create indexes: {e}")
        sys.exit(1)
    finally:
        mongodb_service.close_connection()


if __name__ == "__main__":
    main()
