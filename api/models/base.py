# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import datetime
from typing import Any, Dict
from pydantic import BaseModel, Field, ConfigDict


class CamelModel(BaseModel):
    """Model that reads and writes camelCase field names on the wire."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Arbitrary types allowed
        arbitrary_types_allowed=True
    )

    def to_api(self) -> Dict[str, Any]:
        """Serialize with camelCase keys and JSON-safe values."""
        return self.model_dump(by_alias=True, mode="json")


class BaseEntity(CamelModel):
    """Base entity for persisted documents."""

    id: str = Field(..., description="Store-assigned unique identifier")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
