# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the Membership API.
"""

from enum import Enum


class SortField(str, Enum):
    """Member fields that list queries may sort on."""
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    EMAIL = "email"
    CREATED_AT = "createdAt"
    STATUS = "status"


class SortOrder(str, Enum):
    """Sort direction for list queries."""
    ASC = "asc"
    DESC = "desc"

    @property
    def direction(self) -> int:
        """MongoDB sort direction (1 ascending, -1 descending)."""
        return 1 if self is SortOrder.ASC else -1


class ResponseStatus(str, Enum):
    """Top-level status carried by every response envelope."""
    SUCCESS = "success"
    ERROR = "error"
