# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for list query translation and pagination metadata.
"""

import re
import pytest
from datetime import datetime, timezone

from domain.members import (
    translate_query,
    build_pagination,
    parse_date_range,
    INVALID_SORT_FIELD_MESSAGE,
    INVALID_DATE_RANGE_MESSAGE
)
from middleware.error_handler import ValidationException


class TestTranslateQuery:
    """Test translation of query parameters into a descriptor."""

    def test_defaults(self):
        """No parameters means page 1 of 10, newest first, no filter."""
        descriptor = translate_query({})

        assert descriptor.page == 1
        assert descriptor.limit == 10
        assert descriptor.skip == 0
        assert descriptor.sort == [("createdAt", -1)]
        assert descriptor.filters == {}
        assert descriptor.search is None

    def test_pagination_offsets(self):
        descriptor = translate_query({'page': '3', 'limit': '25'})

        assert descriptor.page == 3
        assert descriptor.limit == 25
        assert descriptor.skip == 50

    def test_limit_is_capped(self):
        assert translate_query({'limit': '5000'}).limit == 100
        assert translate_query({'limit': '5000'}, max_page_size=50).limit == 50

    @pytest.mark.parametrize("params", [
        {'page': '0'},
        {'page': '-2'},
        {'page': 'abc'},
        {'limit': '0'},
        {'limit': ''}
    ])
    def test_invalid_numbers_fall_back_to_defaults(self, params):
        descriptor = translate_query(params)

        assert descriptor.page == 1
        assert descriptor.limit == 10

    def test_sort_ascending(self):
        descriptor = translate_query({'sortField': 'lastName', 'sortOrder': 'asc'})

        assert descriptor.sort == [("lastName", 1)]

    def test_unknown_sort_order_is_descending(self):
        descriptor = translate_query({'sortField': 'email', 'sortOrder': 'sideways'})

        assert descriptor.sort == [("email", -1)]

    @pytest.mark.parametrize("field", ["password", "$where", "phoneNumber", "_id"])
    def test_sort_field_allow_list(self, field):
        """Sort fields outside the allow-list are rejected."""
        with pytest.raises(ValidationException) as exc_info:
            translate_query({'sortField': field})

        assert exc_info.value.message == INVALID_SORT_FIELD_MESSAGE

    def test_search_builds_case_insensitive_or(self):
        descriptor = translate_query({'search': '  jane '})

        assert descriptor.search == 'jane'
        assert descriptor.filters == {
            "$or": [
                {"firstName": {"$regex": "jane", "$options": "i"}},
                {"lastName": {"$regex": "jane", "$options": "i"}},
                {"email": {"$regex": "jane", "$options": "i"}}
            ]
        }

    def test_search_text_is_escaped(self):
        """Regex metacharacters in search text match literally."""
        descriptor = translate_query({'search': 'a.b+c'})

        pattern = descriptor.filters["$or"][0]["firstName"]["$regex"]
        assert pattern == re.escape('a.b+c')
        assert re.search(pattern, 'a.b+c')
        assert not re.search(pattern, 'axbbc')

    def test_blank_search_is_ignored(self):
        assert translate_query({'search': '   '}).filters == {}

    def test_date_range(self):
        descriptor = translate_query({'startDate': '2024-01-01', 'endDate': '2024-01-31'})

        assert descriptor.filters == {
            "createdAt": {
                "$gte": datetime(2024, 1, 1, tzinfo=timezone.utc),
                "$lte": datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)
            }
        }

    def test_one_sided_date_range_is_ignored(self):
        assert translate_query({'startDate': '2024-01-01'}).filters == {}
        assert translate_query({'endDate': '2024-01-31'}).filters == {}

    def test_search_and_date_range_combine(self):
        descriptor = translate_query({
            'search': 'doe',
            'startDate': '2024-01-01T00:00:00Z',
            'endDate': '2024-02-01T12:00:00Z'
        })

        assert set(descriptor.filters) == {"$or", "createdAt"}
        assert descriptor.filters["createdAt"]["$lte"] == datetime(2024, 2, 1, 12, tzinfo=timezone.utc)

    def test_invalid_dates(self):
        with pytest.raises(ValidationException) as exc_info:
            translate_query({'startDate': 'yesterday', 'endDate': '2024-01-31'})

        assert exc_info.value.message == INVALID_DATE_RANGE_MESSAGE


class TestParseDateRange:
    """Test creation-date range parsing."""

    def test_offsets_are_converted_to_utc(self):
        start, end = parse_date_range('2024-01-01T02:00:00+02:00', '2024-01-02T00:00:00+00:00')

        assert start == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_missing_bound(self):
        assert parse_date_range(None, '2024-01-01') is None
        assert parse_date_range('', '') is None


class TestBuildPagination:
    """Test pagination metadata arithmetic."""

    def test_middle_page(self):
        pagination = build_pagination(page=2, limit=10, total_count=95)

        assert pagination.total_pages == 10
        assert pagination.has_next_page
        assert pagination.has_prev_page

    def test_first_page(self):
        pagination = build_pagination(page=1, limit=10, total_count=95)

        assert not pagination.has_prev_page
        assert pagination.has_next_page

    def test_last_page(self):
        pagination = build_pagination(page=10, limit=10, total_count=95)

        assert not pagination.has_next_page
        assert pagination.has_prev_page

    def test_empty_result(self):
        pagination = build_pagination(page=1, limit=10, total_count=0)

        assert pagination.total_pages == 0
        assert not pagination.has_next_page
        assert not pagination.has_prev_page

    def test_wire_format(self):
        assert build_pagination(page=1, limit=10, total_count=5).to_api() == {
            "currentPage": 1,
            "totalPages": 1,
            "totalCount": 5,
            "hasNextPage": False,
            "hasPrevPage": False,
            "limit": 10
        }
