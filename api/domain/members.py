# SPDX-License-Identifier: Apache-2.0

"""
Member domain logic for signup validation and list query translation.

This module contains pure functions: signup payload validation and
sanitization, translation of list query parameters into a MongoDB
filter/sort/pagination descriptor, and pagination arithmetic.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from typing import List, Dict, Any, Optional, Mapping, Tuple

from email_validator import validate_email, EmailNotValidError

from models.entities import MemberCreate, QueryDescriptor, PaginationInfo
from models.enums import SortField, SortOrder
from middleware.error_handler import ValidationException


REQUIRED_TEXT_FIELDS = ('firstName', 'lastName', 'email', 'phoneNumber')
REQUIRED_FIELDS = REQUIRED_TEXT_FIELDS + ('acceptedTerms',)
SEARCH_FIELDS = ('firstName', 'lastName', 'email')
ALLOWED_SORT_FIELDS = frozenset(f.value for f in SortField)

NAME_MAX_LENGTH = 50
PHONE_PATTERN = r'^\+?[\d\s-]{10,}$'
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGE_SIZE = 100

MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_EMAIL_MESSAGE = "Invalid email format"
INVALID_PHONE_MESSAGE = "Invalid phone number format"
NAME_TOO_LONG_MESSAGE = f"Name fields must be at most {NAME_MAX_LENGTH} characters"
INVALID_SORT_FIELD_MESSAGE = "Invalid sort field"
INVALID_DATE_RANGE_MESSAGE = "Invalid date range"

_PHONE_RE = re.compile(PHONE_PATTERN, re.ASCII)
_PHONE_STRIP_RE = re.compile(r'[^\d+\s-]', re.ASCII)

_HTML_ESCAPES = {
    '&': '&amp;',
    '"': '&quot;',
    "'": '&#x27;',
    '<': '&lt;',
    '>': '&gt;',
    '/': '&#x2F;',
    '\\': '&#x5C;',
    '`': '&#96;',
}

_GMAIL_DOMAINS = frozenset(['gmail.com', 'googlemail.com'])
_ICLOUD_DOMAINS = frozenset(['icloud.com', 'me.com'])
_OUTLOOK_DOMAINS = frozenset([
    'hotmail.at', 'hotmail.be', 'hotmail.ca', 'hotmail.cl', 'hotmail.co.il',
    'hotmail.co.nz', 'hotmail.co.th', 'hotmail.co.uk', 'hotmail.com',
    'hotmail.com.ar', 'hotmail.com.au', 'hotmail.com.br', 'hotmail.com.gr',
    'hotmail.com.mx', 'hotmail.com.pe', 'hotmail.com.tr', 'hotmail.com.vn',
    'hotmail.cz', 'hotmail.de', 'hotmail.dk', 'hotmail.es', 'hotmail.fr',
    'hotmail.hu', 'hotmail.id', 'hotmail.ie', 'hotmail.in', 'hotmail.it',
    'hotmail.jp', 'hotmail.kr', 'hotmail.lv', 'hotmail.my', 'hotmail.ph',
    'hotmail.pt', 'hotmail.sa', 'hotmail.sg', 'hotmail.sk',
    'live.be', 'live.co.uk', 'live.com', 'live.com.ar', 'live.com.mx',
    'live.de', 'live.es', 'live.eu', 'live.fr', 'live.it', 'live.nl',
    'msn.com',
    'outlook.at', 'outlook.be', 'outlook.cl', 'outlook.co.il', 'outlook.co.nz',
    'outlook.co.th', 'outlook.com', 'outlook.com.ar', 'outlook.com.au',
    'outlook.com.br', 'outlook.com.gr', 'outlook.com.pe', 'outlook.com.tr',
    'outlook.com.vn', 'outlook.cz', 'outlook.de', 'outlook.dk', 'outlook.es',
    'outlook.fr', 'outlook.hu', 'outlook.id', 'outlook.ie', 'outlook.in',
    'outlook.it', 'outlook.jp', 'outlook.kr', 'outlook.lv', 'outlook.my',
    'outlook.ph', 'outlook.pt', 'outlook.sa', 'outlook.sg', 'outlook.sk',
    'passport.com'
])
_YAHOO_DOMAINS = frozenset([
    'rocketmail.com', 'yahoo.ca', 'yahoo.co.uk', 'yahoo.com', 'yahoo.de',
    'yahoo.fr', 'yahoo.in', 'yahoo.it', 'ymail.com'
])
_YANDEX_DOMAINS = frozenset(['yandex.ru', 'yandex.ua', 'yandex.kz', 'yandex.com', 'ya.ru'])


@dataclass
class SignupResult:
    """Result of signup payload validation."""
    success: bool
    record: Optional[MemberCreate] = None
    message: Optional[str] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def raise_for_errors(self) -> MemberCreate:
        """Return the record, or raise the failure as a ValidationException."""
        if not self.success:
            raise ValidationException(self.message, self.errors)
        return self.record


def _failure(message: str, errors: List[Dict[str, Any]]) -> SignupResult:
    return SignupResult(success=False, message=message, errors=errors)


def is_valid_phone(phone: str) -> bool:
    """Optional leading '+', then at least 10 digits, spaces or hyphens."""
    return _PHONE_RE.fullmatch(phone) is not None


def escape_html(value: str) -> str:
    """Replace HTML-significant characters with entities."""
    return ''.join(_HTML_ESCAPES.get(char, char) for char in value)


def normalize_email(email: str) -> str:
    """
    Lowercase and canonicalize an email address.

    Well-known providers that ignore subaddresses have them stripped:
    Gmail drops '+tag' and dots and folds googlemail.com into gmail.com,
    iCloud and Outlook/Hotmail/Live drop '+tag', Yahoo drops the last
    '-tag'. Yandex aliases fold into yandex.ru.

    Raises:
        EmailNotValidError: If the address is malformed or nothing is left
            of the local part once the subaddress is removed
    """
    normalized = validate_email(email.strip(), check_deliverability=False).normalized.lower()
    local, _, domain = normalized.rpartition('@')

    if domain in _GMAIL_DOMAINS:
        local = local.split('+', 1)[0].replace('.', '')
        domain = 'gmail.com'
    elif domain in _ICLOUD_DOMAINS or domain in _OUTLOOK_DOMAINS:
        local = local.split('+', 1)[0]
    elif domain in _YAHOO_DOMAINS:
        local = local.rsplit('-', 1)[0]
    elif domain in _YANDEX_DOMAINS:
        domain = 'yandex.ru'

    if not local:
        raise EmailNotValidError("The email address has no mailbox name.")

    return f"{local}@{domain}"


def sanitize_phone(phone: str) -> str:
    """Drop every character other than digits, '+', whitespace and '-'."""
    return _PHONE_STRIP_RE.sub('', phone)


def validate_signup(payload: Any) -> SignupResult:
    """
    Validate and normalize a raw signup payload.

    Checks run against the caller's original input. The email is
    canonicalized as part of its check; every other field is sanitized only
    once all checks have passed.

    Args:
        payload: Decoded JSON request body

    Returns:
        SignupResult with the sanitized record or the failure reason
    """
    if not isinstance(payload, dict):
        return _failure(MISSING_FIELDS_MESSAGE, [
            {"field": "body", "message": "Expected a JSON object"}
        ])

    missing = []
    for name in REQUIRED_TEXT_FIELDS:
        value = payload.get(name)
        if not isinstance(value, str) or not value.strip():
            missing.append(name)
    if 'acceptedTerms' not in payload:
        missing.append('acceptedTerms')

    if missing:
        return _failure(MISSING_FIELDS_MESSAGE, [
            {"field": name, "message": "Field is required"} for name in missing
        ])

    try:
        email = normalize_email(payload['email'])
    except EmailNotValidError:
        return _failure(INVALID_EMAIL_MESSAGE, [
            {"field": "email", "message": INVALID_EMAIL_MESSAGE}
        ])

    if not is_valid_phone(payload['phoneNumber']):
        return _failure(INVALID_PHONE_MESSAGE, [
            {"field": "phoneNumber", "message": INVALID_PHONE_MESSAGE}
        ])

    too_long = [
        name for name in ('firstName', 'lastName')
        if len(payload[name].strip()) > NAME_MAX_LENGTH
    ]
    if too_long:
        return _failure(NAME_TOO_LONG_MESSAGE, [
            {"field": name, "message": NAME_TOO_LONG_MESSAGE} for name in too_long
        ])

    record = MemberCreate(
        first_name=escape_html(payload['firstName'].strip()),
        last_name=escape_html(payload['lastName'].strip()),
        email=email,
        phone_number=sanitize_phone(payload['phoneNumber']),
        accepted_terms=bool(payload['acceptedTerms']),
        newsletter_subscription=bool(payload.get('newsletterSubscription'))
    )
    return SignupResult(success=True, record=record)


def _parse_positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def _parse_date(value: str, end_of_day: bool = False) -> datetime:
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    parsed = datetime.fromisoformat(text)

    # Date-only bounds cover the whole day
    if end_of_day and len(text) == 10:
        parsed = datetime.combine(parsed.date(), time.max)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date_range(start: Optional[str], end: Optional[str]) -> Optional[Tuple[datetime, datetime]]:
    """
    Parse an inclusive creation-date range.

    Returns None unless both bounds are supplied.

    Raises:
        ValidationException: If either bound is not an ISO 8601 date
    """
    if not start or not end:
        return None

    try:
        return _parse_date(start), _parse_date(end, end_of_day=True)
    except ValueError:
        raise ValidationException(INVALID_DATE_RANGE_MESSAGE, [
            {"field": "startDate/endDate", "message": "Expected ISO 8601 dates"}
        ])


def build_member_filter(
    search: Optional[str],
    date_range: Optional[Tuple[datetime, datetime]]
) -> Dict[str, Any]:
    """Build the MongoDB filter for a member list query."""
    filters: Dict[str, Any] = {}

    if search:
        pattern = re.escape(search)
        filters["$or"] = [
            {name: {"$regex": pattern, "$options": "i"}} for name in SEARCH_FIELDS
        ]

    if date_range:
        start, end = date_range
        filters["createdAt"] = {"$gte": start, "$lte": end}

    return filters


def translate_query(params: Mapping[str, Any], max_page_size: int = MAX_PAGE_SIZE) -> QueryDescriptor:
    """
    Translate list query parameters into a query descriptor.

    Args:
        params: Request query parameters
        max_page_size: Upper bound applied to ``limit``

    Returns:
        QueryDescriptor with pagination, sort and MongoDB filter

    Raises:
        ValidationException: For sort fields outside the allow-list or unparseable dates
    """
    page = _parse_positive_int(params.get('page'), DEFAULT_PAGE)
    limit = min(_parse_positive_int(params.get('limit'), DEFAULT_LIMIT), max_page_size)

    sort_field = params.get('sortField') or SortField.CREATED_AT.value
    if sort_field not in ALLOWED_SORT_FIELDS:
        raise ValidationException(INVALID_SORT_FIELD_MESSAGE, [
            {"field": "sortField", "message": INVALID_SORT_FIELD_MESSAGE, "input": sort_field}
        ])

    sort_order = SortOrder.ASC if params.get('sortOrder') == SortOrder.ASC.value else SortOrder.DESC

    search = (params.get('search') or '').strip() or None
    date_range = parse_date_range(params.get('startDate'), params.get('endDate'))

    return QueryDescriptor(
        page=page,
        limit=limit,
        sort_field=SortField(sort_field),
        sort_order=sort_order,
        search=search,
        start_date=date_range[0] if date_range else None,
        end_date=date_range[1] if date_range else None,
        filters=build_member_filter(search, date_range)
    )


def build_pagination(page: int, limit: int, total_count: int) -> PaginationInfo:
    """
    Compute pagination metadata.

    Args:
        page: Current page (1-based)
        limit: Page size
        total_count: Number of documents matching the filter

    Returns:
        PaginationInfo for the response envelope
    """
    total_pages = math.ceil(total_count / limit) if limit else 0

    return PaginationInfo(
        current_page=page,
        total_pages=total_pages,
        total_count=total_count,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
        limit=limit
    )
