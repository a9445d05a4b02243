import calendar
import math
import re
from datetime import date, datetime, timedelta, timezone

from gymadmin.utils.errors import BadRequestError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
DATE_ONLY_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


def utcnow():
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def parse_datetime(value):
    """
    Parse an ISO-8601 date or datetime into a naive UTC datetime.

    Accepts 'YYYY-MM-DD' (midnight UTC), full timestamps with or without an
    offset, and a trailing 'Z'. Returns None for empty input and raises
    ValueError when the text is not ISO-8601.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def to_db_timestamp(value):
    """Serialize a datetime (or ISO string) to 'YYYY-MM-DDTHH:MM:SS' or None."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = parse_datetime(value)
    return value.isoformat(timespec='seconds')


def to_api_timestamp(value):
    """Render a stored timestamp for JSON output (UTC with a 'Z' suffix)."""
    if value is None:
        return None
    parsed = value if isinstance(value, datetime) else parse_datetime(value)
    return parsed.isoformat(timespec='seconds') + 'Z'


def start_of_day(moment):
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment):
    """Most recent Sunday 00:00 on or before `moment`."""
    days_since_sunday = (moment.weekday() + 1) % 7
    return start_of_day(moment) - timedelta(days=days_since_sunday)


def start_of_month(moment):
    return start_of_day(moment).replace(day=1)


def calculate_expiry_date(start, months=1):
    """Add `months` calendar months to `start`, clamping to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def validate_email(email):
    """Validate email format"""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def normalize_email(email):
    return email.strip().lower()


def parse_int(value, message, minimum=None, maximum=None):
    """Parse an integer field (bools rejected) within optional bounds or raise BadRequestError."""
    if isinstance(value, bool):
        raise BadRequestError(message)
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and re.fullmatch(r'\s*[+-]?\d+\s*', value):
        number = int(value)
    else:
        raise BadRequestError(message)
    if minimum is not None and number < minimum:
        raise BadRequestError(message)
    if maximum is not None and number > maximum:
        raise BadRequestError(message)
    return number


def parse_pagination(args, default_limit=10, max_limit=100):
    """Read ?page=&limit= from request args."""
    page = parse_int(args.get('page', 1), 'Page must be a positive integer', minimum=1)
    limit = parse_int(args.get('limit', default_limit),
                      f'Limit must be between 1 and {max_limit}', minimum=1, maximum=max_limit)
    return page, limit


def pagination_info(page, limit, total):
    return {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if limit else 0,
    }


def parse_sort(args, allowed, default_field, default_order='asc'):
    """
    Validate ?sortBy=&sortOrder=. `allowed` maps API field names to SQL columns.
    Returns (column, 'ASC'|'DESC').
    """
    field = args.get('sortBy', default_field)
    if field not in allowed:
        raise BadRequestError('Invalid sort field')
    order = str(args.get('sortOrder', default_order)).lower()
    if order not in ('asc', 'desc'):
        raise BadRequestError('Sort order must be asc or desc')
    return allowed[field], order.upper()


def parse_date_arg(args, name, message, end_of_day=False):
    """
    Read an ISO date or datetime query argument. With `end_of_day`, a bare
    'YYYY-MM-DD' stands for the last second of that day so an inclusive
    upper bound keeps the whole day.
    """
    value = args.get(name)
    if not value:
        return None
    try:
        parsed = parse_datetime(value)
    except ValueError:
        raise BadRequestError(message)
    if end_of_day and DATE_ONLY_PATTERN.fullmatch(value.strip()):
        parsed = parsed.replace(hour=23, minute=59, second=59)
    return parsed
