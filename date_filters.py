"""Turn the history/breakdown filter parameters into concrete datetime bounds."""

import calendar
from collections import namedtuple
from datetime import date, datetime, time, timedelta

DateRange = namedtuple('DateRange', ['start', 'end'])

END_OF_DAY = time(23, 59, 59)
FILTER_TYPES = ('week', 'month', 'year', 'range', 'custom', 'all')
PERIODS = ('week', 'month', 'year', 'custom')


def _to_int(value):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_day(value):
    """Parse YYYY-MM-DD (or a full ISO timestamp) into a date, None on failure."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    s = str(value).strip()
    try:
        return datetime.strptime(s, '%Y-%m-%d').date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s.replace('Z', '+00:00')).date()
    except ValueError:
        return None


def _day_bounds(first, last):
    return DateRange(datetime.combine(first, time.min), datetime.combine(last, END_OF_DAY))


def month_range(year, month):
    last_day = calendar.monthrange(year, month)[1]
    return _day_bounds(date(year, month, 1), date(year, month, last_day))


def year_range(year):
    return _day_bounds(date(year, 1, 1), date(year, 12, 31))


def week_range(year, week):
    """Monday-aligned 7 day window for a week number.

    The anchor is Jan 1 + (week - 1) weeks. A Sunday anchor moves forward to
    the next Monday, any other weekday moves back to the Monday before it, so
    week 1 can start in the previous year.
    """
    anchor = date(year, 1, 1) + timedelta(weeks=week - 1)
    sunday_based_dow = (anchor.weekday() + 1) % 7
    start = anchor - timedelta(days=sunday_based_dow - 1)
    return _day_bounds(start, start + timedelta(days=6))


def resolve_date_range(filter_type, month=None, year=None, week=None,
                       start_date=None, end_date=None):
    """Return a DateRange for the filter, or None when there is no restriction.

    Missing or malformed parameters for the chosen filter mean no restriction.
    """
    if filter_type not in FILTER_TYPES:
        return None
    year = _to_int(year)
    month = _to_int(month)
    week = _to_int(week)
    try:
        if filter_type == 'month' and month and year:
            return month_range(year, month)
        if filter_type == 'year' and year:
            return year_range(year)
        if filter_type == 'week' and week and year:
            return week_range(year, week)
    except (ValueError, OverflowError):
        return None
    if filter_type in ('range', 'custom'):
        first, last = parse_day(start_date), parse_day(end_date)
        if first and last:
            return _day_bounds(first, last)
    return None


def date_filter_from_args(args):
    return resolve_date_range(
        args.get('filterType'),
        month=args.get('month'),
        year=args.get('year'),
        week=args.get('week'),
        start_date=args.get('startDate'),
        end_date=args.get('endDate'),
    )


def resolve_period(period, start_date=None, end_date=None, today=None):
    """Resolve a summary period relative to today; it always ends tonight."""
    if period not in PERIODS:
        period = 'month'
    today = today or date.today()
    end = datetime.combine(today, time.max)
    if period == 'week':
        start = today - timedelta(days=today.weekday())
    elif period == 'year':
        start = date(today.year, 1, 1)
    elif period == 'custom' and parse_day(start_date) and parse_day(end_date):
        return DateRange(datetime.combine(parse_day(start_date), time.min),
                         datetime.combine(parse_day(end_date), time.max))
    else:
        start = today.replace(day=1)
    return DateRange(datetime.combine(start, time.min), end)


def apply_date_range(query, column, date_range):
    if date_range is None:
        return query
    return query.filter(column >= date_range.start, column <= date_range.end)
