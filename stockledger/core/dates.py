from datetime import date, datetime, time, timezone


def as_utc(value):
    """Return an aware UTC datetime; naive values are taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now():
    return datetime.now(timezone.utc)


def parse_datetime(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        value_text = value.strip()
        if not value_text:
            return None
        if value_text.endswith("Z"):
            value_text = value_text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(value_text))
        except ValueError:
            return None
    return None


def _is_date_only(value):
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    if isinstance(value, str):
        return len(value.strip()) == 10
    return False


def report_window(from_value, to_value):
    """Resolve report bounds into an inclusive ``[start, end]`` pair of UTC datetimes.

    A date-only upper bound covers the whole of that day.
    Returns ``(None, None)`` when either bound cannot be parsed.
    """
    start = parse_datetime(from_value)
    end = parse_datetime(to_value)
    if start is None or end is None:
        return None, None
    if _is_date_only(to_value):
        end = datetime.combine(end.date(), time.max, tzinfo=timezone.utc)
    return start, end


def parse_iso_date(value):
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    value_text = value.strip()
    if len(value_text) != 10:
        return None
    try:
        return date.fromisoformat(value_text)
    except ValueError:
        return None
