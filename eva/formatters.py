"""Display formatting shared by the dashboard view models"""

import math
import re
from datetime import date, datetime, timezone
from typing import Optional, Union

from .config import DEFAULT_CURRENCY
from .constants import MONTHS, SUPPORTED_CURRENCIES

DateLike = Union[datetime, date, str]


def parse_datetime(value: Optional[DateLike]) -> Optional[datetime]:
    """Parse marketplace ISO timestamps ("2025-06-01T10:00:00.000Z") into aware datetimes"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_currency(amount, currency: Optional[str] = None) -> str:
    currency = (currency or DEFAULT_CURRENCY).upper()
    symbol = SUPPORTED_CURRENCIES.get(currency, f"{currency} ")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value):
        value = 0.0

    sign = "-" if value < 0 else ""
    value = abs(round(value, 2))
    if value == int(value):
        body = f"{int(value):,}"
    else:
        body = f"{value:,.2f}"
    return f"{sign}{symbol}{body}"


def format_compact_number(num: float) -> str:
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.1f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def _unit(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''} ago"


def format_relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - dt).total_seconds())

    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _unit(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _unit(hours, "hour")
    days = hours // 24
    if days < 7:
        return _unit(days, "day")
    weeks = days // 7
    if weeks < 4:
        return _unit(weeks, "week")
    months = days // 30
    if months < 12:
        return _unit(max(months, 1), "month")
    return _unit(days // 365, "year")


def format_time_ago_short(value: DateLike, now: Optional[datetime] = None) -> str:
    """Compact variant used on the vendor dashboard"""
    dt = parse_datetime(value)
    if dt is None:
        return ""
    now = now or datetime.now(timezone.utc)
    hours = int((now - dt).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours}h ago"
    if hours // 24 < 7:
        return f"{hours // 24}d ago"
    return format_date(dt)


def format_date(value: DateLike) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return ""
    return f"{dt.day} {MONTHS[dt.month - 1]} {dt.year}"


def format_short_date(value: DateLike) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return ""
    return f"{MONTHS[dt.month - 1][:3]} {dt.day}, {dt.year}"


def format_time(value: DateLike) -> str:
    """12-hour clock, e.g. 2:30 PM"""
    dt = parse_datetime(value)
    if dt is None:
        return ""
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_date_range(start: DateLike, end: DateLike) -> str:
    s, e = parse_datetime(start), parse_datetime(end)
    if s is None or e is None:
        return ""
    if (s.year, s.month, s.day) == (e.year, e.month, e.day):
        return format_date(s)
    if (s.year, s.month) == (e.year, e.month):
        return f"{s.day} - {e.day} {MONTHS[s.month - 1]} {s.year}"
    if s.year == e.year:
        return f"{MONTHS[s.month - 1][:3]} {s.day} - {format_short_date(e)}"
    return f"{format_short_date(s)} - {format_short_date(e)}"


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)].strip() + suffix


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:].lower()


def title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def slugify(text: str) -> str:
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return re.sub(r"^-+|-+$", "", slug)


def deslugify(slug: str) -> str:
    return title_case(slug.replace("-", " "))


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    if count == 1:
        return singular
    return plural or f"{singular}s"


def format_list(items: list[str], conjunction: str = "and") -> str:
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return f"{', '.join(items[:-1])}, {conjunction} {items[-1]}"


def get_initials(name: str) -> str:
    return "".join(part[:1] for part in name.split(" ") if part).upper()[:2]


def format_status(status: str) -> str:
    return title_case(status.replace("_", " "))


def format_ordinal(num: int) -> str:
    suffixes = ["th", "st", "nd", "rd"]
    v = num % 100
    if 11 <= v <= 13:
        return f"{num}th"
    return f"{num}{suffixes[num % 10] if num % 10 < 4 else 'th'}"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min{'s' if minutes > 1 else ''}"
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours} hour{'s' if hours > 1 else ''}"
    return f"{hours}h {remaining}m"


def format_file_size(size: float) -> str:
    if size < 1:
        return f"{size:g} Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    i = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    value = round(size / (1024**i), 2)
    return f"{value:g} {units[i]}"


def format_rating(rating: float, max_rating: int = 5) -> str:
    return f"{rating:.1f}/{max_rating}"
