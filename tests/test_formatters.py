from datetime import datetime, timedelta, timezone

import pytest

from eva.formatters import (
    deslugify,
    format_compact_number,
    format_currency,
    format_date,
    format_date_range,
    format_duration,
    format_file_size,
    format_list,
    format_percentage,
    format_rating,
    format_ordinal,
    format_relative_time,
    format_short_date,
    format_status,
    format_time,
    format_time_ago_short,
    get_initials,
    parse_datetime,
    pluralize,
    slugify,
    truncate,
)
from eva.shared.validators import (
    validate_date_range,
    validate_email,
    validate_password,
    validate_phone,
    validate_slug,
    validate_time_of_day,
    validate_url,
)
from eva.utils.sanitization import sanitize_dict, sanitize_message, sanitize_string

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════
# FORMATTERS
# ═══════════════════════════════════════════════════════


def test_parse_marketplace_timestamps():
    parsed = parse_datetime("2025-06-01T10:00:00.000Z")

    assert parsed == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert parse_datetime("") is None
    assert parse_datetime("yesterday") is None
    assert parse_datetime("2025-06-01").tzinfo is not None


def test_currency_formatting():
    assert format_currency(1500, "EUR") == "€1,500"
    assert format_currency(12.5, "GBP") == "£12.50"
    assert format_currency(-3, "usd") == "-$3"
    assert format_currency("abc", "NGN") == "₦0"
    assert format_currency(10, "XYZ") == "XYZ 10"


def test_relative_time():
    assert format_relative_time(NOW - timedelta(seconds=30), NOW) == "just now"
    assert format_relative_time(NOW - timedelta(minutes=1), NOW) == "1 minute ago"
    assert format_relative_time(NOW - timedelta(hours=5), NOW) == "5 hours ago"
    assert format_relative_time(NOW - timedelta(days=14), NOW) == "2 weeks ago"
    assert format_relative_time(NOW - timedelta(days=400), NOW) == "1 year ago"


def test_time_ago_short():
    assert format_time_ago_short(NOW - timedelta(minutes=20), NOW) == "Just now"
    assert format_time_ago_short(NOW - timedelta(hours=3), NOW) == "3h ago"
    assert format_time_ago_short(NOW - timedelta(days=2), NOW) == "2d ago"
    assert format_time_ago_short(datetime(2025, 5, 1, tzinfo=timezone.utc), NOW) == "1 May 2025"


def test_dates_and_times():
    assert format_date("2025-06-01T10:00:00Z") == "1 June 2025"
    assert format_short_date("2025-06-01T10:00:00Z") == "Jun 1, 2025"
    assert format_time("2025-06-01T00:05:00Z") == "12:05 AM"
    assert format_time("2025-06-01T14:30:00Z") == "2:30 PM"


def test_date_ranges():
    assert format_date_range("2025-06-01", "2025-06-01") == "1 June 2025"
    assert format_date_range("2025-06-01", "2025-06-03") == "1 - 3 June 2025"
    assert format_date_range("2025-06-28", "2025-07-02") == "Jun 28 - Jul 2, 2025"
    assert format_date_range("2025-12-30", "2026-01-02") == "Dec 30, 2025 - Jan 2, 2026"


def test_text_helpers():
    assert slugify("Music & DJs") == "music-djs"
    assert slugify("  Newcastle upon Tyne ") == "newcastle-upon-tyne"
    assert get_initials("kofi mensah annan") == "KM"
    assert truncate("A long description", 10) == "A long..."
    assert format_status("PENDING_PAYMENT") == "Pending Payment"
    assert format_list(["venues", "caterers", "florists"]) == "venues, caterers, and florists"
    assert deslugify("wedding-planners") == "Wedding Planners"
    assert pluralize(1, "vendor") == "vendor"
    assert pluralize(3, "city", "cities") == "cities"


def test_number_helpers():
    assert format_ordinal(1) == "1st"
    assert format_ordinal(12) == "12th"
    assert format_ordinal(22) == "22nd"
    assert format_duration(45) == "45 mins"
    assert format_duration(90) == "1h 30m"
    assert format_duration(120) == "2 hours"
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(0.5) == "0.5 Bytes"
    assert format_file_size(1536) == "1.5 KB"
    assert format_compact_number(1_300_000) == "1.3M"
    assert format_compact_number(950) == "950"
    assert format_percentage(12.34) == "12.3%"
    assert format_rating(4.26) == "4.3/5"


# ═══════════════════════════════════════════════════════
# VALIDATORS
# ═══════════════════════════════════════════════════════


def test_phone_numbers():
    assert validate_phone("+234 801 234 5678") == "+2348012345678"
    assert validate_phone("020 7946 0958") == "02079460958"
    assert validate_phone("") == ""
    with pytest.raises(ValueError):
        validate_phone("12345")
    with pytest.raises(ValueError):
        validate_phone("call me maybe")


def test_email_is_lowercased():
    assert validate_email(" Ada@Example.COM ") == "ada@example.com"
    with pytest.raises(ValueError):
        validate_email("ada@example")


def test_slug_rules():
    assert validate_slug("event-planners") == "event-planners"
    for bad in ("", "Event Planners", "double--hyphen", "-leading", "a" * 101):
        with pytest.raises(ValueError):
            validate_slug(bad)


def test_password_strength():
    assert validate_password("Sunshine42") == "Sunshine42"
    for weak in ("Short1", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"):
        with pytest.raises(ValueError):
            validate_password(weak)


def test_time_of_day():
    assert validate_time_of_day("23:59") == "23:59"
    for bad in ("24:00", "9:00", "09:60"):
        with pytest.raises(ValueError):
            validate_time_of_day(bad)


def test_urls_and_date_ranges():
    assert validate_url("") == ""
    assert validate_url("https://eva.example.com/vendors") == "https://eva.example.com/vendors"
    with pytest.raises(ValueError):
        validate_url("javascript:alert(1)")

    validate_date_range(NOW - timedelta(days=1), NOW)
    with pytest.raises(ValueError):
        validate_date_range(NOW, NOW - timedelta(days=1))


# ═══════════════════════════════════════════════════════
# SANITIZATION
# ═══════════════════════════════════════════════════════


def test_sanitize_escapes_html_and_strips_control_chars():
    assert sanitize_string('<script>alert("x")</script>') == "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;"
    assert sanitize_string("line\x00break") == "linebreak"
    assert sanitize_string(None) is None


def test_sanitize_dict_only_touches_listed_fields():
    result = sanitize_dict({"name": "<b>Ada</b>", "website": "https://a.example/?q=<x>"}, ["name"])

    assert result["name"] == "&lt;b&gt;Ada&lt;/b&gt;"
    assert result["website"] == "https://a.example/?q=<x>"


def test_nested_records_are_escaped_by_key():
    payload = {
        "businessName": "Ada & Co",
        "listings": [{"headline": "<i>Full day</i>", "price": 100}],
        "photos": ["https://cdn.example/a.jpg?x=<1>"],
    }

    result = sanitize_dict(payload, ["businessName", "headline"])

    assert result["businessName"] == "Ada &amp; Co"
    assert result["listings"][0] == {"headline": "&lt;i&gt;Full day&lt;/i&gt;", "price": 100}
    assert result["photos"] == ["https://cdn.example/a.jpg?x=<1>"]


def test_message_length_limit():
    assert sanitize_message("  hello  ") == "hello"
    assert sanitize_message(None) == ""
    with pytest.raises(ValueError):
        sanitize_message("x" * 501, max_length=500)
