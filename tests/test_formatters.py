from videos.formatters import format_count, format_date, format_duration_display


def test_format_count():
    assert format_count(1234567) == "1,234,567"
    assert format_count(12) == "12"
    assert format_count(None) == "0"


def test_format_date():
    assert format_date("2023-05-15") == "May 15, 2023"
    assert format_date("2021-12-01T08:30:00") == "Dec 1, 2021"


def test_format_date_passes_through_textual_dates():
    assert format_date("3 days ago") == "3 days ago"
    assert format_date("") == ""
    assert format_date(None) == ""


def test_format_duration_display():
    assert format_duration_display(3723) == "1:02:03"
    assert format_duration_display(245) == "4:05"
    assert format_duration_display(0) == "0:00"
    assert format_duration_display(None) == ""
