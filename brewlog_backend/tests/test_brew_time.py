# brewlog_backend/tests/test_brew_time.py
import pytest

from brewlog_backend.app.services.validation import (
    FormatError,
    ValidationError,
    format_brew_time,
    parse_brew_time,
)

# Purpose:
# MM:SS parsing/formatting used by the brew time field.

@pytest.mark.parametrize("text,expected", [
    ("5:59", 359),
    ("05:59", 359),
    ("0:00", 0),
    ("3:00", 180),
    ("125:07", 125 * 60 + 7),
    (" 2:30 ", 150),
])
def test_parse_valid(text, expected):
    assert parse_brew_time(text) == expected

@pytest.mark.parametrize("text", [
    "75",        # no separator
    "5:75",      # seconds >= 60
    "5:60",
    "1:2:3",     # extra component
    ":30",
    "5:",
    "a:10",
    "5:1x",
    "-1:30",
    "1:-5",
    "1.5:30",
    "",
])
def test_parse_rejects(text):
    with pytest.raises(FormatError):
        parse_brew_time(text)

def test_format_error_is_a_validation_error():
    with pytest.raises(ValidationError) as exc:
        parse_brew_time("75")
    assert "brew_time" in exc.value.errors

def test_format_pads_and_truncates():
    assert format_brew_time(359) == "05:59"
    assert format_brew_time(0) == "00:00"
    assert format_brew_time(59.9) == "00:59"
    assert format_brew_time(6000) == "100:00"

def test_format_parse_agree():
    for minutes in (0, 1, 9, 42, 120):
        for seconds in (0, 7, 30, 59):
            total = minutes * 60 + seconds
            text = format_brew_time(total)
            assert text.endswith(f":{seconds:02d}")
            assert parse_brew_time(text) == total
            assert parse_brew_time(f"{minutes}:{seconds}") == total

def test_format_rejects_negative():
    with pytest.raises(ValueError):
        format_brew_time(-1)
