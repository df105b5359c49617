import pytest

from water_reminder.ui import format_interval, format_short_duration


@pytest.mark.parametrize("minutes, expected", [
    (5, "5 minutes"),
    (1, "1 minute"),
    (60, "1 hour"),
    (90, "1 hour 30 minutes"),
    (240, "4 hours"),
    (0, "less than a minute"),
])
def test_format_interval(minutes, expected):
    assert format_interval(minutes) == expected


@pytest.mark.parametrize("remaining, expected", [
    (None, "--"),
    (0, "now"),
    (1, "1m"),
    (60_000, "1m"),
    (61_000, "2m"),
    (125 * 60_000, "2h 5m"),
])
def test_format_short_duration(remaining, expected):
    assert format_short_duration(remaining) == expected
