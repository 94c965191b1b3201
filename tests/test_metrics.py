import pytest

from reporting.metrics import (
    click_through_rate,
    format_date_label,
    format_duration,
    format_long_date,
    is_reportable,
    percentage_of,
    percentage_share,
    series_key,
    slugify,
)


@pytest.mark.parametrize(
    "clicks, loads, expected",
    [
        (25, 100, 25.0),
        (0, 50, 0),
        (667, 279, 239.1),
        (1, 3, 33.3),
        (2, 3, 66.7),
        (10, 0, 0),
    ],
)
def test_click_through_rate(clicks, loads, expected):
    assert click_through_rate(clicks, loads) == expected


def test_click_through_rate_rounds_half_up():
    # 1/16 is 62.5 per mille, exactly half way
    assert click_through_rate(1, 16) == 6.3


def test_percentage_share():
    assert percentage_share(30, 40) == 75.0
    assert percentage_share(10, 40) == 25.0
    assert percentage_share(1, 3) == 33.33
    assert percentage_share(5, 0) == 0


def test_percentage_of_uses_one_decimal():
    assert percentage_of(1, 3) == 33.3
    assert percentage_of(0, 0) == 0


def test_shares_sum_to_at_most_hundred():
    clicks = [13, 7, 7, 3, 1]
    total = sum(clicks)
    shares = [percentage_share(c, total) for c in clicks]
    assert sum(shares) <= 100.1


def test_reportable_values():
    assert is_reportable("Gemini")
    assert not is_reportable("")
    assert not is_reportable(None)
    assert not is_reportable("(not set)")
    assert not is_reportable("-")


def test_format_date_label():
    assert format_date_label("20260117") == "Jan 17"
    assert format_date_label("20260102") == "Jan 2"


def test_format_date_label_is_stable():
    assert format_date_label("20251221") == format_date_label("20251221")


def test_format_date_label_rejects_garbage():
    with pytest.raises(ValueError):
        format_date_label("not-a-date")


def test_format_long_date():
    assert format_long_date("2025-12-21") == "Dec 21, 2025"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Kings Landing", "kingsLanding"),
        ("Village at Kings Crossing", "villageatKingsCrossing"),
        ("Gemini", "gemini"),
        ("", "other"),
        ("   ", "other"),
    ],
)
def test_series_key(name, expected):
    assert series_key(name) == expected


def test_format_duration():
    assert format_duration(95.4) == "01:35"
    assert format_duration(0) == "00:00"
    assert format_duration(600) == "10:00"


def test_slugify():
    assert slugify("Coastal Bend Lots") == "coastal-bend-lots"
