import pytest

from fire_core import (
    ExtraEvent,
    format_axis_currency,
    format_currency,
    format_extra_events,
    parse_dollars,
    parse_extra_events,
    parse_percent,
    parse_rate,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("26%", 0.26),
        ("0%", 0.0),
        ("100%", 1.0),
    ],
)
def test_parse_percent_valid(text, expected):
    assert parse_percent(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["101%", "-5%", "abc%"])
def test_parse_percent_invalid(text):
    with pytest.raises(ValueError):
        parse_percent(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("7%", 0.07),
        ("-1.5%", -0.015),
        (" 2 ", 0.02),
        ("150%", 1.5),
    ],
)
def test_parse_rate_valid(text, expected):
    assert parse_rate(text) == pytest.approx(expected)


def test_parse_rate_invalid():
    with pytest.raises(ValueError):
        parse_rate("seven%")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("$1,234", 1234.0),
        ("€250,000", 250_000.0),
        ("0", 0.0),
        (" 500 ", 500.0),
    ],
)
def test_parse_dollars_valid(text, expected):
    assert parse_dollars(text) == expected


@pytest.mark.parametrize("text", ["-1", "-€5", "abc"])
def test_parse_dollars_invalid(text):
    with pytest.raises(ValueError):
        parse_dollars(text)


def test_parse_extra_events():
    text = """
    60, 50000, Pension fund payout
    75, €20000, Inheritance, from aunt

    50, 0
    """
    events = parse_extra_events(text)
    assert events == (
        ExtraEvent(1, 50_000.0, 60, "Pension fund payout"),
        ExtraEvent(2, 20_000.0, 75, "Inheritance, from aunt"),
        ExtraEvent(3, 0.0, 50, ""),
    )


@pytest.mark.parametrize("text", ["60", "sixty, 100", "60, -100"])
def test_parse_extra_events_invalid(text):
    with pytest.raises(ValueError):
        parse_extra_events(text)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "N/A"),
        (0, "€0"),
        (1234.4, "€1,234"),
        (-2500, "€-2,500"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


@pytest.mark.parametrize(
    "tick, expected",
    [
        (2_500_000, "€2.5M"),
        (250_000, "€250k"),
        (900, "€900"),
        (float("nan"), ""),
    ],
)
def test_format_axis_currency(tick, expected):
    assert format_axis_currency(tick) == expected


def test_format_extra_events_keeps_cents():
    events = (
        ExtraEvent(1, 1234.56, 60, "gift"),
        ExtraEvent(2, 20_000, 75, "Inheritance, from aunt"),
        ExtraEvent(3, 0.5, 80),
    )
    text = format_extra_events(events)
    assert text == "60, 1234.56, gift\n75, 20000, Inheritance, from aunt\n80, 0.5"
    assert parse_extra_events(text) == events


def test_format_extra_events_empty():
    assert format_extra_events(()) == ""
    assert parse_extra_events(format_extra_events(())) == ()
