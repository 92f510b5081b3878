import pytest

from wizard.flow.validator import (
    FIELD_RULES,
    INVALID_NUMBER_MESSAGE,
    REQUIRED_MESSAGE,
    coerce_number,
    required_error,
    validate_field,
)

MIN_ONLY = [k for k, r in FIELD_RULES.items() if "min" in r and "max" not in r]
MIN_MAX = [k for k, r in FIELD_RULES.items() if "min" in r and "max" in r]


@pytest.mark.parametrize("key", MIN_ONLY)
def test_min_only_rules(key):
    minimum = FIELD_RULES[key]["min"]
    assert validate_field(key, str(minimum - 0.005)) == f"Must be at least {minimum:g}."
    assert validate_field(key, str(minimum)) == ""
    assert validate_field(key, "1000000") == ""


@pytest.mark.parametrize("key", MIN_MAX)
def test_min_max_rules(key):
    rule = FIELD_RULES[key]
    assert validate_field(key, str(rule["min"] - 1)) == f"Must be at least {rule['min']:g}."
    assert validate_field(key, str(rule["max"] + 1)) == f"Must be {rule['max']:g} or less."
    assert validate_field(key, str(rule["min"])) == ""
    assert validate_field(key, str(rule["max"])) == ""


def test_min_is_checked_before_max(monkeypatch):
    # A rule whose bounds cannot both hold: every value violates one of them
    monkeypatch.setitem(FIELD_RULES, "inverted", {"min": 10, "max": 5})
    assert validate_field("inverted", "7") == "Must be at least 10."
    assert validate_field("inverted", "12") == "Must be 5 or less."


@pytest.mark.parametrize("raw", [
    "abc", "12abc", "1_000", "nan", "--1",
    "inf", "infinity", "Infinity", "-Infinity", "1e400", "١٢", "１２", "0x", "1e", ".",
])
@pytest.mark.parametrize("key", sorted(FIELD_RULES))
def test_non_numeric_input_reports_invalid_number(key, raw):
    assert validate_field(key, raw) == INVALID_NUMBER_MESSAGE


def test_monthly_ad_spend_scenario():
    assert validate_field("monthly_ad_spend", "0") == "Must be at least 0.01."
    assert validate_field("monthly_ad_spend", "0.01") == ""


def test_timeframe_messages_use_plain_numbers():
    assert validate_field("timeframe_days", "2") == "Must be at least 3."
    assert validate_field("timeframe_days", "91") == "Must be 90 or less."
    assert validate_field("ctr_all", "-0.5") == "Must be at least 0."
    assert validate_field("ctr_all", "20.5") == "Must be 20 or less."


def test_unknown_keys_always_pass():
    assert validate_field("business_type", "not a number") == ""
    assert validate_field("anything", "") == ""


def test_coerce_number_follows_browser_number_parsing():
    assert coerce_number(" 42 ") == 42.0
    assert coerce_number("1e3") == 1000.0
    assert coerce_number("") == 0.0
    assert coerce_number("four") is None
    assert coerce_number(".5") == 0.5
    assert coerce_number("5.") == 5.0
    assert coerce_number("-2.5E-1") == -0.25
    assert coerce_number("0x1A") == 26.0
    assert coerce_number("0b101") == 5.0
    assert coerce_number("-0x1A") is None
    assert coerce_number("Infinity") is None
    assert coerce_number("٣") is None


def test_required_error_is_a_separate_gate():
    assert required_error(True, "") == REQUIRED_MESSAGE
    assert required_error(True, None) == REQUIRED_MESSAGE
    assert required_error(True, "x") == ""
    assert required_error(False, "") == ""


def test_infinite_spend_is_not_a_valid_number():
    assert validate_field("monthly_ad_spend", "inf") == INVALID_NUMBER_MESSAGE
    assert validate_field("monthly_ad_spend", "Infinity") == INVALID_NUMBER_MESSAGE
    assert validate_field("monthly_ad_spend", "9" * 400) == INVALID_NUMBER_MESSAGE
