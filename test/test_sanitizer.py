import pytest

from extraction.sanitizer import normalize_input, sanitize_input
from todo_ai.errors import (
    EmptyInput,
    InputValidationError,
    NoMeaningfulContent,
    TooLong,
    TooShort,
)


def test_whitespace_is_collapsed():
    assert sanitize_input("  buy   milk\n\ttomorrow  ") == "buy milk tomorrow"


def test_empty_and_blank_input():
    with pytest.raises(EmptyInput):
        sanitize_input("")
    with pytest.raises(EmptyInput):
        sanitize_input("   \n\t ")


def test_single_character_is_too_short():
    with pytest.raises(TooShort):
        sanitize_input(" a ")


def test_length_limits_apply_after_normalization():
    assert len(sanitize_input("a" * 500)) == 500
    with pytest.raises(TooLong):
        sanitize_input("a" * 501)
    # 166 words separated by runs of spaces fit once collapsed
    assert sanitize_input("ab    " * 166).count(" ") == 165


def test_symbols_only_is_rejected():
    with pytest.raises(NoMeaningfulContent):
        sanitize_input("!!! ???")


def test_checks_run_in_order():
    # too short wins over "no letters"
    with pytest.raises(TooShort):
        sanitize_input("!")
    # too long wins over "no letters"
    with pytest.raises(TooLong):
        sanitize_input("!" * 600)


def test_digits_and_non_latin_letters_count_as_content():
    assert sanitize_input("42") == "42"
    assert sanitize_input("내일 회의") == "내일 회의"


def test_all_failures_are_input_validation_errors():
    for bad in ["", "x", "y" * 501, "...."]:
        with pytest.raises(InputValidationError):
            sanitize_input(bad)


def test_normalize_input_handles_none():
    assert normalize_input(None) == ""
