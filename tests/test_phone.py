from academy.utils.phone import digits, normalize_mobile


def test_local_number_gets_country_prefix():
    assert normalize_mobile("0771234567") == "94771234567"


def test_formatting_is_stripped():
    assert normalize_mobile("077 123-4567") == "94771234567"
    assert normalize_mobile("+94 77 123 4567") == "94771234567"


def test_already_prefixed_number_is_unchanged():
    assert normalize_mobile("94771234567") == "94771234567"


def test_number_without_leading_zero():
    assert normalize_mobile("771234567") == "94771234567"


def test_empty_input_stays_empty():
    assert normalize_mobile("") == ""
    assert digits("  ") == ""
