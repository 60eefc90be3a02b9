import pytest

from supplier_auth.core.errors import InvalidInput
from supplier_auth.dto.phone_validations import normalize_phone, validate_phone_number


@pytest.mark.parametrize("raw", [
    "+62 812-3456-7890",
    "(62) 812 3456 7890",
    "6281234567890",
    "+6281234567890",
])
def test_human_formats_share_one_canonical_form(raw):
    assert validate_phone_number(raw) == "+6281234567890"


@pytest.mark.parametrize("raw", [None, "", "123-456-789", "phone"])
def test_short_or_missing_numbers_are_rejected(raw):
    with pytest.raises(InvalidInput) as exc:
        validate_phone_number(raw)
    assert exc.value.status_code == 400


def test_normalize_does_not_enforce_length():
    assert normalize_phone("12 34") == "+1234"
