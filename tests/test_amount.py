import pytest

from vaultsim.amount import Amount


@pytest.mark.parametrize("text", ["0", "500", "0.06", "-0.019608035372895813", "99999"])
def test_parse_str_round_trip(text):
    assert str(Amount.parse(text)) == text


def test_trailing_zeros_trimmed():
    assert str(Amount.parse("4.500")) == "4.5"


def test_invalid_parse():
    with pytest.raises(ValueError):
        Amount.parse("abc")
    with pytest.raises(ValueError):
        Amount.parse("1.0000000000000000001")


def test_arithmetic_with_ints():
    assert Amount(50) * 10 == Amount(500)
    assert Amount(3) + 2 == 5
    assert 10 - Amount(4) == Amount(6)
    assert -Amount(7) == Amount(-7)
    assert abs(Amount(-7)) == Amount(7)


def test_division_truncates():
    assert str(Amount(1) / Amount(3)) == "0.333333333333333333"
    assert str(Amount(-1) / Amount(3)) == "-0.333333333333333333"


def test_division_by_zero():
    with pytest.raises(ZeroDivisionError):
        Amount(1) / Amount(0)


def test_ordering_and_zero():
    assert Amount(0).is_zero()
    assert not Amount.parse("0.000000000000000001").is_zero()
    assert Amount(1) < Amount(2) <= Amount(2)
    assert Amount(3) > 2
    assert hash(Amount(5)) == hash(Amount.parse("5.0"))