"""Tests for the VAT split."""

from decimal import Decimal

import pytest

from jangbu.classifiers.vat import split_vat


@pytest.mark.parametrize("amount,supply,vat", [
    (15000, Decimal("13636"), Decimal("1364")),
    (59000, Decimal("53636"), Decimal("5364")),
    (35000, Decimal("31818"), Decimal("3182")),
    (5000, Decimal("4545"), Decimal("455")),
    (11000, Decimal("10000"), Decimal("1000")),
    (1, Decimal("1"), Decimal("0")),
    (0, Decimal("0"), Decimal("0")),
])
def test_split_vat(amount, supply, vat):
    assert split_vat(amount) == (supply, vat)


def test_parts_sum_to_amount():
    for amount in range(1, 3000, 7):
        supply, vat = split_vat(Decimal(amount))
        assert supply + vat == amount
        assert vat == amount - (20 * amount + 11) // 22


def test_accepts_decimal():
    supply, vat = split_vat(Decimal("2000000"))

    assert supply == Decimal("1818182")
    assert vat == Decimal("181818")


def test_very_long_amount_stays_exact():
    amount = 10 ** 29

    supply, vat = split_vat(Decimal(amount))

    assert supply + vat == amount
    assert supply == Decimal((20 * amount + 11) // 22)
