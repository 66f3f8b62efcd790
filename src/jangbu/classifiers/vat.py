"""Value-added tax split for VAT-inclusive amounts (10% Korean VAT)."""

from decimal import Decimal
from typing import Tuple, Union


def split_vat(amount: Union[int, Decimal]) -> Tuple[Decimal, Decimal]:
    """Split a VAT-inclusive amount into (supply, vat) in whole won.

    The supply value is ``amount / 1.1`` rounded half-up and VAT absorbs the
    remainder, so ``supply + vat == amount`` holds exactly. Integer
    arithmetic keeps this exact for amounts of any length.
    """
    total = int(amount)
    supply = (20 * total + 11) // 22
    return Decimal(supply), Decimal(total - supply)
