# synergies/core/commission_policy.py
from __future__ import annotations

from decimal import Decimal
from typing import Optional

STANDARD_AMOUNT = Decimal("100.00")
RECRUITMENT_AMOUNT = Decimal("500.00")

# Substrings of the normalized project category.
# "Location & Gestion" is eligible through "gestion"; "Achat" / "Location" alone are not.
RECRUITMENT_KEYS = ("recrut",)
STANDARD_KEYS = ("vente", "gestion", "syndic", "entreprise")

ZERO = Decimal("0.00")


def normalize_category(category: str | None) -> str:
    return (category or "").strip().lower()


def compute_commission_amount(
    category: str | None,
    *,
    standard_amount: Optional[Decimal] = None,
    recruitment_amount: Optional[Decimal] = None,
) -> Decimal:
    """
    Flat bonus owed to the prescriber of a closed-won referral.

      Vente, Gestion, Location & Gestion, Syndic, Ona Entreprises -> standard (100)
      Recrutement                                                 -> recruitment (500)
      Achat, Location, unknown, empty                             -> 0
    """
    c = normalize_category(category)
    if not c:
        return ZERO

    if any(key in c for key in RECRUITMENT_KEYS):
        amount = RECRUITMENT_AMOUNT if recruitment_amount is None else recruitment_amount
        return Decimal(amount).quantize(Decimal("1.00"))

    if any(key in c for key in STANDARD_KEYS):
        amount = STANDARD_AMOUNT if standard_amount is None else standard_amount
        return Decimal(amount).quantize(Decimal("1.00"))

    return ZERO


def is_eligible(category: str | None) -> bool:
    return compute_commission_amount(category) > 0
