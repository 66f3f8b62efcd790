"""Ordered keyword decision lists shared by the classifiers.

A rule list is evaluated top to bottom and the first matching rule wins, so
list order encodes priority: specific keywords must precede broad ones.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Tuple, TypeVar


@dataclass(frozen=True)
class TransactionRule:
    """Keyword rule over the concatenated text of selected transaction fields.

    Attributes:
        pattern: Regex searched in the concatenated field text
        fields: Attribute names joined (None as "") before matching
        debit: Debit account name
        credit: Credit account name
        vat_deductible: Whether input VAT may be deducted
        confidence: Static confidence of the rule
        reason: Human-readable justification
    """
    pattern: str
    fields: Tuple[str, ...]
    debit: str
    credit: str
    vat_deductible: bool
    confidence: float
    reason: str

    def matches(self, subject: Any) -> bool:
        text = ''.join(getattr(subject, name, None) or '' for name in self.fields)
        return re.search(self.pattern, text) is not None

    @property
    def accounts(self) -> Tuple[str, str]:
        return self.debit, self.credit


@dataclass(frozen=True)
class AccountRule:
    """Keyword rule over free text that selects a single account"""
    pattern: str
    account: str
    vat_deductible: bool
    confidence: float

    def matches(self, text: str) -> bool:
        return re.search(self.pattern, text, re.IGNORECASE) is not None


@dataclass(frozen=True)
class ContextRule:
    """Account rule that needs both a context keyword and an item keyword.

    Used where the same purchase means different things depending on who
    it was for, e.g. a meal with a client versus a meal with staff.
    """
    context: str
    item: str
    account: str
    vat_deductible: bool
    confidence: float

    def matches(self, text: str) -> bool:
        return (re.search(self.context, text, re.IGNORECASE) is not None
                and re.search(self.item, text, re.IGNORECASE) is not None)


R = TypeVar('R')


def first_match(rules: Iterable[R], subject: Any) -> Optional[R]:
    """Return the first rule whose ``matches(subject)`` is true."""
    for rule in rules:
        if rule.matches(subject):
            return rule
    return None


def referenced_accounts(rules: Sequence[Any]) -> set:
    """Collect every account name a rule list can emit."""
    names = set()
    for rule in rules:
        if isinstance(rule, TransactionRule):
            names.update(rule.accounts)
        else:
            names.add(rule.account)
    return names
