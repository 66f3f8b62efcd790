"""Rule-based account classifiers"""

from .rules import TransactionRule, AccountRule, ContextRule, first_match
from .transaction_classifier import TransactionClassifier, WITHDRAWAL_RULES, DEPOSIT_RULES
from .vat import split_vat
from .diary_classifier import DiaryClassifier

__all__ = [
    'TransactionRule',
    'AccountRule',
    'ContextRule',
    'first_match',
    'TransactionClassifier',
    'WITHDRAWAL_RULES',
    'DEPOSIT_RULES',
    'split_vat',
    'DiaryClassifier',
]
