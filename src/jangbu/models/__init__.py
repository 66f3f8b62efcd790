"""Data models and structures"""

from .core import (
    Account,
    BankLayout,
    BookkeepingConfig,
    CanonicalTransaction,
    ClassificationResult,
    ClassifiedTransaction,
    JournalEntry,
    JournalLine,
    ParsedDiaryEntry,
    ProcessingResult,
    StatementMeta,
    StatementParseResult,
    ValidationResult,
)
from .chart_of_accounts import ChartOfAccounts, DEFAULT_ACCOUNTS, default_chart

__all__ = [
    'Account',
    'BankLayout',
    'BookkeepingConfig',
    'CanonicalTransaction',
    'ChartOfAccounts',
    'ClassificationResult',
    'ClassifiedTransaction',
    'DEFAULT_ACCOUNTS',
    'JournalEntry',
    'JournalLine',
    'ParsedDiaryEntry',
    'ProcessingResult',
    'StatementMeta',
    'StatementParseResult',
    'ValidationResult',
    'default_chart',
]
