"""Validation of journal entries and canonical transactions."""

from datetime import datetime
from decimal import Decimal
from typing import List

from ..models.core import CanonicalTransaction, JournalEntry, ValidationResult


def validate_journal_entry(entry: JournalEntry) -> ValidationResult:
    """Check that debits equal credits and the entry is not empty.

    Reports the problem; never corrects the entry.
    """
    total_debit = entry.total_debit
    total_credit = entry.total_credit

    if total_debit != total_credit:
        return ValidationResult(
            valid=False,
            error=f"대차 불일치: 차변 {total_debit} ≠ 대변 {total_credit}",
        )
    if total_debit == 0:
        return ValidationResult(valid=False, error="금액이 0입니다.")
    return ValidationResult(valid=True)


class ValidationEngine:
    """Sanity checks for parsed and classified records"""

    def validate_journal_entry(self, entry: JournalEntry) -> ValidationResult:
        return validate_journal_entry(entry)

    def validate_journal_lines(self, entry: JournalEntry) -> List[str]:
        """Validate individual journal lines and return list of errors"""
        errors = []

        for i, line in enumerate(entry.lines, start=1):
            if line.debit < 0 or line.credit < 0:
                errors.append(f"Line {i}: amounts cannot be negative")
            if (line.debit != 0) == (line.credit != 0):
                errors.append(f"Line {i}: exactly one of debit or credit must be non-zero")
            if not line.account or not line.account.strip():
                errors.append(f"Line {i}: account cannot be empty")

        return errors

    def validate_transaction(self, transaction: CanonicalTransaction) -> List[str]:
        """Validate a canonical transaction and return list of errors"""
        errors = []

        if not isinstance(transaction.date, datetime):
            errors.append("Invalid date: must be datetime object")
        elif transaction.date.tzinfo is None:
            errors.append("Invalid date: must be timezone-aware")

        for name in ('withdrawal', 'deposit', 'balance'):
            value = getattr(transaction, name)
            if not isinstance(value, Decimal):
                errors.append(f"Invalid {name}: must be Decimal object")

        if isinstance(transaction.withdrawal, Decimal) and transaction.withdrawal < 0:
            errors.append("Withdrawal cannot be negative")
        if isinstance(transaction.deposit, Decimal) and transaction.deposit < 0:
            errors.append("Deposit cannot be negative")
        if transaction.is_withdrawal and transaction.is_deposit:
            errors.append("Transaction cannot be both a withdrawal and a deposit")

        if not isinstance(transaction.seq, int) or transaction.seq < 1:
            errors.append("Sequence number must be a positive integer")

        return errors
