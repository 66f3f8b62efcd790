"""CSV output for classified transactions and journal entries."""

import csv
import logging
import os
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from ..models.core import BookkeepingConfig, ClassifiedTransaction, JournalEntry


logger = logging.getLogger(__name__)


class CSVWriter:
    """Writes classification results with fixed column layouts"""

    TRANSACTION_HEADERS = [
        'seq',
        'date',
        'withdrawal',
        'deposit',
        'balance',
        'description',
        'counterpart_name',
        'debit_account',
        'credit_account',
        'vat_deductible',
        'confidence',
        'needs_review',
        'reason',
    ]

    JOURNAL_HEADERS = [
        'date',
        'account',
        'account_code',
        'debit',
        'credit',
        'confidence',
        'needs_review',
        'reason',
    ]

    def __init__(self, config: Optional[BookkeepingConfig] = None):
        self.config = config or BookkeepingConfig()

    def write_transactions(self, classified: List[ClassifiedTransaction], output_path: str) -> bool:
        """
        Write classified transactions to a CSV file

        Args:
            classified: Transactions paired with their classification
            output_path: Path where CSV file should be written

        Returns:
            True if successful, False otherwise
        """
        if not classified:
            return False

        rows = [self._classified_to_dict(item) for item in classified]
        return self._write(output_path, self.TRANSACTION_HEADERS, rows)

    def write_journal_entries(self, entries: List[JournalEntry], output_path: str, append: bool = False) -> bool:
        """Write one CSV row per journal line.

        With ``append`` the rows are added to an existing journal file and the
        header is written only when the file is new or empty.
        """
        rows = [
            row
            for entry in entries
            for row in self._journal_to_dicts(entry)
        ]
        if not rows:
            return False
        return self._write(output_path, self.JOURNAL_HEADERS, rows, append=append)

    def generate_output_path(self, source_file_path: str, bank_code: str) -> str:
        """Output path under the data directory, grouped by bank code"""
        csv_filename = f"{os.path.basename(source_file_path)}.csv"
        return os.path.join(self.config.data_directory, bank_code.lower(), csv_filename)

    def create_unique_filename(self, base_path: str) -> str:
        """
        Create unique filename if file already exists

        Args:
            base_path: Base file path

        Returns:
            Unique file path (may have suffix added)
        """
        if not os.path.exists(base_path):
            return base_path

        path_without_ext, ext = os.path.splitext(base_path)

        counter = 1
        while counter <= 999:
            new_path = f"{path_without_ext}_{counter:03d}{ext}"
            if not os.path.exists(new_path):
                return new_path
            counter += 1

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{path_without_ext}_{timestamp}{ext}"

    def _write(self, output_path: str, headers: List[str], rows: List[Dict[str, str]],
               append: bool = False) -> bool:
        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            existing = append and os.path.exists(output_path) and os.path.getsize(output_path) > 0

            # utf-8-sig so spreadsheet apps detect the encoding of Korean text;
            # the BOM is only emitted at the start of the file
            with open(output_path, 'a' if existing else 'w', newline='', encoding='utf-8-sig') as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=headers)
                if not existing:
                    writer.writeheader()
                writer.writerows(rows)

            logger.info(f"Wrote {len(rows)} rows to {output_path}")
            return True

        except (OSError, csv.Error) as e:
            logger.error(f"Failed to write CSV {output_path}: {e}")
            return False

    def _classified_to_dict(self, item: ClassifiedTransaction) -> Dict[str, str]:
        """Convert a classified transaction to a dictionary for CSV writing"""
        tx = item.transaction
        result = item.classification
        return {
            'seq': str(tx.seq),
            'date': tx.date.isoformat(),
            'withdrawal': self._amount(tx.withdrawal),
            'deposit': self._amount(tx.deposit),
            'balance': self._amount(tx.balance),
            'description': tx.description or '',
            'counterpart_name': tx.counterpart_name or '',
            'debit_account': result.debit_account,
            'credit_account': result.credit_account,
            'vat_deductible': str(result.vat_deductible).lower(),
            'confidence': f"{result.confidence:.2f}",
            'needs_review': str(item.needs_review(self.config.review_threshold)).lower(),
            'reason': result.reason,
        }

    def _journal_to_dicts(self, entry: JournalEntry) -> List[Dict[str, str]]:
        return [
            {
                'date': entry.date.isoformat(),
                'account': line.account,
                'account_code': line.account_code,
                'debit': self._amount(line.debit),
                'credit': self._amount(line.credit),
                'confidence': f"{entry.confidence:.2f}",
                'needs_review': str(entry.needs_review).lower(),
                'reason': entry.reason,
            }
            for line in entry.lines
        ]

    @staticmethod
    def _amount(value: Optional[Decimal]) -> str:
        return str(value) if value is not None else ''
