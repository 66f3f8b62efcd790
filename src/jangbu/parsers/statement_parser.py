"""Bank statement parser driven by per-bank layout tables."""

import hashlib
import logging
import os
import re
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .base import StatementParser, DataTransformer, UnsupportedFormatError
from ..models.core import (
    BankLayout,
    BookkeepingConfig,
    CanonicalTransaction,
    StatementMeta,
    StatementParseResult,
    exact_sum,
)
from ..utils.validation import ValidationEngine


logger = logging.getLogger(__name__)


# IBK 기업은행 "거래내역조회_입출식 예금" export:
# row 0 title, row 1 account info, row 2 header, rows 3..N-1 data, row N totals
IBK_LAYOUT = BankLayout(
    code="IBK",
    title_markers=["입출식 예금", "기업은행", "IBK"],
    meta_row=1,
    header_offset=3,
    columns={
        'seq': 0,
        'date': 1,
        'withdrawal': 2,
        'deposit': 3,
        'balance': 4,
        'description': 5,
        'counterpart_account': 6,
        'counterpart_bank': 7,
        'memo': 8,
        'transaction_type': 9,
        'counterpart_name': 12,
    },
    total_marker="합계",
    presence_column=1,
    meta_patterns={
        'account_number': r'계좌번호[:\s]*([0-9\-]+)',
        'account_holder': r'예금주명[:\s]*(.+?)[\s]+',
        'current_balance': r'현재잔액[:\s]*([\d,]+)원',
        'period_start': r'조회시작일자[:\s]*([\d\-]+)',
        'period_end': r'조회종료일자[:\s]*([\d\-]+)',
    },
)

DEFAULT_LAYOUTS = [IBK_LAYOUT]

REQUIRED_COLUMNS = {'date', 'withdrawal', 'deposit', 'description'}


def layout_from_dict(code: str, data: Dict[str, Any]) -> BankLayout:
    """Build a BankLayout from configuration data.

    Raises:
        ValueError: If required keys are missing or malformed
    """
    for key in ('title_markers', 'meta_row', 'header_offset', 'columns'):
        if key not in data:
            raise ValueError(f"Bank layout {code} missing required field: {key}")

    markers = data['title_markers']
    if not isinstance(markers, list) or not markers:
        raise ValueError(f"title_markers for {code} must be a non-empty list")

    columns = data['columns']
    if not isinstance(columns, dict):
        raise ValueError(f"columns for {code} must be a dictionary")
    missing = REQUIRED_COLUMNS - set(columns)
    if missing:
        raise ValueError(f"columns for {code} missing: {', '.join(sorted(missing))}")

    return BankLayout(
        code=code,
        title_markers=[str(m) for m in markers],
        meta_row=int(data['meta_row']),
        header_offset=int(data['header_offset']),
        columns={str(k): int(v) for k, v in columns.items()},
        total_marker=str(data.get('total_marker', '합계')),
        presence_column=int(data.get('presence_column', columns['date'])),
        meta_patterns=dict(data.get('meta_patterns') or {}),
    )


class BankStatementParser(StatementParser):
    """Parser for tabular bank statement exports.

    Each supported bank is described by a BankLayout; detection, metadata
    extraction and row mapping are all read from the layout table.
    """

    def __init__(self,
                 config: Optional[BookkeepingConfig] = None,
                 layouts: Optional[List[BankLayout]] = None):
        super().__init__(config)
        self.supported_extensions = ['.xlsx', '.xls']
        self.transformer = DataTransformer(self.config)
        self.validator = ValidationEngine()

        self.layouts: List[BankLayout] = list(layouts) if layouts is not None else list(DEFAULT_LAYOUTS)
        for code, layout_data in (self.config.bank_layouts or {}).items():
            self.layouts.append(layout_from_dict(code, layout_data))

    def get_supported_extensions(self) -> List[str]:
        """Return list of supported file extensions"""
        return self.supported_extensions

    def validate_file(self, file_path: str) -> bool:
        """Validate spreadsheet file"""
        if not os.path.exists(file_path):
            logger.error(f"File does not exist: {file_path}")
            return False

        _, ext = os.path.splitext(file_path.lower())
        if ext not in self.supported_extensions:
            logger.error(f"Unsupported file extension: {ext}")
            return False

        if os.path.getsize(file_path) == 0:
            logger.error(f"File is empty: {file_path}")
            return False

        return True

    def parse(self, file_path: str) -> StatementParseResult:
        """Read the first sheet of a workbook and parse it.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a readable spreadsheet
            UnsupportedFormatError: If the sheet title matches no known layout
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Statement file not found: {file_path}")
        if not self.validate_file(file_path):
            raise ValueError(f"File validation failed for: {file_path}")

        rows = self.read_rows(file_path)
        result = self.parse_rows(rows)
        result.file_hash = self.compute_file_hash(file_path)

        logger.info(
            f"Parsed {len(result.transactions)} transactions from {file_path} "
            f"({result.meta.bank_code})"
        )
        return result

    def read_rows(self, file_path: str) -> List[List[Any]]:
        """Load the first sheet as a list of rows with None for empty cells."""
        try:
            df = pd.read_excel(file_path, sheet_name=0, header=None, dtype=object)
        except Exception as e:
            raise ValueError(f"Unable to read spreadsheet {file_path}: {e}") from e

        df = df.astype(object).where(pd.notna(df), None)
        return df.values.tolist()

    @staticmethod
    def compute_file_hash(file_path: str) -> str:
        """SHA-256 of the file contents, used to spot repeated uploads."""
        sha256 = hashlib.sha256()
        with open(file_path, 'rb') as f:
            for chunk in iter(lambda: f.read(65536), b''):
                sha256.update(chunk)
        return sha256.hexdigest()

    def detect_layout(self, rows: Sequence[Sequence[Any]]) -> BankLayout:
        """Match the title cell against the registered layouts.

        Raises:
            UnsupportedFormatError: If no layout recognizes the title
        """
        title = self._title(rows)
        for layout in self.layouts:
            if any(marker in title for marker in layout.title_markers):
                return layout
        raise UnsupportedFormatError(title)

    def parse_rows(self, rows: Sequence[Sequence[Any]]) -> StatementParseResult:
        """Parse a 2-D cell table into metadata and canonical transactions"""
        layout = self.detect_layout(rows)
        meta = self.extract_meta(rows, layout)

        transactions: List[CanonicalTransaction] = []
        skipped_rows: List[str] = []

        for index in range(layout.header_offset, len(rows)):
            row = rows[index]
            first = self._cell(row, 0)
            if self.transformer.is_blank(first) or str(first).strip() == layout.total_marker:
                break
            if self.transformer.is_blank(self._cell(row, layout.presence_column)):
                continue

            position = index - layout.header_offset + 1
            try:
                transaction = self._convert_row(row, layout, position)
            except ValueError as e:
                logger.warning(f"Skipping malformed row {index + 1}: {e}")
                skipped_rows.append(f"Row {index + 1}: {e}")
                continue

            transactions.append(transaction)

        return StatementParseResult(
            meta=meta,
            transactions=transactions,
            total_withdrawal=exact_sum(tx.withdrawal for tx in transactions),
            total_deposit=exact_sum(tx.deposit for tx in transactions),
            skipped_rows=skipped_rows,
        )

    def extract_meta(self, rows: Sequence[Sequence[Any]], layout: BankLayout) -> StatementMeta:
        """Best-effort extraction of labeled fields from the metadata row"""
        meta_row = rows[layout.meta_row] if layout.meta_row < len(rows) else []
        text = self.transformer.clean_text(self._cell(meta_row, 0)) or ''

        values: Dict[str, str] = {}
        for field_name, pattern in layout.meta_patterns.items():
            match = re.search(pattern, text)
            if match:
                values[field_name] = match.group(1).strip()

        return StatementMeta(
            bank_code=layout.code,
            account_number=values.get('account_number', ''),
            account_holder=values.get('account_holder', ''),
            period_start=self.transformer.normalize_date(values.get('period_start')),
            period_end=self.transformer.normalize_date(values.get('period_end')),
            current_balance=self.transformer.normalize_amount(values.get('current_balance')),
        )

    def _convert_row(self, row: Sequence[Any], layout: BankLayout, position: int) -> CanonicalTransaction:
        """Map one row to a CanonicalTransaction by fixed column offsets.

        Raises:
            ValueError: If the date is unreadable or the amounts break the
                transaction invariants (negative, or both sides set)
        """
        columns = layout.columns

        def cell(name: str) -> Any:
            if name not in columns:
                return None
            return self._cell(row, columns[name])

        seq = self._parse_seq(cell('seq'), position)

        transaction = CanonicalTransaction(
            seq=seq,
            date=self.transformer.normalize_datetime(cell('date')),
            withdrawal=self.transformer.normalize_amount(cell('withdrawal')),
            deposit=self.transformer.normalize_amount(cell('deposit')),
            balance=self.transformer.normalize_amount(cell('balance')),
            description=self.transformer.clean_text(cell('description')) or '',
            counterpart_account=self.transformer.clean_text(cell('counterpart_account')),
            counterpart_bank=self.transformer.clean_text(cell('counterpart_bank')),
            memo=self.transformer.clean_text(cell('memo')),
            transaction_type=self.transformer.clean_text(cell('transaction_type')),
            counterpart_name=self.transformer.clean_text(cell('counterpart_name')),
        )

        errors = self.validator.validate_transaction(transaction)
        if errors:
            raise ValueError("; ".join(errors))
        return transaction

    def _parse_seq(self, value: Any, position: int) -> int:
        number = self.transformer.normalize_amount(value)
        if number > 0 and number == number.to_integral_value():
            return int(number)
        return position

    def _title(self, rows: Sequence[Sequence[Any]]) -> str:
        if not rows:
            return ''
        return self.transformer.clean_text(self._cell(rows[0], 0)) or ''

    @staticmethod
    def _cell(row: Sequence[Any], index: int) -> Any:
        if row is None or index >= len(row):
            return None
        return row[index]
