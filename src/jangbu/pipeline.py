"""End-to-end bookkeeping flows: statement ingestion and diary recording."""

import logging
import time
from dataclasses import replace
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from .classifiers.diary_classifier import DiaryClassifier
from .classifiers.transaction_classifier import TransactionClassifier
from .models.chart_of_accounts import ChartOfAccounts
from .models.core import (
    DIRECTIONS,
    BookkeepingConfig,
    ClassifiedTransaction,
    JournalEntry,
    ParsedDiaryEntry,
    ProcessingResult,
    StatementParseResult,
)
from .parsers.base import UnsupportedFormatError
from .parsers.diary_parser import DiaryTextParser, normalize_payment_method
from .parsers.statement_parser import BankStatementParser
from .utils.account_config import ChartOfAccountsLoader
from .utils.csv_writer import CSVWriter
from .utils.error_handler import ErrorCategory, ErrorHandler, handle_file_access_error
from .utils.validation import ValidationEngine, validate_journal_entry


logger = logging.getLogger(__name__)


class BookkeepingPipeline:
    """Wires parsers, classifiers and validation together.

    Statement flow: rows -> canonical transactions -> classifications.
    Diary flow: text -> parsed fields -> journal entry -> balance check.
    """

    def __init__(self,
                 config: Optional[BookkeepingConfig] = None,
                 chart: Optional[ChartOfAccounts] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 today: Optional[date] = None):
        self.config = config or BookkeepingConfig()
        self.chart = chart or ChartOfAccountsLoader(self.config.chart_of_accounts_path).load()
        self.error_handler = error_handler or ErrorHandler(log_directory=self.config.log_directory)

        self.statement_parser = BankStatementParser(self.config)
        self.diary_parser = DiaryTextParser(today=today)
        self.transaction_classifier = TransactionClassifier(self.chart)
        self.diary_classifier = DiaryClassifier(self.chart, review_threshold=self.config.review_threshold)
        self.csv_writer = CSVWriter(self.config)
        self.validator = ValidationEngine()

    # Statement flow

    def ingest_rows(self, rows: Sequence[Sequence[Any]]) -> StatementParseResult:
        """Parse an in-memory cell table.

        Raises:
            UnsupportedFormatError: If the title matches no known bank layout
        """
        try:
            result = self.statement_parser.parse_rows(rows)
        except UnsupportedFormatError as e:
            self._log_unsupported(e)
            raise
        self._log_skipped_rows(result)
        return result

    def ingest_file(self, file_path: str) -> StatementParseResult:
        """Parse a statement workbook from disk.

        Raises:
            FileNotFoundError: If the file does not exist
            UnsupportedFormatError: If the title matches no known bank layout
            ValueError: If the file cannot be read as a spreadsheet
        """
        try:
            result = self.statement_parser.parse(file_path)
        except UnsupportedFormatError as e:
            self._log_unsupported(e, file_path)
            raise
        except OSError as e:
            handle_file_access_error(self.error_handler, file_path, e)
            raise
        except ValueError as e:
            self.error_handler.log_error(
                f"Malformed statement file {file_path}: {e}",
                "MALFORMED_FILE",
                ErrorCategory.FILE_FORMAT,
                file_path=file_path,
                exception=e
            )
            raise
        self._log_skipped_rows(result, file_path)
        return result

    def classify_statement(self, result: StatementParseResult) -> List[ClassifiedTransaction]:
        """Classify every transaction, keeping statement order"""
        classified = self.transaction_classifier.classify_many(result.transactions)

        review_count = self.count_for_review(classified)
        if review_count:
            self.error_handler.log_info(
                f"{review_count} of {len(classified)} transactions need review",
                context={'code': self.error_handler.error_codes['LOW_CONFIDENCE'],
                         'bank_code': result.meta.bank_code}
            )
        return classified

    def count_for_review(self, classified: List[ClassifiedTransaction]) -> int:
        return sum(1 for item in classified if item.needs_review(self.config.review_threshold))

    def process_statement_file(self, file_path: str, output_path: Optional[str] = None) -> ProcessingResult:
        """Parse, classify and write one statement file to CSV"""
        start_time = time.time()
        errors: List[str] = []
        warnings: List[str] = []

        try:
            result = self.ingest_file(file_path)
        except (OSError, ValueError) as e:
            errors.append(str(e))
            return ProcessingResult(
                file_path=file_path,
                bank_code="",
                transactions_count=0,
                review_count=0,
                output_file="",
                processing_time=time.time() - start_time,
                errors=errors,
                warnings=warnings,
                success=False
            )

        warnings.extend(result.skipped_rows)
        classified = self.classify_statement(result)
        review_count = self.count_for_review(classified)
        if review_count:
            warnings.append(f"{review_count} transactions need review")

        output_file = ""
        if classified:
            output_file = output_path or self.csv_writer.create_unique_filename(
                self.csv_writer.generate_output_path(file_path, result.meta.bank_code)
            )
            if not self.csv_writer.write_transactions(classified, output_file):
                errors.append(f"Failed to write output file: {output_file}")
                self.error_handler.log_error(
                    f"Failed to write output file: {output_file}",
                    "OUTPUT_WRITE_ERROR",
                    ErrorCategory.SYSTEM,
                    file_path=file_path
                )
                output_file = ""
        else:
            warnings.append("No transactions found")

        return ProcessingResult(
            file_path=file_path,
            bank_code=result.meta.bank_code,
            transactions_count=len(classified),
            review_count=review_count,
            output_file=output_file,
            processing_time=time.time() - start_time,
            errors=errors,
            warnings=warnings,
            success=not errors,
            total_withdrawal=result.total_withdrawal,
            total_deposit=result.total_deposit
        )

    # Diary flow

    def record_diary(self, text: str, payment_method: Optional[str] = None) -> Tuple[ParsedDiaryEntry, JournalEntry]:
        """Parse and classify a diary sentence.

        An explicit payment method overrides whatever the text implies.

        Raises:
            ValueError: If payment_method is not a known payment method
        """
        parsed = self.diary_parser.parse(text)
        method = normalize_payment_method(payment_method)
        if method:
            parsed = replace(parsed, payment_method=method)
        return parsed, self.journalize(parsed, text)

    def reclassify_diary(self,
                         text: str,
                         category: Optional[str] = None,
                         payment_method: Optional[str] = None,
                         direction: Optional[str] = None) -> Tuple[ParsedDiaryEntry, JournalEntry]:
        """Re-run classification with follow-up answers applied to the parsed fields.

        Raises:
            ValueError: If direction or payment_method is not a known value
        """
        parsed = self.diary_parser.parse(text)

        updates = {}
        if category:
            updates['category'] = category
        method = normalize_payment_method(payment_method)
        if method:
            updates['payment_method'] = method
        if direction:
            if direction not in DIRECTIONS:
                raise ValueError(f"Unknown direction '{direction}'. Expected one of: {', '.join(DIRECTIONS)}")
            updates['direction'] = direction

        if updates:
            parsed = replace(parsed, **updates)
        return parsed, self.journalize(parsed, text)

    def journalize(self, parsed: ParsedDiaryEntry, text: str) -> JournalEntry:
        """Classify a parsed entry and run the balance check on the result"""
        entry = self.diary_classifier.classify(parsed, text)

        if not entry.lines:
            self.error_handler.log_warning(
                f"Could not determine an amount: {text!r}",
                "AMOUNT_PARSE_ERROR",
                ErrorCategory.DATA_PARSING,
                context={'text': text}
            )
            return entry

        validation = validate_journal_entry(entry)
        line_errors = self.validator.validate_journal_lines(entry)
        if not validation.valid:
            entry.needs_review = True
            self.error_handler.log_critical(
                f"Unbalanced journal entry produced by classifier: {validation.error}",
                "BALANCE_VIOLATION",
                ErrorCategory.CLASSIFICATION,
                context={'text': text, 'reason': entry.reason}
            )
        elif line_errors:
            entry.needs_review = True
            self.error_handler.log_critical(
                f"Malformed journal lines produced by classifier: {'; '.join(line_errors)}",
                "INVALID_JOURNAL_LINE",
                ErrorCategory.CLASSIFICATION,
                context={'text': text, 'reason': entry.reason}
            )
        elif entry.needs_review:
            self.error_handler.log_info(
                f"Journal entry needs review (confidence {entry.confidence:.2f}): {entry.reason}",
                context={'code': self.error_handler.error_codes['LOW_CONFIDENCE'], 'text': text}
            )

        return entry

    def write_journal(self, entries: List[JournalEntry], output_path: str, append: bool = True) -> bool:
        """Append journal lines to a CSV journal file; entries without lines are skipped"""
        written = [entry for entry in entries if entry.lines]
        if not written:
            return False

        if not self.csv_writer.write_journal_entries(written, output_path, append=append):
            self.error_handler.log_error(
                f"Failed to write journal file: {output_path}",
                "OUTPUT_WRITE_ERROR",
                ErrorCategory.SYSTEM,
                file_path=output_path
            )
            return False
        return True

    def _log_unsupported(self, error: UnsupportedFormatError, file_path: Optional[str] = None):
        self.error_handler.log_error(
            str(error),
            "UNSUPPORTED_FORMAT",
            ErrorCategory.FILE_FORMAT,
            file_path=file_path,
            context={'title': error.title}
        )

    def _log_skipped_rows(self, result: StatementParseResult, file_path: Optional[str] = None):
        for message in result.skipped_rows:
            self.error_handler.log_warning(
                f"Skipped statement row. {message}",
                "INVALID_TRANSACTION",
                ErrorCategory.DATA_VALIDATION,
                file_path=file_path
            )
