"""Abstract base classes and cell normalizers for statement parsers."""

import math
import re
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from ..models.core import BookkeepingConfig, StatementParseResult


class UnsupportedFormatError(ValueError):
    """Statement title does not match any known bank layout.

    The offending title text is kept on ``title`` for diagnostics.
    """

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"지원하지 않는 은행 양식입니다: \"{title}\"")


class StatementParser(ABC):
    """Abstract base class for statement parsers"""

    def __init__(self, config: Optional[BookkeepingConfig] = None):
        self.config = config or BookkeepingConfig()

    @abstractmethod
    def parse_rows(self, rows: Sequence[Sequence[Any]]) -> StatementParseResult:
        """Parse a 2-D table of cells into a statement result"""
        pass

    @abstractmethod
    def parse(self, file_path: str) -> StatementParseResult:
        """Read the file into a table and parse it"""
        pass

    @abstractmethod
    def get_supported_extensions(self) -> List[str]:
        """Return list of supported file extensions"""
        pass

    @abstractmethod
    def validate_file(self, file_path: str) -> bool:
        """Validate if file can be processed by this parser"""
        pass


class DataTransformer:
    """Normalizes untyped spreadsheet cells"""

    DATETIME_FORMATS = [
        "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d",
        "%Y.%m.%d %H:%M:%S", "%Y.%m.%d",
        "%Y/%m/%d %H:%M:%S", "%Y/%m/%d",
        "%Y%m%d",
    ]

    def __init__(self, config: Optional[BookkeepingConfig] = None):
        self.config = config or BookkeepingConfig()
        self.tz = timezone(timedelta(hours=self.config.timezone_offset_hours))

    @staticmethod
    def is_blank(value: Any) -> bool:
        """True for None, NaN and whitespace-only strings."""
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        return isinstance(value, str) and not value.strip()

    def normalize_datetime(self, value: Any) -> datetime:
        """Convert a cell to a timezone-aware datetime in the statement's zone.

        Raises:
            ValueError: If the cell cannot be read as a date
        """
        if self.is_blank(value):
            raise ValueError("Date cell cannot be empty")

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime(value.year, value.month, value.day)
        else:
            text = str(value).strip()
            parsed = None
            for fmt in self.DATETIME_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            if parsed is None:
                raise ValueError(f"Unable to parse date: {text}")

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self.tz)
        return parsed

    def normalize_date(self, value: Any) -> Optional[date]:
        """Best-effort date conversion; returns None instead of raising."""
        try:
            return self.normalize_datetime(value).date()
        except ValueError:
            return None

    def normalize_amount(self, value: Any) -> Decimal:
        """Convert a numeric cell to Decimal, defaulting to 0 on non-numeric content."""
        if self.is_blank(value) or isinstance(value, bool):
            return Decimal("0")

        if isinstance(value, int):
            return Decimal(value)

        if isinstance(value, float):
            if math.isinf(value):
                return Decimal("0")
            return Decimal(int(value)) if value.is_integer() else Decimal(str(value))

        cleaned = re.sub(r'[,\s원₩]', '', str(value))
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
        if not amount.is_finite():
            return Decimal("0")
        return amount

    def clean_text(self, value: Any) -> Optional[str]:
        """Convert a cell to stripped text, or None for empty cells."""
        if self.is_blank(value):
            return None
        if isinstance(value, float) and value.is_integer():
            # Spreadsheet readers turn account numbers into floats
            return str(int(value))
        return str(value).strip()
