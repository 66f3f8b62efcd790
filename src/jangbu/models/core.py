"""Core data models for the bookkeeping classifier."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import MAX_EMAX, MAX_PREC, Decimal, localcontext
from typing import List, Dict, Any, Iterable, Optional


INCOME = "income"
EXPENSE = "expense"
DIRECTIONS = (INCOME, EXPENSE)

CASH = "cash"
DEBIT_CARD = "debit-card"
CREDIT_CARD = "credit-card"
TRANSFER = "transfer"
PAYMENT_METHODS = (CASH, DEBIT_CARD, CREDIT_CARD, TRANSFER)

ACCOUNT_CATEGORIES = ("asset", "liability", "equity", "revenue", "expense")


@dataclass(frozen=True)
class Account:
    """A single chart-of-accounts entry.

    Attributes:
        code: Account code (e.g., "101")
        name: Account name, unique within a chart (e.g., "보통예금")
        category: One of asset, liability, equity, revenue, expense
        subcategory: Finer grouping (e.g., "유동자산")
        vat_relevant: Whether the account carries value-added tax
    """
    code: str
    name: str
    category: str
    subcategory: str
    vat_relevant: bool = False


@dataclass
class CanonicalTransaction:
    """Bank-agnostic representation of one statement row"""
    seq: int
    date: datetime
    withdrawal: Decimal
    deposit: Decimal
    balance: Decimal
    description: str
    counterpart_account: Optional[str] = None
    counterpart_bank: Optional[str] = None
    counterpart_name: Optional[str] = None
    memo: Optional[str] = None
    transaction_type: Optional[str] = None

    @property
    def is_withdrawal(self) -> bool:
        return self.withdrawal > 0

    @property
    def is_deposit(self) -> bool:
        return self.deposit > 0

    @property
    def amount(self) -> Decimal:
        """Absolute amount moved by this row."""
        return self.withdrawal if self.is_withdrawal else self.deposit


@dataclass
class StatementMeta:
    """Account metadata extracted from a statement header"""
    bank_code: str
    account_number: str = ""
    account_holder: str = ""
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    current_balance: Decimal = Decimal("0")


@dataclass
class StatementParseResult:
    """Result of ingesting one statement table"""
    meta: StatementMeta
    transactions: List[CanonicalTransaction]
    total_withdrawal: Decimal = Decimal("0")
    total_deposit: Decimal = Decimal("0")
    file_hash: Optional[str] = None
    skipped_rows: List[str] = field(default_factory=list)


@dataclass
class ParsedDiaryEntry:
    """Structured fields extracted from a free-text money diary entry.

    ``amount`` is None when no amount could be recovered from the text;
    that is a valid outcome, not a parse error.
    """
    date: date
    direction: str
    amount: Optional[Decimal]
    counterpart: Optional[str]
    category: Optional[str]
    payment_method: Optional[str]
    description: str


@dataclass(frozen=True)
class ClassificationResult:
    """Debit/credit assignment for one statement transaction"""
    debit_account: str
    credit_account: str
    vat_deductible: bool
    confidence: float
    reason: str


@dataclass
class ClassifiedTransaction:
    """A transaction paired with its classification"""
    transaction: CanonicalTransaction
    classification: ClassificationResult

    def needs_review(self, threshold: float = 0.7) -> bool:
        return self.classification.confidence < threshold


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Sum amounts without rounding to the context precision (28 digits)."""
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.Emax = MAX_EMAX
        return sum(values, Decimal("0"))


@dataclass
class JournalLine:
    """One side of a journal entry; exactly one of debit/credit is non-zero"""
    account: str
    account_code: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


@dataclass
class JournalEntry:
    """Double-entry journal entry built from a diary entry"""
    date: date
    lines: List[JournalLine]
    confidence: float
    reason: str
    needs_review: bool

    @property
    def total_debit(self) -> Decimal:
        return exact_sum(line.debit for line in self.lines)

    @property
    def total_credit(self) -> Decimal:
        return exact_sum(line.credit for line in self.lines)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the debit/credit balance check"""
    valid: bool
    error: Optional[str] = None


@dataclass
class BankLayout:
    """Table-driven description of one bank's statement export.

    Attributes:
        code: Bank code written to StatementMeta (e.g., "IBK")
        title_markers: Substrings of the title cell (row 0, col 0) that identify the layout
        meta_row: Row index holding the account metadata text
        header_offset: Index of the first transaction row
        columns: Field name -> column offset
        total_marker: First-cell text that terminates the transaction block
        presence_column: Rows with an empty cell here are skipped
        meta_patterns: Field name -> regex with one capture group
    """
    code: str
    title_markers: List[str]
    meta_row: int
    header_offset: int
    columns: Dict[str, int]
    total_marker: str = "합계"
    presence_column: int = 1
    meta_patterns: Dict[str, str] = field(default_factory=dict)


@dataclass
class ProcessingResult:
    """Result of processing one statement file"""
    file_path: str
    bank_code: str
    transactions_count: int
    review_count: int
    output_file: str
    processing_time: float
    errors: List[str]
    warnings: List[str]
    success: bool
    total_withdrawal: Decimal = Decimal("0")
    total_deposit: Decimal = Decimal("0")


@dataclass
class BookkeepingConfig:
    """Runtime configuration"""
    data_directory: str = "data"
    log_directory: Optional[str] = None
    review_threshold: float = 0.7
    chart_of_accounts_path: Optional[str] = None
    timezone_offset_hours: int = 9
    bank_layouts: Optional[Dict[str, Dict[str, Any]]] = None

    def __post_init__(self):
        if self.bank_layouts is None:
            self.bank_layouts = {}
