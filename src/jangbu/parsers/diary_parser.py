"""Natural-language parser for money diary entries.

Turns informal Korean sentences into structured fields:

    "오늘 거래처 김과장과 59000원 식사했다"
        -> expense, 59000, category "식사"
    "어제 택시비 15000원"
        -> expense, yesterday, 15000, category "교통"
    "거래처에서 200만원 입금받았다"
        -> income, 2000000, counterpart "거래처"

The parser is total: every input yields a ParsedDiaryEntry, and ambiguity
is settled by rule order within each keyword table.
"""

import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, List, Match, Optional, Pattern, Tuple

from ..models.core import (
    CASH,
    CREDIT_CARD,
    DEBIT_CARD,
    EXPENSE,
    INCOME,
    PAYMENT_METHODS,
    TRANSFER,
    ParsedDiaryEntry,
)


DateRule = Tuple[Pattern, Callable[[Match, date], Optional[date]]]


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


DATE_RULES: List[DateRule] = [
    # "2026-02-11", "2026.02.11", "2026/02/11"
    (re.compile(r'(\d{4})[-./](\d{1,2})[-./](\d{1,2})'),
     lambda m, today: _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))),
    # "2월 11일", "2월11일"
    (re.compile(r'(\d{1,2})월\s*(\d{1,2})일'),
     lambda m, today: _safe_date(today.year, int(m.group(1)), int(m.group(2)))),
    (re.compile(r'오늘'), lambda m, today: today),
    (re.compile(r'어제'), lambda m, today: today - timedelta(days=1)),
    # 엊그제 contains 그제, so it is checked first
    (re.compile(r'엊그제'), lambda m, today: today - timedelta(days=3)),
    (re.compile(r'그제|그저께'), lambda m, today: today - timedelta(days=2)),
]

DATE_STRIP_PATTERNS = [
    re.compile(r'오늘|어제|그제|그저께|엊그제'),
    re.compile(r'\d{4}[-./]\d{1,2}[-./]\d{1,2}'),
    re.compile(r'\d{1,2}월\s*\d{1,2}일'),
]

INCOME_KEYWORDS = re.compile(
    r'입금|받았|받음|수금|수입|매출|급여|월급|임금|보너스|상여|이자|배당|환급|정산'
    r'|판매대금|용역대금|수당|들어왔|들어옴|벌었|벌음|매각|수령'
)

EXPENSE_CATEGORY_KEYWORDS: List[Tuple[Pattern, str]] = [
    (re.compile(r'식사|밥|점심|저녁|아침|식비|식당|카페|커피|음료|치킨|피자|배달'), '식사'),
    (re.compile(r'택시|교통|버스|지하철|KTX|기차|주차|톨비|하이패스|고속도로'), '교통'),
    (re.compile(r'주유|기름'), '주유'),
    (re.compile(r'사무용품|문구|프린터|토너|복사'), '사무용품'),
    (re.compile(r'선물|경조사|축의금|조의금|부의금|화환'), '경조사'),
    (re.compile(r'접대|술|회식|노래방|유흥'), '접대'),
    (re.compile(r'교육|강의|세미나|학원|수강'), '교육'),
    (re.compile(r'광고|마케팅|홍보|전단'), '광고'),
    (re.compile(r'임대|월세|관리비|보증금'), '임대'),
    (re.compile(r'보험|보험료'), '보험'),
    (re.compile(r'통신|전화|인터넷|요금'), '통신'),
    (re.compile(r'수리|수선|정비|AS'), '수리'),
    (re.compile(r'택배|배송|운반|화물'), '배송'),
    (re.compile(r'구매|구입|쇼핑|매입|샀|사왔|주문'), '구매'),
]

INCOME_CATEGORY_KEYWORDS: List[Tuple[Pattern, str]] = [
    (re.compile(r'매출|판매|판매대금'), '매출'),
    (re.compile(r'급여|월급|임금|수당|상여|보너스'), '급여'),
    (re.compile(r'이자'), '이자'),
    (re.compile(r'배당'), '배당'),
    (re.compile(r'환급|세금환급'), '환급'),
    (re.compile(r'용역|용역대금|수수료'), '용역'),
    (re.compile(r'정산'), '정산'),
    (re.compile(r'임대|월세|관리비'), '임대수입'),
]

# Most specific phrase first; a bare "카드" is assumed to be a credit card
PAYMENT_KEYWORDS: List[Tuple[Pattern, str]] = [
    (re.compile(r'체크\s*카드'), DEBIT_CARD),
    (re.compile(r'신용\s*카드'), CREDIT_CARD),
    (re.compile(r'현금'), CASH),
    (re.compile(r'계좌\s*이체|이체|송금'), TRANSFER),
    (re.compile(r'카드'), CREDIT_CARD),
]

PAYMENT_LABELS = {
    '현금': CASH,
    '체크카드': DEBIT_CARD,
    '신용카드': CREDIT_CARD,
    '계좌이체': TRANSFER,
}

COUNTERPART_PATTERNS: List[Pattern] = [
    re.compile(r'(.+?)(이?랑|과|와|에게|한테)\s'),      # "김과장과", "거래처랑"
    re.compile(r'(.+?)(에서|에서의)\s'),                # "문구점에서"
    re.compile(r'(.+?)(로부터|에게서)\s'),              # "거래처로부터"
    re.compile(r'(.+?)\s+(사장|대표|과장|부장|팀장|님)'),  # "김 사장"
]

# Category words that must not be mistaken for a counterpart name
COUNTERPART_EXCLUDE = re.compile(
    r'^(식사|밥|점심|저녁|아침|택시|교통|버스|주유|사무용품|문구|선물|경조사|접대|교육'
    r'|광고|임대|보험|통신|수리|택배|구매|매출|급여)$'
)

MAX_COUNTERPART_LENGTH = 20


def normalize_payment_method(value: Optional[str]) -> Optional[str]:
    """Map a payment method code or Korean label to the canonical code.

    Raises:
        ValueError: If the value is not a known payment method
    """
    if value is None or not str(value).strip():
        return None
    value = str(value).strip()
    if value in PAYMENT_METHODS:
        return value
    if value in PAYMENT_LABELS:
        return PAYMENT_LABELS[value]
    raise ValueError(
        f"Unknown payment method '{value}'. Expected one of: {', '.join(PAYMENT_METHODS)}"
    )


class DiaryTextParser:
    """Extracts structured bookkeeping fields from free text"""

    def __init__(self, today: Optional[date] = None):
        """
        Args:
            today: Reference date for relative expressions. Defaults to the
                   current date at parse time.
        """
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def parse(self, text: str) -> ParsedDiaryEntry:
        """Parse a diary sentence into a ParsedDiaryEntry"""
        trimmed = (text or '').strip()
        direction = self.parse_direction(trimmed)

        return ParsedDiaryEntry(
            date=self.parse_date(trimmed),
            direction=direction,
            amount=self.parse_amount(trimmed),
            counterpart=self.parse_counterpart(trimmed),
            category=self.parse_category(trimmed, direction),
            payment_method=self.parse_payment_method(trimmed),
            description=self.build_description(trimmed),
        )

    def parse_date(self, text: str) -> date:
        """First calendar-valid date expression, else today."""
        today = self.today
        for pattern, extract in DATE_RULES:
            match = pattern.search(text)
            if match:
                result = extract(match, today)
                if result is not None:
                    return result
        return today

    def parse_direction(self, text: str) -> str:
        return INCOME if INCOME_KEYWORDS.search(text) else EXPENSE

    def parse_amount(self, text: str) -> Optional[Decimal]:
        """Extract an amount, trying the most specific expression first."""

        def number(raw: str) -> int:
            return int(raw.replace(',', ''))

        # "5만9천원", "5만 9천원", "5만9천"
        match = re.search(r'(\d[\d,]*)\s*만\s*(\d[\d,]*)\s*천\s*원?', text)
        if match:
            return Decimal(number(match.group(1)) * 10000 + number(match.group(2)) * 1000)

        # "5만원", "200만원"
        match = re.search(r'(\d[\d,]*)\s*만\s*원', text)
        if match:
            return Decimal(number(match.group(1)) * 10000)

        # "5천원"
        match = re.search(r'(\d[\d,]*)\s*천\s*원', text)
        if match:
            return Decimal(number(match.group(1)) * 1000)

        # "59000원", "59,000원"
        match = re.search(r'(\d[\d,]*)\s*원', text)
        if match:
            return Decimal(number(match.group(1)))

        # Bare number of three or more characters; a stray day-of-month is too short
        match = re.search(r'(\d[\d,]{2,})', text)
        if match:
            value = number(match.group(1))
            if value >= 100:
                return Decimal(value)

        return None

    def parse_category(self, text: str, direction: str) -> Optional[str]:
        table = INCOME_CATEGORY_KEYWORDS if direction == INCOME else EXPENSE_CATEGORY_KEYWORDS
        for pattern, category in table:
            if pattern.search(text):
                return category

        # Bidirectional terms such as "임대"
        if direction == INCOME:
            for pattern, category in EXPENSE_CATEGORY_KEYWORDS:
                if pattern.search(text):
                    return category
        return None

    def parse_payment_method(self, text: str) -> Optional[str]:
        for pattern, method in PAYMENT_KEYWORDS:
            if pattern.search(text):
                return method
        return None

    def parse_counterpart(self, text: str) -> Optional[str]:
        for pattern in COUNTERPART_PATTERNS:
            match = pattern.search(text)
            if match:
                name = match.group(1).strip()
                if 1 <= len(name) <= MAX_COUNTERPART_LENGTH and not COUNTERPART_EXCLUDE.match(name):
                    return name
        return None

    def build_description(self, text: str) -> str:
        description = text
        for pattern in DATE_STRIP_PATTERNS:
            description = pattern.sub('', description, count=1)
        description = re.sub(r'^[,.\s]+|[,.\s]+$', '', description.strip()).strip()
        return description or text
