"""Diary entry to journal entry classifier.

Converts a parsed money diary entry into double-entry journal lines.

    "사무실 선풍기 35000원 체크카드"
        (차) 비품          31,818
        (차) 부가세대급금    3,182
        (대) 보통예금       35,000

    "거래처 김과장과 59000원 식사"
        (차) 접대비         53,636
        (차) 부가세대급금    5,364
        (대) 미지급금       59,000
"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .rules import AccountRule, ContextRule, first_match, referenced_accounts
from .vat import split_vat
from ..models.chart_of_accounts import ChartOfAccounts, default_chart
from ..models.core import (
    CASH,
    CREDIT_CARD,
    DEBIT_CARD,
    INCOME,
    TRANSFER,
    JournalEntry,
    JournalLine,
    ParsedDiaryEntry,
)


VAT_ACCOUNT = '부가세대급금'

# Purchased item or service -> debit account, specific before general
ITEM_DEBIT_RULES: List[AccountRule] = [
    # Fixtures (long-lived assets)
    AccountRule(r'선풍기|에어컨|냉장고|전자레인지|정수기|세탁기|청소기|가습기|제습기|공기청정기', '비품', True, 0.9),
    AccountRule(r'컴퓨터|노트북|데스크탑|모니터|키보드|마우스|태블릿|아이패드|맥북', '비품', True, 0.9),
    AccountRule(r'프린터|복합기|스캐너|팩스|복사기', '비품', True, 0.9),
    AccountRule(r'책상|의자|캐비닛|서랍장|선반|파티션|금고|사물함|진열대', '비품', True, 0.9),
    AccountRule(r'전화기|인터폰|CCTV|카메라', '비품', True, 0.85),

    # Consumables
    AccountRule(r'볼펜|연필|메모지|포스트잇|화이트보드|마커|형광펜|노트|수첩', '소모품비', True, 0.9),
    AccountRule(r'A4|용지|토너|잉크|카트리지|복사용지', '소모품비', True, 0.9),
    AccountRule(r'봉투|테이프|스테이플러|가위|칼|풀|클립|바인더', '소모품비', True, 0.85),
    AccountRule(r'건전지|배터리|전구|형광등|LED등', '소모품비', True, 0.85),
    AccountRule(r'휴지|화장지|물티슈|쓰레기봉투|세제|청소용품|행주|걸레', '소모품비', True, 0.85),
    AccountRule(r'사무용품|문구', '소모품비', True, 0.8),

    # Vehicle
    AccountRule(r'주유|기름|휘발유|경유|LPG', '차량유지비', True, 0.95),
    AccountRule(r'세차', '차량유지비', True, 0.9),
    AccountRule(r'타이어|엔진오일|와이퍼|부동액|냉각수', '차량유지비', True, 0.9),
    AccountRule(r'차량\s*정비|자동차\s*수리|차량\s*수리', '차량유지비', True, 0.85),

    # Travel
    AccountRule(r'택시비?', '여비교통비', True, 0.95),
    AccountRule(r'버스|지하철|전철|KTX|SRT|기차|열차', '여비교통비', True, 0.9),
    AccountRule(r'주차비?|톨비|하이패스|고속도로비?', '여비교통비', True, 0.9),
    AccountRule(r'항공|비행기|숙박|호텔|모텔|출장', '여비교통비', True, 0.85),

    # Entertainment
    AccountRule(r'접대', '접대비', True, 0.95),
    AccountRule(r'경조사비?|축의금|조의금|부의금|화환|조화', '접대비', False, 0.9),

    # Employee welfare
    AccountRule(r'간식|다과|음료수|과자|떡|과일', '복리후생비', True, 0.85),

    # Advertising
    AccountRule(r'광고|마케팅|홍보|전단지|현수막|배너|판촉물|네이버광고|구글광고', '광고선전비', True, 0.9),
    AccountRule(r'명함|카달로그|브로셔|리플렛', '광고선전비', True, 0.85),

    # Rent
    AccountRule(r'월세|임대료|임차료', '임차료', True, 0.95),
    AccountRule(r'관리비', '임차료', True, 0.85),
    AccountRule(r'렌탈료?|리스료?', '임차료', True, 0.8),

    # Telecom
    AccountRule(r'전화요금|휴대폰\s*요금|인터넷\s*요금|통신비', '통신비', True, 0.9),

    # Utilities
    AccountRule(r'전기세|전기요금|전기료', '수도광열비', True, 0.9),
    AccountRule(r'수도세|수도요금|수도료', '수도광열비', True, 0.9),
    AccountRule(r'가스비|가스요금|가스료|난방비', '수도광열비', True, 0.9),

    # Training
    AccountRule(r'교육비?|세미나|강의|수강료?|학원비?|자격증|연수', '교육훈련비', True, 0.85),

    # Books and printing
    AccountRule(r'책|도서|서적|잡지|신문', '도서인쇄비', True, 0.85),
    AccountRule(r'인쇄비?|출력', '도서인쇄비', True, 0.8),

    # Insurance
    AccountRule(r'보험료|화재보험|배상책임보험|자동차보험', '보험료', False, 0.9),

    # Taxes and dues
    AccountRule(r'부가세|소득세|법인세|재산세|자동차세|주민세|면허세', '세금과공과', False, 0.95),
    AccountRule(r'벌금|과태료|범칙금', '세금과공과', False, 0.9),
    AccountRule(r'인지세|등록세|취득세', '세금과공과', False, 0.9),
    AccountRule(r'4대\s*보험|국민연금|건강보험|고용보험|산재보험', '세금과공과', False, 0.9),

    # Fees
    AccountRule(r'수수료|세무사|회계사|변호사|법무사|중개', '지급수수료', True, 0.85),

    # Payroll
    AccountRule(r'급여|월급|임금|인건비|상여금?|보너스', '급여', False, 0.95),

    # Shipping
    AccountRule(r'택배비?|배송비?|운반비?|화물비?|퀵비?', '운반비', True, 0.85),

    # Repairs
    AccountRule(r'수리비?|수선비?|정비비?|AS비?', '수선비', True, 0.85),
]

# Meals and coffee depend on who they were for
CONTEXT_DEBIT_RULES: List[ContextRule] = [
    ContextRule(
        context=r'거래처|고객|바이어|클라이언트|업체|외부|손님',
        item=r'식사|밥|점심|저녁|아침|커피|카페|술|회식|노래방|유흥',
        account='접대비', vat_deductible=True, confidence=0.9,
    ),
    ContextRule(
        context=r'직원|팀원|사내|우리|회사|동료|부서',
        item=r'식사|밥|점심|저녁|아침|커피|카페|간식|회식',
        account='복리후생비', vat_deductible=True, confidence=0.85,
    ),
]

# Meals without context; a sole proprietor's own meal is welfare
MEAL_FALLBACK_RULES: List[AccountRule] = [
    AccountRule(r'회식|노래방|유흥|술', '접대비', True, 0.7),
    AccountRule(r'식사|밥|점심|저녁|아침|식비|식당', '복리후생비', True, 0.7),
    AccountRule(r'커피|카페|음료|차', '복리후생비', True, 0.7),
    AccountRule(r'치킨|피자|배달|족발|보쌈|햄버거|분식', '복리후생비', True, 0.7),
]

# Parser category -> (account, vat_deductible)
CATEGORY_TO_ACCOUNT: Dict[str, Tuple[str, bool]] = {
    '식사': ('복리후생비', True),
    '교통': ('여비교통비', True),
    '주유': ('차량유지비', True),
    '사무용품': ('소모품비', True),
    '경조사': ('접대비', False),
    '접대': ('접대비', True),
    '교육': ('교육훈련비', True),
    '광고': ('광고선전비', True),
    '임대': ('임차료', True),
    '보험': ('보험료', False),
    '통신': ('통신비', True),
    '수리': ('수선비', True),
    '배송': ('운반비', True),
    '구매': ('매입', True),
}

CATEGORY_CONFIDENCE = 0.6
UNCLASSIFIED_ACCOUNT = '매입'
UNCLASSIFIED_CONFIDENCE = 0.3

INCOME_CREDIT_RULES: List[AccountRule] = [
    AccountRule(r'매출|판매|판매대금|매출액', '매출', False, 0.9),
    AccountRule(r'용역|용역대금|서비스료', '매출', False, 0.85),
    AccountRule(r'거래처.*(입금|보내|송금)|거래대금', '매출', False, 0.8),
    AccountRule(r'이자', '이자수익', False, 0.95),
    AccountRule(r'임대수입|월세수입|임대료.*받', '임대수익', False, 0.9),
    AccountRule(r'환급|세금환급', '잡이익', False, 0.85),
    AccountRule(r'입금', '매출', False, 0.7),
]

INCOME_CATEGORY_TO_ACCOUNT: Dict[str, str] = {
    '매출': '매출',
    '용역': '매출',
    '정산': '매출',
    '이자': '이자수익',
    '배당': '잡이익',
    '환급': '잡이익',
    '임대수입': '임대수익',
}

INCOME_DEFAULT_CREDIT = ('매출', 0.5)
INCOME_CATEGORY_CONFIDENCE = 0.7

# Payment method -> (account, confidence)
EXPENSE_CREDIT_BY_PAYMENT: Dict[str, Tuple[str, float]] = {
    CASH: ('현금', 1.0),
    DEBIT_CARD: ('보통예금', 1.0),     # withdrawn immediately
    TRANSFER: ('보통예금', 1.0),
    CREDIT_CARD: ('미지급금', 1.0),    # paid later
}
EXPENSE_CREDIT_UNKNOWN = ('미지급금', 0.75)

INCOME_DEBIT_BY_PAYMENT: Dict[str, Tuple[str, float]] = {
    CASH: ('현금', 1.0),
    TRANSFER: ('보통예금', 1.0),
}
INCOME_DEBIT_UNKNOWN = ('보통예금', 0.7)

MISSING_AMOUNT_REASON = '금액을 파악할 수 없습니다.'


class DiaryClassifier:
    """Builds balanced journal entries from parsed diary entries.

    Expense debits are picked by context rules, then item keywords, then
    meal fallbacks, then the parser category; the credit side follows from
    the payment method. VAT-deductible expenses are split into supply and
    부가세대급금 lines. Income entries always produce two lines.
    """

    def __init__(self, chart: Optional[ChartOfAccounts] = None, review_threshold: float = 0.7):
        if not 0 <= review_threshold <= 1:
            raise ValueError("review_threshold must be between 0 and 1")
        self.chart = chart or default_chart()
        self.review_threshold = review_threshold
        self._check_accounts()

    def _check_accounts(self) -> None:
        names = (referenced_accounts(ITEM_DEBIT_RULES)
                 | referenced_accounts(CONTEXT_DEBIT_RULES)
                 | referenced_accounts(MEAL_FALLBACK_RULES)
                 | referenced_accounts(INCOME_CREDIT_RULES))
        names.update(account for account, _ in CATEGORY_TO_ACCOUNT.values())
        names.update(INCOME_CATEGORY_TO_ACCOUNT.values())
        names.update(account for account, _ in EXPENSE_CREDIT_BY_PAYMENT.values())
        names.update(account for account, _ in INCOME_DEBIT_BY_PAYMENT.values())
        names.update({VAT_ACCOUNT, UNCLASSIFIED_ACCOUNT})

        unknown = sorted(name for name in names if name not in self.chart)
        if unknown:
            raise ValueError(f"Rules reference accounts missing from the chart: {', '.join(unknown)}")

    def classify(self, parsed: ParsedDiaryEntry, raw_text: str) -> JournalEntry:
        """Turn a parsed diary entry into a journal entry.

        A missing or non-positive amount yields an empty, zero-confidence
        entry flagged for review instead of raising.
        """
        text = (raw_text or '').lower()
        amount = parsed.amount

        if amount is None or amount <= 0:
            return JournalEntry(
                date=parsed.date,
                lines=[],
                confidence=0.0,
                reason=MISSING_AMOUNT_REASON,
                needs_review=True,
            )

        amount = Decimal(amount)
        if parsed.direction == INCOME:
            return self._classify_income(parsed, text, amount)
        return self._classify_expense(parsed, text, amount)

    def _classify_expense(self, parsed: ParsedDiaryEntry, text: str, amount: Decimal) -> JournalEntry:
        context_rule = first_match(CONTEXT_DEBIT_RULES, text)
        if context_rule:
            return self._expense_entry(parsed, amount, context_rule.account, context_rule.vat_deductible,
                                       context_rule.confidence, f"맥락: {context_rule.account}")

        item_rule = first_match(ITEM_DEBIT_RULES, text)
        if item_rule:
            return self._expense_entry(parsed, amount, item_rule.account, item_rule.vat_deductible,
                                       item_rule.confidence, f"키워드 매칭: {item_rule.account}")

        meal_rule = first_match(MEAL_FALLBACK_RULES, text)
        if meal_rule:
            return self._expense_entry(parsed, amount, meal_rule.account, meal_rule.vat_deductible,
                                       meal_rule.confidence, f"기본 분류: {meal_rule.account}")

        if parsed.category in CATEGORY_TO_ACCOUNT:
            account, vat_deductible = CATEGORY_TO_ACCOUNT[parsed.category]
            return self._expense_entry(parsed, amount, account, vat_deductible, CATEGORY_CONFIDENCE,
                                       f"카테고리 추정: {parsed.category} → {account}")

        return self._expense_entry(parsed, amount, UNCLASSIFIED_ACCOUNT, True, UNCLASSIFIED_CONFIDENCE,
                                   '자동 분류 불가 (수동 확인 필요)')

    def _classify_income(self, parsed: ParsedDiaryEntry, text: str, amount: Decimal) -> JournalEntry:
        debit_account, debit_confidence = INCOME_DEBIT_BY_PAYMENT.get(
            parsed.payment_method, INCOME_DEBIT_UNKNOWN)

        credit_account, credit_confidence = INCOME_DEFAULT_CREDIT
        reason = '기본 매출 추정'

        rule = first_match(INCOME_CREDIT_RULES, text)
        if rule:
            credit_account, credit_confidence = rule.account, rule.confidence
            reason = f"키워드 매칭: {rule.account}"

        if credit_confidence < INCOME_CATEGORY_CONFIDENCE and parsed.category in INCOME_CATEGORY_TO_ACCOUNT:
            credit_account = INCOME_CATEGORY_TO_ACCOUNT[parsed.category]
            credit_confidence = INCOME_CATEGORY_CONFIDENCE
            reason = f"카테고리: {parsed.category} → {credit_account}"

        confidence = min(debit_confidence, credit_confidence)
        lines = [
            self._line(debit_account, debit=amount),
            self._line(credit_account, credit=amount),
        ]
        return self._entry(parsed, lines, confidence, reason)

    def _expense_entry(self, parsed: ParsedDiaryEntry, amount: Decimal, debit_account: str,
                       vat_deductible: bool, item_confidence: float, reason: str) -> JournalEntry:
        credit_account, credit_confidence = EXPENSE_CREDIT_BY_PAYMENT.get(
            parsed.payment_method, EXPENSE_CREDIT_UNKNOWN)
        confidence = min(item_confidence, credit_confidence)

        supply, vat = split_vat(amount) if vat_deductible else (amount, Decimal("0"))
        lines = [self._line(debit_account, debit=supply)]
        # amounts under 6 won carry no VAT; a zero line would have no side
        if vat:
            lines.append(self._line(VAT_ACCOUNT, debit=vat))

        lines.append(self._line(credit_account, credit=amount))
        return self._entry(parsed, lines, confidence, reason)

    def _line(self, account: str, debit: Decimal = Decimal("0"), credit: Decimal = Decimal("0")) -> JournalLine:
        return JournalLine(
            account=account,
            account_code=self.chart.code_for(account),
            debit=debit,
            credit=credit,
        )

    def _entry(self, parsed: ParsedDiaryEntry, lines: List[JournalLine],
               confidence: float, reason: str) -> JournalEntry:
        return JournalEntry(
            date=parsed.date,
            lines=lines,
            confidence=confidence,
            reason=reason,
            needs_review=confidence < self.review_threshold,
        )
