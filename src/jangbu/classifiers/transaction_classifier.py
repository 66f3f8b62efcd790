"""Rule-based classifier for bank statement transactions.

Assigns debit/credit accounts to canonical transactions:

- withdrawal: (debit) expense or asset increase / (credit) 보통예금 decrease
- deposit:    (debit) 보통예금 increase / (credit) revenue or liability
"""

import logging
from typing import Iterable, List, Optional

from .rules import TransactionRule, first_match, referenced_accounts
from ..models.chart_of_accounts import ChartOfAccounts, default_chart
from ..models.core import CanonicalTransaction, ClassificationResult, ClassifiedTransaction


logger = logging.getLogger(__name__)


DESC_MEMO = ('description', 'memo')
DESC_COUNTERPART = ('description', 'counterpart_name')
DESC = ('description',)
COUNTERPART = ('counterpart_name',)

WITHDRAWAL_RULES: List[TransactionRule] = [
    # Payroll
    TransactionRule(r'급여|월급|상여|보너스|인건비', DESC_MEMO,
                    '급여', '보통예금', False, 0.95, '적요에 급여 관련 키워드'),
    # Social insurance
    TransactionRule(r'국민연금|건강보험|고용보험|산재보험|4대보험', DESC_COUNTERPART,
                    '세금과공과', '보통예금', False, 0.95, '4대보험 납부'),
    # Taxes
    TransactionRule(r'부가세|부가가치세|소득세|원천세|법인세|지방세|재산세|종합소득세|주민세', DESC_MEMO,
                    '세금과공과', '보통예금', False, 0.95, '세금 납부'),
    TransactionRule(r'국세|세무서|세관|관세', COUNTERPART,
                    '세금과공과', '보통예금', False, 0.9, '국세/세무서 관련 거래처'),
    # Rent and maintenance fees
    TransactionRule(r'임대료|월세|관리비|렌탈료|리스료', DESC_MEMO,
                    '임차료', '보통예금', True, 0.9, '임대료/관리비 키워드'),
    # Insurance
    TransactionRule(r'보험료|화재보험|자동차보험|배상책임보험', DESC_MEMO,
                    '보험료', '보통예금', False, 0.9, '보험료 키워드'),
    TransactionRule(r'보험|삼성화재|현대해상|DB손해|메리츠', COUNTERPART,
                    '보험료', '보통예금', False, 0.85, '보험사 거래처명'),
    # Telecom
    TransactionRule(r'통신비|전화료|인터넷|SK텔레콤|KT|LG유플러스|SKT', DESC_COUNTERPART,
                    '통신비', '보통예금', True, 0.9, '통신비 키워드 또는 통신사'),
    # Utilities
    TransactionRule(r'전기료|수도료|가스료|한국전력|수도사업소|도시가스|난방비', DESC_COUNTERPART,
                    '수도광열비', '보통예금', True, 0.9, '공과금 관련 키워드'),
    # Vehicle
    TransactionRule(r'주유|주유소|세차|정비|자동차|차량|타이어|GS칼텍스|SK에너지|현대오일', DESC_COUNTERPART,
                    '차량유지비', '보통예금', True, 0.85, '차량 관련 키워드'),
    # Travel
    TransactionRule(r'교통|택시|버스|지하철|KTX|톨비|하이패스|고속도로', DESC_MEMO,
                    '여비교통비', '보통예금', True, 0.85, '교통비 키워드'),
    # Entertainment
    TransactionRule(r'접대|회식|선물|경조사', DESC_MEMO,
                    '접대비', '보통예금', True, 0.85, '접대비 키워드'),
    # Advertising
    TransactionRule(r'광고|네이버광고|구글광고|페이스북|인스타|마케팅|홍보', DESC_COUNTERPART,
                    '광고선전비', '보통예금', True, 0.85, '광고/마케팅 키워드'),
    # Supplies
    TransactionRule(r'사무용품|소모품|문구|토너|복사', DESC_MEMO,
                    '소모품비', '보통예금', True, 0.85, '소모품 키워드'),
    # Employee welfare
    TransactionRule(r'식대|중식|석식|커피|간식|복리후생|경조금|체력단련', DESC_MEMO,
                    '복리후생비', '보통예금', True, 0.8, '복리후생비 키워드'),
    # Card company fees
    TransactionRule(r'카드수수료|BC카드|비씨카드|신한카드|삼성카드|현대카드|롯데카드|국민카드|하나카드|우리카드',
                    DESC_COUNTERPART,
                    '지급수수료', '보통예금', False, 0.8, '카드 관련 수수료'),
    # Bank fees
    TransactionRule(r'수수료|이체수수료|인터넷뱅킹수수료|펌수수료', DESC,
                    '지급수수료', '보통예금', False, 0.9, '수수료 키워드'),
    # Interest paid
    TransactionRule(r'이자|대출이자', DESC,
                    '이자비용', '보통예금', False, 0.9, '이자 관련 출금'),
    # Loan repayment
    TransactionRule(r'대출상환|원금상환|원리금', DESC,
                    '단기차입금', '보통예금', False, 0.85, '대출 상환 키워드'),
    # Owner's drawings
    TransactionRule(r'인출|생활비|개인용', DESC_MEMO,
                    '인출금', '보통예금', False, 0.8, '사업주 인출 추정'),
    # Firm banking / auto debit, hard to pin down
    TransactionRule(r'펌뱅킹|자동이체', ('transaction_type',),
                    '지급수수료', '보통예금', False, 0.5, '펌뱅킹/자동이체 (구체적 판단 어려움)'),
]

DEPOSIT_RULES: List[TransactionRule] = [
    TransactionRule(r'이자|이자입금|보통예금이자|정기예금이자', DESC,
                    '보통예금', '이자수익', False, 0.95, '이자 수입 키워드'),
    TransactionRule(r'카드매출|카드입금|PG|결제대금|카드대금|VAN', DESC_COUNTERPART,
                    '보통예금', '매출', False, 0.9, '카드매출/PG 입금'),
    TransactionRule(r'대출|융자|차입', DESC,
                    '보통예금', '단기차입금', False, 0.85, '대출/차입 입금'),
    TransactionRule(r'환불|반환|취소|반품', DESC_MEMO,
                    '보통예금', '잡이익', False, 0.8, '환불/반환 키워드'),
    TransactionRule(r'보증금|임대보증금', DESC,
                    '보통예금', '보증금', False, 0.8, '보증금 반환'),
    TransactionRule(r'자본금|출자|사업자금', DESC_MEMO,
                    '보통예금', '자본금', False, 0.8, '사업주 자본 입금'),
]

DEFAULT_WITHDRAWAL = ClassificationResult(
    debit_account='매입',
    credit_account='보통예금',
    vat_deductible=True,
    confidence=0.3,
    reason='기본 출금 분류 (수동 확인 필요)',
)

DEFAULT_DEPOSIT = ClassificationResult(
    debit_account='보통예금',
    credit_account='매출',
    vat_deductible=False,
    confidence=0.4,
    reason='기본 입금 분류 (수동 확인 필요)',
)


class TransactionClassifier:
    """Assigns accounts to statement transactions with ordered keyword rules"""

    def __init__(self,
                 chart: Optional[ChartOfAccounts] = None,
                 withdrawal_rules: Optional[List[TransactionRule]] = None,
                 deposit_rules: Optional[List[TransactionRule]] = None):
        self.chart = chart or default_chart()
        self.withdrawal_rules = list(withdrawal_rules if withdrawal_rules is not None else WITHDRAWAL_RULES)
        self.deposit_rules = list(deposit_rules if deposit_rules is not None else DEPOSIT_RULES)
        self._check_accounts()

    def _check_accounts(self) -> None:
        """Every account a rule can emit must exist in the chart.

        Raises:
            ValueError: If a rule references an unknown account name
        """
        names = referenced_accounts(self.withdrawal_rules) | referenced_accounts(self.deposit_rules)
        for result in (DEFAULT_WITHDRAWAL, DEFAULT_DEPOSIT):
            names.update((result.debit_account, result.credit_account))

        unknown = sorted(name for name in names if name not in self.chart)
        if unknown:
            raise ValueError(f"Rules reference accounts missing from the chart: {', '.join(unknown)}")

    def classify(self, transaction: CanonicalTransaction) -> ClassificationResult:
        """Classify a single transaction. Never raises for a well-formed record."""
        if transaction.withdrawal > 0:
            rules, default = self.withdrawal_rules, DEFAULT_WITHDRAWAL
        else:
            rules, default = self.deposit_rules, DEFAULT_DEPOSIT

        rule = first_match(rules, transaction)
        if rule is None:
            logger.debug(f"No rule matched transaction {transaction.seq}; using default")
            return default

        return ClassificationResult(
            debit_account=rule.debit,
            credit_account=rule.credit,
            vat_deductible=rule.vat_deductible,
            confidence=rule.confidence,
            reason=rule.reason,
        )

    def classify_many(self, transactions: Iterable[CanonicalTransaction]) -> List[ClassifiedTransaction]:
        """Classify a batch, preserving input order."""
        return [ClassifiedTransaction(tx, self.classify(tx)) for tx in transactions]
