"""Tests for the bank transaction classifier."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from jangbu.classifiers.rules import TransactionRule, first_match
from jangbu.classifiers.transaction_classifier import (
    DEFAULT_DEPOSIT,
    DEFAULT_WITHDRAWAL,
    DEPOSIT_RULES,
    WITHDRAWAL_RULES,
    TransactionClassifier,
)
from jangbu.models.chart_of_accounts import default_chart
from jangbu.models.core import CanonicalTransaction


KST = timezone(timedelta(hours=9))


def make_transaction(seq=1, withdrawal=0, deposit=0, description="", **kwargs):
    return CanonicalTransaction(
        seq=seq,
        date=datetime(2026, 1, 5, 9, 0, tzinfo=KST),
        withdrawal=Decimal(withdrawal),
        deposit=Decimal(deposit),
        balance=Decimal("1000000"),
        description=description,
        **kwargs
    )


class TestTransactionClassifier:
    """Test cases for TransactionClassifier"""

    def setup_method(self):
        self.classifier = TransactionClassifier()

    def test_social_insurance_withdrawal(self):
        result = self.classifier.classify(make_transaction(withdrawal=15000, description="국민연금"))

        assert result.debit_account == "세금과공과"
        assert result.credit_account == "보통예금"
        assert result.vat_deductible is False
        assert result.confidence == 0.95
        assert result.reason == "4대보험 납부"

    def test_card_sales_deposit(self):
        tx = make_transaction(deposit=250000, description="카드매출 입금", counterpart_name="비씨카드")

        result = self.classifier.classify(tx)

        assert result.debit_account == "보통예금"
        assert result.credit_account == "매출"
        assert result.confidence == 0.9

    def test_interest_deposit(self):
        result = self.classifier.classify(make_transaction(deposit=1200, description="보통예금이자"))

        assert result.credit_account == "이자수익"
        assert result.confidence == 0.95

    def test_interest_withdrawal_is_expense(self):
        result = self.classifier.classify(make_transaction(withdrawal=50000, description="대출이자"))

        assert result.debit_account == "이자비용"
        assert result.confidence == 0.9

    def test_bank_fee(self):
        result = self.classifier.classify(make_transaction(withdrawal=800, description="타행이체수수료"))

        assert result.debit_account == "지급수수료"
        assert result.vat_deductible is False
        assert result.confidence == 0.9

    def test_first_matching_rule_wins(self):
        # Both the payroll and the fee keywords appear; payroll is listed first
        result = self.classifier.classify(make_transaction(withdrawal=1000, description="급여이체수수료"))

        assert result.debit_account == "급여"

    def test_counterpart_only_rule(self):
        tx = make_transaction(withdrawal=120000, description="출금", counterpart_name="삼성화재")

        result = self.classifier.classify(tx)

        assert result.debit_account == "보험료"
        assert result.confidence == 0.85

    def test_memo_searched_only_by_rules_that_include_it(self):
        # The telecom rule looks at description and counterpart, not memo
        tx = make_transaction(withdrawal=33000, description="출금", memo="KT")
        assert self.classifier.classify(tx) == DEFAULT_WITHDRAWAL

        tx = make_transaction(withdrawal=33000, description="출금", memo="사무용품")
        assert self.classifier.classify(tx).debit_account == "소모품비"

    def test_transaction_type_rule(self):
        tx = make_transaction(withdrawal=9900, description="XYZ", transaction_type="자동이체")

        result = self.classifier.classify(tx)

        assert result.debit_account == "지급수수료"
        assert result.confidence == 0.5

    def test_matching_is_case_sensitive(self):
        assert self.classifier.classify(
            make_transaction(withdrawal=59800, description="SKT 요금")).debit_account == "통신비"
        assert self.classifier.classify(
            make_transaction(withdrawal=59800, description="skt 요금")) == DEFAULT_WITHDRAWAL

    def test_broad_keyword_shadows_later_rule(self):
        # "KT" is listed under telecom ahead of the travel rule for "KTX"
        result = self.classifier.classify(make_transaction(withdrawal=59800, description="KTX 승차권"))

        assert result.debit_account == "통신비"

    def test_default_withdrawal(self):
        result = self.classifier.classify(make_transaction(withdrawal=5000, description="알수없음"))

        assert result == DEFAULT_WITHDRAWAL
        assert result.debit_account == "매입"
        assert result.vat_deductible is True
        assert result.confidence == 0.3

    def test_default_deposit(self):
        result = self.classifier.classify(make_transaction(deposit=5000, description="알수없음"))

        assert result == DEFAULT_DEPOSIT
        assert result.credit_account == "매출"
        assert result.confidence == 0.4

    def test_zero_amounts_use_deposit_rules(self):
        result = self.classifier.classify(make_transaction(description="이자"))

        assert result.credit_account == "이자수익"

    def test_none_fields_are_empty_text(self):
        tx = make_transaction(withdrawal=1000, description="", memo=None, counterpart_name=None)
        assert self.classifier.classify(tx) == DEFAULT_WITHDRAWAL

    def test_results_are_deterministic(self):
        tx = make_transaction(withdrawal=45000, description="GS칼텍스 주유")
        assert self.classifier.classify(tx) == self.classifier.classify(tx)
        assert self.classifier.classify(tx).debit_account == "차량유지비"

    def test_classify_many_preserves_order(self):
        transactions = [
            make_transaction(seq=3, withdrawal=800, description="수수료"),
            make_transaction(seq=1, deposit=250000, description="카드매출"),
            make_transaction(seq=2, withdrawal=5000, description="알수없음"),
        ]

        classified = self.classifier.classify_many(transactions)

        assert [item.transaction.seq for item in classified] == [3, 1, 2]
        assert [item.needs_review() for item in classified] == [False, False, True]

    def test_all_rule_accounts_in_default_chart(self):
        chart = default_chart()
        for rule in WITHDRAWAL_RULES + DEPOSIT_RULES:
            assert rule.debit in chart
            assert rule.credit in chart

    def test_withdrawal_credit_is_always_bank(self):
        assert all(rule.credit == "보통예금" for rule in WITHDRAWAL_RULES)
        assert all(rule.debit == "보통예금" for rule in DEPOSIT_RULES)

    def test_unknown_account_rejected(self):
        rules = [TransactionRule(r'x', ('description',), '없는계정', '보통예금', False, 0.9, 'r')]

        with pytest.raises(ValueError, match="없는계정"):
            TransactionClassifier(withdrawal_rules=rules)

    def test_custom_rules(self):
        rules = [TransactionRule(r'커피', ('description',), '복리후생비', '보통예금', True, 0.6, '커피')]
        classifier = TransactionClassifier(withdrawal_rules=rules, deposit_rules=[])

        assert classifier.classify(make_transaction(withdrawal=4500, description="커피")).confidence == 0.6
        assert classifier.classify(make_transaction(deposit=4500, description="이자")) == DEFAULT_DEPOSIT


class TestRules:
    """Test cases for rule helpers"""

    def test_first_match_returns_none(self):
        assert first_match(WITHDRAWAL_RULES, make_transaction(description="nothing")) is None

    def test_rule_joins_fields(self):
        rule = TransactionRule(r'AB', ('description', 'memo'), '매입', '보통예금', True, 0.5, 'r')

        assert rule.matches(make_transaction(description="A", memo="B"))
        assert not rule.matches(make_transaction(description="A", memo=None))
        assert rule.accounts == ('매입', '보통예금')
