"""Tests for the money diary text parser."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from jangbu.models.core import CASH, CREDIT_CARD, DEBIT_CARD, EXPENSE, INCOME, TRANSFER
from jangbu.parsers.diary_parser import DiaryTextParser, normalize_payment_method


TODAY = date(2026, 2, 11)


class TestDiaryTextParser:
    """Test cases for DiaryTextParser"""

    def setup_method(self):
        self.parser = DiaryTextParser(today=TODAY)

    def test_client_meal(self):
        parsed = self.parser.parse("거래처 김과장과 59000원 식사")

        assert parsed.direction == EXPENSE
        assert parsed.amount == Decimal("59000")
        assert parsed.counterpart == "거래처 김과장"
        assert parsed.category == "식사"
        assert parsed.payment_method is None
        assert parsed.date == TODAY

    def test_relative_date_yesterday(self):
        parsed = self.parser.parse("어제 택시비 15000원")

        assert parsed.date == TODAY - timedelta(days=1)
        assert parsed.category == "교통"
        assert parsed.amount == Decimal("15000")
        assert parsed.description == "택시비 15000원"

    def test_relative_dates(self):
        assert self.parser.parse_date("오늘 점심") == TODAY
        assert self.parser.parse_date("그제 점심") == TODAY - timedelta(days=2)
        assert self.parser.parse_date("그저께 점심") == TODAY - timedelta(days=2)
        assert self.parser.parse_date("엊그제 점심") == TODAY - timedelta(days=3)

    def test_absolute_dates(self):
        assert self.parser.parse_date("2026-01-05 택시") == date(2026, 1, 5)
        assert self.parser.parse_date("2025.12.31 택시") == date(2025, 12, 31)
        assert self.parser.parse_date("2026/3/1 택시") == date(2026, 3, 1)
        assert self.parser.parse_date("1월 5일 택시") == date(2026, 1, 5)
        assert self.parser.parse_date("3월5일 택시") == date(2026, 3, 5)

    def test_invalid_calendar_date_falls_back_to_today(self):
        assert self.parser.parse_date("2월 30일 택시비 5000원") == TODAY
        assert self.parser.parse_date("2026-13-01 택시") == TODAY

    def test_invalid_date_passes_to_later_rule(self):
        assert self.parser.parse_date("2월 30일 어제 택시") == TODAY - timedelta(days=1)

    def test_no_date_is_today(self):
        assert self.parser.parse_date("택시비 5000원") == TODAY

    def test_income_direction(self):
        parsed = self.parser.parse("거래처에서 200만원 입금받았다")

        assert parsed.direction == INCOME
        assert parsed.amount == Decimal("2000000")
        assert parsed.counterpart == "거래처"

    def test_income_categories(self):
        assert self.parser.parse("이번달 급여 300만원 받았다").category == "급여"
        assert self.parser.parse("예금 이자 1200원 입금").category == "이자"
        assert self.parser.parse("판매대금 50만원 입금").category == "매출"

    def test_income_falls_back_to_expense_categories(self):
        parsed = self.parser.parse("보증금 500만원 돌려받았다")

        assert parsed.direction == INCOME
        assert parsed.category == "임대"

    @pytest.mark.parametrize("text,expected", [
        ("5만9천원 식사", Decimal("59000")),
        ("5만 9천원 식사", Decimal("59000")),
        ("5만9천 식사", Decimal("59000")),
        ("점심 5만원", Decimal("50000")),
        ("200만원 입금", Decimal("2000000")),
        ("커피 5천원", Decimal("5000")),
        ("택시 59,000원", Decimal("59000")),
        ("택시 15000원", Decimal("15000")),
    ])
    def test_amount_expressions(self, text, expected):
        assert self.parser.parse_amount(text) == expected

    def test_no_amount(self):
        assert self.parser.parse_amount("그냥 메모") is None
        assert self.parser.parse_amount("택시 12") is None

    def test_bare_number_amount_is_loose(self):
        # Known-loose heuristic: a bare number is taken as the amount,
        # even when it is really a year
        assert self.parser.parse_amount("택시 15000") == Decimal("15000")
        assert self.parser.parse_amount("2026-02-11 택시 이동") == Decimal("2026")

    @pytest.mark.parametrize("text,expected", [
        ("체크카드로 결제", DEBIT_CARD),
        ("체크 카드 결제", DEBIT_CARD),
        ("신용카드로 결제", CREDIT_CARD),
        ("현금으로 냈음", CASH),
        ("계좌이체 했음", TRANSFER),
        ("송금함", TRANSFER),
        ("그냥 메모", None),
    ])
    def test_payment_methods(self, text, expected):
        assert self.parser.parse_payment_method(text) == expected

    def test_bare_card_assumed_credit_card(self):
        # Known-loose heuristic: an unqualified "카드" is treated as a credit card
        assert self.parser.parse_payment_method("카드로 결제") == CREDIT_CARD

    def test_counterpart_patterns(self):
        assert self.parser.parse_counterpart("문구점에서 볼펜 3000원") == "문구점"
        assert self.parser.parse_counterpart("거래처로부터 송금 받음") == "거래처"
        assert self.parser.parse_counterpart("김 사장 선물 5만원") == "김"

    def test_counterpart_excludes_category_words(self):
        assert self.parser.parse_counterpart("점심과 커피") is None

    def test_empty_text_is_total(self):
        parsed = self.parser.parse("")

        assert parsed.date == TODAY
        assert parsed.direction == EXPENSE
        assert parsed.amount is None
        assert parsed.counterpart is None
        assert parsed.category is None
        assert parsed.payment_method is None
        assert parsed.description == ""

    @pytest.mark.parametrize("text", ["   ", "!!!", "12", "만원", "원", "2월", "ㅋㅋㅋ", "1,,,"])
    def test_odd_inputs_never_raise(self, text):
        parsed = self.parser.parse(text)
        assert parsed.direction in (INCOME, EXPENSE)

    def test_description_strips_date_words(self):
        parsed = self.parser.parse("오늘, 사무용품 구매 30000원.")

        assert parsed.description == "사무용품 구매 30000원"

    def test_description_falls_back_to_text(self):
        assert self.parser.parse("오늘").description == "오늘"

    def test_parse_is_deterministic(self):
        text = "어제 거래처 김과장과 5만9천원 식사 카드"
        assert self.parser.parse(text) == self.parser.parse(text)

    def test_default_today(self):
        assert DiaryTextParser().parse("택시").date == date.today()


class TestNormalizePaymentMethod:
    """Test cases for payment method normalization"""

    def test_codes_pass_through(self):
        for code in (CASH, DEBIT_CARD, CREDIT_CARD, TRANSFER):
            assert normalize_payment_method(code) == code

    def test_korean_labels(self):
        assert normalize_payment_method("현금") == CASH
        assert normalize_payment_method("체크카드") == DEBIT_CARD
        assert normalize_payment_method("신용카드") == CREDIT_CARD
        assert normalize_payment_method("계좌이체") == TRANSFER

    def test_empty_is_none(self):
        assert normalize_payment_method(None) is None
        assert normalize_payment_method("") is None

    def test_unknown_rejected(self):
        with pytest.raises(ValueError, match="Unknown payment method"):
            normalize_payment_method("bitcoin")
