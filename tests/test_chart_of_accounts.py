"""Tests for the chart of accounts registry."""

import pytest

from jangbu.models.chart_of_accounts import (
    ChartOfAccounts,
    DEFAULT_ACCOUNTS,
    UNKNOWN_ACCOUNT_CODE,
    default_chart,
)
from jangbu.models.core import Account


class TestChartOfAccounts:
    """Test cases for ChartOfAccounts"""

    def setup_method(self):
        self.chart = default_chart()

    def test_default_chart_size(self):
        assert len(self.chart) == len(DEFAULT_ACCOUNTS) == 48

    def test_lookup_by_code_and_name(self):
        assert self.chart.get("101").name == "보통예금"
        assert self.chart.get_by_name("부가세대급금").code == "107"
        assert self.chart.get("999") is None
        assert self.chart.get_by_name("없는계정") is None

    def test_code_for_unknown_name(self):
        assert self.chart.code_for("현금") == "102"
        assert self.chart.code_for("없는계정") == UNKNOWN_ACCOUNT_CODE

    def test_contains_by_name(self):
        assert "미지급금" in self.chart
        assert "101" not in self.chart

    def test_by_category(self):
        revenue = self.chart.by_category("revenue")
        assert [a.name for a in revenue] == ["매출", "이자수익", "잡이익", "임대수익"]
        assert len(self.chart.by_category("equity")) == 2

    def test_vat_relevant_accounts(self):
        vat_codes = {a.code for a in self.chart if a.vat_relevant}
        assert {"107", "205", "401", "501", "514", "515"} <= vat_codes
        assert "518" not in vat_codes

    def test_to_list(self):
        first = self.chart.to_list()[0]
        assert first == {'code': '101', 'name': '보통예금', 'category': 'asset'}

    def test_to_list_by_category(self):
        equity = self.chart.to_list("equity")
        assert len(equity) == 2
        assert {item['category'] for item in equity} == {'equity'}

    def test_default_chart_is_shared(self):
        assert default_chart() is self.chart

    def test_duplicate_code_rejected(self):
        with pytest.raises(ValueError, match="Duplicate account code"):
            ChartOfAccounts([
                Account("101", "보통예금", "asset", "유동자산"),
                Account("101", "현금", "asset", "유동자산"),
            ])

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError, match="Duplicate account name"):
            ChartOfAccounts([
                Account("101", "보통예금", "asset", "유동자산"),
                Account("102", "보통예금", "asset", "유동자산"),
            ])

    def test_invalid_category_rejected(self):
        with pytest.raises(ValueError, match="invalid category"):
            ChartOfAccounts([Account("901", "기타", "misc", "")])
