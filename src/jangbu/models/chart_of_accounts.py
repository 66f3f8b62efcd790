"""Chart of accounts for sole-proprietor simplified bookkeeping."""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .core import Account, ACCOUNT_CATEGORIES


UNKNOWN_ACCOUNT_CODE = "???"


DEFAULT_ACCOUNTS: Tuple[Account, ...] = (
    # Assets
    Account("101", "보통예금", "asset", "유동자산"),
    Account("102", "현금", "asset", "유동자산"),
    Account("103", "외상매출금", "asset", "유동자산"),
    Account("104", "받을어음", "asset", "유동자산"),
    Account("105", "미수금", "asset", "유동자산"),
    Account("106", "선급금", "asset", "유동자산"),
    Account("107", "부가세대급금", "asset", "유동자산", vat_relevant=True),
    Account("108", "단기대여금", "asset", "유동자산"),
    Account("151", "건물", "asset", "고정자산"),
    Account("152", "차량운반구", "asset", "고정자산"),
    Account("153", "비품", "asset", "고정자산"),
    Account("154", "보증금", "asset", "고정자산"),

    # Liabilities
    Account("201", "외상매입금", "liability", "유동부채"),
    Account("202", "지급어음", "liability", "유동부채"),
    Account("203", "미지급금", "liability", "유동부채"),
    Account("204", "예수금", "liability", "유동부채"),
    Account("205", "부가세예수금", "liability", "유동부채", vat_relevant=True),
    Account("206", "단기차입금", "liability", "유동부채"),
    Account("251", "장기차입금", "liability", "비유동부채"),

    # Equity
    Account("301", "자본금", "equity", "자본금"),
    Account("302", "인출금", "equity", "자본금"),

    # Revenue
    Account("401", "매출", "revenue", "영업수익", vat_relevant=True),
    Account("402", "이자수익", "revenue", "영업외수익"),
    Account("403", "잡이익", "revenue", "영업외수익"),
    Account("404", "임대수익", "revenue", "영업외수익"),

    # Expenses
    Account("501", "매입", "expense", "매출원가", vat_relevant=True),
    Account("511", "급여", "expense", "판매비와관리비"),
    Account("512", "퇴직급여", "expense", "판매비와관리비"),
    Account("513", "복리후생비", "expense", "판매비와관리비", vat_relevant=True),
    Account("514", "여비교통비", "expense", "판매비와관리비", vat_relevant=True),
    Account("515", "접대비", "expense", "판매비와관리비", vat_relevant=True),
    Account("516", "통신비", "expense", "판매비와관리비", vat_relevant=True),
    Account("517", "수도광열비", "expense", "판매비와관리비", vat_relevant=True),
    Account("518", "세금과공과", "expense", "판매비와관리비"),
    Account("519", "감가상각비", "expense", "판매비와관리비"),
    Account("520", "임차료", "expense", "판매비와관리비", vat_relevant=True),
    Account("521", "수선비", "expense", "판매비와관리비", vat_relevant=True),
    Account("522", "보험료", "expense", "판매비와관리비"),
    Account("523", "차량유지비", "expense", "판매비와관리비", vat_relevant=True),
    Account("524", "운반비", "expense", "판매비와관리비", vat_relevant=True),
    Account("525", "교육훈련비", "expense", "판매비와관리비", vat_relevant=True),
    Account("526", "도서인쇄비", "expense", "판매비와관리비", vat_relevant=True),
    Account("527", "소모품비", "expense", "판매비와관리비", vat_relevant=True),
    Account("528", "지급수수료", "expense", "판매비와관리비", vat_relevant=True),
    Account("529", "광고선전비", "expense", "판매비와관리비", vat_relevant=True),
    Account("530", "대손상각비", "expense", "판매비와관리비"),
    Account("541", "이자비용", "expense", "영업외비용"),
    Account("542", "잡손실", "expense", "영업외비용"),
)


class ChartOfAccounts:
    """Immutable account registry indexed by code and by name.

    Built once and shared by the classifiers. Codes and names must both be
    unique; a duplicate raises ValueError at construction.
    """

    def __init__(self, accounts: Iterable[Account]):
        by_code: Dict[str, Account] = {}
        by_name: Dict[str, Account] = {}

        for account in accounts:
            if account.category not in ACCOUNT_CATEGORIES:
                raise ValueError(
                    f"Account {account.code} has invalid category '{account.category}'"
                )
            if account.code in by_code:
                raise ValueError(f"Duplicate account code: {account.code}")
            if account.name in by_name:
                raise ValueError(f"Duplicate account name: {account.name}")
            by_code[account.code] = account
            by_name[account.name] = account

        self._accounts = tuple(by_code.values())
        self._by_code = by_code
        self._by_name = by_name

    @property
    def accounts(self) -> Tuple[Account, ...]:
        return self._accounts

    def get(self, code: str) -> Optional[Account]:
        """Look up an account by code."""
        return self._by_code.get(code)

    def get_by_name(self, name: str) -> Optional[Account]:
        """Look up an account by name."""
        return self._by_name.get(name)

    def code_for(self, name: str) -> str:
        """Return the code for an account name, or "???" when unknown."""
        account = self._by_name.get(name)
        return account.code if account else UNKNOWN_ACCOUNT_CODE

    def by_category(self, category: str) -> List[Account]:
        return [a for a in self._accounts if a.category == category]

    def to_list(self, category: Optional[str] = None) -> List[Dict[str, str]]:
        """Compact account list for exports, optionally limited to one category."""
        accounts = self.by_category(category) if category else self._accounts
        return [
            {'code': a.code, 'name': a.name, 'category': a.category}
            for a in accounts
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)


_DEFAULT_CHART: Optional[ChartOfAccounts] = None


def default_chart() -> ChartOfAccounts:
    """Return the shared registry built from DEFAULT_ACCOUNTS."""
    global _DEFAULT_CHART
    if _DEFAULT_CHART is None:
        _DEFAULT_CHART = ChartOfAccounts(DEFAULT_ACCOUNTS)
    return _DEFAULT_CHART
