"""Shared fixtures: IBK statement tables built in memory."""

import pytest


IBK_TITLE = "거래내역조회_입출식 예금"
IBK_META = (
    "계좌번호: 123-456789-01-011 예금주명: 홍길동 현재잔액: 1,234,567원 "
    "조회시작일자: 2026-01-01 조회종료일자: 2026-01-31"
)
IBK_HEADER = [
    "순번", "거래일시", "출금", "입금", "잔액", "거래내용", "상대계좌번호",
    "상대은행", "메모", "거래구분", "수표어음금액", "CMS코드", "상대계좌예금주명",
]


def ibk_row(seq, when, withdrawal=0, deposit=0, balance=0, description="",
            counterpart_account=None, counterpart_bank=None, memo=None,
            transaction_type=None, counterpart_name=None):
    return [
        seq, when, withdrawal, deposit, balance, description, counterpart_account,
        counterpart_bank, memo, transaction_type, None, None, counterpart_name,
    ]


def build_ibk_table(rows, with_total=True):
    table = [[IBK_TITLE], [IBK_META], list(IBK_HEADER)]
    table.extend(rows)
    if with_total:
        table.append(["합계"] + [None] * 12)
    return table


@pytest.fixture
def ibk_table():
    """A small IBK statement with one skipped row and a totals row"""
    return build_ibk_table([
        ibk_row(1, "2026-01-05 09:12:33", withdrawal="15,000", balance=985000,
                description="국민연금", counterpart_name="국민연금공단"),
        ibk_row(2, "2026-01-06 14:00:00", deposit=250000, balance=1235000,
                description="카드매출 입금", counterpart_name="비씨카드"),
        # No transaction datetime: informational row, skipped
        ibk_row(3, None, description="잔액이월"),
        ibk_row(4, "2026-01-07 10:30:00", withdrawal=800, balance=1234200,
                description="타행이체수수료"),
    ])
