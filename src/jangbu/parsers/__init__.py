"""Statement and diary parsers"""

from .base import StatementParser, DataTransformer, UnsupportedFormatError
from .statement_parser import BankStatementParser, IBK_LAYOUT, layout_from_dict
from .diary_parser import DiaryTextParser, normalize_payment_method

__all__ = [
    'StatementParser',
    'DataTransformer',
    'UnsupportedFormatError',
    'BankStatementParser',
    'IBK_LAYOUT',
    'layout_from_dict',
    'DiaryTextParser',
    'normalize_payment_method',
]
