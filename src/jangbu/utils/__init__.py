"""Utility functions and helpers"""

from .validation import ValidationEngine, validate_journal_entry
from .csv_writer import CSVWriter
from .config_manager import ConfigManager, get_default_config_manager
from .error_handler import ErrorHandler, ErrorCategory, ErrorSeverity, handle_file_access_error
from .account_config import ChartOfAccountsLoader

__all__ = [
    'ValidationEngine',
    'validate_journal_entry',
    'CSVWriter',
    'ConfigManager',
    'get_default_config_manager',
    'ErrorHandler',
    'ErrorCategory',
    'ErrorSeverity',
    'handle_file_access_error',
    'ChartOfAccountsLoader',
]
