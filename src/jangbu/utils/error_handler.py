"""Structured error handling and logging for the bookkeeping pipeline."""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    FILE_ACCESS = "file_access"
    FILE_FORMAT = "file_format"
    DATA_PARSING = "data_parsing"
    CLASSIFICATION = "classification"
    DATA_VALIDATION = "data_validation"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


ERROR_CODES = {
    # File access errors
    "FILE_NOT_FOUND": "F001",
    "FILE_PERMISSION_DENIED": "F002",

    # File format errors
    "UNSUPPORTED_FORMAT": "F101",
    "MALFORMED_FILE": "F102",

    # Data parsing errors
    "DATE_PARSE_ERROR": "D001",
    "AMOUNT_PARSE_ERROR": "D002",

    # Validation and classification errors
    "BALANCE_VIOLATION": "V101",
    "LOW_CONFIDENCE": "V102",
    "INVALID_TRANSACTION": "V103",
    "INVALID_JOURNAL_LINE": "V104",

    # Configuration errors
    "CONFIG_FILE_NOT_FOUND": "C001",
    "INVALID_CONFIG_FORMAT": "C002",

    # System errors
    "OUTPUT_WRITE_ERROR": "S001",
    "UNEXPECTED_ERROR": "S999",
}


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    field_name: Optional[str] = None
    raw_value: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for key in ('error_code', 'file_path', 'category', 'context'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ErrorHandler:
    """Collects errors and warnings and emits them as structured log records.

    Console output is human-readable and goes to stderr so command output on
    stdout stays clean. When a log directory is given, every record is also
    written as JSON lines, and errors additionally to a separate file.
    """

    LOGGER_NAME = 'jangbu.errors'

    def __init__(self, log_directory: Optional[str] = None, enable_console: bool = True):
        self.log_directory = Path(log_directory) if log_directory else None
        if self.log_directory:
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []
        self.error_codes = dict(ERROR_CODES)

        self._setup_logging(enable_console)

    def _setup_logging(self, enable_console: bool):
        self.logger = logging.getLogger(self.LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)

        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        if self.log_directory:
            stamp = datetime.now().strftime('%Y%m%d')

            file_handler = logging.FileHandler(self.log_directory / f"jangbu_{stamp}.jsonl", encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(file_handler)

            error_handler = logging.FileHandler(self.log_directory / f"errors_{stamp}.jsonl", encoding='utf-8')
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(error_handler)

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(console_handler)

    def close(self):
        """Release file handlers"""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def _record(self,
                severity: ErrorSeverity,
                message: str,
                error_type: str,
                category: ErrorCategory,
                file_path: Optional[str] = None,
                line_number: Optional[int] = None,
                field_name: Optional[str] = None,
                raw_value: Optional[str] = None,
                exception: Optional[Exception] = None,
                context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        error_code = self.error_codes.get(error_type, "S999")

        stack_trace = None
        if exception:
            stack_trace = ''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=severity.value,
            category=category.value,
            error_code=error_code,
            message=message,
            file_path=file_path,
            line_number=line_number,
            field_name=field_name,
            raw_value=raw_value,
            stack_trace=stack_trace,
            context=context or {}
        )

        level = getattr(logging, severity.name)
        self.logger.log(
            level,
            message,
            extra={
                'error_code': error_code,
                'category': category.value,
                'file_path': file_path,
                'context': context or {}
            }
        )
        return detail

    def log_error(self,
                  message: str,
                  error_type: str,
                  category: ErrorCategory = ErrorCategory.SYSTEM,
                  file_path: Optional[str] = None,
                  line_number: Optional[int] = None,
                  field_name: Optional[str] = None,
                  raw_value: Optional[str] = None,
                  exception: Optional[Exception] = None,
                  context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log an error with detailed information"""
        detail = self._record(ErrorSeverity.ERROR, message, error_type, category,
                              file_path=file_path, line_number=line_number,
                              field_name=field_name, raw_value=raw_value,
                              exception=exception, context=context)
        self.errors.append(detail)
        return detail

    def log_critical(self,
                     message: str,
                     error_type: str,
                     category: ErrorCategory = ErrorCategory.SYSTEM,
                     context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log an internal inconsistency that should never happen"""
        detail = self._record(ErrorSeverity.CRITICAL, message, error_type, category, context=context)
        self.errors.append(detail)
        return detail

    def log_warning(self,
                    message: str,
                    warning_type: str,
                    category: ErrorCategory = ErrorCategory.SYSTEM,
                    file_path: Optional[str] = None,
                    context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log a warning with detailed information"""
        detail = self._record(ErrorSeverity.WARNING, message, warning_type, category,
                              file_path=file_path, context=context)
        self.warnings.append(detail)
        return detail

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log informational message"""
        self.logger.info(message, extra={'context': context or {}})

    def log_debug(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log debug message"""
        self.logger.debug(message, extra={'context': context or {}})

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        errors_by_category: Dict[str, int] = {}
        warnings_by_category: Dict[str, int] = {}
        errors_by_code: Dict[str, int] = {}

        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1
            errors_by_code[error.error_code] = errors_by_code.get(error.error_code, 0) + 1

        for warning in self.warnings:
            warnings_by_category[warning.category] = warnings_by_category.get(warning.category, 0) + 1

        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'errors_by_category': errors_by_category,
            'warnings_by_category': warnings_by_category,
            'errors_by_code': errors_by_code,
            'files_with_errors': len(set(e.file_path for e in self.errors if e.file_path)),
        }

    def clear_errors(self):
        """Clear all accumulated errors and warnings"""
        self.errors.clear()
        self.warnings.clear()

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_errors_for_file(self, file_path: str) -> List[ErrorDetail]:
        """Get all errors for a specific file"""
        return [error for error in self.errors if error.file_path == file_path]


def handle_file_access_error(error_handler: ErrorHandler,
                             file_path: str,
                             exception: Exception) -> ErrorDetail:
    """Handle common file access errors"""
    if isinstance(exception, FileNotFoundError):
        return error_handler.log_error(
            f"File not found: {file_path}",
            "FILE_NOT_FOUND",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
    elif isinstance(exception, PermissionError):
        return error_handler.log_error(
            f"Permission denied accessing file: {file_path}",
            "FILE_PERMISSION_DENIED",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
    else:
        return error_handler.log_error(
            f"File access error: {str(exception)}",
            "UNEXPECTED_ERROR",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
