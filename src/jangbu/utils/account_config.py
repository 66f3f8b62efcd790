"""Chart of accounts loader for user-maintained YAML files."""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from ..models.chart_of_accounts import ChartOfAccounts, default_chart
from ..models.core import Account, ACCOUNT_CATEGORIES


logger = logging.getLogger(__name__)


class ChartOfAccountsLoader:
    """Loads and validates a chart of accounts from a YAML file.

    The file holds a list of accounts, either at the top level or under an
    ``accounts`` key.

    Example accounts.yaml:
        accounts:
          - code: "101"
            name: 보통예금
            category: asset
            subcategory: 유동자산
          - code: "514"
            name: 여비교통비
            category: expense
            subcategory: 판매비와관리비
            vat_relevant: true

    A missing, empty or unreadable file falls back to the built-in chart.
    """

    REQUIRED_FIELDS = ('code', 'name', 'category')

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Path to the accounts YAML file. None uses the
                         built-in chart.
        """
        self.config_path = config_path
        self._accounts: List[Account] = []

    def load(self) -> ChartOfAccounts:
        """Load the chart of accounts, falling back to the default chart"""
        self._accounts = []

        if not self.config_path:
            return default_chart()

        if not os.path.exists(self.config_path):
            logger.info(
                f"Chart of accounts file not found at {self.config_path}. "
                "Using the built-in chart."
            )
            return default_chart()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(
                f"Invalid YAML syntax in {self.config_path}: {e}. "
                "Using the built-in chart."
            )
            return default_chart()
        except OSError as e:
            logger.error(
                f"Error reading chart of accounts file {self.config_path}: {e}. "
                "Using the built-in chart."
            )
            return default_chart()

        if isinstance(data, dict):
            data = data.get('accounts')

        if data is None:
            logger.info(f"Chart of accounts file {self.config_path} is empty. Using the built-in chart.")
            return default_chart()

        if not isinstance(data, list):
            logger.error(
                f"Chart of accounts must be a list, got {type(data).__name__}. "
                "Using the built-in chart."
            )
            return default_chart()

        self._parse_accounts(data)
        if not self._accounts:
            logger.warning(f"No valid accounts in {self.config_path}. Using the built-in chart.")
            return default_chart()

        logger.info(f"Loaded {len(self._accounts)} account(s) from {self.config_path}")
        return ChartOfAccounts(self._accounts)

    def _parse_accounts(self, entries: List[Any]) -> None:
        seen_codes = set()
        seen_names = set()

        for index, entry in enumerate(entries):
            account = self._parse_account(index, entry)
            if account is None:
                continue

            if account.code in seen_codes or account.name in seen_names:
                logger.warning(
                    f"Skipping account {account.code} '{account.name}': duplicate code or name"
                )
                continue

            seen_codes.add(account.code)
            seen_names.add(account.name)
            self._accounts.append(account)

    def _parse_account(self, index: int, entry: Any) -> Optional[Account]:
        """Validate a single account entry; None when it must be skipped."""
        if not isinstance(entry, dict):
            logger.warning(f"Skipping account entry #{index}: must be a dictionary")
            return None

        for field_name in self.REQUIRED_FIELDS:
            if entry.get(field_name) in (None, ''):
                logger.warning(
                    f"Skipping account entry #{index}: missing required field '{field_name}'"
                )
                return None

        category = str(entry['category']).lower()
        if category not in ACCOUNT_CATEGORIES:
            logger.warning(
                f"Skipping account entry #{index}: invalid category '{entry['category']}'"
            )
            return None

        vat_relevant = entry.get('vat_relevant', False)
        if not isinstance(vat_relevant, bool):
            logger.warning(
                f"Account entry #{index}: 'vat_relevant' must be a boolean, defaulting to false"
            )
            vat_relevant = False

        return Account(
            code=str(entry['code']),
            name=str(entry['name']),
            category=category,
            subcategory=str(entry.get('subcategory') or ''),
            vat_relevant=vat_relevant,
        )

    @staticmethod
    def to_yaml_data(chart: ChartOfAccounts) -> Dict[str, Any]:
        """Serializable form of a chart, suitable for editing and reloading."""
        return {
            'accounts': [
                {
                    'code': a.code,
                    'name': a.name,
                    'category': a.category,
                    'subcategory': a.subcategory,
                    'vat_relevant': a.vat_relevant,
                }
                for a in chart
            ]
        }
