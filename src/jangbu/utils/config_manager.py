"""Configuration management for the bookkeeping classifier."""

import json
import os
import yaml
from typing import Dict, Any, Optional
import logging

from ..models.core import BookkeepingConfig


logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages loading and validation of runtime configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[BookkeepingConfig] = None

    def load_config(self, force_reload: bool = False) -> BookkeepingConfig:
        """Load configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            BookkeepingConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()

        try:
            self._config_cache = BookkeepingConfig(
                data_directory=config_data.get('data_directory', 'data'),
                log_directory=config_data.get('log_directory'),
                review_threshold=float(config_data.get('review_threshold', 0.7)),
                chart_of_accounts_path=config_data.get('chart_of_accounts_path'),
                timezone_offset_hours=int(config_data.get('timezone_offset_hours', 9)),
                bank_layouts=config_data.get('bank_layouts'),
            )
            logger.info(f"Configuration loaded successfully from {self.config_path or 'defaults'}")
            return self._config_cache

        except (TypeError, ValueError) as e:
            logger.warning(f"Error loading configuration: {e}. Using defaults.")
            self._config_cache = BookkeepingConfig()
            return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
            or the file is invalid
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.info("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except (OSError, ValueError, yaml.YAMLError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations

        Returns:
            Path to configuration file or None if not found
        """
        if self.config_path:
            return self.config_path

        search_paths = [
            'jangbu_config.json',
            'jangbu_config.yml',
            'jangbu_config.yaml',
            'config/jangbu_config.json',
            'config/jangbu_config.yml',
            'config/jangbu_config.yaml',
            os.path.expanduser('~/.jangbu/config.json'),
            os.path.expanduser('~/.jangbu/config.yml'),
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Args:
            data: Configuration data to validate

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        if 'data_directory' in data:
            if not isinstance(data['data_directory'], str):
                raise ValueError("data_directory must be a string")
            if not data['data_directory'].strip():
                raise ValueError("data_directory cannot be empty")

        for path_key in ['log_directory', 'chart_of_accounts_path']:
            if data.get(path_key) is not None and not isinstance(data[path_key], str):
                raise ValueError(f"{path_key} must be a string")

        if 'review_threshold' in data:
            threshold = data['review_threshold']
            if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
                raise ValueError("review_threshold must be a number")
            if not 0 <= threshold <= 1:
                raise ValueError("review_threshold must be between 0 and 1")

        if 'timezone_offset_hours' in data:
            offset = data['timezone_offset_hours']
            if isinstance(offset, bool) or not isinstance(offset, int):
                raise ValueError("timezone_offset_hours must be an integer")
            if not -12 <= offset <= 14:
                raise ValueError("timezone_offset_hours must be between -12 and 14")

        if 'bank_layouts' in data:
            if not isinstance(data['bank_layouts'], dict):
                raise ValueError("bank_layouts must be a dictionary")
            self._validate_bank_layouts(data['bank_layouts'])

    def _validate_bank_layouts(self, layouts: Dict[str, Any]) -> None:
        """Validate additional bank statement layouts

        Raises:
            ValueError: If a layout definition is invalid
        """
        for code, layout in layouts.items():
            if not isinstance(layout, dict):
                raise ValueError(f"Bank layout for {code} must be a dictionary")

            for field in ['title_markers', 'meta_row', 'header_offset', 'columns']:
                if field not in layout:
                    raise ValueError(f"Bank layout {code} missing required field: {field}")

            if not isinstance(layout['title_markers'], list):
                raise ValueError(f"title_markers for {code} must be a list")
            if not isinstance(layout['columns'], dict):
                raise ValueError(f"columns for {code} must be a dictionary")
            for offset_field in ['meta_row', 'header_offset']:
                if not isinstance(layout[offset_field], int):
                    raise ValueError(f"{offset_field} for {code} must be an integer")

    def save_config_template(self, output_path: str) -> None:
        """Generate and save a configuration file template

        Args:
            output_path: Path where to save the template
        """
        template = {
            "data_directory": "data",
            "log_directory": "logs",
            "review_threshold": 0.7,
            "chart_of_accounts_path": None,
            "timezone_offset_hours": 9,
            "bank_layouts": {
                "EXAMPLE": {
                    "title_markers": ["예시은행 거래내역"],
                    "meta_row": 1,
                    "header_offset": 3,
                    "columns": {
                        "seq": 0,
                        "date": 1,
                        "withdrawal": 2,
                        "deposit": 3,
                        "balance": 4,
                        "description": 5
                    },
                    "total_marker": "합계",
                    "presence_column": 1,
                    "meta_patterns": {
                        "account_number": r"계좌번호[:\s]*([0-9\-]+)"
                    }
                }
            }
        }

        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                if output_path.endswith(('.yml', '.yaml')):
                    yaml.dump(template, f, default_flow_style=False, indent=2, allow_unicode=True)
                else:
                    json.dump(template, f, indent=2, ensure_ascii=False)

            logger.info(f"Configuration template saved to {output_path}")

        except OSError as e:
            logger.error(f"Error saving configuration template: {e}")
            raise

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values

        Args:
            updates: Dictionary of configuration updates
        """
        if self._config_cache is None:
            self.load_config()

        for key, value in updates.items():
            if hasattr(self._config_cache, key):
                setattr(self._config_cache, key, value)
                logger.debug(f"Updated configuration: {key} = {value}")
            else:
                logger.warning(f"Unknown configuration key: {key}")

    def reset_config(self) -> None:
        """Reset configuration cache, forcing reload on next access"""
        self._config_cache = None
        logger.debug("Configuration cache reset")


def get_default_config_manager() -> ConfigManager:
    """Get a default configuration manager instance"""
    return ConfigManager()
