"""Tests for configuration management."""

import json
import os
import tempfile
import unittest

import yaml

from jangbu.utils.config_manager import ConfigManager
from jangbu.models.core import BookkeepingConfig


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, 'test_config.json')

    def tearDown(self):
        """Clean up test fixtures"""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_json(self, data):
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)

    def test_default_config_loading(self):
        """Test loading default configuration when no file exists"""
        manager = ConfigManager(config_path="nonexistent_file.json")
        config = manager.load_config()

        self.assertIsInstance(config, BookkeepingConfig)
        self.assertEqual(config.data_directory, "data")
        self.assertIsNone(config.log_directory)
        self.assertEqual(config.review_threshold, 0.7)
        self.assertEqual(config.timezone_offset_hours, 9)
        self.assertEqual(config.bank_layouts, {})

    def test_config_file_loading(self):
        """Test loading configuration from JSON file"""
        self._write_json({
            "data_directory": "out",
            "log_directory": "logs",
            "review_threshold": 0.8,
            "chart_of_accounts_path": "accounts.yaml",
            "timezone_offset_hours": 0,
        })

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config.data_directory, "out")
        self.assertEqual(config.log_directory, "logs")
        self.assertEqual(config.review_threshold, 0.8)
        self.assertEqual(config.chart_of_accounts_path, "accounts.yaml")
        self.assertEqual(config.timezone_offset_hours, 0)

    def test_yaml_config_loading(self):
        """Test loading configuration from YAML file"""
        yaml_file = os.path.join(self.temp_dir, 'config.yaml')
        with open(yaml_file, 'w', encoding='utf-8') as f:
            yaml.dump({"review_threshold": 0.5, "data_directory": "yaml_out"}, f)

        config = ConfigManager(config_path=yaml_file).load_config()

        self.assertEqual(config.review_threshold, 0.5)
        self.assertEqual(config.data_directory, "yaml_out")

    def test_bank_layout_loading(self):
        """Test loading additional bank layouts"""
        self._write_json({
            "bank_layouts": {
                "TEST": {
                    "title_markers": ["테스트은행"],
                    "meta_row": 1,
                    "header_offset": 3,
                    "columns": {"date": 1, "withdrawal": 2, "deposit": 3, "description": 4},
                }
            }
        })

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertIn("TEST", config.bank_layouts)
        self.assertEqual(config.bank_layouts["TEST"]["header_offset"], 3)

    def test_config_validation(self):
        """Test that invalid configuration falls back to defaults"""
        invalid_configs = [
            {"review_threshold": 1.5},
            {"review_threshold": "high"},
            {"timezone_offset_hours": 20},
            {"timezone_offset_hours": True},
            {"data_directory": ""},
            {"log_directory": 5},
            {"bank_layouts": []},
            {"bank_layouts": {"X": {"title_markers": ["x"]}}},
            {"bank_layouts": {"X": {"title_markers": "x", "meta_row": 1,
                                    "header_offset": 2, "columns": {}}}},
            ["not", "a", "dict"],
        ]

        for data in invalid_configs:
            self._write_json(data)
            config = ConfigManager(config_path=self.config_file).load_config()
            self.assertEqual(config, BookkeepingConfig(), msg=str(data))

    def test_malformed_json_uses_defaults(self):
        with open(self.config_file, 'w', encoding='utf-8') as f:
            f.write("{not json")

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config, BookkeepingConfig())

    def test_unsupported_extension_uses_defaults(self):
        ini_file = os.path.join(self.temp_dir, 'config.ini')
        with open(ini_file, 'w') as f:
            f.write("[jangbu]\n")

        self.assertEqual(ConfigManager(config_path=ini_file).load_config(), BookkeepingConfig())

    def test_config_template_generation(self):
        """Test generating configuration template"""
        template_path = os.path.join(self.temp_dir, 'nested', 'template.json')

        ConfigManager().save_config_template(template_path)

        self.assertTrue(os.path.exists(template_path))
        with open(template_path, encoding='utf-8') as f:
            template = json.load(f)
        self.assertIn('review_threshold', template)
        self.assertIn('EXAMPLE', template['bank_layouts'])

        config = ConfigManager(config_path=template_path).load_config()
        self.assertEqual(config.log_directory, "logs")
        self.assertIn('EXAMPLE', config.bank_layouts)

    def test_yaml_template_generation(self):
        template_path = os.path.join(self.temp_dir, 'template.yml')

        ConfigManager().save_config_template(template_path)

        with open(template_path, encoding='utf-8') as f:
            template = yaml.safe_load(f)
        self.assertEqual(template['bank_layouts']['EXAMPLE']['title_markers'], ["예시은행 거래내역"])

    def test_config_caching(self):
        """Test configuration caching behavior"""
        self._write_json({"review_threshold": 0.6})
        manager = ConfigManager(config_path=self.config_file)

        config1 = manager.load_config()
        self._write_json({"review_threshold": 0.9})
        config2 = manager.load_config()
        self.assertIs(config1, config2)

        config3 = manager.load_config(force_reload=True)
        self.assertEqual(config3.review_threshold, 0.9)

    def test_update_and_reset(self):
        manager = ConfigManager(config_path="nonexistent_file.json")

        manager.update_config({"review_threshold": 0.9, "unknown_key": 1})
        self.assertEqual(manager.load_config().review_threshold, 0.9)
        self.assertFalse(hasattr(manager.load_config(), "unknown_key"))

        manager.reset_config()
        self.assertEqual(manager.load_config().review_threshold, 0.7)


if __name__ == '__main__':
    unittest.main()
