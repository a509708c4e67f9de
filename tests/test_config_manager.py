"""
配置管理器与提供者工厂测试
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from islandlyrics.core.context import LyricsContext
from islandlyrics.provider.kugou_provider import KugouProvider
from islandlyrics.provider.netease_provider import NetEaseProvider
from islandlyrics.provider.provider_factory import LyricProviderFactory
from islandlyrics.utils.config_manager import ConfigManager
from islandlyrics.utils.logger import setup_logger

CONFIG_YAML = """
lyrics:
  providers:
    - Kugou
    - netease
  http_timeout: 5
  batch_deadline: 8
  max_cache_size: 20
scroll:
  mode: timed
  max_display_weight: 24
logging:
  level: DEBUG
"""


class TestConfigManager:
    """测试配置管理器"""

    def test_load_yaml_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(CONFIG_YAML, encoding='utf-8')

        config = ConfigManager(str(config_file))

        assert config.get_enabled_providers() == ["kugou", "netease"]
        assert config.get_http_timeout() == 5.0
        assert config.get_batch_deadline() == 8.0
        assert config.get_max_cache_size() == 20
        assert config.get_scroll_mode() == "timed"
        assert config.get_max_display_weight() == 24
        assert config.get_log_level() == "DEBUG"
        assert config.get('lyrics.missing.key', 'fallback') == 'fallback'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding='utf-8')
        assert ConfigManager(str(config_file)).config == {}

    def test_defaults(self):
        config = ConfigManager.from_dict({})
        assert config.get_enabled_providers() == ["kugou", "netease", "lrcapi"]
        assert config.get_http_timeout() == 10.0
        assert config.get_batch_deadline() == 10.0
        assert config.is_cache_enabled() is True
        assert config.get_max_cache_size() == 100
        assert config.get_scroll_mode() == "adaptive"
        assert config.get_max_display_weight() == 18
        assert config.get_tick_interval() == 150
        assert config.get_log_file() is None

    def test_unknown_scroll_mode(self):
        config = ConfigManager.from_dict({"scroll": {"mode": "bouncy"}})
        assert config.get_scroll_mode() == "adaptive"

    def test_empty_provider_list_falls_back(self):
        config = ConfigManager.from_dict({"lyrics": {"providers": []}})
        assert config.get_enabled_providers() == ["kugou", "netease", "lrcapi"]


class TestLyricProviderFactory:
    """测试歌词提供者工厂"""

    def test_default_providers(self):
        factory = LyricProviderFactory()
        assert [provider.name for provider in factory.get_providers()] == ["Kugou", "Netease", "LrcApi"]
        assert factory.get_supported_providers() == ["kugou", "netease", "lrcapi"]

    def test_configured_providers(self):
        config = ConfigManager.from_dict({"lyrics": {"providers": ["netease", "unknown", "kugou"]}})
        factory = LyricProviderFactory(config)

        providers = factory.get_providers()
        assert [type(provider) for provider in providers] == [NetEaseProvider, KugouProvider]
        assert factory.get_provider_by_name("NETEASE") is providers[0]
        assert factory.get_provider_by_name("lrcapi") is None

    def test_shared_http_client(self):
        factory = LyricProviderFactory(ConfigManager.from_dict({"lyrics": {"http_timeout": 3}}))
        for provider in factory.get_providers():
            assert provider.http is factory.http_client
        assert factory.http_client.timeout.sock_read == 3

    def test_context_from_config(self):
        context = LyricsContext.from_config(ConfigManager.from_dict({"lyrics": {"providers": ["lrcapi"]}}))
        assert [provider.name for provider in context.providers] == ["LrcApi"]
        assert context.clock() >= 0


class TestSetupLogger:
    """测试日志配置"""

    def test_console_and_file_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "islandlyrics.log"
        logger = setup_logger("DEBUG", str(log_file), max_size=1024, backup_count=2)

        try:
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 2
            file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
            assert file_handlers[0].backupCount == 2

            logging.getLogger("islandlyrics.lyrics.test").info("写入日志")
            file_handlers[0].flush()
            assert "写入日志" in log_file.read_text(encoding='utf-8')
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.propagate = True
            logger.setLevel(logging.NOTSET)

    def test_repeated_setup_replaces_handlers(self):
        setup_logger("INFO")
        logger = setup_logger("WARNING")
        try:
            assert len(logger.handlers) == 1
            assert logger.level == logging.WARNING
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.propagate = True
            logger.setLevel(logging.NOTSET)
