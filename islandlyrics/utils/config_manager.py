"""Configuration manager for the lyric engine."""
import logging
import os
from typing import Any, Dict, List, Optional
import yaml

DEFAULT_PROVIDERS = ["kugou", "netease", "lrcapi"]


class ConfigManager:
    """
    Configuration manager for the lyric engine.

    Handles loading and accessing configuration values from the config file.
    """

    def __init__(self, config_path: Optional[str] = "config/config.yaml"):
        """
        Initialize the ConfigManager.

        Args:
            config_path: Path to the configuration file, or None for an empty
                in-memory configuration

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        self.logger = logging.getLogger("islandlyrics.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

        if config_path is not None:
            self._load_config()

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "ConfigManager":
        """
        Build a configuration from an in-memory dictionary.

        Args:
            values: Nested configuration values

        Returns:
            A ConfigManager that never touches the filesystem
        """
        manager = cls(config_path=None)
        manager.config = dict(values)
        return manager

    def _load_config(self) -> None:
        """
        Load the configuration from the config file.

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        if not os.path.exists(self.config_path):
            example_path = f"{self.config_path}.example"
            if os.path.exists(example_path):
                self.logger.error(
                    f"Configuration file {self.config_path} not found. "
                    f"Please copy {example_path} to {self.config_path} and update it."
                )
            else:
                self.logger.error(f"Configuration file {self.config_path} not found.")
            raise FileNotFoundError(f"Configuration file {self.config_path} not found")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as config_file:
                self.config = yaml.safe_load(config_file) or {}
                self.logger.debug(f"Loaded configuration from {self.config_path}")
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing configuration file: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key (dot notation for nested keys)
            default: Default value to return if the key is not found

        Returns:
            The configuration value or the default value if not found
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                self.logger.debug(f"Configuration key '{key}' not found, using default: {default}")
                return default

        return value

    def get_enabled_providers(self) -> List[str]:
        """
        Get the names of the lyric providers to race.

        Returns:
            Lower-case provider names
        """
        providers = self.get('lyrics.providers', DEFAULT_PROVIDERS)
        if not providers:
            self.logger.warning("No lyric providers configured, falling back to defaults")
            return list(DEFAULT_PROVIDERS)
        return [str(name).lower() for name in providers]

    def get_http_timeout(self) -> float:
        """
        Get the per-request connect/read timeout.

        Returns:
            Timeout in seconds
        """
        return float(self.get('lyrics.http_timeout', 10))

    def get_batch_deadline(self) -> float:
        """
        Get the overall deadline for one provider race.

        Returns:
            Deadline in seconds
        """
        return float(self.get('lyrics.batch_deadline', 10))

    def is_cache_enabled(self) -> bool:
        """
        Check if fetched lyrics are cached per song.

        Returns:
            True if caching is enabled
        """
        return self.get('lyrics.cache_enabled', True)

    def get_max_cache_size(self) -> int:
        """
        Get the maximum number of cached songs.

        Returns:
            The cache size
        """
        return int(self.get('lyrics.max_cache_size', 100))

    def get_scroll_mode(self) -> str:
        """
        Get the scrolling mode.

        Returns:
            "adaptive" for the weight-based state machine, "timed" for
            syllable/LRC progress windows
        """
        mode = str(self.get('scroll.mode', 'adaptive')).lower()
        if mode not in ('adaptive', 'timed'):
            self.logger.warning(f"Unknown scroll mode '{mode}', using adaptive")
            return 'adaptive'
        return mode

    def get_max_display_weight(self) -> int:
        """
        Get the display capacity in visual weight units.

        Returns:
            The display capacity
        """
        return int(self.get('scroll.max_display_weight', 18))

    def get_tick_interval(self) -> int:
        """
        Get the playback driver tick interval.

        Returns:
            Interval in milliseconds
        """
        return int(self.get('scroll.tick_interval', 150))

    def get_log_level(self) -> str:
        """
        Get the logging level.

        Returns:
            The logging level
        """
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> Optional[str]:
        """
        Get the log file path.

        Returns:
            The log file path or None if not set
        """
        return self.get('logging.file', None)

    def get_log_max_size(self) -> int:
        """
        Get the maximum log file size.

        Returns:
            The maximum log file size in bytes
        """
        return self.get('logging.max_size', 10485760)  # 10 MB

    def get_log_backup_count(self) -> int:
        """
        Get the number of backup log files to keep.

        Returns:
            The number of backup log files
        """
        return self.get('logging.backup_count', 5)
