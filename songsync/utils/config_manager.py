"""Configuration manager for SongSync."""
import logging
import os
from typing import Any, Dict, Optional
import yaml

from songsync.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = "config/config.yaml"


class ConfigManager:
    """
    Configuration manager for SongSync.

    Handles loading and accessing configuration values from the config file.
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        """
        Initialize the ConfigManager.

        Args:
            config_path: Path to the configuration file

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        self.logger = logging.getLogger("songsync.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

        self._load_config()

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

    def get_discord_token(self) -> str:
        """
        Get the Discord bot token.

        Raises:
            ValueError: If the Discord bot token is not set
        """
        token = self.get('discord.token')
        if not token or token == "YOUR_DISCORD_BOT_TOKEN_HERE":
            self.logger.error("Discord bot token not set in configuration")
            raise ValueError("Discord bot token not set in configuration")
        return token

    def get_command_prefix(self) -> str:
        return self.get('discord.command_prefix', '!')

    def get_lyrics_provider(self) -> str:
        """
        获取默认的歌词提供者名称

        Returns:
            提供者名称（小写）
        """
        return str(self.get('lyrics.provider', 'netease')).lower()

    def get_generator_tag(self) -> str:
        """
        获取写入 .lrc 文件 [by:] 标签的生成者名称

        Returns:
            生成者名称
        """
        return self.get('lyrics.generator_tag', 'Generated using SongSync')

    def get_request_timeout(self) -> float:
        """
        获取提供者请求超时时间

        Returns:
            超时秒数

        Raises:
            ConfigError: 超时时间不是正数
        """
        timeout = self.get('lyrics.request_timeout', 10)
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid lyrics.request_timeout: {timeout!r}")
        if timeout <= 0:
            raise ConfigError(f"Invalid lyrics.request_timeout: {timeout}")
        return timeout

    def get_user_agent(self) -> str:
        return self.get('lyrics.user_agent', 'SongSync/0.1 (https://github.com/Lambada10/SongSync)')

    def get_lrclib_base_url(self) -> str:
        """Get the LRCLIB instance URL without trailing slash."""
        return str(self.get('lyrics.lrclib_base_url', 'https://lrclib.net')).rstrip('/')

    def get_download_dir(self) -> str:
        """
        获取 .lrc 文件的默认保存目录

        Returns:
            目录路径
        """
        return self.get('output.download_dir', './downloads')

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
        return self.get('logging.max_size', 10485760)  # 10 MB

    def get_log_backup_count(self) -> int:
        return self.get('logging.backup_count', 5)

    def get_music_dir(self) -> Optional[str]:
        """
        获取本地曲库目录

        Returns:
            目录路径，未配置时为 None
        """
        return self.get('library.music_dir', None)
