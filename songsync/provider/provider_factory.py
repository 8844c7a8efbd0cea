"""
提供者工厂 - 管理和创建歌词源提供者实例

根据配置创建所有提供者，并按名称查找。
"""

import logging
from typing import List, Optional, Dict

from songsync.utils.config_manager import ConfigManager
from .base import BaseLyricsSourceProvider, DEFAULT_USER_AGENT
from .netease_provider import NetEaseProvider
from .lrclib_provider import LrcLibProvider


class ProviderFactory:
    """
    提供者工厂

    负责管理所有歌词源提供者，提供按名称获取提供者的统一接口。
    """

    def __init__(self, config: Optional[ConfigManager] = None):
        """
        初始化提供者工厂

        Args:
            config: 配置管理器，为 None 时使用默认设置
        """
        self.config = config
        self.logger = logging.getLogger("songsync.provider.factory")

        timeout = config.get_request_timeout() if config else 10
        user_agent = config.get_user_agent() if config else DEFAULT_USER_AGENT
        lrclib_base_url = config.get_lrclib_base_url() if config else "https://lrclib.net"
        self.default_name = config.get_lyrics_provider() if config else "netease"

        # 创建提供者映射
        self._provider_map: Dict[str, BaseLyricsSourceProvider] = {
            'netease': NetEaseProvider(timeout=timeout, user_agent=user_agent),
            'lrclib': LrcLibProvider(base_url=lrclib_base_url, timeout=timeout, user_agent=user_agent),
        }

        if self.default_name not in self._provider_map:
            self.logger.warning(f"未知的默认提供者 '{self.default_name}'，改用 netease")
            self.default_name = 'netease'

    def get_supported_providers(self) -> List[str]:
        """
        获取支持的提供者列表

        Returns:
            提供者名称列表
        """
        return list(self._provider_map.keys())

    def get_provider_by_name(self, name: str) -> Optional[BaseLyricsSourceProvider]:
        """
        根据名称获取提供者

        Args:
            name: 提供者名称

        Returns:
            提供者实例，未找到时返回None
        """
        return self._provider_map.get(name.lower())

    def get_default_provider(self) -> BaseLyricsSourceProvider:
        return self._provider_map[self.default_name]
