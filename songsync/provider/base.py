"""
歌词源提供者基类 - 定义提供者的通用功能

提供统一的 HTTP 请求、错误分类和日志记录。
子类只需要实现具体 API 的解析逻辑。
"""

import asyncio
import json
import logging
import socket
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, Type

import aiohttp

from songsync.core.exceptions import (
    ProviderError,
    ConnectionUnavailableError,
    NoTrackFoundError,
    RateLimitedError,
)
from songsync.core.interfaces import IMetadataProvider, ILyricsProvider, SongMetadata

DEFAULT_USER_AGENT = "SongSync/0.1 (https://github.com/Lambada10/SongSync)"


class BaseLyricsSourceProvider(IMetadataProvider, ILyricsProvider, ABC):
    """
    歌词源提供者基类

    同时实现元数据查找和同步歌词获取。公开方法负责把网络层异常
    转换为统一的提供者异常，子类实现 _lookup_impl / _fetch_synced_impl。
    """

    def __init__(self, name: str, timeout: float = 10, user_agent: Optional[str] = None):
        """
        初始化提供者

        Args:
            name: 提供者名称
            timeout: 单次请求超时（秒）
            user_agent: 请求使用的 User-Agent
        """
        self.name = name
        self.logger = logging.getLogger(f"songsync.provider.{name.lower()}")

        # 会话超时
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        self.headers: Dict[str, str] = {
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
        }

        self.logger.debug(f"{name} 提供者初始化完成")

    async def lookup(self, title: str, artist: str, offset: int = 0) -> SongMetadata:
        """
        查找歌曲元数据（带错误转换的包装方法）

        Args:
            title: 歌名
            artist: 歌手
            offset: 候选结果偏移量

        Returns:
            歌曲元数据
        """
        self.logger.debug(f"开始在 {self.name} 查找: {title} - {artist} (offset={offset})")
        try:
            metadata = await self._lookup_impl(title, artist, offset)
        except ProviderError as e:
            self.logger.info(f"{self.name} 查找失败: {type(e).__name__}: {e}")
            raise
        except Exception as e:
            error = self._convert_error(e)
            self.logger.warning(f"{self.name} 查找出错: {error}")
            raise error from e

        self.logger.info(f"{self.name} 找到曲目: {metadata.get_display_name()}")
        return metadata

    async def fetch_synced(self, track_link: str) -> str:
        """
        获取同步歌词（带错误转换的包装方法）

        Args:
            track_link: 元数据中的曲目链接

        Returns:
            LRC 格式歌词文本
        """
        self.logger.debug(f"开始从 {self.name} 获取歌词: {track_link}")
        try:
            lyrics = await self._fetch_synced_impl(track_link)
        except ProviderError as e:
            self.logger.info(f"{self.name} 歌词获取失败: {type(e).__name__}: {e}")
            raise
        except Exception as e:
            error = self._convert_error(e)
            self.logger.warning(f"{self.name} 歌词获取出错: {error}")
            raise error from e

        self.logger.info(f"{self.name} 歌词获取成功 ({len(lyrics)} 字符)")
        return lyrics

    def _convert_error(self, error: Exception) -> ProviderError:
        """将网络层异常转换为提供者异常"""
        # ServerTimeoutError 同时是连接错误，超时需要先判断
        if isinstance(error, asyncio.TimeoutError):
            return ProviderError(f"{self.name} 请求超时", self.name)
        if isinstance(error, (aiohttp.ClientConnectionError, socket.gaierror, ConnectionError)):
            return ConnectionUnavailableError(f"无法连接到 {self.name}: {error}", self.name)
        if isinstance(error, aiohttp.ClientError):
            return ProviderError(f"{self.name} 请求失败: {error}", self.name)
        return ProviderError(f"{self.name} 处理响应时出错: {type(error).__name__}: {error}", self.name)

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        not_found_error: Type[ProviderError] = NoTrackFoundError
    ) -> Any:
        """
        发送 GET 请求并解析 JSON

        Args:
            url: 请求地址
            params: 查询参数
            headers: 额外请求头
            not_found_error: 404 时抛出的异常类型

        Returns:
            解析后的 JSON 数据

        Raises:
            ProviderError: 状态码异常或响应不是有效的 JSON
        """
        request_headers = dict(self.headers)
        if headers:
            request_headers.update(headers)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url, params=params, headers=request_headers) as response:
                if response.status == 404:
                    raise not_found_error(f"{self.name} 未找到资源: {url}", self.name)
                if response.status == 429:
                    raise RateLimitedError(f"{self.name} 请求过于频繁，请稍后再试", self.name)
                if response.status != 200:
                    raise ProviderError(f"{self.name} 返回状态 {response.status}", self.name)

                text_response = await response.text()

        if not text_response.strip():
            raise ProviderError(f"{self.name} 返回空响应", self.name)

        try:
            return json.loads(text_response)
        except json.JSONDecodeError as e:
            self.logger.debug(f"响应内容（前300字符）: {text_response[:300]}...")
            raise ProviderError(f"{self.name} 响应不是有效的JSON: {e}", self.name) from e

    @abstractmethod
    async def _lookup_impl(self, title: str, artist: str, offset: int) -> SongMetadata:
        """子类实现的元数据查找逻辑"""
        raise NotImplementedError

    @abstractmethod
    async def _fetch_synced_impl(self, track_link: str) -> str:
        """子类实现的歌词获取逻辑"""
        raise NotImplementedError
