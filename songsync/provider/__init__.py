"""
歌词源提供者模块 - 查找歌曲元数据并获取同步歌词

每个提供者同时实现元数据查找和歌词获取，
会话只通过 IMetadataProvider / ILyricsProvider 接口使用它们。
"""

from .base import BaseLyricsSourceProvider
from .netease_provider import NetEaseProvider
from .lrclib_provider import LrcLibProvider
from .provider_factory import ProviderFactory

__all__ = [
    "BaseLyricsSourceProvider",
    "NetEaseProvider",
    "LrcLibProvider",
    "ProviderFactory"
]
