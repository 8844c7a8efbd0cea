"""
测试配置

提供会话、提供者和 Discord 交互的模拟对象
"""

import asyncio
from typing import Dict, Any, List, Optional
from unittest.mock import Mock, AsyncMock

import pytest
import discord

from songsync.core.interfaces import IMetadataProvider, ILyricsProvider, SongMetadata
from songsync.utils.config_manager import ConfigManager


class FakeProvider(IMetadataProvider, ILyricsProvider):
    """
    可控的提供者

    lookup/fetch_synced 的结果按调用顺序从队列中取出；
    队列元素为异常时抛出。设置 gate 后调用会阻塞到 gate 被 set。
    """

    def __init__(self, supports_offset: bool = True):
        self.supports_offset = supports_offset
        self.lookup_results: List[Any] = []
        self.lyrics_results: List[Any] = []
        self.lookup_calls: List[tuple] = []
        self.fetch_calls: List[str] = []
        self.lookup_gates: Dict[int, asyncio.Event] = {}
        self.fetch_gate: Optional[asyncio.Event] = None
        self.fetch_gates: Dict[int, asyncio.Event] = {}

    async def lookup(self, title: str, artist: str, offset: int = 0) -> SongMetadata:
        index = len(self.lookup_calls)
        self.lookup_calls.append((title, artist, offset))
        gate = self.lookup_gates.get(index)
        if gate is not None:
            await gate.wait()
        result = self.lookup_results[index]
        if isinstance(result, BaseException):
            raise result
        return result

    async def fetch_synced(self, track_link: str) -> str:
        index = len(self.fetch_calls)
        self.fetch_calls.append(track_link)
        gate = self.fetch_gates.get(index, self.fetch_gate)
        if gate is not None:
            await gate.wait()
        result = self.lyrics_results[index]
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    """返回提供者类，用于需要自定义参数的测试"""
    return FakeProvider


@pytest.fixture
def sample_metadata():
    return SongMetadata(
        title="晴天",
        artist="周杰伦",
        cover_url="http://example.com/cover.jpg",
        track_link="https://music.163.com/song?id=186016"
    )


@pytest.fixture
def mock_config():
    """创建模拟配置管理器"""
    config = Mock(spec=ConfigManager)
    config.get.side_effect = lambda key, default=None: default
    config.get_lyrics_provider.return_value = "netease"
    config.get_request_timeout.return_value = 10.0
    config.get_user_agent.return_value = "SongSync-Test"
    config.get_lrclib_base_url.return_value = "https://lrclib.net"
    config.get_generator_tag.return_value = "Generated using SongSync"
    return config


@pytest.fixture
def mock_interaction():
    """创建模拟Discord交互对象"""
    interaction = Mock(spec=discord.Interaction)
    interaction.user = Mock()
    interaction.user.id = 67890
    interaction.user.display_name = "TestUser"
    interaction.command = None
    interaction.response = Mock()
    interaction.response.is_done = Mock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.followup = Mock()
    interaction.followup.send = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction
