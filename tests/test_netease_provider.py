"""
网易云音乐提供者测试

通过模拟 aiohttp.ClientSession 验证请求参数、响应解析和错误转换。
"""

import asyncio
import json
from unittest.mock import MagicMock, AsyncMock, patch

import aiohttp
import pytest

from songsync.core.exceptions import (
    ProviderError,
    ConnectionUnavailableError,
    NoTrackFoundError,
    RateLimitedError,
    LyricsNotFoundError,
)
from songsync.provider.netease_provider import NetEaseProvider


def build_session(status: int = 200, payload=None, text: str = None):
    """构建返回指定响应的模拟会话"""
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text if text is not None else json.dumps(payload))

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    session.get.return_value.__aexit__.return_value = False
    return session


def install_session(mock_session_class, session):
    mock_session_class.return_value.__aenter__.return_value = session
    mock_session_class.return_value.__aexit__.return_value = False


SEARCH_RESPONSE = {
    "code": 200,
    "result": {
        "songs": [
            {
                "id": 186016,
                "name": "晴天",
                "artists": [{"name": "周杰伦"}],
                "album": {"name": "叶惠美", "picUrl": "http://p1.music.126.net/cover.jpg"}
            }
        ],
        "songCount": 1
    }
}


class TestNetEaseLookup:
    """元数据查找测试"""

    def setup_method(self):
        self.provider = NetEaseProvider(timeout=5)

    def test_supports_offset(self):
        assert self.provider.supports_offset

    @pytest.mark.asyncio
    async def test_lookup_success(self):
        """测试搜索结果转换为元数据"""
        session = build_session(payload=SEARCH_RESPONSE)
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            metadata = await self.provider.lookup("晴天", "周杰伦", offset=2)

        assert metadata.title == "晴天"
        assert metadata.artist == "周杰伦"
        assert metadata.cover_url == "http://p1.music.126.net/cover.jpg"
        assert metadata.track_link == "https://music.163.com/song?id=186016"

        params = session.get.call_args.kwargs["params"]
        assert params["s"] == "晴天 周杰伦"
        assert params["offset"] == 2
        assert params["limit"] == 1

    @pytest.mark.asyncio
    async def test_multiple_artists_joined(self):
        payload = {"code": 200, "result": {"songs": [{
            "id": 1, "name": "Song", "artists": [{"name": "A"}, {"name": "B"}], "album": {}
        }]}}
        session = build_session(payload=payload)
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            metadata = await self.provider.lookup("Song", "")

        assert metadata.artist == "A, B"
        assert metadata.cover_url is None

    @pytest.mark.asyncio
    async def test_no_songs(self):
        """测试没有搜索结果"""
        session = build_session(payload={"code": 200, "result": {"songCount": 0}})
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(NoTrackFoundError):
                await self.provider.lookup("不存在", "")

    @pytest.mark.asyncio
    async def test_rate_limit_code(self):
        session = build_session(payload={"code": -460, "msg": "Cheating"})
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(RateLimitedError):
                await self.provider.lookup("晴天", "")

    @pytest.mark.asyncio
    async def test_http_429(self):
        session = build_session(status=429, text="")
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(RateLimitedError):
                await self.provider.lookup("晴天", "")

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """测试其他状态码转换为普通提供者错误"""
        session = build_session(status=503, text="")
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(ProviderError) as exc_info:
                await self.provider.lookup("晴天", "")

        assert type(exc_info.value) is ProviderError
        assert "503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        session = build_session(text="<html>blocked</html>")
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(ProviderError):
                await self.provider.lookup("晴天", "")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """测试连接错误转换为 ConnectionUnavailableError"""
        session = build_session()
        session.get.side_effect = aiohttp.ClientConnectionError("Cannot connect")
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(ConnectionUnavailableError):
                await self.provider.lookup("晴天", "")

    @pytest.mark.asyncio
    async def test_timeout_is_not_connection_error(self):
        """测试超时归类为普通提供者错误"""
        session = build_session()
        session.get.side_effect = asyncio.TimeoutError()
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(ProviderError) as exc_info:
                await self.provider.lookup("晴天", "")

        assert not isinstance(exc_info.value, ConnectionUnavailableError)


class TestNetEaseLyrics:
    """同步歌词获取测试"""

    def setup_method(self):
        self.provider = NetEaseProvider(timeout=5)

    @pytest.mark.asyncio
    async def test_fetch_synced(self):
        payload = {"code": 200, "lrc": {"version": 1, "lyric": "[00:01.00]故事的小黄花\n"}}
        session = build_session(payload=payload)
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            lyrics = await self.provider.fetch_synced("https://music.163.com/song?id=186016")

        assert lyrics == "[00:01.00]故事的小黄花"
        assert session.get.call_args.kwargs["params"]["id"] == "186016"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"code": 200, "nolyric": True},
        {"code": 200, "uncollected": True},
        {"code": 200, "lrc": {"lyric": ""}},
    ])
    async def test_no_lyrics(self, payload):
        """测试没有歌词的各种响应"""
        session = build_session(payload=payload)
        with patch('aiohttp.ClientSession') as mock_session_class:
            install_session(mock_session_class, session)
            with pytest.raises(LyricsNotFoundError):
                await self.provider.fetch_synced("https://music.163.com/song?id=1")

    @pytest.mark.asyncio
    async def test_invalid_track_link(self):
        with pytest.raises(ProviderError):
            await self.provider.fetch_synced("https://example.com/song")

    def test_extract_song_id(self):
        """测试歌曲ID提取"""
        test_cases = [
            ("https://music.163.com/song?id=517567145", "517567145"),
            ("http://music.163.com/#/song?id=123456", "123456"),
            ("https://music.163.com/song?id=1&userid=2", "1"),
            ("186016", "186016"),
            ("invalid_url", None),
            ("", None),
        ]

        for url, expected_id in test_cases:
            assert NetEaseProvider.extract_song_id(url) == expected_id
