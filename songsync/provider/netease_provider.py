"""
网易云音乐提供者 - 通过网易云音乐公开API查找歌曲和同步歌词

搜索接口支持 offset 参数，因此可以「再试一次」获取下一个候选结果。
"""

import re
from typing import Optional, Dict, Any

from songsync.core.exceptions import (
    ProviderError,
    NoTrackFoundError,
    RateLimitedError,
    LyricsNotFoundError,
)
from songsync.core.interfaces import SongMetadata
from .base import BaseLyricsSourceProvider


class NetEaseProvider(BaseLyricsSourceProvider):
    """
    网易云音乐提供者

    元数据来自搜索接口，歌词来自歌词接口；曲目链接为歌曲页面地址，
    从中可以提取歌曲ID。
    """

    supports_offset = True

    # 网易云返回的"操作频繁"代码
    RATE_LIMIT_CODES = (405, -460)

    def __init__(self, timeout: float = 10, user_agent: Optional[str] = None):
        super().__init__("NetEase", timeout, user_agent)

        # API端点
        self.search_api = "https://music.163.com/api/search/get"
        self.lyrics_api = "https://music.163.com/api/song/lyric"

        # 网易API请求头
        self.api_headers = {
            "Referer": "https://music.163.com",
        }

    async def _lookup_impl(self, title: str, artist: str, offset: int) -> SongMetadata:
        query = self._build_search_query(title, artist)
        params = {
            's': query,
            'type': 1,  # 1 = 歌曲
            'limit': 1,
            'offset': offset,
        }

        data = await self._get_json(self.search_api, params=params, headers=self.api_headers)
        self._check_api_code(data)

        songs = (data.get('result') or {}).get('songs') or []
        if not songs:
            raise NoTrackFoundError(f"未找到匹配的歌曲: {query} (offset={offset})", self.name)

        return self._convert_to_metadata(songs[0])

    async def _fetch_synced_impl(self, track_link: str) -> str:
        song_id = self.extract_song_id(track_link)
        if not song_id:
            raise ProviderError(f"无法从链接提取歌曲ID: {track_link}", self.name)

        params = {'id': song_id, 'lv': 1}
        data = await self._get_json(
            self.lyrics_api,
            params=params,
            headers=self.api_headers,
            not_found_error=LyricsNotFoundError
        )
        self._check_api_code(data)

        if data.get('nolyric') or data.get('uncollected'):
            raise LyricsNotFoundError(f"歌曲没有歌词: {song_id}", self.name)

        lyric = ((data.get('lrc') or {}).get('lyric') or '').strip()
        if not lyric:
            raise LyricsNotFoundError(f"歌曲没有同步歌词: {song_id}", self.name)

        return lyric

    def _check_api_code(self, data: Dict[str, Any]) -> None:
        """检查网易云响应中的 code 字段"""
        if not isinstance(data, dict):
            raise ProviderError("网易云响应格式异常", self.name)

        code = data.get('code', 200)
        if code in self.RATE_LIMIT_CODES:
            raise RateLimitedError(f"网易云请求过于频繁 (code={code})", self.name)
        if code != 200:
            message = data.get('msg') or data.get('message')
            detail = f": {message}" if message else ""
            raise ProviderError(f"网易云返回错误代码 {code}{detail}", self.name)

    def _convert_to_metadata(self, song: Dict[str, Any]) -> SongMetadata:
        """将搜索结果转换为元数据"""
        song_id = song.get('id')
        if song_id is None:
            raise ProviderError("搜索结果缺少歌曲ID", self.name)

        artists = song.get('artists') or []
        artist = ', '.join(a.get('name', '') for a in artists if a.get('name')) or None

        album = song.get('album') or {}

        return SongMetadata(
            title=song.get('name'),
            artist=artist,
            cover_url=album.get('picUrl'),
            track_link=f"https://music.163.com/song?id={song_id}",
        )

    def _build_search_query(self, title: str, artist: str) -> str:
        query = f"{title.strip()} {artist.strip()}"
        return re.sub(r'\s+', ' ', query).strip()

    @staticmethod
    def extract_song_id(track_link: str) -> Optional[str]:
        """
        从网易云音乐链接中提取歌曲ID

        Args:
            track_link: 歌曲页面链接

        Returns:
            歌曲ID，提取失败时返回None
        """
        if not track_link:
            return None
        match = re.search(r'[?&]id=(\d+)', track_link)
        if match:
            return match.group(1)
        if track_link.isdigit():
            return track_link
        return None
