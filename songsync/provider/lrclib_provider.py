"""
LRCLIB 提供者 - 通过 LRCLIB 开放歌词库查找歌曲和同步歌词

LRCLIB 对同一查询只返回一个规范答案，因此不支持偏移量重试。
"""

from typing import Optional, List, Dict, Any

from songsync.core.exceptions import ProviderError, NoTrackFoundError, LyricsNotFoundError
from songsync.core.interfaces import SongMetadata
from .base import BaseLyricsSourceProvider


class LrcLibProvider(BaseLyricsSourceProvider):
    """
    LRCLIB 提供者

    元数据来自 /api/search，曲目链接指向 /api/get/<id>，
    获取歌词时直接读取该记录的 syncedLyrics 字段。
    """

    supports_offset = False

    def __init__(
        self,
        base_url: str = "https://lrclib.net",
        timeout: float = 10,
        user_agent: Optional[str] = None
    ):
        super().__init__("LRCLIB", timeout, user_agent)
        self.base_url = base_url.rstrip("/")

    async def _lookup_impl(self, title: str, artist: str, offset: int) -> SongMetadata:
        if offset:
            self.logger.debug(f"LRCLIB 不支持偏移量，忽略 offset={offset}")

        params = {"track_name": title.strip()}
        if artist.strip():
            params["artist_name"] = artist.strip()

        items = await self._get_json(f"{self.base_url}/api/search", params=params)
        if not isinstance(items, list):
            raise ProviderError("LRCLIB 搜索响应格式异常", self.name)

        best = self._pick_best(items)
        if best is None:
            raise NoTrackFoundError(f"LRCLIB 未找到匹配的歌曲: {title} - {artist}", self.name)

        return SongMetadata(
            title=best.get("trackName") or best.get("name"),
            artist=best.get("artistName"),
            cover_url=None,
            track_link=f"{self.base_url}/api/get/{best['id']}",
        )

    async def _fetch_synced_impl(self, track_link: str) -> str:
        data = await self._get_json(track_link, not_found_error=LyricsNotFoundError)
        if not isinstance(data, dict):
            raise ProviderError("LRCLIB 歌词响应格式异常", self.name)

        synced = (data.get("syncedLyrics") or "").strip()
        if not synced:
            if data.get("instrumental"):
                raise LyricsNotFoundError("纯音乐，没有歌词", self.name)
            raise LyricsNotFoundError(f"LRCLIB 记录没有同步歌词: {track_link}", self.name)
        return synced

    @staticmethod
    def _pick_best(items: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """优先选择带同步歌词的记录，否则返回第一条"""
        candidates = [item for item in items if isinstance(item, dict) and item.get("id") is not None]
        if not candidates:
            return None
        for item in candidates:
            if item.get("syncedLyrics"):
                return item
        return candidates[0]
