"""
核心接口定义 - 定义会话与外部协作者之间的抽象接口

会话只依赖这些接口，具体的网络提供者和文件写入实现可以自由替换。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class Query:
    """
    搜索查询数据类

    提交后不可变；"再试一次"时通过 with_next_offset() 生成新的查询。
    """
    title: str
    artist: str
    offset: int = 0

    def __post_init__(self):
        if self.offset < 0:
            raise ValueError(f"offset 不能为负数: {self.offset}")

    @property
    def is_empty(self) -> bool:
        """歌名和歌手都为空时视为空查询"""
        return not self.title.strip() and not self.artist.strip()

    def with_next_offset(self) -> "Query":
        """返回偏移量加一的新查询"""
        return replace(self, offset=self.offset + 1)

    @classmethod
    def from_local_song(cls, song: "LocalSong") -> "Query":
        """根据本地歌曲构建查询"""
        return cls(title=song.title or "", artist=song.artist or "")

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "artist": self.artist, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Query":
        return cls(
            title=data.get("title", ""),
            artist=data.get("artist", ""),
            offset=int(data.get("offset", 0)),
        )


@dataclass(frozen=True)
class SongMetadata:
    """
    歌曲元数据

    由元数据提供者返回，track_link 用于获取歌词。
    """
    title: Optional[str] = None
    artist: Optional[str] = None
    cover_url: Optional[str] = None
    track_link: Optional[str] = None

    def get_display_name(self) -> str:
        """
        获取用于显示的歌曲名称

        Returns:
            格式化的歌曲显示名称
        """
        return f"{self.title or '未知歌曲'} - {self.artist or '未知艺术家'}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "artist": self.artist,
            "cover_url": self.cover_url,
            "track_link": self.track_link,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SongMetadata":
        return cls(
            title=data.get("title"),
            artist=data.get("artist"),
            cover_url=data.get("cover_url"),
            track_link=data.get("track_link"),
        )


@dataclass(frozen=True)
class LocalSong:
    """本地曲库中的歌曲"""
    title: Optional[str]
    artist: Optional[str]
    file_path: Optional[str] = None
    cover_uri: Optional[str] = None

    def get_lrc_path(self) -> Optional[Path]:
        """与音频文件同名的 .lrc 路径"""
        if not self.file_path:
            return None
        return Path(self.file_path).with_suffix(".lrc")


class IMetadataProvider(ABC):
    """元数据提供者接口 - 根据歌名/歌手查找最佳匹配"""

    # 是否支持通过 offset 获取其他候选结果
    supports_offset: bool = True

    @abstractmethod
    async def lookup(self, title: str, artist: str, offset: int = 0) -> SongMetadata:
        """
        查找歌曲元数据

        Raises:
            ConnectionUnavailableError: 无法连接
            NoTrackFoundError: 没有匹配结果
            RateLimitedError: 请求频率受限
            ProviderError: 其他错误
        """
        pass


class ILyricsProvider(ABC):
    """歌词提供者接口 - 根据曲目链接获取同步歌词"""

    @abstractmethod
    async def fetch_synced(self, track_link: str) -> str:
        """
        获取同步歌词文本

        Raises:
            LyricsNotFoundError: 没有歌词
            ProviderError: 其他错误
        """
        pass


class IPersistence(ABC):
    """持久化接口 - 将字节写入调用方指定的位置"""

    @abstractmethod
    def write(self, path: Path, data: bytes) -> None:
        """写入数据"""
        pass
