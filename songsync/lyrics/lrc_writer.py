"""
LRC 文件写入 - 生成 .lrc 内容并保存到本地

目标位置规则：
- 本地歌曲：与音频文件同目录同名的 .lrc
- 其他歌曲：<download_dir>/SongSync/<歌名> - <歌手>.lrc
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from songsync.core.interfaces import IPersistence, SongMetadata, LocalSong

LRC_SUBDIR = "SongSync"
LRC_ENCODING = "utf-8"


def build_lrc_payload(metadata: SongMetadata, lyrics: str, generator_tag: str) -> str:
    """
    生成带标签头的 LRC 文本

    Args:
        metadata: 歌曲元数据
        lyrics: 原始同步歌词
        generator_tag: [by:] 标签内容

    Returns:
        [ti:]、[ar:]、[by:] 三行标签后接原始歌词
    """
    return (
        f"[ti:{metadata.title or ''}]\n"
        f"[ar:{metadata.artist or ''}]\n"
        f"[by:{generator_tag}]\n"
        f"{lyrics}"
    )


def _safe_file_name(name: str) -> str:
    """替换文件名中的路径分隔符和非法字符"""
    cleaned = re.sub(r'[\\/:*?"<>|\x00-\x1f]', '_', name).strip()
    return cleaned or "unknown"


def resolve_lrc_path(
    metadata: SongMetadata,
    download_dir: Union[str, Path],
    local_song: Optional[LocalSong] = None
) -> Path:
    """
    确定 .lrc 文件的保存路径

    Args:
        metadata: 歌曲元数据
        download_dir: 非本地歌曲的保存根目录
        local_song: 对应的本地歌曲（如果有）

    Returns:
        目标文件路径
    """
    if local_song is not None:
        local_path = local_song.get_lrc_path()
        if local_path is not None:
            return local_path

    file_name = _safe_file_name(f"{metadata.title or 'unknown'} - {metadata.artist or 'unknown'}")
    return Path(download_dir) / LRC_SUBDIR / f"{file_name}.lrc"


class LrcFileWriter(IPersistence):
    """
    LRC 文件写入器

    负责目标路径解析和实际写入；已存在的同名文件会被覆盖。
    """

    def __init__(self, download_dir: Union[str, Path] = "./downloads", generator_tag: str = "Generated using SongSync"):
        """
        初始化写入器

        Args:
            download_dir: 非本地歌曲的保存根目录
            generator_tag: [by:] 标签内容
        """
        self.logger = logging.getLogger("songsync.lyrics.lrc_writer")
        self.download_dir = Path(download_dir)
        self.generator_tag = generator_tag

    def write(self, path: Path, data: bytes) -> None:
        """
        写入字节数据，自动创建父目录

        Args:
            path: 目标路径
            data: 文件内容
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        self.logger.debug(f"写入文件: {path} ({len(data)} 字节)")

    def save(self, metadata: SongMetadata, lyrics: str, local_song: Optional[LocalSong] = None) -> Path:
        """
        生成并保存 .lrc 文件

        Args:
            metadata: 歌曲元数据
            lyrics: 同步歌词
            local_song: 对应的本地歌曲（如果有）

        Returns:
            实际写入的路径

        Raises:
            OSError: 写入失败
        """
        path = resolve_lrc_path(metadata, self.download_dir, local_song)
        payload = build_lrc_payload(metadata, lyrics, self.generator_tag)
        self.write(path, payload.encode(LRC_ENCODING))
        self.logger.info(f"LRC 文件已保存: {path}")
        return path
