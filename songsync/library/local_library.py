"""
本地曲库 - 将曲库中的音频文件解析为 LocalSong

文件名按 "歌手 - 歌名" 解析；没有分隔符时整个文件名视为歌名。
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from songsync.core.interfaces import LocalSong

AUDIO_EXTENSIONS = ('.mp3', '.m4a', '.flac', '.ogg', '.opus', '.wav')

# 按顺序查找：与音频同名的图片，然后是目录封面
COVER_EXTENSIONS = ('.jpg', '.jpeg', '.png')
COVER_NAMES = ('cover', 'folder', 'front')


def parse_file_name(stem: str) -> Tuple[str, Optional[str]]:
    """
    从文件名（不含扩展名）解析歌名和歌手

    Args:
        stem: 文件名

    Returns:
        (歌名, 歌手)
    """
    if " - " in stem:
        artist, title = stem.split(" - ", 1)
        if artist.strip() and title.strip():
            return title.strip(), artist.strip()
    return stem.strip(), None


def find_cover(audio_path: Path) -> Optional[Path]:
    """查找音频文件旁边的封面图片，没有时返回 None"""
    stems = (audio_path.stem,) + COVER_NAMES
    for stem in stems:
        for ext in COVER_EXTENSIONS:
            candidate = audio_path.with_name(stem + ext)
            if candidate.is_file():
                return candidate
    return None


class LocalLibrary:
    """本地曲库，只允许访问曲库目录内的音频文件"""

    def __init__(self, music_dir: Union[str, Path]):
        self.music_dir = Path(music_dir)
        self.logger = logging.getLogger("songsync.library.local_library")

    def resolve(self, relative_path: str) -> LocalSong:
        """
        解析曲库中的音频文件

        Args:
            relative_path: 相对曲库目录的路径

        Returns:
            本地歌曲

        Raises:
            ValueError: 路径不在曲库内或不是支持的音频格式
            FileNotFoundError: 文件不存在
        """
        root = self.music_dir.resolve()
        path = (root / relative_path).resolve()

        if root not in path.parents:
            raise ValueError(f"路径不在曲库目录内: {relative_path}")
        if path.suffix.lower() not in AUDIO_EXTENSIONS:
            raise ValueError(f"不支持的音频格式: {path.suffix or '无扩展名'}")
        if not path.is_file():
            raise FileNotFoundError(f"文件不存在: {relative_path}")

        title, artist = parse_file_name(path.stem)
        self.logger.debug(f"解析本地歌曲: {path} -> {title} / {artist}")
        cover = find_cover(path)
        return LocalSong(
            title=title,
            artist=artist,
            file_path=str(path),
            cover_uri=cover.as_uri() if cover else None
        )
