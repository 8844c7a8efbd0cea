"""
Slash Commands 模块

提供 /歌词搜索 命令及其交互界面
"""

from .lyrics_commands import LyricsSearchCommands
from .registry import CommandRegistry

__all__ = [
    'LyricsSearchCommands',
    'CommandRegistry'
]
