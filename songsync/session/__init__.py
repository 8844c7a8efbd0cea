"""
搜索会话模块 - 歌词搜索流程的状态机

提供查询提交、元数据查找、同步歌词获取以及状态通知功能。
"""

from .states import SessionState, SessionStatus, ErrorKind, LyricsState, LyricsStatus
from .search_session import (
    LyricsSearchSession,
    STATE_CHANGED,
    LYRICS_CHANGED,
    classify_metadata_error,
    classify_lyrics_error,
)

__all__ = [
    'SessionState',
    'SessionStatus',
    'ErrorKind',
    'LyricsState',
    'LyricsStatus',
    'LyricsSearchSession',
    'STATE_CHANGED',
    'LYRICS_CHANGED',
    'classify_metadata_error',
    'classify_lyrics_error',
]
