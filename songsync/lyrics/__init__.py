"""
歌词模块 - LRC 内容生成与文件保存
"""

from .lrc_writer import LrcFileWriter, build_lrc_payload, resolve_lrc_path

__all__ = [
    'LrcFileWriter',
    'build_lrc_payload',
    'resolve_lrc_path'
]
