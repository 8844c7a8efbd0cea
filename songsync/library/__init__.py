"""
本地曲库模块
"""

from .local_library import LocalLibrary, parse_file_name, AUDIO_EXTENSIONS

__all__ = [
    'LocalLibrary',
    'parse_file_name',
    'AUDIO_EXTENSIONS'
]
