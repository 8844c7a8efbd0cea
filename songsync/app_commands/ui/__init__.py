"""
UI组件模块
"""

from .embed_builder import EmbedBuilder
from .session_view import SearchSessionView, QueryEditModal

__all__ = [
    'EmbedBuilder',
    'SearchSessionView',
    'QueryEditModal'
]
