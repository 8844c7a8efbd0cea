"""
Slash Commands 核心组件
"""

from .base_command import BaseSlashCommand

__all__ = ['BaseSlashCommand']
