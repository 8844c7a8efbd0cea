"""
命令注册系统

把歌词搜索命令注册到机器人的命令树，并负责同步和清理。
"""

import logging
from typing import Optional
import discord
from discord import app_commands
from discord.ext import commands

from .lyrics_commands import LyricsSearchCommands


class CommandRegistry:
    """
    命令注册器

    管理 Slash 命令的注册和生命周期
    """

    def __init__(self, bot: commands.Bot, lyrics_commands: LyricsSearchCommands):
        """
        初始化命令注册器

        Args:
            bot: Discord机器人实例
            lyrics_commands: 歌词搜索命令处理器
        """
        self.bot = bot
        self.lyrics_commands = lyrics_commands
        self.logger = logging.getLogger("songsync.app_commands.registry")
        self._registered = False

    def register_lyrics_commands(self) -> None:
        """注册歌词相关的Slash命令"""
        if self._registered:
            return

        handler = self.lyrics_commands

        @self.bot.tree.command(name="歌词搜索", description="搜索同步歌词并保存为 .lrc 文件")
        @app_commands.describe(
            歌名="歌曲名称",
            歌手="歌手名称",
            来源="歌词提供者（默认使用配置中的提供者）",
            本地文件="本地曲库中的音频文件相对路径"
        )
        @app_commands.choices(来源=[
            app_commands.Choice(name="网易云音乐", value="netease"),
            app_commands.Choice(name="LRCLIB", value="lrclib"),
        ])
        async def lyrics_search(
            interaction: discord.Interaction,
            歌名: str = "",
            歌手: str = "",
            来源: Optional[app_commands.Choice[str]] = None,
            本地文件: Optional[str] = None
        ):
            """歌词搜索命令处理器"""
            await handler.execute(
                interaction,
                title=歌名,
                artist=歌手,
                provider=来源.value if 来源 else None,
                local_file=本地文件
            )

        self._registered = True
        self.logger.info("歌词命令已注册")

    async def sync_commands(self, guild: Optional[discord.Object] = None) -> int:
        """
        同步命令到 Discord

        Args:
            guild: 指定服务器，为 None 时全局同步

        Returns:
            同步的命令数量
        """
        try:
            synced = await self.bot.tree.sync(guild=guild)
            self.logger.info(f"已同步 {len(synced)} 个命令")
            return len(synced)
        except discord.HTTPException as e:
            self.logger.error(f"同步命令失败: {e}", exc_info=True)
            raise

    async def cleanup(self) -> None:
        await self.lyrics_commands.cleanup()
