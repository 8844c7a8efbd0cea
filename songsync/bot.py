"""SongSync 歌词机器人主实现"""
import logging
from typing import Optional
import discord
from discord.ext import commands

from songsync.app_commands.lyrics_commands import LyricsSearchCommands
from songsync.app_commands.registry import CommandRegistry
from songsync.library import LocalLibrary
from songsync.lyrics.lrc_writer import LrcFileWriter
from songsync.provider.provider_factory import ProviderFactory
from songsync.utils.config_manager import ConfigManager


class SongSyncBot:
    """
    SongSync 歌词机器人主实现类。

    通过 /歌词搜索 查找歌曲的同步歌词，预览后保存为 .lrc 文件。
    """

    def __init__(self, config: ConfigManager):
        """
        Initialize the Discord bot and register slash commands.

        Args:
            config: Configuration manager
        """
        self.logger = logging.getLogger("songsync.bot")
        self.config = config

        intents = discord.Intents.default()

        self.bot = commands.Bot(
            command_prefix=self.config.get_command_prefix(),
            intents=intents,
            help_command=None
        )

        self._init_core_modules()

        self.registry = CommandRegistry(self.bot, self.lyrics_commands)
        self.registry.register_lyrics_commands()

        self._commands_synced = False
        self.bot.add_listener(self._on_ready, 'on_ready')

        self.logger.info("🎵 歌词机器人初始化成功")

    def _init_core_modules(self) -> None:
        """初始化提供者、写入器和命令处理器"""
        self.provider_factory = ProviderFactory(self.config)
        self.writer = LrcFileWriter(
            download_dir=self.config.get_download_dir(),
            generator_tag=self.config.get_generator_tag()
        )

        music_dir = self.config.get_music_dir()
        self.library = LocalLibrary(music_dir) if music_dir else None

        self.lyrics_commands = LyricsSearchCommands(
            self.config,
            self.provider_factory,
            self.writer,
            self.library
        )

        self.logger.debug(
            f"核心模块初始化完成 - 默认提供者: {self.provider_factory.default_name}, "
            f"本地曲库: {music_dir or '未配置'}"
        )

    async def _on_ready(self) -> None:
        """机器人就绪时同步 Slash Commands"""
        self.logger.info(f"🤖 机器人已就绪: {self.bot.user}")

        # on_ready 在重连时会再次触发
        if self._commands_synced:
            return

        try:
            await self.registry.sync_commands()
            self._commands_synced = True
            self.logger.info("✅ Slash Commands 已同步到 Discord")
        except Exception as e:
            self.logger.error(f"机器人就绪初始化失败: {e}", exc_info=True)

    async def start(self, token: str) -> None:
        """
        Start the Discord bot.

        Args:
            token: Discord bot token
        """
        try:
            self.logger.info("🚀 启动歌词机器人...")
            await self.bot.start(token)
        except Exception as e:
            self.logger.error(f"启动机器人失败: {e}", exc_info=True)
            raise

    async def close(self) -> None:
        """关闭 Discord 机器人并清理资源。"""
        try:
            self.logger.info("🛑 正在关闭歌词机器人...")
            await self.registry.cleanup()
            await self.bot.close()
            self.logger.info("✅ 歌词机器人关闭成功")
        except Exception as e:
            self.logger.error(f"关闭过程中发生错误: {e}", exc_info=True)

    def run(self, token: str) -> None:
        """
        运行 Discord 机器人（阻塞式）。

        Args:
            token: Discord 机器人令牌
        """
        try:
            self.bot.run(token)
        except KeyboardInterrupt:
            self.logger.info("用户停止了机器人")
        except Exception as e:
            self.logger.error(f"机器人崩溃: {e}", exc_info=True)
            raise

    def is_ready(self) -> bool:
        return self.bot.is_ready()

    @property
    def user(self) -> Optional[discord.ClientUser]:
        """获取机器人用户。"""
        return self.bot.user
