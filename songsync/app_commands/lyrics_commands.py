"""
歌词搜索命令

处理 /歌词搜索 命令：创建搜索会话和对应的交互视图，
然后提交查询（或从本地文件开始搜索）。
"""

import logging
from typing import Optional, Set
import discord

from songsync.core.interfaces import Query, LocalSong
from songsync.library import LocalLibrary
from songsync.lyrics.lrc_writer import LrcFileWriter
from songsync.provider.provider_factory import ProviderFactory
from songsync.session import LyricsSearchSession
from songsync.utils.config_manager import ConfigManager
from .core.base_command import BaseSlashCommand
from .ui.session_view import SearchSessionView

PROVIDER_DISPLAY_NAMES = {
    'netease': "网易云音乐",
    'lrclib': "LRCLIB",
}


class LyricsSearchCommands(BaseSlashCommand):
    """
    歌词搜索命令处理器

    每次命令创建一个独立的搜索会话，视图超时或机器人关闭时释放。
    """

    def __init__(
        self,
        config: ConfigManager,
        provider_factory: ProviderFactory,
        writer: LrcFileWriter,
        library: Optional[LocalLibrary] = None
    ):
        """
        初始化歌词搜索命令

        Args:
            config: 配置管理器
            provider_factory: 提供者工厂
            writer: LRC 文件写入器
            library: 本地曲库，未配置时为 None
        """
        super().__init__(config)
        self.provider_factory = provider_factory
        self.writer = writer
        self.library = library
        self.view_timeout = float(config.get('lyrics.view_timeout', 600))

        self._active_views: Set[SearchSessionView] = set()

    async def execute(self, interaction: discord.Interaction, **kwargs) -> None:
        """
        执行歌词搜索命令

        Args:
            interaction: Discord交互对象
            **kwargs: title, artist, provider, local_file
        """
        title = kwargs.get('title') or ""
        artist = kwargs.get('artist') or ""
        provider_name = kwargs.get('provider')
        local_file = kwargs.get('local_file')

        try:
            if not await self.check_prerequisites(interaction):
                return

            if provider_name:
                provider = self.provider_factory.get_provider_by_name(provider_name)
                if provider is None:
                    await self.send_error_response(interaction, f"不支持的歌词提供者: {provider_name}")
                    return
            else:
                provider_name = self.provider_factory.default_name
                provider = self.provider_factory.get_default_provider()

            local_song: Optional[LocalSong] = None
            if local_file:
                if self.library is None:
                    await self.send_error_response(interaction, "未配置本地曲库目录")
                    return
                try:
                    local_song = self.library.resolve(local_file)
                except (ValueError, FileNotFoundError) as e:
                    await self.send_error_response(interaction, str(e))
                    return

            self.logger.info(
                f"用户 {interaction.user.display_name} 搜索歌词 - "
                f"歌名: '{title}', 歌手: '{artist}', 提供者: {provider_name}"
                + (f", 本地文件: {local_song.file_path}" if local_song else "")
            )

            if local_song is not None:
                seed = Query(
                    title=title or local_song.title or "",
                    artist=artist or local_song.artist or ""
                )
                session = LyricsSearchSession(provider, provider, seed=seed)
            else:
                session = LyricsSearchSession(provider, provider)

            view = self.create_view(session, interaction, provider_name, local_song)
            await interaction.response.send_message(embed=view.build_embed(), view=view)

            if local_song is not None:
                await session.start()
            else:
                await session.submit(Query(title=title, artist=artist))

        except Exception as e:
            await self.handle_command_error(interaction, e)

    def create_view(
        self,
        session: LyricsSearchSession,
        interaction: discord.Interaction,
        provider_name: str,
        local_song: Optional[LocalSong] = None
    ) -> SearchSessionView:
        """创建并跟踪会话视图"""
        # 清理已超时的视图
        self._active_views = {v for v in self._active_views if not v.is_finished()}

        view = SearchSessionView(
            session=session,
            user=interaction.user,
            origin_interaction=interaction,
            writer=self.writer,
            provider_name=PROVIDER_DISPLAY_NAMES.get(provider_name, provider_name),
            local_song=local_song,
            timeout=self.view_timeout
        )
        self._active_views.add(view)
        return view

    @property
    def active_view_count(self) -> int:
        return len(self._active_views)

    async def cleanup(self) -> None:
        """关闭所有活跃的搜索会话"""
        views = list(self._active_views)
        self._active_views.clear()
        for view in views:
            view.stop()
            await view.session.close()
        if views:
            self.logger.info(f"已关闭 {len(views)} 个搜索会话")
