"""
搜索会话视图 - 将搜索会话的状态渲染为带按钮的消息

按钮：
- 再试一次：获取下一个候选结果（提供者不支持时禁用）
- 编辑：打开编辑窗口修改歌名/歌手后重新搜索
- 保存 LRC：写入 .lrc 文件并作为附件发送
- 复制歌词：私密发送歌词文本
- 确定：关闭错误提示
"""

import asyncio
import io
import logging
from typing import Optional
import discord

from songsync.core.interfaces import Query, LocalSong
from songsync.lyrics.lrc_writer import LrcFileWriter
from songsync.session import (
    LyricsSearchSession,
    SessionStatus,
    LyricsStatus,
    STATE_CHANGED,
    LYRICS_CHANGED,
)
from .embed_builder import EmbedBuilder

# Discord 消息内容上限为 2000 字符
MESSAGE_TEXT_LIMIT = 1900


class QueryEditModal(discord.ui.Modal):
    """编辑查询窗口"""

    def __init__(self, session_view: "SearchSessionView", title_default: str = "", artist_default: str = ""):
        super().__init__(title="编辑查询")
        self.session_view = session_view

        self.song_title = discord.ui.TextInput(
            label="歌名",
            default=title_default or None,
            required=False,
            max_length=200
        )
        self.song_artist = discord.ui.TextInput(
            label="歌手",
            default=artist_default or None,
            required=False,
            max_length=200
        )
        self.add_item(self.song_title)
        self.add_item(self.song_artist)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        query = Query(title=self.song_title.value or "", artist=self.song_artist.value or "")
        await self.session_view.resubmit(query, interaction)


class SearchSessionView(discord.ui.View):
    """
    搜索会话视图

    订阅会话事件，每次状态或歌词变化时重新渲染原始响应。
    只有发起搜索的用户可以与此界面交互。
    """

    def __init__(
        self,
        session: LyricsSearchSession,
        user: discord.abc.User,
        origin_interaction: discord.Interaction,
        writer: LrcFileWriter,
        provider_name: str,
        local_song: Optional[LocalSong] = None,
        timeout: float = 600.0
    ):
        """
        初始化搜索会话视图

        Args:
            session: 搜索会话
            user: 发起搜索的用户
            origin_interaction: 斜杠命令的原始交互，用于编辑响应
            writer: LRC 文件写入器
            provider_name: 提供者显示名称
            local_song: 对应的本地歌曲
            timeout: 超时时间（秒）
        """
        super().__init__(timeout=timeout)
        self.session = session
        self.user = user
        self.origin_interaction = origin_interaction
        self.writer = writer
        self.provider_name = provider_name
        self.local_song = local_song
        self.logger = logging.getLogger("songsync.ui.search_session_view")

        # 串行化渲染，保证最后一次编辑反映最新状态
        self._render_lock = asyncio.Lock()

        session.add_event_handler(STATE_CHANGED, self._on_session_event)
        session.add_event_handler(LYRICS_CHANGED, self._on_session_event)

        self.refresh_buttons()

    def refresh_buttons(self) -> None:
        """根据会话状态更新按钮可用性"""
        state = self.session.state
        lyrics = self.session.lyrics
        has_lyrics = lyrics is not None and lyrics.status == LyricsStatus.PRESENT

        self.retry_button.disabled = not self.session.can_retry()
        self.edit_button.disabled = state.status == SessionStatus.PENDING
        self.save_button.disabled = not has_lyrics
        self.copy_button.disabled = not has_lyrics
        self.dismiss_button.disabled = not state.is_error

    def build_embed(self) -> discord.Embed:
        return EmbedBuilder.create_session_embed(
            self.session.state,
            self.session.lyrics,
            self.provider_name,
            self.local_song
        )

    async def render(self) -> None:
        """用最新状态编辑原始响应"""
        async with self._render_lock:
            self.refresh_buttons()
            try:
                await self.origin_interaction.edit_original_response(embed=self.build_embed(), view=self)
            except discord.HTTPException as e:
                self.logger.warning(f"更新搜索消息失败: {e}")

    async def _on_session_event(self, session: LyricsSearchSession, **kwargs) -> None:
        await self.render()

    async def resubmit(self, query: Query, interaction: Optional[discord.Interaction] = None) -> bool:
        """
        丢弃当前结果并提交新的查询

        Args:
            query: 新的查询
            interaction: 编辑窗口的交互，提交被拒绝时用于私密提示

        Returns:
            查询被接受时返回 True
        """
        if self.session.can_edit():
            await self.session.edit()
        if await self.session.submit(query):
            return True

        self.logger.info(f"会话处于 {self.session.state.status.value} 状态，新的查询被拒绝")
        if interaction is not None:
            await interaction.followup.send("❌ 当前状态无法提交新的查询，请稍后再试", ephemeral=True)
        return False

    async def _check_user(self, interaction: discord.Interaction) -> bool:
        """验证用户权限"""
        if interaction.user.id != self.user.id:
            await interaction.response.send_message(
                f"❌ 只有 {self.user.display_name} 可以操作此搜索结果",
                ephemeral=True
            )
            return False
        return True

    @discord.ui.button(label="🔄 再试一次", style=discord.ButtonStyle.secondary)
    async def retry_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """再试一次按钮回调"""
        if not await self._check_user(interaction):
            return
        await interaction.response.defer()
        if not await self.session.retry():
            await interaction.followup.send("❌ 当前无法获取其他候选结果", ephemeral=True)

    @discord.ui.button(label="✏️ 编辑", style=discord.ButtonStyle.secondary)
    async def edit_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """编辑按钮回调"""
        if not await self._check_user(interaction):
            return
        query = self.session.query
        modal = QueryEditModal(
            self,
            title_default=query.title if query else "",
            artist_default=query.artist if query else ""
        )
        await interaction.response.send_modal(modal)

    @discord.ui.button(label="💾 保存 LRC", style=discord.ButtonStyle.green)
    async def save_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """保存按钮回调"""
        if not await self._check_user(interaction):
            return

        state = self.session.state
        lyrics = self.session.lyrics
        if state.status != SessionStatus.SUCCESS or lyrics is None or lyrics.status != LyricsStatus.PRESENT:
            await interaction.response.send_message("❌ 没有可保存的歌词", ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            path = self.writer.save(state.metadata, lyrics.text, self.local_song)
        except OSError as e:
            self.logger.error(f"保存 LRC 文件失败: {e}", exc_info=True)
            await interaction.followup.send(f"❌ 保存失败: {e}", ephemeral=True)
            return

        await interaction.followup.send(
            content=f"✅ 文件已保存到 `{path}`",
            file=discord.File(str(path), filename=path.name),
            ephemeral=True
        )

    @discord.ui.button(label="📋 复制歌词", style=discord.ButtonStyle.secondary)
    async def copy_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """复制歌词按钮回调"""
        if not await self._check_user(interaction):
            return

        lyrics = self.session.lyrics
        if lyrics is None or lyrics.status != LyricsStatus.PRESENT:
            await interaction.response.send_message("❌ 没有可复制的歌词", ephemeral=True)
            return

        # 含代码块标记的歌词无法原样放进代码块，改为附件
        if len(lyrics.text) <= MESSAGE_TEXT_LIMIT and "```" not in lyrics.text:
            await interaction.response.send_message(f"```\n{lyrics.text}\n```", ephemeral=True)
        else:
            data = io.BytesIO(lyrics.text.encode("utf-8"))
            await interaction.response.send_message(
                "歌词已作为附件发送",
                file=discord.File(data, filename="lyrics.txt"),
                ephemeral=True
            )

    @discord.ui.button(label="确定", style=discord.ButtonStyle.primary)
    async def dismiss_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """关闭错误提示"""
        if not await self._check_user(interaction):
            return
        await interaction.response.defer()
        await self.session.dismiss_error()

    async def on_timeout(self) -> None:
        """超时后禁用所有按钮并释放会话"""
        self.logger.debug("搜索会话视图超时")
        for item in self.children:
            item.disabled = True
        await self.session.close()
        try:
            await self.origin_interaction.edit_original_response(view=self)
        except discord.HTTPException as e:
            self.logger.debug(f"超时后更新消息失败: {e}")
