"""
嵌入消息构建器

根据搜索会话的当前状态生成对应的嵌入消息。
"""

from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse
import discord

from songsync.core.interfaces import LocalSong
from songsync.session import SessionState, SessionStatus, ErrorKind, LyricsState, LyricsStatus

# 嵌入字段值上限为 1024 字符，预览留出代码块标记的空间
LYRICS_PREVIEW_LIMIT = 900


class EmbedBuilder:
    """
    嵌入消息构建器

    提供统一的嵌入消息构建方法，确保UI一致性
    """

    # 主题色彩
    COLORS = {
        'success': discord.Color.green(),
        'error': discord.Color.red(),
        'warning': discord.Color.orange(),
        'info': discord.Color.blue(),
        'neutral': discord.Color.light_grey()
    }

    @classmethod
    def create_error_embed(cls, title: str, description: str) -> discord.Embed:
        return discord.Embed(
            title=f"❌ {title}",
            description=description,
            color=cls.COLORS['error']
        )

    @classmethod
    def create_session_embed(
        cls,
        state: SessionState,
        lyrics: Optional[LyricsState],
        provider_name: str,
        local_song: Optional[LocalSong] = None
    ) -> discord.Embed:
        """
        根据会话状态创建嵌入消息

        Args:
            state: 会话状态
            lyrics: 歌词状态（仅 SUCCESS 时存在）
            provider_name: 当前提供者名称
            local_song: 对应的本地歌曲

        Returns:
            Discord嵌入消息
        """
        if state.status == SessionStatus.NOT_SUBMITTED:
            embed = discord.Embed(
                title="✏️ 编辑查询",
                description="点击「编辑」输入歌名和歌手",
                color=cls.COLORS['neutral']
            )
        elif state.status == SessionStatus.PENDING:
            query = state.query
            description = f"正在 {provider_name} 中搜索: **{query.title} - {query.artist}**"
            if query.offset:
                description += f"\n第 {query.offset + 1} 个候选结果"
            embed = discord.Embed(
                title="🔍 搜索中...",
                description=description,
                color=cls.COLORS['info']
            )
        elif state.status == SessionStatus.SUCCESS:
            embed = cls._create_result_embed(state, lyrics, provider_name)
        elif state.status == SessionStatus.NO_CONNECTION:
            embed = cls.create_error_embed("无法连接", "无法连接到服务器，请检查网络连接后重试")
        else:
            embed = cls.create_error_embed("错误", cls.describe_failure(state))

        if local_song is not None:
            value = f"{local_song.title or '未知歌曲'} - {local_song.artist or '未知艺术家'}"
            cover = local_song.cover_uri
            if cover and cover.startswith(("http://", "https://")):
                if not embed.thumbnail.url:
                    embed.set_thumbnail(url=cover)
            elif cover:
                # 本地图片无法作为缩略图显示
                value += f"\n🖼️ 封面: {PurePosixPath(unquote(urlparse(cover).path)).name}"
            embed.add_field(name="📁 本地歌曲", value=value, inline=False)

        return embed

    @classmethod
    def _create_result_embed(
        cls,
        state: SessionState,
        lyrics: Optional[LyricsState],
        provider_name: str
    ) -> discord.Embed:
        metadata = state.metadata
        embed = discord.Embed(
            title=f"☁️ {metadata.title or '未知歌曲'}",
            description=f"歌手: **{metadata.artist or '未知艺术家'}**",
            url=metadata.track_link if metadata.track_link and metadata.track_link.startswith("http") else None,
            color=cls.COLORS['success']
        )
        if metadata.cover_url:
            embed.set_thumbnail(url=metadata.cover_url)

        embed.add_field(name="歌词", value=cls.describe_lyrics(lyrics), inline=False)
        embed.set_footer(text=f"来源: {provider_name}")
        return embed

    @staticmethod
    def describe_failure(state: SessionState) -> str:
        """
        生成失败原因的用户提示

        Args:
            state: FAILED 状态

        Returns:
            提示文本
        """
        if state.error_kind == ErrorKind.NO_TRACK_FOUND:
            return "未找到结果"
        if state.error_kind == ErrorKind.EMPTY_QUERY:
            return "无效的查询：歌名和歌手不能同时为空"
        if state.error_kind == ErrorKind.RATE_LIMITED:
            return "已达到提供者的请求频率上限\n请稍后再试\n或在配置中切换到其他歌词提供者"
        return state.error_details or "未知错误"

    @staticmethod
    def describe_lyrics(lyrics: Optional[LyricsState]) -> str:
        if lyrics is None or lyrics.status == LyricsStatus.NOT_SUBMITTED:
            return "⏳ 正在获取歌词..."
        if lyrics.status == LyricsStatus.ABSENT:
            return "这首歌没有同步歌词"
        if lyrics.status == LyricsStatus.ERRORED:
            return lyrics.details[:LYRICS_PREVIEW_LIMIT]

        text = escape_code_block(lyrics.text)
        if len(text) > LYRICS_PREVIEW_LIMIT:
            text = text[:LYRICS_PREVIEW_LIMIT].rstrip() + "\n..."
        return f"```\n{text}\n```"


def escape_code_block(text: str) -> str:
    """
    防止文本中的反引号提前结束代码块

    在每个反引号后插入零宽空格，使文本中不再出现连续的反引号。

    Args:
        text: 原始文本

    Returns:
        可以安全放入 ``` 代码块的文本
    """
    return text.replace("`", "`\u200b")
