"""
歌词搜索命令测试

测试命令处理器与命令注册：
- 查询提交与提供者选择
- 本地文件预置查询
- 功能开关与错误响应
"""

from unittest.mock import Mock

import pytest
import discord
from discord.ext import commands

from songsync.app_commands import LyricsSearchCommands, CommandRegistry
from songsync.app_commands.ui import SearchSessionView
from songsync.core.interfaces import SongMetadata
from songsync.library import LocalLibrary
from songsync.lyrics import LrcFileWriter
from songsync.session import SessionStatus


@pytest.fixture
def mock_factory(fake_provider):
    factory = Mock()
    factory.default_name = "netease"
    factory.get_default_provider.return_value = fake_provider
    factory.get_provider_by_name.side_effect = lambda name: fake_provider if name == "lrclib" else None
    return factory


class TestLyricsSearchCommands:
    """测试歌词搜索命令"""

    def make_command(self, config, factory, tmp_path, library=None):
        writer = LrcFileWriter(download_dir=tmp_path, generator_tag="tag")
        return LyricsSearchCommands(config, factory, writer, library)

    @pytest.mark.asyncio
    async def test_execute_submits_query(
        self, mock_config, mock_factory, fake_provider, sample_metadata, mock_interaction, tmp_path
    ):
        """测试命令创建会话视图并提交查询"""
        fake_provider.lookup_results = [sample_metadata]
        fake_provider.lyrics_results = ["[00:01.00]la"]
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.execute(mock_interaction, title="晴天", artist="周杰伦")

        kwargs = mock_interaction.response.send_message.call_args.kwargs
        view = kwargs["view"]
        assert isinstance(view, SearchSessionView)
        assert view.provider_name == "网易云音乐"
        assert command.active_view_count == 1

        await view.session.wait_idle()
        assert fake_provider.lookup_calls == [("晴天", "周杰伦", 0)]
        assert view.session.state.status == SessionStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_execute_with_provider_choice(
        self, mock_config, mock_factory, fake_provider, mock_interaction, tmp_path
    ):
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.execute(mock_interaction, title="", artist="", provider="lrclib")

        view = mock_interaction.response.send_message.call_args.kwargs["view"]
        assert view.provider_name == "LRCLIB"
        assert view.session.state.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_unknown_provider(self, mock_config, mock_factory, mock_interaction, tmp_path):
        """测试不支持的提供者返回错误"""
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.execute(mock_interaction, title="晴天", artist="", provider="spotify")

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert "spotify" in embed.description
        assert command.active_view_count == 0

    @pytest.mark.asyncio
    async def test_feature_disabled(self, mock_config, mock_factory, mock_interaction, tmp_path):
        mock_config.get.side_effect = lambda key, default=None: False if key == 'lyrics.enabled' else default
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.execute(mock_interaction, title="晴天", artist="")

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.description == "歌词功能当前不可用"

    @pytest.mark.asyncio
    async def test_local_file_without_library(self, mock_config, mock_factory, mock_interaction, tmp_path):
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.execute(mock_interaction, local_file="a.mp3")

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.description == "未配置本地曲库目录"

    @pytest.mark.asyncio
    async def test_local_file_seeds_session(
        self, mock_config, mock_factory, fake_provider, mock_interaction, tmp_path
    ):
        """测试本地文件生成预置查询并保存到音频文件旁边"""
        music_dir = tmp_path / "music"
        music_dir.mkdir()
        (music_dir / "周杰伦 - 晴天.mp3").write_bytes(b"")
        fake_provider.lookup_results = [SongMetadata(title="晴天", artist="周杰伦", track_link="https://music.163.com/song?id=1")]
        fake_provider.lyrics_results = ["[00:01.00]la"]
        command = self.make_command(mock_config, mock_factory, tmp_path, LocalLibrary(music_dir))

        await command.execute(mock_interaction, local_file="周杰伦 - 晴天.mp3")

        view = mock_interaction.response.send_message.call_args.kwargs["view"]
        await view.session.wait_idle()

        assert view.local_song.title == "晴天"
        assert fake_provider.lookup_calls == [("晴天", "周杰伦", 0)]

        await view.save_button.callback(mock_interaction)
        assert (music_dir / "周杰伦 - 晴天.lrc").exists()

    @pytest.mark.asyncio
    async def test_local_file_outside_library(self, mock_config, mock_factory, mock_interaction, tmp_path):
        music_dir = tmp_path / "music"
        music_dir.mkdir()
        command = self.make_command(mock_config, mock_factory, tmp_path, LocalLibrary(music_dir))

        await command.execute(mock_interaction, local_file="../escape.mp3")

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert "曲库目录" in embed.description

    @pytest.mark.asyncio
    async def test_unexpected_error_handled(self, mock_config, mock_factory, mock_interaction, tmp_path):
        """测试意外错误被统一处理"""
        mock_factory.get_default_provider.side_effect = RuntimeError("boom")
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.execute(mock_interaction, title="晴天", artist="")

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.description == "命令执行时发生错误，请稍后重试"

    @pytest.mark.asyncio
    async def test_error_after_response_uses_followup(self, mock_config, mock_factory, mock_interaction, tmp_path):
        """测试已响应的交互通过 followup 发送错误"""
        mock_interaction.response.is_done.return_value = True
        command = self.make_command(mock_config, mock_factory, tmp_path)

        await command.send_error_response(mock_interaction, "保存失败")

        mock_interaction.response.send_message.assert_not_called()
        kwargs = mock_interaction.followup.send.call_args.kwargs
        assert kwargs["embed"].title == "❌ 错误"
        assert kwargs["embed"].description == "保存失败"
        assert kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_cleanup_closes_sessions(self, mock_config, mock_factory, mock_interaction, tmp_path):
        command = self.make_command(mock_config, mock_factory, tmp_path)
        await command.execute(mock_interaction, title="", artist="")

        await command.cleanup()

        assert command.active_view_count == 0


class TestCommandRegistry:
    """测试命令注册"""

    @pytest.mark.asyncio
    async def test_register_lyrics_command(self, mock_config, mock_factory, tmp_path):
        bot = commands.Bot(command_prefix="!", intents=discord.Intents.default())
        handler = LyricsSearchCommands(mock_config, mock_factory, LrcFileWriter(tmp_path))
        registry = CommandRegistry(bot, handler)

        registry.register_lyrics_commands()
        registry.register_lyrics_commands()

        command = bot.tree.get_command("歌词搜索")
        assert command is not None
        assert [p.name for p in command.parameters] == ["歌名", "歌手", "来源", "本地文件"]
        assert len(bot.tree.get_commands()) == 1
