"""
基础Slash命令类

歌词命令共用的部分：功能开关、统一的错误嵌入消息和异常兜底。
"""

import logging
from abc import ABC, abstractmethod
import discord

from songsync.app_commands.ui.embed_builder import EmbedBuilder
from songsync.utils.config_manager import ConfigManager


class BaseSlashCommand(ABC):
    """
    Slash命令基础类

    子类实现 execute，并通过 send_error_response 报告可预期的错误。
    """

    def __init__(self, config: ConfigManager):
        """
        初始化基础命令

        Args:
            config: 配置管理器
        """
        self.config = config
        self.logger = logging.getLogger(f"songsync.app_commands.{self.__class__.__name__}")
        self._enabled = config.get('lyrics.enabled', True)

    def is_available(self) -> bool:
        return self._enabled

    async def check_prerequisites(self, interaction: discord.Interaction) -> bool:
        """
        检查歌词功能是否启用

        Args:
            interaction: Discord交互对象

        Returns:
            功能可用时返回 True
        """
        if self.is_available():
            return True

        self.logger.debug(f"歌词功能已禁用，拒绝用户 {interaction.user.display_name} 的请求")
        await self.send_error_response(interaction, "歌词功能当前不可用")
        return False

    async def _respond(self, interaction: discord.Interaction, **kwargs) -> None:
        # 已响应过的交互只能通过 followup 发送
        if interaction.response.is_done():
            await interaction.followup.send(**kwargs)
        else:
            await interaction.response.send_message(**kwargs)

    async def send_error_response(
        self,
        interaction: discord.Interaction,
        message: str,
        ephemeral: bool = True
    ) -> None:
        """
        发送错误嵌入消息，发送失败只记录日志

        Args:
            interaction: Discord交互对象
            message: 错误消息
            ephemeral: 是否为私密消息
        """
        embed = EmbedBuilder.create_error_embed("错误", message)
        try:
            await self._respond(interaction, embed=embed, ephemeral=ephemeral)
        except discord.HTTPException as e:
            self.logger.error(f"发送错误响应失败: {e}")

    async def handle_command_error(self, interaction: discord.Interaction, error: Exception) -> None:
        """
        记录未预期的异常并回复通用错误

        Args:
            interaction: Discord交互对象
            error: 异常对象
        """
        command_name = interaction.command.name if interaction.command else "未知"
        self.logger.error(
            f"/{command_name} 执行失败 (用户 {interaction.user.display_name}): {error}",
            exc_info=True
        )
        await self.send_error_response(interaction, "命令执行时发生错误，请稍后重试")

    @abstractmethod
    async def execute(self, interaction: discord.Interaction, **kwargs) -> None:
        """
        执行命令

        Args:
            interaction: Discord交互对象
            **kwargs: 命令参数
        """
