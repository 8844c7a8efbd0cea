#!/usr/bin/env python3
"""
SongSync 歌词机器人 - 搜索同步歌词并保存为 .lrc 文件

主程序入口点，负责配置加载、机器人初始化和启动/关闭处理。
"""
import logging

from songsync.bot import SongSyncBot
from songsync.core.exceptions import ConfigError
from songsync.utils.config_manager import ConfigManager
from songsync.utils.logger import setup_logger


def main() -> int:
    """
    SongSync 歌词机器人主入口函数。

    Returns:
        int: 退出代码（0表示成功，1表示错误）
    """
    try:
        config = ConfigManager()
    except FileNotFoundError as e:
        # 日志尚未配置
        setup_logger()
        logging.getLogger("songsync").error(f"❌ 配置文件错误: {e}")
        return 1

    # Set up logging with configuration values
    setup_logger(
        log_level=config.get_log_level(),
        log_file=config.get_log_file(),
        max_size=config.get_log_max_size(),
        backup_count=config.get_log_backup_count()
    )
    logger = logging.getLogger("songsync")

    logger.info("=" * 60)
    logger.info("🎵 SongSync 歌词机器人启动中...")
    logger.info("=" * 60)
    logger.debug(f"日志配置完成 - 级别: {config.get_log_level()}, 文件: {config.get_log_file()}")

    try:
        try:
            discord_token = config.get_discord_token()
            logger.info("✅ Discord 令牌获取成功")
        except ValueError as e:
            logger.error(f"❌ Discord 令牌配置错误: {e}")
            logger.error("请检查 config/config.yaml 文件并确保 Discord 令牌已正确设置")
            return 1

        bot = SongSyncBot(config)

        _log_bot_configuration(logger, config)

        logger.info("按 Ctrl+C 停止机器人")
        bot.run(discord_token)

    except KeyboardInterrupt:
        logger.info("🛑 用户停止了机器人 (Ctrl+C)")
        return 0
    except ConfigError as e:
        logger.error(f"❌ 配置错误: {e}")
        return 1
    except Exception as e:
        logger.error(f"❌ 启动歌词机器人时发生意外错误: {e}", exc_info=True)
        return 1

    return 0


def _log_bot_configuration(logger: logging.Logger, config: ConfigManager) -> None:
    """
    记录机器人配置摘要，用于调试和监控。

    Args:
        logger: 日志记录器实例
        config: 配置管理器
    """
    logger.info("📋 机器人配置摘要:")
    logger.info(f"   歌词提供者: {config.get_lyrics_provider()}")
    logger.info(f"   请求超时: {config.get_request_timeout()} 秒")
    logger.info(f"   保存目录: {config.get_download_dir()}")
    logger.info(f"   本地曲库: {config.get_music_dir() or '未配置'}")
    logger.info("=" * 60)


if __name__ == "__main__":
    exit(main())
