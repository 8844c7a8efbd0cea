"""SongSync 自定义异常"""

from typing import Optional


class SongSyncError(Exception):
    """SongSync 异常基类"""
    pass


class ConfigError(SongSyncError):
    """配置无效"""
    pass


class ProviderError(SongSyncError):
    """
    提供者调用失败

    所有元数据/歌词提供者抛出的错误都继承自此类，会话据此进行分类。
    """

    def __init__(self, message: str, provider: Optional[str] = None):
        """
        初始化提供者错误

        Args:
            message: 错误消息
            provider: 出错的提供者名称
        """
        super().__init__(message)
        self.provider = provider


class ConnectionUnavailableError(ProviderError):
    """无法连接到服务器（DNS 失败、网络不可用等）"""
    pass


class NoTrackFoundError(ProviderError):
    """没有匹配的曲目"""
    pass


class RateLimitedError(ProviderError):
    """提供者请求频率受限"""
    pass


class LyricsNotFoundError(ProviderError):
    """曲目存在但没有同步歌词"""
    pass
