"""
SongSync - 同步歌词搜索与保存

为本地或在线曲目查找带时间轴的歌词（.lrc），并提供 Discord 交互界面。
"""

__version__ = "0.1.0"
