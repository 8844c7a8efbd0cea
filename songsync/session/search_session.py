"""
歌词搜索会话 - 驱动"查找曲目 → 元数据 → 同步歌词"的完整流程

每次 submit/retry/edit/dismiss_error 都会推进会话代数（generation），
每个异步提供者调用都带有其所属代数；完成时通过比较并设置
(代数, 状态) 来应用结果，过期的结果直接丢弃，不做主动取消。
"""

import asyncio
import inspect
import logging
import socket
import threading
from typing import Optional, Dict, List, Callable, Set, Any

import aiohttp

from songsync.core.exceptions import (
    ConnectionUnavailableError,
    NoTrackFoundError,
    RateLimitedError,
    LyricsNotFoundError,
)
from songsync.core.interfaces import IMetadataProvider, ILyricsProvider, Query, SongMetadata
from .states import SessionState, SessionStatus, ErrorKind, LyricsState, LyricsStatus


STATE_CHANGED = "state_changed"
LYRICS_CHANGED = "lyrics_changed"

# 连接类错误一律视为"无网络"，而不是普通失败
_CONNECTION_ERRORS = (
    ConnectionUnavailableError,
    aiohttp.ClientConnectionError,
    socket.gaierror,
    ConnectionError,
)


def describe_error(error: BaseException) -> str:
    """生成非空的错误描述"""
    message = str(error).strip()
    name = type(error).__name__
    return f"{name}: {message}" if message else name


def classify_metadata_error(error: BaseException) -> SessionState:
    """
    将元数据提供者的异常归类为会话状态

    Args:
        error: 提供者抛出的异常

    Returns:
        NO_CONNECTION 或 FAILED 状态
    """
    if isinstance(error, _CONNECTION_ERRORS):
        return SessionState.no_connection()
    if isinstance(error, NoTrackFoundError):
        return SessionState.failed(ErrorKind.NO_TRACK_FOUND, str(error) or None)
    if isinstance(error, RateLimitedError):
        return SessionState.failed(ErrorKind.RATE_LIMITED, str(error) or None)
    return SessionState.failed(ErrorKind.OTHER, describe_error(error))


def classify_lyrics_error(error: BaseException) -> LyricsState:
    """将歌词提供者的异常归类为歌词状态"""
    if isinstance(error, (LyricsNotFoundError, FileNotFoundError)):
        return LyricsState.absent()
    return LyricsState.errored(describe_error(error))


class LyricsSearchSession:
    """
    歌词搜索会话

    负责一次用户发起的搜索：提交查询、请求元数据、成功后请求同步歌词，
    并通过事件处理器向调用方报告状态变化。

    事件：
    - state_changed: 处理器以 session=, state= 关键字参数调用
    - lyrics_changed: 处理器以 session=, lyrics= 关键字参数调用
    """

    def __init__(
        self,
        metadata_provider: IMetadataProvider,
        lyrics_provider: ILyricsProvider,
        seed: Optional[Query] = None
    ):
        """
        初始化搜索会话

        Args:
            metadata_provider: 元数据提供者
            lyrics_provider: 歌词提供者
            seed: 由本地文件生成的初始查询；提供时会话以 PENDING 状态创建，
                  需调用 start() 发出请求
        """
        self.logger = logging.getLogger("songsync.session.search_session")
        self.metadata_provider = metadata_provider
        self.lyrics_provider = lyrics_provider

        self._lock = threading.Lock()
        self._generation = 0
        self._query: Optional[Query] = None
        self._state = SessionState.not_submitted()
        self._lyrics: Optional[LyricsState] = None
        self._lyrics_requested_generation: Optional[int] = None
        self._seed_started = True

        if seed is not None:
            self._generation = 1
            self._query = seed
            self._state = SessionState.pending(seed)
            self._seed_started = False

        self._tasks: Set[asyncio.Task] = set()
        self._event_handlers: Dict[str, List[Callable]] = {
            STATE_CHANGED: [],
            LYRICS_CHANGED: [],
        }

        self.logger.debug(f"搜索会话创建完成 - 初始状态: {self._state.status.value}")

    # 只读属性

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def lyrics(self) -> Optional[LyricsState]:
        """当前 SUCCESS 状态下的歌词状态，其他状态为 None"""
        return self._lyrics

    @property
    def query(self) -> Optional[Query]:
        return self._query

    @property
    def generation(self) -> int:
        return self._generation

    def can_retry(self) -> bool:
        """当前是否可以「再试一次」"""
        return self._state.status == SessionStatus.SUCCESS and self.metadata_provider.supports_offset

    def can_edit(self) -> bool:
        return self._state.status in (
            SessionStatus.SUCCESS,
            SessionStatus.FAILED,
            SessionStatus.NO_CONNECTION,
        )

    # 事件处理器

    def add_event_handler(self, event_type: str, handler: Callable) -> None:
        """
        添加事件处理器

        Args:
            event_type: 事件类型（state_changed / lyrics_changed）
            handler: 处理函数，可以是普通函数或协程函数
        """
        if event_type in self._event_handlers:
            self._event_handlers[event_type].append(handler)
            self.logger.debug(f"添加事件处理器: {event_type}")
        else:
            self.logger.warning(f"未知事件类型: {event_type}")

    def remove_event_handler(self, event_type: str, handler: Callable) -> None:
        handlers = self._event_handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def _trigger_event(self, event_type: str, **kwargs) -> None:
        """触发事件；处理器出错只记录日志"""
        for handler in list(self._event_handlers.get(event_type, [])):
            try:
                result = handler(session=self, **kwargs)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                name = getattr(handler, "__name__", repr(handler))
                self.logger.error(f"事件处理器 {name} 处理 {event_type} 时出错: {e}", exc_info=True)

    # 用户操作

    async def start(self) -> bool:
        """
        发出预置查询的请求

        Returns:
            如果发出了请求返回 True
        """
        with self._lock:
            if self._seed_started or self._state.status != SessionStatus.PENDING:
                return False
            self._seed_started = True
            generation = self._generation
            query = self._query

        self.logger.info(f"开始预置查询: {query.title} - {query.artist}")
        await self._trigger_event(STATE_CHANGED, state=self._state)
        self._launch_lookup(query, generation)
        return True

    async def submit(self, query: Query) -> bool:
        """
        提交查询

        只能在 NOT_SUBMITTED 状态下调用。歌名和歌手都为空时直接进入
        FAILED(EMPTY_QUERY)，不会调用提供者。

        Args:
            query: 搜索查询

        Returns:
            如果状态发生了转换返回 True
        """
        with self._lock:
            if self._state.status != SessionStatus.NOT_SUBMITTED:
                self.logger.warning(f"无法在 {self._state.status.value} 状态下提交查询")
                return False

            self._generation += 1
            generation = self._generation
            self._query = query

            if query.is_empty:
                new_state = SessionState.failed(ErrorKind.EMPTY_QUERY, "歌名和歌手不能同时为空")
            else:
                new_state = SessionState.pending(query)
            self._set_state(new_state)

        if new_state.status == SessionStatus.FAILED:
            self.logger.info("空查询，跳过元数据请求")
        else:
            self.logger.info(f"提交查询: {query.title} - {query.artist} (offset={query.offset})")

        await self._trigger_event(STATE_CHANGED, state=new_state)

        if new_state.status == SessionStatus.PENDING:
            self._launch_lookup(query, generation)
        return True

    async def retry(self) -> bool:
        """
        用下一个偏移量重新查询相同的歌名/歌手

        提供者不支持偏移量时为空操作。

        Returns:
            如果状态发生了转换返回 True
        """
        if not self.metadata_provider.supports_offset:
            self.logger.debug("当前提供者不支持偏移量，忽略重试")
            return False

        with self._lock:
            if self._state.status != SessionStatus.SUCCESS or self._query is None:
                self.logger.warning(f"无法在 {self._state.status.value} 状态下重试")
                return False

            query = self._query.with_next_offset()
            self._generation += 1
            generation = self._generation
            self._query = query
            new_state = SessionState.pending(query)
            self._set_state(new_state)

        self.logger.info(f"重试查询: {query.title} - {query.artist} (offset={query.offset})")
        await self._trigger_event(STATE_CHANGED, state=new_state)
        self._launch_lookup(query, generation)
        return True

    async def edit(self) -> bool:
        """
        回到 NOT_SUBMITTED 以便修改查询

        已发出的请求不会被取消，其结果会因代数过期而被忽略。
        """
        with self._lock:
            if not self.can_edit():
                self.logger.warning(f"无法在 {self._state.status.value} 状态下编辑")
                return False
            self._generation += 1
            new_state = SessionState.not_submitted()
            self._set_state(new_state)

        self.logger.debug("会话回到编辑状态")
        await self._trigger_event(STATE_CHANGED, state=new_state)
        return True

    async def dismiss_error(self) -> bool:
        """关闭错误提示，回到 NOT_SUBMITTED"""
        with self._lock:
            if not self._state.is_error:
                return False
            self._generation += 1
            new_state = SessionState.not_submitted()
            self._set_state(new_state)

        await self._trigger_event(STATE_CHANGED, state=new_state)
        return True

    def ensure_lyrics_fetch(self) -> bool:
        """
        确保当前 SUCCESS 状态的歌词请求已经发出

        可以重复调用；同一个 SUCCESS 状态只会发出一次请求。

        Returns:
            如果本次调用发出了请求返回 True
        """
        with self._lock:
            if self._state.status != SessionStatus.SUCCESS:
                return False
            if self._lyrics_requested_generation == self._generation:
                return False
            self._lyrics_requested_generation = self._generation
            generation = self._generation
            metadata = self._state.metadata

        self._spawn(self._run_lyrics_fetch(metadata, generation))
        return True

    async def wait_idle(self) -> None:
        """等待所有未完成的提供者调用结束"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """取消所有未完成的请求（用于关闭界面时释放资源）"""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.logger.debug(f"会话已关闭，取消了 {len(tasks)} 个请求")

    # 内部实现

    def _set_state(self, new_state: SessionState) -> None:
        """在持有锁的情况下替换状态；歌词状态只在 SUCCESS 内有效"""
        self._state = new_state
        self._lyrics_requested_generation = None
        if new_state.status == SessionStatus.SUCCESS:
            self._lyrics = LyricsState.not_submitted()
        else:
            self._lyrics = None

    def _compare_and_set(self, generation: int, expected: SessionStatus, new_state: SessionState) -> bool:
        with self._lock:
            if generation != self._generation or self._state.status != expected:
                return False
            self._set_state(new_state)
            return True

    def _spawn(self, coro: Any) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _launch_lookup(self, query: Query, generation: int) -> None:
        if generation != self._generation:
            # 通知期间会话已被其他操作推进
            return
        self._spawn(self._run_lookup(query, generation))

    async def _run_lookup(self, query: Query, generation: int) -> None:
        try:
            metadata = await self.metadata_provider.lookup(query.title, query.artist, query.offset)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            new_state = classify_metadata_error(e)
            self.logger.warning(f"元数据查询失败 ({new_state.status.value}): {describe_error(e)}")
        else:
            if metadata is None:
                new_state = SessionState.failed(ErrorKind.NO_TRACK_FOUND)
            else:
                new_state = SessionState.success(metadata, query)

        if not self._compare_and_set(generation, SessionStatus.PENDING, new_state):
            self.logger.debug(f"忽略过期的元数据结果 (代数 {generation}, 当前 {self._generation})")
            return

        if new_state.status == SessionStatus.SUCCESS:
            self.logger.info(f"找到曲目: {new_state.metadata.get_display_name()}")
            # 歌词请求不等待状态处理器
            self.ensure_lyrics_fetch()

        await self._trigger_event(STATE_CHANGED, state=new_state)

    async def _run_lyrics_fetch(self, metadata: SongMetadata, generation: int) -> None:
        if not metadata.track_link:
            self.logger.debug("曲目没有链接，跳过歌词请求")
            result = LyricsState.absent()
        else:
            try:
                text = await self.lyrics_provider.fetch_synced(metadata.track_link)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                result = classify_lyrics_error(e)
                self.logger.debug(f"歌词获取失败 ({result.status.value}): {describe_error(e)}")
            else:
                result = LyricsState.present(text) if text and text.strip() else LyricsState.absent()

        with self._lock:
            if generation != self._generation or self._state.status != SessionStatus.SUCCESS:
                self.logger.debug(f"忽略过期的歌词结果 (代数 {generation})")
                return
            if self._lyrics is not None and self._lyrics.status != LyricsStatus.NOT_SUBMITTED:
                return
            self._lyrics = result

        self.logger.info(f"歌词获取完成: {result.status.value}")
        await self._trigger_event(LYRICS_CHANGED, lyrics=result)
