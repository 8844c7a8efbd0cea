"""
会话状态定义 - 搜索会话与歌词获取的状态变体

每个状态都是不可变的数据对象，可以序列化为字典以便跨进程保存。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

from songsync.core.interfaces import Query, SongMetadata


class SessionStatus(Enum):
    """会话状态枚举"""
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    NO_CONNECTION = "no_connection"


class ErrorKind(Enum):
    """失败原因分类"""
    EMPTY_QUERY = "empty_query"
    NO_TRACK_FOUND = "no_track_found"
    RATE_LIMITED = "rate_limited"  # 界面可以建议切换提供者
    OTHER = "other"


class LyricsStatus(Enum):
    """歌词获取状态枚举"""
    NOT_SUBMITTED = "not_submitted"
    PRESENT = "present"
    ABSENT = "absent"
    ERRORED = "errored"


@dataclass(frozen=True)
class SessionState:
    """
    会话状态

    通过 status 区分变体，并在构造时校验各变体携带的数据：
    - PENDING 必须带有查询
    - SUCCESS 必须带有元数据
    - FAILED 必须带有失败原因
    - FAILED / NO_CONNECTION 不携带元数据
    """
    status: SessionStatus
    query: Optional[Query] = None
    metadata: Optional[SongMetadata] = None
    error_kind: Optional[ErrorKind] = None
    error_details: Optional[str] = None

    def __post_init__(self):
        if self.status == SessionStatus.PENDING and self.query is None:
            raise ValueError("PENDING 状态必须携带查询")
        if self.status == SessionStatus.SUCCESS and self.metadata is None:
            raise ValueError("SUCCESS 状态必须携带元数据")
        if self.status == SessionStatus.FAILED and self.error_kind is None:
            raise ValueError("FAILED 状态必须携带失败原因")
        if self.status in (SessionStatus.FAILED, SessionStatus.NO_CONNECTION) and self.metadata is not None:
            raise ValueError(f"{self.status.value} 状态不能携带元数据")

    @classmethod
    def not_submitted(cls) -> "SessionState":
        return cls(SessionStatus.NOT_SUBMITTED)

    @classmethod
    def pending(cls, query: Query) -> "SessionState":
        return cls(SessionStatus.PENDING, query=query)

    @classmethod
    def success(cls, metadata: SongMetadata, query: Optional[Query] = None) -> "SessionState":
        return cls(SessionStatus.SUCCESS, query=query, metadata=metadata)

    @classmethod
    def failed(cls, kind: ErrorKind, details: Optional[str] = None) -> "SessionState":
        return cls(SessionStatus.FAILED, error_kind=kind, error_details=details)

    @classmethod
    def no_connection(cls) -> "SessionState":
        return cls(SessionStatus.NO_CONNECTION)

    @property
    def is_error(self) -> bool:
        return self.status in (SessionStatus.FAILED, SessionStatus.NO_CONNECTION)

    def to_dict(self) -> Dict[str, Any]:
        """
        序列化为字典

        Returns:
            只包含基本类型的字典
        """
        return {
            "status": self.status.value,
            "query": self.query.to_dict() if self.query else None,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_details": self.error_details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        """
        从字典恢复状态

        Args:
            data: to_dict() 生成的字典

        Returns:
            会话状态

        Raises:
            ValueError: 数据不符合任何状态变体
        """
        query = data.get("query")
        metadata = data.get("metadata")
        error_kind = data.get("error_kind")
        return cls(
            status=SessionStatus(data["status"]),
            query=Query.from_dict(query) if query else None,
            metadata=SongMetadata.from_dict(metadata) if metadata else None,
            error_kind=ErrorKind(error_kind) if error_kind else None,
            error_details=data.get("error_details"),
        )


@dataclass(frozen=True)
class LyricsState:
    """歌词获取状态，只在会话处于 SUCCESS 时存在"""
    status: LyricsStatus = LyricsStatus.NOT_SUBMITTED
    text: Optional[str] = None
    details: Optional[str] = None

    def __post_init__(self):
        if self.status == LyricsStatus.PRESENT and self.text is None:
            raise ValueError("PRESENT 状态必须携带歌词文本")
        if self.status == LyricsStatus.ERRORED and not self.details:
            raise ValueError("ERRORED 状态必须携带错误详情")

    @classmethod
    def not_submitted(cls) -> "LyricsState":
        return cls(LyricsStatus.NOT_SUBMITTED)

    @classmethod
    def present(cls, text: str) -> "LyricsState":
        return cls(LyricsStatus.PRESENT, text=text)

    @classmethod
    def absent(cls) -> "LyricsState":
        return cls(LyricsStatus.ABSENT)

    @classmethod
    def errored(cls, details: str) -> "LyricsState":
        return cls(LyricsStatus.ERRORED, details=details)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "text": self.text, "details": self.details}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LyricsState":
        return cls(
            status=LyricsStatus(data["status"]),
            text=data.get("text"),
            details=data.get("details"),
        )
