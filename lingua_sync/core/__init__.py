"""
本核心包定义了 lingua-sync 中最基础、最稳定的构建块。

这里包含了系统的核心数据类型、接口协议和自定义异常，它们共同构成了
整个应用的“契约”。所有其他模块都依赖于此核心包，但本包不依赖于
项目中的任何其他模块。
"""

from .exceptions import (
    ConfigurationError,
    DatabaseError,
    InvalidLocaleError,
    LinguaSyncError,
    MalformedResponseError,
    MissingCollaboratorError,
    NoTargetsError,
    TransportError,
)
from .interfaces import BulkUpdater, PendingRowSource, StringStore, Transport
from .types import (
    BatchRequest,
    BatchResponse,
    ChunkOutcome,
    JobStatus,
    LocaleCompletion,
    PendingRow,
    PullResult,
    PushMode,
    PushResult,
    SourceString,
    SyncReport,
    SyncState,
    TranslationItem,
    TranslationStatus,
    TransportKind,
)

__all__ = [
    # from exceptions.py
    "LinguaSyncError",
    "ConfigurationError",
    "DatabaseError",
    "InvalidLocaleError",
    "MalformedResponseError",
    "MissingCollaboratorError",
    "NoTargetsError",
    "TransportError",
    # from interfaces.py
    "Transport",
    "PendingRowSource",
    "BulkUpdater",
    "StringStore",
    # from types.py
    "TranslationStatus",
    "TransportKind",
    "PushMode",
    "SyncState",
    "PendingRow",
    "SourceString",
    "BatchRequest",
    "BatchResponse",
    "TranslationItem",
    "JobStatus",
    "ChunkOutcome",
    "PushResult",
    "PullResult",
    "LocaleCompletion",
    "SyncReport",
]
