# lingua_sync/core/types.py
"""
本模块定义了 lingua-sync 同步引擎的核心数据类型。

包括本地行的生命周期状态、与远端翻译服务交互的线路 DTO，
以及 push / pull / sync 各阶段对外汇报的结果对象。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TranslationStatus(str, Enum):
    """翻译存根在其生命周期中的状态：new → queued → translated (→ reviewed)。"""

    NEW = "new"
    QUEUED = "queued"
    TRANSLATED = "translated"
    REVIEWED = "reviewed"


class TransportKind(str, Enum):
    """与远端服务通信的方式，在构造时一次性选定。"""

    HTTP = "http"
    IN_PROCESS = "in_process"


class PushMode(str, Enum):
    """push 的数据来源。"""

    STUBS = "stubs"
    SOURCES = "sources"


class SyncState(str, Enum):
    """SyncOrchestrator 状态机的状态。"""

    PUSHING = "pushing"
    PULLING = "pulling"
    EVALUATING = "evaluating"
    SLEEPING = "sleeping"
    DONE = "done"
    FAILED = "failed"


DispatchTransport = Literal["sync", "async"]


class PendingRow(BaseModel):
    """一条待处理的行：内容键（或原文）加上源/目标语言。"""

    model_config = ConfigDict(frozen=True)

    key: str
    text: str = ""
    source_locale: str = ""
    target_locale: str = ""


class SourceString(BaseModel):
    """已注册的源字符串，创建后不可变。"""

    model_config = ConfigDict(frozen=True)

    code: str
    text: str
    source_locale: str


class BatchRequest(BaseModel):
    """发送给 /batch-translate 的请求负载。"""

    texts: list[str]
    source: str
    target: Union[str, list[str]]
    engine: Optional[str] = None
    insert_new_strings: bool = True
    force_dispatch: bool = False
    transport: Optional[DispatchTransport] = None

    def to_wire(self) -> dict[str, Any]:
        """转换为线路格式（驼峰字段名，省略空的可选字段）。"""
        payload: dict[str, Any] = {
            "texts": self.texts,
            "source": self.source,
            "target": self.target,
            "insertNewStrings": self.insert_new_strings,
            "forceDispatch": self.force_dispatch,
        }
        if self.engine:
            payload["engine"] = self.engine
        if self.transport:
            payload["transport"] = self.transport
        return payload


class TranslationItem(BaseModel):
    """服务端同步返回的单条翻译结果。"""

    key: str
    source: str = ""
    target: str = ""
    text: str = ""
    engine: Optional[str] = None
    cached: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)


class BatchResponse(BaseModel):
    """/batch-translate 的规范化响应。字段别名已在信封解包阶段统一。"""

    status: str = "ok"
    job_id: Optional[str] = None
    queued: int = 0
    accepted: int = 0
    missing: int = 0
    items: list[TranslationItem] = Field(default_factory=list)
    error: Optional[str] = None
    message: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)


class JobStatus(BaseModel):
    """异步任务的轮询结果 (/job/{id}.json)。"""

    job_id: str
    state: str = "unknown"
    progress: Optional[int] = None
    items: list[TranslationItem] = Field(default_factory=list)
    message: Optional[str] = None


class ChunkOutcome(BaseModel):
    """一次 push 网络调用（一个批次）的结果。"""

    source_locale: str
    target_locales: list[str]
    size: int
    accepted: int = 0
    queued: int = 0
    missing: int = 0
    error: Optional[str] = None
    job_id: Optional[str] = None


class PushResult(BaseModel):
    """一次 push 运行在所有批次上聚合后的计数。计数仅用于进度汇报。"""

    batches: int = 0
    texts: int = 0
    accepted: int = 0
    queued: int = 0
    missing: int = 0
    errored_batches: int = 0
    skipped: int = 0
    job_ids: list[str] = Field(default_factory=list)
    chunks: list[ChunkOutcome] = Field(default_factory=list)

    @property
    def had_error(self) -> bool:
        return self.errored_batches > 0

    def record(self, outcome: ChunkOutcome) -> None:
        """将单个批次的结果累加进运行级计数。"""
        self.chunks.append(outcome)
        self.batches += 1
        self.texts += outcome.size
        self.accepted += outcome.accepted
        self.queued += outcome.queued
        self.missing += outcome.missing
        if outcome.error is not None:
            self.errored_batches += 1
        if outcome.job_id:
            self.job_ids.append(outcome.job_id)

    def failed(self, strict: bool) -> bool:
        """只有在 strict 模式下，部分批次失败或零接收才算整体失败。"""
        if not strict or self.batches == 0:
            return False
        return self.had_error or (self.accepted + self.queued) == 0


class PullResult(BaseModel):
    """一次 pull 运行的计数。"""

    chunks: int = 0
    requested: int = 0
    resolved: int = 0
    updated: int = 0
    pending: int = 0
    errored_chunks: int = 0


class LocaleCompletion(BaseModel):
    """某一目标语言在本地存储中的完成度。"""

    locale: str
    total: int = 0
    translated: int = 0

    @property
    def missing(self) -> int:
        return max(0, self.total - self.translated)

    @property
    def pct(self) -> float:
        if self.total <= 0:
            return 0.0
        return round(self.translated / self.total * 100, 1)


class SyncReport(BaseModel):
    """一次完整 sync 运行的汇总。"""

    state: SyncState
    targets: list[str] = Field(default_factory=list)
    push: PushResult = Field(default_factory=PushResult)
    pulls: list[PullResult] = Field(default_factory=list)
    attempts: int = 0
    completion: dict[str, LocaleCompletion] = Field(default_factory=dict)
    converged: bool = False
    handoff_exit_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def updated(self) -> int:
        return sum(p.updated for p in self.pulls)

    @model_validator(mode="after")
    def check_consistency(self) -> "SyncReport":
        if self.state == SyncState.FAILED and self.error is None:
            raise ValueError("FAILED 状态的报告必须包含 error 信息。")
        return self
