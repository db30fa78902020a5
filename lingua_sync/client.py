# lingua_sync/client.py
"""
远端翻译服务的客户端，负责线路契约与响应规范化。

服务端有时把真正的负载包在信封字段（response / data）里，有时直接平铺返回；
字段名也存在多种写法（sources / accepted，hash / key）。所有变体都在这里
集中处理，按固定优先级检查，产出唯一的规范化结果对象。
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional, Union

import structlog

from lingua_sync.core.exceptions import MalformedResponseError
from lingua_sync.core.interfaces import Transport
from lingua_sync.core.types import (
    BatchRequest,
    BatchResponse,
    JobStatus,
    TranslationItem,
)

logger = structlog.get_logger(__name__)

ROUTE_BATCH = "/batch-translate"
ROUTE_PULL = "/babel/pull"
ROUTE_SOURCE = "/source"
ROUTE_JOB = "/job"

# 信封字段，按优先级检查，只解包一层
ENVELOPE_KEYS = ("response", "data")
# 各字段的别名，按优先级检查
ACCEPTED_ALIASES = ("items", "sources", "accepted")
QUEUED_ALIASES = ("queued",)
MISSING_ALIASES = ("missing",)
JOB_ID_ALIASES = ("jobId", "job_id")
ITEM_KEY_ALIASES = ("key", "hash")


def decode_payload(content: Union[bytes, str]) -> Any:
    """把原始响应体解码为 JSON。"""
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponseError(f"远端返回了非 JSON 负载: {e}") from e


def unwrap_envelope(data: Any) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    解包恰好一层信封，返回 (规范负载, 顶层负载)。

    Raises:
        MalformedResponseError: 负载不是 JSON 对象。
    """
    if isinstance(data, (bytes, str)):
        data = decode_payload(data)
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"远端负载应为 JSON 对象，得到 {type(data).__name__}"
        )
    for envelope in ENVELOPE_KEYS:
        inner = data.get(envelope)
        if isinstance(inner, dict):
            return inner, data
    return data, data


def _lookup(inner: Mapping[str, Any], top: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        for source in (inner, top):
            value = source.get(alias)
            if value is not None:
                return value
    return None


def countish(value: Any) -> int:
    """把“数量或列表”统一为计数。"""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, (list, tuple, dict)):
        return len(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return 0


def stringify(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def parse_item(row: Mapping[str, Any]) -> TranslationItem:
    key = next((row[a] for a in ITEM_KEY_ALIASES if row.get(a)), "")
    return TranslationItem(
        key=str(key),
        source=str(row.get("source") or ""),
        target=str(row.get("target") or ""),
        text=str(row.get("text") or ""),
        engine=row.get("engine"),
        cached=bool(row.get("cached", False)),
        meta=row.get("meta") if isinstance(row.get("meta"), dict) else {},
    )


def parse_items(value: Any) -> list[TranslationItem]:
    if not isinstance(value, list):
        return []
    return [parse_item(row) for row in value if isinstance(row, dict)]


def normalize_batch_response(data: Any) -> BatchResponse:
    """把 /batch-translate 的任意形状响应规范化为 BatchResponse。"""
    inner, top = unwrap_envelope(data)
    job_id = _lookup(inner, top, JOB_ID_ALIASES)
    status = top.get("status") or inner.get("status") or "ok"
    return BatchResponse(
        status=str(status),
        job_id=str(job_id) if job_id else None,
        queued=countish(_lookup(inner, top, QUEUED_ALIASES)),
        accepted=countish(_lookup(inner, top, ACCEPTED_ALIASES)),
        missing=countish(_lookup(inner, top, MISSING_ALIASES)),
        items=parse_items(_lookup(inner, top, ("items",))),
        error=stringify(_lookup(inner, top, ("error",))),
        message=stringify(_lookup(inner, top, ("message",))),
        raw=top,
    )


def normalize_pull_map(data: Any) -> dict[str, str]:
    """把 /babel/pull 的响应规范化为 {源键: 译文}。None 值被丢弃。"""
    inner, _ = unwrap_envelope(data)
    result: dict[str, str] = {}
    for key, value in inner.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        result[str(key)] = value if isinstance(value, str) else str(value)
    return result


class LinguaClient:
    """远端翻译服务的异步客户端。"""

    def __init__(self, transport: Transport):
        self.transport = transport

    async def close(self) -> None:
        await self.transport.aclose()

    async def request_batch(self, request: BatchRequest) -> BatchResponse:
        """提交一个批次；由服务端决定同步处理还是排队。"""
        response = await self.transport.request(
            "POST", ROUTE_BATCH, json=request.to_wire()
        )
        result = normalize_batch_response(response.content)
        if result.error:
            logger.warning(
                "批次响应包含错误",
                status=result.status,
                error=result.error,
                message=result.message,
            )
        return result

    async def pull_by_keys(
        self,
        keys: list[str],
        locale: Optional[str] = None,
        engine: Optional[str] = None,
    ) -> dict[str, str]:
        """按源键拉取译文。服务端只返回它找到的键。"""
        params = {k: v for k, v in (("locale", locale), ("engine", engine)) if v}
        response = await self.transport.request(
            "POST",
            ROUTE_PULL,
            params=params or None,
            json={"hashes": keys, "keys": keys},
        )
        return normalize_pull_map(response.content)

    async def get_job_status(self, job_id: str) -> JobStatus:
        """轮询一个异步任务 (/job/{id}.json)。"""
        response = await self.transport.request("GET", f"{ROUTE_JOB}/{job_id}.json")
        inner, top = unwrap_envelope(response.content)
        returned_id = _lookup(inner, top, JOB_ID_ALIASES)
        progress = _lookup(inner, top, ("progress",))
        return JobStatus(
            job_id=str(returned_id or job_id),
            state=str(_lookup(inner, top, ("state",)) or "unknown"),
            progress=countish(progress) if progress is not None else None,
            items=parse_items(_lookup(inner, top, ("items",))),
            message=stringify(_lookup(inner, top, ("message",))),
        )

    async def get_source(self, key: str) -> dict[str, Any]:
        """读取服务端记录的源字符串 (/source/{key}.json)，便于排错和回填。"""
        response = await self.transport.request("GET", f"{ROUTE_SOURCE}/{key}.json")
        inner, _ = unwrap_envelope(response.content)
        return inner

    async def translate_now(
        self,
        text: str,
        target: str,
        source: Optional[str] = None,
        engine: Optional[str] = None,
        lookup_only: bool = False,
    ) -> Optional[TranslationItem]:
        """单条同步翻译。lookup_only 时服务端只查找已有字符串，不新建。"""
        result = await self.request_batch(
            BatchRequest(
                texts=[text],
                source=source or "auto",
                target=[target],
                engine=engine,
                insert_new_strings=not lookup_only,
                transport="sync",
            )
        )
        for item in result.items:
            if not item.target or item.target == target:
                return item
        return None
