# lingua_sync/persistence/base.py
# 本地字符串存储的共享实现，SQLite 与 PostgreSQL 子类只覆盖方言相关部分。
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy import and_, case, func, inspect, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from lingua_sync._keys import normalize_locale, source_key
from lingua_sync.core.exceptions import DatabaseError, MissingCollaboratorError
from lingua_sync.core.types import (
    LocaleCompletion,
    PendingRow,
    SourceString,
    TranslationStatus,
)
from lingua_sync.db.schema import REQUIRED_TABLES, Base, LsSource, LsTranslation

logger = structlog.get_logger(__name__)


def _is_pending():
    return or_(LsTranslation.text.is_(None), LsTranslation.text == "")


def _not_reviewed():
    return LsTranslation.status != TranslationStatus.REVIEWED.value


class BaseStringStore(ABC):
    """`StringStore` 协议基于 SQLAlchemy 异步会话的通用实现。"""

    def __init__(self, engine: AsyncEngine, create_schema: bool = True):
        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        self._create_schema = create_schema

    async def connect(self) -> None:
        """确保数据库可达，且所需的表已存在。"""
        await self._ensure_schema()

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("持久化层引擎已关闭。")

    async def _ensure_schema(self) -> None:
        try:
            async with self._engine.begin() as conn:
                existing = await conn.run_sync(
                    lambda sync_conn: set(inspect(sync_conn).get_table_names())
                )
                missing = [t for t in REQUIRED_TABLES if t not in existing]
                if not missing:
                    return
                if not self._create_schema:
                    raise MissingCollaboratorError(
                        f"本地字符串存储缺少必需的表: {', '.join(missing)}"
                    )
                await conn.run_sync(Base.metadata.create_all)
                logger.info("已创建缺失的数据表", tables=missing)
        except SQLAlchemyError as e:
            raise DatabaseError(f"检查数据表结构失败: {e}") from e

    @abstractmethod
    async def _insert_ignore(
        self, session: AsyncSession, model: type[Base], values: dict[str, Any]
    ) -> None:
        """[子类实现] 插入一行，若违反唯一约束则静默忽略。"""
        ...

    async def register_source(
        self,
        text: str,
        source_locale: str,
        target_locales: list[str],
        engine: str,
    ) -> str:
        source_locale = normalize_locale(source_locale)
        code = source_key(text, source_locale)
        try:
            async with self._sessionmaker.begin() as session:
                await self._insert_ignore(
                    session,
                    LsSource,
                    {"code": code, "text": text, "source_locale": source_locale},
                )
                for target in dict.fromkeys(map(normalize_locale, target_locales)):
                    if not target or target == source_locale:
                        continue
                    await self._insert_ignore(
                        session,
                        LsTranslation,
                        {
                            "source_key": code,
                            "target_locale": target,
                            "engine": engine,
                            "text": None,
                            "status": TranslationStatus.NEW.value,
                        },
                    )
        except SQLAlchemyError as e:
            raise DatabaseError(f"注册源字符串失败: {e}") from e
        return code

    async def fetch_pending(
        self,
        targets: list[str] | None = None,
        engine: str | None = None,
        limit: int | None = None,
        include_translated: bool = False,
    ) -> list[PendingRow]:
        """
        查询待处理行。include_translated 时也返回已翻译（但未审校）的行，
        供强制覆盖的 pull 使用。
        """
        stmt = (
            select(
                LsTranslation.source_key,
                LsTranslation.target_locale,
                LsSource.text,
                LsSource.source_locale,
            )
            .distinct()
            .join(LsSource, LsSource.code == LsTranslation.source_key, isouter=True)
            .where(_not_reviewed() if include_translated else _is_pending())
            .order_by(
                LsTranslation.target_locale,
                LsSource.source_locale,
                LsTranslation.source_key,
            )
        )
        if engine:
            stmt = stmt.where(LsTranslation.engine == engine)
        if targets:
            stmt = stmt.where(LsTranslation.target_locale.in_(targets))
        if limit:
            stmt = stmt.limit(limit)
        try:
            async with self._sessionmaker() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"查询待处理行失败: {e}") from e
        return [
            PendingRow(
                key=row.source_key,
                target_locale=row.target_locale,
                text=row.text or "",
                source_locale=row.source_locale or "",
            )
            for row in rows
        ]

    async def iter_sources(self, limit: int | None = None) -> list[SourceString]:
        stmt = select(LsSource.code, LsSource.text, LsSource.source_locale).order_by(
            LsSource.code
        )
        if limit:
            stmt = stmt.limit(limit)
        try:
            async with self._sessionmaker() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"读取源字符串失败: {e}") from e
        return [
            SourceString(code=r.code, text=r.text, source_locale=r.source_locale)
            for r in rows
        ]

    async def mark_queued(self, keys: list[str], target_locale: str) -> int:
        """把已成功派发的存根从 new 推进到 queued，不会回退其他状态。"""
        if not keys:
            return 0
        stmt = (
            update(LsTranslation)
            .where(
                LsTranslation.source_key.in_(keys),
                LsTranslation.target_locale == target_locale,
                LsTranslation.status == TranslationStatus.NEW.value,
                _is_pending(),
            )
            .values(status=TranslationStatus.QUEUED.value)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._sessionmaker.begin() as session:
                result = await session.execute(stmt)
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"标记排队状态失败: {e}") from e

    async def apply_translations(
        self,
        locale: str,
        translations: Mapping[str, str],
        engine: str | None = None,
        force: bool = False,
    ) -> int:
        """
        定向批量更新：只更新 (键, 语言[, 引擎]) 匹配的行。

        整个批次在一个事务中提交；会话随批次结束而关闭，
        因此不会在多个批次之间累积身份映射。
        """
        updated = 0
        try:
            async with self._sessionmaker.begin() as session:
                for key, text in translations.items():
                    if not text:
                        continue
                    conditions = [
                        LsTranslation.source_key == key,
                        LsTranslation.target_locale == locale,
                    ]
                    if engine:
                        conditions.append(LsTranslation.engine == engine)
                    if force:
                        # 已审校的行不回退；相同译文不计为更新
                        conditions.append(_not_reviewed())
                        conditions.append(
                            or_(_is_pending(), LsTranslation.text != text)
                        )
                    else:
                        conditions.append(_is_pending())
                    stmt = (
                        update(LsTranslation)
                        .where(*conditions)
                        .values(text=text, status=TranslationStatus.TRANSLATED.value)
                        .execution_options(synchronize_session=False)
                    )
                    result = await session.execute(stmt)
                    updated += result.rowcount or 0
                session.expunge_all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"批量写入译文失败: {e}") from e
        return updated

    async def completion(
        self, targets: list[str] | None = None
    ) -> dict[str, LocaleCompletion]:
        translated = func.sum(
            case(
                (and_(LsTranslation.text.is_not(None), LsTranslation.text != ""), 1),
                else_=0,
            )
        )
        stmt = select(
            LsTranslation.target_locale,
            func.count().label("total"),
            translated.label("translated"),
        ).group_by(LsTranslation.target_locale)
        if targets:
            stmt = stmt.where(LsTranslation.target_locale.in_(targets))
        try:
            async with self._sessionmaker() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"计算完成度失败: {e}") from e

        stats = {
            r.target_locale: LocaleCompletion(
                locale=r.target_locale,
                total=int(r.total or 0),
                translated=int(r.translated or 0),
            )
            for r in rows
            if r.target_locale
        }
        for locale in targets or []:
            stats.setdefault(locale, LocaleCompletion(locale=locale))
        return dict(sorted(stats.items()))

    async def distinct_locales(self) -> list[str]:
        stmt = (
            select(LsTranslation.target_locale)
            .distinct()
            .order_by(LsTranslation.target_locale)
        )
        try:
            async with self._sessionmaker() as session:
                return [loc for loc in (await session.execute(stmt)).scalars() if loc]
        except SQLAlchemyError as e:
            raise DatabaseError(f"读取目标语言失败: {e}") from e
