# lingua_sync/persistence/postgres.py
"""基于 asyncpg 的 PostgreSQL 存储实现，只包含方言特有的部分。"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_sync.core.exceptions import DatabaseError
from lingua_sync.db.schema import Base
from lingua_sync.persistence.base import BaseStringStore

logger = structlog.get_logger(__name__)


class PostgresStringStore(BaseStringStore):
    """`StringStore` 协议的 PostgreSQL 实现。"""

    async def connect(self) -> None:
        """[覆盖] 健康检查以确保 PostgreSQL 连接正常。"""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("连接 PostgreSQL 数据库失败", exc_info=True)
            raise DatabaseError(f"数据库连接失败: {e}") from e
        await super().connect()
        logger.info("PostgreSQL 数据库连接已建立并通过健康检查")

    async def _insert_ignore(
        self, session: AsyncSession, model: type[Base], values: dict[str, Any]
    ) -> None:
        await session.execute(pg_insert(model).values(**values).on_conflict_do_nothing())
