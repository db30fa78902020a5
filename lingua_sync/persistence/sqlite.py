# lingua_sync/persistence/sqlite.py
from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import insert, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from lingua_sync.core.exceptions import DatabaseError
from lingua_sync.db.schema import Base
from lingua_sync.persistence.base import BaseStringStore

logger = structlog.get_logger(__name__)


class SQLiteStringStore(BaseStringStore):
    """`StringStore` 协议的 SQLite 实现。"""

    def __init__(self, engine: AsyncEngine, db_path: str, create_schema: bool = True):
        super().__init__(engine, create_schema=create_schema)
        self.db_path = db_path

    async def connect(self) -> None:
        """[覆盖] 建立连接并为 SQLite 设置必要的 PRAGMA。"""
        try:
            async with self._engine.begin() as conn:
                await conn.execute(text("PRAGMA foreign_keys = ON;"))
                if self.db_path not in ("", ":memory:"):
                    await conn.execute(text("PRAGMA journal_mode=WAL;"))
        except SQLAlchemyError as e:
            raise DatabaseError(f"SQLite 连接失败: {e}") from e
        await super().connect()
        logger.info("SQLite 数据库连接已建立并通过 PRAGMA 检查", db_path=self.db_path)

    async def _insert_ignore(
        self, session: AsyncSession, model: type[Base], values: dict[str, Any]
    ) -> None:
        await session.execute(insert(model).values(**values).prefix_with("OR IGNORE"))
