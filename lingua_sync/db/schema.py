# lingua_sync/db/schema.py
# 以内容键为主键的存储结构：翻译行通过 source_key 直接定位，无需 JOIN 即可更新。
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from lingua_sync.core.types import TranslationStatus


class Base(DeclarativeBase):
    """声明式基类。"""


class LsSource(Base):
    """源字符串表。创建后不可变。"""

    __tablename__ = "ls_source"
    code: Mapped[str] = mapped_column(String(32), primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    source_locale: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class LsTranslation(Base):
    """翻译存根表：(源键, 目标语言, 引擎) 唯一。text 为空表示待翻译。"""

    __tablename__ = "ls_translation"
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    source_key: Mapped[str] = mapped_column(String(32), nullable=False)
    target_locale: Mapped[str] = mapped_column(String(16), nullable=False)
    engine: Mapped[str] = mapped_column(String(32), nullable=False)
    text: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TranslationStatus.NEW.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    __table_args__ = (
        UniqueConstraint(
            "source_key", "target_locale", "engine", name="uq_translation_key"
        ),
        Index("ix_translation_locale", "target_locale"),
    )


REQUIRED_TABLES = (LsSource.__tablename__, LsTranslation.__tablename__)
