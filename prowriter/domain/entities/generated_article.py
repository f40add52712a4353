"""生成文章（草稿）实体。"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...shared.db import Base


class GeneratedArticle(Base):
    """生成文章表。

    以规范化后的主题（topic_key）作为业务唯一键：同一主题只保留一份草稿。
    """

    __tablename__ = "generated_articles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID
    topic: Mapped[str] = mapped_column(String(512), nullable=False)  # 用户输入的原始主题
    topic_key: Mapped[str] = mapped_column(
        String(512), nullable=False, unique=True, index=True
    )  # 规范化主题（去空白 + 大小写折叠）

    sections: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    full_content: Mapped[str | None] = mapped_column(Text, nullable=True)  # 派生全文
    publish_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="draft"
    )  # draft/ready/published

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
