"""文章领域记录：章节、扩写方法与状态。

这些记录均为不可变值对象，修改通过 `dataclasses.replace` 生成新实例。
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable


class ArticleStatus(str, Enum):
    """草稿状态。"""

    DRAFT = "draft"
    READY = "ready"
    PUBLISHED = "published"  # 仅由外部发布流程写入


class MethodCategory(str, Enum):
    """扩写方法分类。"""

    ANALYSIS = "Analysis"
    NARRATIVE = "Narrative"
    STRATEGIC = "Strategic"
    DATA = "Data"
    CONTEXT = "Context"


def new_section_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Section:
    """文章中的一个章节。

    `order` 只是序列位置的投影，序列化时按位置重新计算，不作为独立事实保存。
    """

    id: str
    title: str
    instruction: str = ""
    content: str = ""
    is_generating: bool = False
    order: int = 0

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "instruction": self.instruction,
            "content": self.content,
            "is_generating": self.is_generating,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], order: int = 0) -> "Section":
        # 兼容旧数据中的 context 字段名
        instruction = data.get("instruction")
        if instruction is None:
            instruction = data.get("context") or ""
        return cls(
            id=str(data.get("id") or new_section_id()),
            title=str(data.get("title") or ""),
            instruction=str(instruction),
            content=str(data.get("content") or ""),
            is_generating=False,
            order=order,
        )


@dataclass(frozen=True)
class ExpansionMethod:
    """可复用的章节扩写策略模板。"""

    id: str
    name: str
    category: MethodCategory
    description: str
    instruction: str
    builtin: bool = field(default=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "description": self.description,
            "instruction": self.instruction,
            "builtin": self.builtin,
        }


def renumber(sections: Iterable[Section]) -> tuple[Section, ...]:
    """按序列位置重算 order。"""
    out = []
    for index, s in enumerate(sections):
        out.append(s if s.order == index else replace(s, order=index))
    return tuple(out)


def derive_status(sections: Iterable[Section]) -> ArticleStatus:
    """所有章节都有内容时为 ready，否则为 draft（空文章视为 draft）。"""
    items = list(sections)
    if items and all(s.has_content for s in items):
        return ArticleStatus.READY
    return ArticleStatus.DRAFT


def render_full_text(sections: Iterable[Section]) -> str:
    """拼接已生成章节的全文（派生值，不作为权威数据）。"""
    return "\n\n".join(
        f"## {s.title}\n\n{s.content}" for s in sections if s.content
    )


def render_article(topic: str, sections: Iterable[Section]) -> str:
    """预览用的完整 Markdown（包含文章标题与全部章节）。"""
    body = "\n\n".join(f"## {s.title}\n\n{s.content}" for s in sections)
    return f"# {topic}\n\n{body}".strip()


def normalize_topic(topic: str, case_insensitive: bool = True) -> str:
    s = (topic or "").strip()
    return s.casefold() if case_insensitive else s


@dataclass(frozen=True)
class ArticleDraft:
    """持久化层交换的草稿快照。"""

    topic: str
    sections: tuple[Section, ...]
    status: ArticleStatus = ArticleStatus.DRAFT
    full_text: str = ""
    id: str | None = None
    publish_metadata: dict[str, Any] | None = None

    @classmethod
    def from_sections(
        cls,
        topic: str,
        sections: Iterable[Section],
        *,
        id: str | None = None,
        publish_metadata: dict[str, Any] | None = None,
    ) -> "ArticleDraft":
        items = renumber(sections)
        return cls(
            topic=topic,
            sections=items,
            status=derive_status(items),
            full_text=render_full_text(items),
            id=id,
            publish_metadata=publish_metadata,
        )
