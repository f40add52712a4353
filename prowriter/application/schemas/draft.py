"""已保存草稿 Pydantic 模型。"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from prowriter.application.schemas.wizard import SectionResponse
from prowriter.domain.article import ArticleDraft


class DraftSummary(BaseModel):
    id: str
    topic: str
    status: str
    section_count: int
    completed: int

    @classmethod
    def from_draft(cls, draft: ArticleDraft) -> "DraftSummary":
        return cls(
            id=draft.id or "",
            topic=draft.topic,
            status=draft.status.value,
            section_count=len(draft.sections),
            completed=sum(1 for s in draft.sections if s.has_content),
        )


class DraftDetail(DraftSummary):
    sections: list[SectionResponse]
    full_text: str
    publish_metadata: dict[str, Any] | None

    @classmethod
    def from_draft(cls, draft: ArticleDraft) -> "DraftDetail":
        summary = DraftSummary.from_draft(draft)
        return cls(
            **summary.model_dump(),
            sections=[SectionResponse(**s.to_dict()) for s in draft.sections],
            full_text=draft.full_text,
            publish_metadata=draft.publish_metadata,
        )


class DraftListResponse(BaseModel):
    items: list[DraftSummary]
    total: int
