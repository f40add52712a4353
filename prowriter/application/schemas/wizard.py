"""文章向导 Pydantic 模型。"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

WizardStepName = Literal[
    "setup",
    "outline",
    "knowledge_base",
    "writing",
    "preview",
    "publish_ready",
]


class StartWizardRequest(BaseModel):
    """提交主题请求。"""

    topic: str = Field(..., max_length=512, description="文章主题")


class CreateSessionRequest(BaseModel):
    """创建编辑会话；提供 topic 时立即开始。"""

    topic: str | None = Field(None, max_length=512, description="文章主题（可选）")


class SectionUpdate(BaseModel):
    """章节编辑请求（只修改提供的字段）。"""

    title: str | None = Field(None, max_length=512)
    instruction: str | None = Field(None, max_length=8000)


class GoToRequest(BaseModel):
    step: WizardStepName


class ApplyMethodRequest(BaseModel):
    method_id: str = Field(..., min_length=1, max_length=64)


class SectionResponse(BaseModel):
    id: str
    title: str
    instruction: str
    content: str
    is_generating: bool
    order: int


class ProgressResponse(BaseModel):
    completed: int
    total: int


class WizardStateResponse(BaseModel):
    """会话当前状态。"""

    session_id: str
    step: WizardStepName
    topic: str
    article_id: str | None
    status: str
    is_generating_outline: bool
    progress: ProgressResponse
    sections: list[SectionResponse]
    autosave_pending: bool


class StartWizardResponse(BaseModel):
    session_id: str
    from_cache: bool
    state: WizardStateResponse


class GenerateAllResponse(BaseModel):
    generated: list[str]
    failed: dict[str, str]
    skipped: list[str]
    state: WizardStateResponse


class PreviewResponse(BaseModel):
    topic: str
    markdown: str
    progress: ProgressResponse


class MethodCreate(BaseModel):
    """新增自定义扩写方法请求。"""

    name: str = Field(..., min_length=1, max_length=128)
    category: str = Field(..., description="Analysis / Narrative / Strategic / Data / Context")
    description: str = Field("", max_length=1024)
    instruction: str = Field(..., min_length=1, max_length=8000)


class MethodResponse(BaseModel):
    id: str
    name: str
    category: str
    description: str
    instruction: str
    builtin: bool
