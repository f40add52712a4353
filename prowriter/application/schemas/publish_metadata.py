"""发布元数据与 AI 配置 Pydantic 模型。

模型返回的 JSON 使用 camelCase 键（suggestedCategories / linkingSuggestions），
这里统一用别名接收，对外序列化使用 snake_case。
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are an expert editorial assistant specialised in search engine optimisation (SEO) "
    "and engaging content."
)
DEFAULT_TITLES_INSTRUCTION = (
    "Titles should vary between news style, analytical and curiosity-driven."
)
DEFAULT_TEASER_PROMPTS = [
    "A curiosity-provoking question that makes the reader click",
    "The most important fact of the story in an urgent, concise style",
    "Addressed to a specific audience (e.g. teachers, employees)",
    "A warning or alert style (watch out, beware)",
    "A mysterious summary of the story without revealing the ending",
]


class LinkingSuggestion(BaseModel):
    """内部链接建议。"""

    title: str = ""
    url: str = ""


class PublishMetadata(BaseModel):
    """发布元数据（一次生成的完整结果）。"""

    model_config = ConfigDict(populate_by_name=True)

    slug: str = ""
    suggested_categories: list[str] = Field(default_factory=list, alias="suggestedCategories")
    titles: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    teasers: list[str] = Field(default_factory=list)
    linking_suggestions: list[LinkingSuggestion] = Field(
        default_factory=list, alias="linkingSuggestions"
    )
    sources: list[str] = Field(default_factory=list)


class AIConfig(BaseModel):
    """发布元数据生成配置（数量与提示词）。"""

    model_config = ConfigDict(populate_by_name=True)

    titles_count: int = Field(10, ge=0, le=50, alias="titlesCount")
    keywords_count: int = Field(10, ge=0, le=50, alias="keywordsCount")
    linking_count: int = Field(3, ge=0, le=50, alias="linkingCount")
    categories_count: int = Field(5, ge=0, le=50, alias="categoriesCount")
    sources_count: int = Field(5, ge=0, le=50, alias="sourcesCount")
    system_instruction: str = Field(DEFAULT_SYSTEM_INSTRUCTION, alias="systemInstruction")
    titles_instruction: str = Field(DEFAULT_TITLES_INSTRUCTION, alias="titlesInstruction")
    teaser_prompts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TEASER_PROMPTS), alias="teaserPrompts"
    )


class MetadataItemUpdate(BaseModel):
    """编辑列表字段中的单项。"""

    field: str = Field(..., description="titles / keywords / teasers / sources / suggested_categories")
    index: int = Field(..., ge=0)
    value: str


class MetadataLinkUpdate(BaseModel):
    """编辑内部链接建议中的单项。"""

    index: int = Field(..., ge=0)
    key: str = Field(..., description="title / url")
    value: str


class MetadataStateResponse(BaseModel):
    """发布信息状态。"""

    has_generated: bool
    is_generating: bool
    last_error: str | None
    result: PublishMetadata


class MetadataCopyResponse(BaseModel):
    text: str
