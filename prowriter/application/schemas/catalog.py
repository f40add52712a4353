"""站点目录 Pydantic 模型。"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PublishedArticleCreate(BaseModel):
    """新增已发布文章请求。"""

    title: str = Field(..., min_length=1, max_length=512, description="文章标题")
    url: str = Field(..., min_length=1, max_length=1024, description="文章链接")


class PublishedArticleResponse(BaseModel):
    """已发布文章响应。"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    url: str
    created_at: datetime


class CategoryCreate(BaseModel):
    """新增分类请求。"""

    name: str = Field(..., min_length=1, max_length=256, description="分类名称")


class CategoryResponse(BaseModel):
    """分类响应。"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime


class PublishedArticleListResponse(BaseModel):
    items: list[PublishedArticleResponse]
    total: int


class CategoryListResponse(BaseModel):
    items: list[CategoryResponse]
    total: int


class DeleteAllResponse(BaseModel):
    deleted: int
