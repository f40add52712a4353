"""站点目录 API 路由（已发布文章与分类）。"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from prowriter.application.schemas.catalog import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    DeleteAllResponse,
    PublishedArticleCreate,
    PublishedArticleListResponse,
    PublishedArticleResponse,
)
from prowriter.application.services.catalog_service import CatalogService
from prowriter.interfaces.api.deps import get_catalog_service

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/articles", response_model=PublishedArticleListResponse, summary="列出已发布文章")
async def list_articles(service: CatalogService = Depends(get_catalog_service)):
    items = await service.list_articles()
    return PublishedArticleListResponse(items=items, total=len(items))


@router.post(
    "/articles",
    response_model=PublishedArticleResponse,
    status_code=201,
    summary="新增已发布文章",
)
async def add_article(
    payload: PublishedArticleCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.add_article(payload.title, payload.url)


@router.delete("/articles", response_model=DeleteAllResponse, summary="清空已发布文章")
async def delete_all_articles(service: CatalogService = Depends(get_catalog_service)):
    return DeleteAllResponse(deleted=await service.delete_all_articles())


@router.delete("/articles/{article_id}", status_code=204, summary="删除已发布文章")
async def delete_article(article_id: str, service: CatalogService = Depends(get_catalog_service)):
    if not await service.delete_article(article_id):
        raise HTTPException(status_code=404, detail="文章不存在")


@router.get("/categories", response_model=CategoryListResponse, summary="列出分类")
async def list_categories(service: CatalogService = Depends(get_catalog_service)):
    items = await service.list_categories()
    return CategoryListResponse(items=items, total=len(items))


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=201,
    summary="新增分类",
)
async def add_category(
    payload: CategoryCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.add_category(payload.name)


@router.delete("/categories", response_model=DeleteAllResponse, summary="清空分类")
async def delete_all_categories(service: CatalogService = Depends(get_catalog_service)):
    return DeleteAllResponse(deleted=await service.delete_all_categories())


@router.delete("/categories/{category_id}", status_code=204, summary="删除分类")
async def delete_category(
    category_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    if not await service.delete_category(category_id):
        raise HTTPException(status_code=404, detail="分类不存在")
