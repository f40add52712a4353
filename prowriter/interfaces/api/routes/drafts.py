"""已保存草稿 API 路由。"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from prowriter.application.schemas.draft import DraftDetail, DraftListResponse, DraftSummary
from prowriter.application.services.article_store import SqlArticleStore
from prowriter.interfaces.api.deps import get_article_store

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.get("", response_model=DraftListResponse, summary="列出草稿")
async def list_drafts(store: SqlArticleStore = Depends(get_article_store)):
    drafts = await store.list_all()
    return DraftListResponse(
        items=[DraftSummary.from_draft(d) for d in drafts],
        total=len(drafts),
    )


@router.get("/{article_id}", response_model=DraftDetail, summary="获取草稿")
async def get_draft(article_id: str, store: SqlArticleStore = Depends(get_article_store)):
    draft = await store.get(article_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="草稿不存在")
    return DraftDetail.from_draft(draft)


@router.delete("/{article_id}", status_code=204, summary="删除草稿")
async def delete_draft(article_id: str, store: SqlArticleStore = Depends(get_article_store)):
    if not await store.delete(article_id):
        raise HTTPException(status_code=404, detail="草稿不存在")
