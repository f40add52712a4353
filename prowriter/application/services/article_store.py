"""文章草稿持久化网关。

向导只依赖 `ArticleStore` 协议；默认实现基于 SQLAlchemy 仓储，
同步数据库操作通过 `run_in_executor` 移出事件循环，每次调用使用独立 Session。
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar, runtime_checkable
from uuid import uuid4

from sqlalchemy.orm import Session

from prowriter.application.repositories.generated_article_repository import (
    GeneratedArticleRepository,
)
from prowriter.domain.article import (
    ArticleDraft,
    ArticleStatus,
    Section,
    normalize_topic,
)
from prowriter.domain.entities.generated_article import GeneratedArticle
from prowriter.shared.db import run_in_session
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)

T = TypeVar("T")


@runtime_checkable
class ArticleStore(Protocol):
    """草稿持久化协议（按主题去重）。"""

    async def find_by_topic(self, topic: str) -> ArticleDraft | None: ...

    async def upsert(self, draft: ArticleDraft) -> ArticleDraft: ...

    async def delete(self, article_id: str) -> bool: ...

    async def list_all(self) -> list[ArticleDraft]: ...


def serialize_sections(sections: tuple[Section, ...]) -> list[dict[str, Any]]:
    """序列化章节；加载中标记从不落库。"""
    out = []
    for index, s in enumerate(sections):
        data = s.to_dict()
        data["order"] = index
        data["is_generating"] = False
        out.append(data)
    return out


def to_draft(entity: GeneratedArticle) -> ArticleDraft:
    sections = tuple(
        Section.from_dict(item, order=index)
        for index, item in enumerate(entity.sections or [])
        if isinstance(item, dict)
    )
    try:
        status = ArticleStatus(entity.status)
    except ValueError:
        status = ArticleStatus.DRAFT
    return ArticleDraft(
        topic=entity.topic,
        sections=sections,
        status=status,
        full_text=entity.full_content or "",
        id=entity.id,
        publish_metadata=entity.publish_metadata,
    )


class SqlArticleStore:
    """基于 SQLAlchemy 的草稿存储。"""

    def __init__(self, session_factory: Callable[[], Session], *, case_insensitive: bool = True):
        self._session_factory = session_factory
        self.case_insensitive = case_insensitive

    def topic_key(self, topic: str) -> str:
        return normalize_topic(topic, self.case_insensitive)

    async def _run(self, fn: Callable[[GeneratedArticleRepository], T]) -> T:
        return await run_in_session(
            self._session_factory, lambda session: fn(GeneratedArticleRepository(session))
        )

    # ============== 同步实现（在线程池中执行） ==============

    def _find_by_topic(self, repo: GeneratedArticleRepository, topic: str) -> ArticleDraft | None:
        entity = repo.get_by_topic_key(self.topic_key(topic))
        if entity is None:
            return None
        if entity.topic.strip() != (topic or "").strip():
            # 主题只在大小写/空白上不同也会命中同一份草稿
            log.warning(
                "article_store.topic_collision",
                extra=log_extra(requested=topic, stored=entity.topic, article_id=entity.id),
            )
        return to_draft(entity)

    def _upsert(self, repo: GeneratedArticleRepository, draft: ArticleDraft) -> ArticleDraft:
        key = self.topic_key(draft.topic)
        entity = repo.get_by_topic_key(key)
        sections = serialize_sections(draft.sections)
        if entity is None:
            entity = GeneratedArticle(
                id=str(uuid4()),
                topic=draft.topic.strip(),
                topic_key=key,
                sections=sections,
                full_content=draft.full_text,
                publish_metadata=draft.publish_metadata,
                status=draft.status.value,
            )
            entity = repo.create(entity)
        else:
            entity.sections = sections
            entity.full_content = draft.full_text
            if draft.publish_metadata is not None:
                entity.publish_metadata = draft.publish_metadata
            entity.status = draft.status.value
            entity = repo.update(entity)
        return to_draft(entity)

    # ============== 协议实现 ==============

    async def find_by_topic(self, topic: str) -> ArticleDraft | None:
        return await self._run(lambda repo: self._find_by_topic(repo, topic))

    async def upsert(self, draft: ArticleDraft) -> ArticleDraft:
        return await self._run(lambda repo: self._upsert(repo, draft))

    async def delete(self, article_id: str) -> bool:
        return await self._run(lambda repo: repo.delete(article_id))

    async def list_all(self) -> list[ArticleDraft]:
        return await self._run(lambda repo: [to_draft(e) for e in repo.list(limit=1000)])

    async def get(self, article_id: str) -> ArticleDraft | None:
        def _get(repo: GeneratedArticleRepository) -> ArticleDraft | None:
            entity = repo.get_by_id(article_id)
            return to_draft(entity) if entity is not None else None

        return await self._run(_get)
