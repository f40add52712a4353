"""站点目录服务：已发布文章与分类。

两个列表读取频繁（每次生成发布信息都会用到），由一个显式的 TTLCache 缓存，
任何写操作都会使对应缓存失效。
"""

from __future__ import annotations

import time
from typing import Callable
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from prowriter.application.repositories.catalog_repository import (
    CategoryRepository,
    PublishedArticleRepository,
)
from prowriter.application.schemas.catalog import CategoryResponse, PublishedArticleResponse
from prowriter.domain.entities.category import Category
from prowriter.domain.entities.published_article import PublishedArticle
from prowriter.shared.cache import TTLCache
from prowriter.shared.db import run_in_session
from prowriter.shared.errors import AppError
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)

CACHE_KEY_ARTICLES = "published_articles"
CACHE_KEY_CATEGORIES = "categories"


class CategoryExistsError(AppError):
    def __init__(self, name: str):
        super().__init__(
            code="category_exists",
            message=f"分类已存在: {name}",
            status_code=409,
            details={"name": name},
        )


class CatalogService:
    """站点目录服务类。"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        cache_ttl_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._session_factory = session_factory
        self.cache: TTLCache[list] = TTLCache(cache_ttl_seconds, clock=clock)

    # ============== 已发布文章 ==============

    async def list_articles(self) -> list[PublishedArticleResponse]:
        cached = self.cache.get(CACHE_KEY_ARTICLES)
        if cached is not None:
            return list(cached)

        def _list(session: Session) -> list[PublishedArticleResponse]:
            return [
                PublishedArticleResponse.model_validate(a)
                for a in PublishedArticleRepository(session).list()
            ]

        items = await run_in_session(self._session_factory, _list)
        self.cache.set(CACHE_KEY_ARTICLES, items)
        return list(items)

    async def add_article(self, title: str, url: str) -> PublishedArticleResponse:
        def _create(session: Session) -> PublishedArticleResponse:
            article = PublishedArticle(id=str(uuid4()), title=title.strip(), url=url.strip())
            return PublishedArticleResponse.model_validate(
                PublishedArticleRepository(session).create(article)
            )

        item = await run_in_session(self._session_factory, _create)
        self.cache.invalidate(CACHE_KEY_ARTICLES)
        log.info("catalog.article_added", extra=log_extra(article_id=item.id))
        return item

    async def delete_article(self, article_id: str) -> bool:
        deleted = await run_in_session(
            self._session_factory,
            lambda session: PublishedArticleRepository(session).delete(article_id),
        )
        self.cache.invalidate(CACHE_KEY_ARTICLES)
        return deleted

    async def delete_all_articles(self) -> int:
        deleted = await run_in_session(
            self._session_factory,
            lambda session: PublishedArticleRepository(session).delete_all(),
        )
        self.cache.invalidate(CACHE_KEY_ARTICLES)
        log.info("catalog.articles_cleared", extra=log_extra(deleted=deleted))
        return deleted

    # ============== 分类 ==============

    async def list_categories(self) -> list[CategoryResponse]:
        cached = self.cache.get(CACHE_KEY_CATEGORIES)
        if cached is not None:
            return list(cached)

        def _list(session: Session) -> list[CategoryResponse]:
            return [CategoryResponse.model_validate(c) for c in CategoryRepository(session).list()]

        items = await run_in_session(self._session_factory, _list)
        self.cache.set(CACHE_KEY_CATEGORIES, items)
        return list(items)

    async def add_category(self, name: str) -> CategoryResponse:
        name = name.strip()

        def _create(session: Session) -> CategoryResponse:
            repo = CategoryRepository(session)
            if repo.get_by_name(name) is not None:
                raise CategoryExistsError(name)
            try:
                category = repo.create(Category(id=str(uuid4()), name=name))
            except IntegrityError:
                session.rollback()
                raise CategoryExistsError(name) from None
            return CategoryResponse.model_validate(category)

        item = await run_in_session(self._session_factory, _create)
        self.cache.invalidate(CACHE_KEY_CATEGORIES)
        log.info("catalog.category_added", extra=log_extra(category_id=item.id, name=name))
        return item

    async def delete_category(self, category_id: str) -> bool:
        deleted = await run_in_session(
            self._session_factory,
            lambda session: CategoryRepository(session).delete(category_id),
        )
        self.cache.invalidate(CACHE_KEY_CATEGORIES)
        return deleted

    async def delete_all_categories(self) -> int:
        deleted = await run_in_session(
            self._session_factory,
            lambda session: CategoryRepository(session).delete_all(),
        )
        self.cache.invalidate(CACHE_KEY_CATEGORIES)
        log.info("catalog.categories_cleared", extra=log_extra(deleted=deleted))
        return deleted
