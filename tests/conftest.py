from __future__ import annotations

import asyncio
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence
from uuid import uuid4

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from prowriter.application.schemas.publish_metadata import (
    AIConfig,
    LinkingSuggestion,
    PublishMetadata,
)
from prowriter.domain.article import ArticleDraft, normalize_topic
from prowriter.shared.config import reset_settings_for_tests


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeGenerationGateway:
    """可控的生成网关：记录调用，并统计同时在途的章节请求数。"""

    def __init__(self, titles: list[str] | None = None, delay: float = 0.0):
        self.titles = titles if titles is not None else [f"Title {i}" for i in range(1, 11)]
        self.delay = delay
        self.outline_calls: list[str] = []
        self.section_calls: list[str] = []
        self.outline_error: Exception | None = None
        self.section_errors: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None
        self.active = 0
        self.max_active = 0

    async def generate_outline(self, topic: str) -> list[str]:
        self.outline_calls.append(topic)
        if self.outline_error is not None:
            raise self.outline_error
        return list(self.titles)

    async def generate_section(self, topic: str, title: str, instruction: str) -> str:
        self.section_calls.append(title)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.gate is not None:
                await self.gate.wait()
            error = self.section_errors.get(title)
            if error is not None:
                raise error
            return f"Content for {title}"
        finally:
            self.active -= 1


class InMemoryArticleStore:
    """按规范化主题去重的内存草稿存储。"""

    def __init__(self):
        self.drafts: dict[str, ArticleDraft] = {}
        self.upserts: list[ArticleDraft] = []
        self.fail_upsert = False
        self.fail_lookup = False

    async def find_by_topic(self, topic: str) -> ArticleDraft | None:
        if self.fail_lookup:
            raise RuntimeError("lookup failed")
        return self.drafts.get(normalize_topic(topic))

    async def upsert(self, draft: ArticleDraft) -> ArticleDraft:
        if self.fail_upsert:
            raise RuntimeError("db down")
        key = normalize_topic(draft.topic)
        existing = self.drafts.get(key)
        saved = replace(draft, id=existing.id if existing else uuid4().hex)
        self.drafts[key] = saved
        self.upserts.append(saved)
        return saved

    async def delete(self, article_id: str) -> bool:
        for key, draft in list(self.drafts.items()):
            if draft.id == article_id:
                del self.drafts[key]
                return True
        return False

    async def list_all(self) -> list[ArticleDraft]:
        return list(self.drafts.values())


class FakeMetadataGateway:
    def __init__(self):
        self.calls: list[dict] = []
        self.error: Exception | None = None

    async def generate(
        self,
        *,
        article_text: str,
        topic: str,
        known_articles: Sequence,
        categories: Sequence[str],
        config: AIConfig,
    ) -> PublishMetadata:
        self.calls.append(
            {
                "article_text": article_text,
                "topic": topic,
                "known_articles": list(known_articles),
                "categories": list(categories),
                "config": config,
            }
        )
        if self.error is not None:
            raise self.error
        return PublishMetadata(
            slug="fake-slug",
            suggested_categories=list(categories)[:2] or ["General"],
            titles=["Title A", "Title B"],
            keywords=["k1", "k2"],
            teasers=["Teaser 1", "Teaser 2"],
            linking_suggestions=[LinkingSuggestion(title="Linked", url="https://example.com/a")],
            sources=["Doe, J. (2020). Study."],
        )


@pytest.fixture
def fake_generation() -> FakeGenerationGateway:
    return FakeGenerationGateway()


@pytest.fixture
def memory_store() -> InMemoryArticleStore:
    return InMemoryArticleStore()


@pytest.fixture
def fake_metadata() -> FakeMetadataGateway:
    return FakeMetadataGateway()


@pytest.fixture
def sqlite_session_factory(tmp_path: Path):
    from prowriter.shared.db import init_db, make_engine, make_session_factory

    engine = make_engine(tmp_path / "sqlite" / "test.db")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
async def api_client(tmp_path: Path, fake_generation, fake_metadata):
    """API 客户端：每个用例独立的 SQLite 文件，生成网关替换为假实现。"""
    sqlite_path = tmp_path / "runtime" / "sqlite" / "test.db"

    os.environ["PROWRITER_SQLITE_PATH"] = str(sqlite_path)
    os.environ["PROWRITER_DATABASE_URL"] = ""
    # 禁用加载 .env 文件，防止本地配置干扰测试
    os.environ["PROWRITER_DISABLE_DOTENV"] = "1"
    os.environ["PROWRITER_AUTOSAVE_DEBOUNCE_SECONDS"] = "0.01"

    reset_settings_for_tests()

    from prowriter.interfaces.api.app import create_app

    app = create_app()
    app.state.generation_gateway = fake_generation
    app.state.metadata_gateway = fake_metadata

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        client.app = app  # type: ignore[attr-defined]
        yield client

    await app.state.wizard_sessions.close_all()
    app.state.engine.dispose()
    reset_settings_for_tests()
