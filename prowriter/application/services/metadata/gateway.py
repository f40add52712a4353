"""发布元数据生成网关。"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

import openai
from pydantic import ValidationError

from prowriter.application.schemas.catalog import PublishedArticleResponse
from prowriter.application.schemas.publish_metadata import AIConfig, PublishMetadata
from prowriter.application.services.llm_runtime_service import LLMRuntimeService
from prowriter.application.services.metadata.prompts import SCOPE_PUBLISH_METADATA
from prowriter.shared.errors import AppError, ConfigurationError, GenerationFailedError
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)


@runtime_checkable
class MetadataGateway(Protocol):
    async def generate(
        self,
        *,
        article_text: str,
        topic: str,
        known_articles: Sequence[PublishedArticleResponse],
        categories: Sequence[str],
        config: AIConfig,
    ) -> PublishMetadata: ...


def build_articles_context(known_articles: Sequence[PublishedArticleResponse]) -> str:
    if not known_articles:
        return "There is no list of previously published articles for internal linking."
    lines = "\n".join(f"- Title: {a.title} | URL: {a.url}" for a in known_articles)
    return f"These are the articles currently published on the site, for internal linking:\n{lines}"


def build_categories_context(categories: Sequence[str]) -> str:
    if not categories:
        return "No categories are defined yet; suggest suitable general categories."
    lines = "\n".join(f"- {name}" for name in categories)
    return (
        f"These are the categories available on the site:\n{lines}\n"
        "Pick the most suitable categories from this list."
    )


def build_teaser_rules(teaser_prompts: Sequence[str]) -> str:
    return "\n".join(
        f'   - Teaser {index}: must follow this rule: "{rule}"'
        for index, rule in enumerate(teaser_prompts, start=1)
    )


def parse_publish_metadata(raw: str) -> PublishMetadata:
    """解析模型输出（容忍 ```json 代码块包裹）。"""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.lower().startswith("json"):
            text = text[4:].strip()
    return PublishMetadata.model_validate_json(text)


class LLMMetadataGateway:
    """基于 LLMRuntimeService 的发布元数据网关（单次请求，JSON 模式，不重试）。"""

    def __init__(self, *, llm_runtime_service: LLMRuntimeService):
        self.llm_runtime_service = llm_runtime_service

    async def generate(
        self,
        *,
        article_text: str,
        topic: str,
        known_articles: Sequence[PublishedArticleResponse],
        categories: Sequence[str],
        config: AIConfig,
    ) -> PublishMetadata:
        payload = {
            "system_instruction": config.system_instruction,
            "language": self.llm_runtime_service.settings.content_language,
            "topic": topic,
            "article_text": article_text,
            "articles_context": build_articles_context(known_articles),
            "categories_context": build_categories_context(categories),
            "categories_count": config.categories_count,
            "titles_count": config.titles_count,
            "titles_instruction": config.titles_instruction,
            "keywords_count": config.keywords_count,
            "teasers_count": len(config.teaser_prompts),
            "teaser_rules": build_teaser_rules(config.teaser_prompts),
            "linking_count": config.linking_count,
            "sources_count": config.sources_count,
        }
        try:
            raw = await self.llm_runtime_service.ainvoke(
                SCOPE_PUBLISH_METADATA, payload, json_mode=True
            )
        except AppError:
            raise
        except openai.AuthenticationError as exc:
            raise ConfigurationError(
                message="OpenAI API Key 无效或已失效",
                code="llm_api_key_invalid",
            ) from exc
        except Exception as exc:
            log.exception(
                "metadata.llm_call_failed",
                extra=log_extra(topic=topic, error=str(exc), type=exc.__class__.__name__),
            )
            raise GenerationFailedError(details={"scope": SCOPE_PUBLISH_METADATA}) from exc

        try:
            result = parse_publish_metadata(raw)
        except ValidationError as exc:
            log.warning(
                "metadata.invalid_response",
                extra=log_extra(topic=topic, error=str(exc), raw=raw[:500]),
            )
            raise GenerationFailedError(
                message="模型返回的发布信息格式无效",
                code="metadata_invalid",
            ) from exc
        log.info(
            "metadata.generated",
            extra=log_extra(topic=topic, titles=len(result.titles), keywords=len(result.keywords)),
        )
        return result
