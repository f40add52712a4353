"""生成网关：大纲与章节正文。"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import openai

from prowriter.application.services.generation.outline_utils import parse_outline_titles
from prowriter.application.services.generation.prompts import (
    NO_INSTRUCTION_FALLBACK,
    SCOPE_GENERATE_OUTLINE,
    SCOPE_GENERATE_SECTION,
)
from prowriter.application.services.llm_runtime_service import LLMRuntimeService
from prowriter.shared.errors import AppError, ConfigurationError, GenerationFailedError
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)


@runtime_checkable
class GenerationGateway(Protocol):
    """向导依赖的生成协议。

    失败时必须区分：凭据缺失/无效（ConfigurationError）与其他失败（GenerationFailedError）。
    """

    async def generate_outline(self, topic: str) -> list[str]: ...

    async def generate_section(self, topic: str, title: str, instruction: str) -> str: ...


class LLMGenerationGateway:
    """基于 LLMRuntimeService 的生成网关。"""

    def __init__(self, *, llm_runtime_service: LLMRuntimeService, section_count: int = 10):
        self.llm_runtime_service = llm_runtime_service
        self.section_count = section_count

    async def generate_outline(self, topic: str) -> list[str]:
        """返回模型给出的标题（数量不保证，由向导补齐/截断）。"""
        raw = await self._invoke(
            SCOPE_GENERATE_OUTLINE,
            {
                "topic": topic,
                "section_count": self.section_count,
                "language": self.llm_runtime_service.settings.content_language,
            },
            json_mode=True,
        )
        titles = parse_outline_titles(raw)
        log.info(
            "generation.outline_parsed",
            extra=log_extra(topic=topic, titles=len(titles)),
        )
        return titles

    async def generate_section(self, topic: str, title: str, instruction: str) -> str:
        content = await self._invoke(
            SCOPE_GENERATE_SECTION,
            {
                "topic": topic,
                "title": title,
                "instruction": (instruction or "").strip() or NO_INSTRUCTION_FALLBACK,
                "language": self.llm_runtime_service.settings.content_language,
            },
        )
        if not content:
            raise GenerationFailedError(
                message="模型返回了空内容，请重试",
                details={"title": title},
            )
        return content

    async def _invoke(self, scope: str, payload: dict[str, Any], *, json_mode: bool = False) -> str:
        try:
            return await self.llm_runtime_service.ainvoke(scope, payload, json_mode=json_mode)
        except AppError:
            raise
        except openai.AuthenticationError as exc:
            raise ConfigurationError(
                message="OpenAI API Key 无效或已失效",
                code="llm_api_key_invalid",
            ) from exc
        except Exception as exc:
            log.exception(
                "generation.llm_call_failed",
                extra=log_extra(scope=scope, error=str(exc), type=exc.__class__.__name__),
            )
            raise GenerationFailedError(details={"scope": scope}) from exc
