"""LLM 运行时封装服务。

根据配置构建对话模型（ChatOpenAI / ChatOllama），
按 scope 从提示词注册表构建 `prompt | llm | StrOutputParser()` runnable，
并通过信号量限制进程内同时在途的 LLM 请求数。
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from prowriter.shared.config import Settings
from prowriter.shared.constants.prompts import DEFAULT_PROMPTS
from prowriter.shared.errors import AppError, ConfigurationError


class PromptNotFoundError(AppError):
    def __init__(self, scope: str):
        super().__init__(
            code="prompt_not_found",
            message=f"未找到提示词: {scope}",
            status_code=500,
            details={"scope": scope},
        )


class ProviderNotSupportedError(AppError):
    def __init__(self, provider_type: str):
        super().__init__(
            code="provider_not_supported",
            message=f"不支持的 provider_type: {provider_type}",
            status_code=400,
        )


class LLMRuntimeService:
    """LLM 运行时服务。"""

    PROVIDER_OPENAI_COMPATIBLE = "openai_compatible"
    PROVIDER_OLLAMA = "ollama"

    def __init__(self, settings: Settings, prompts: dict[str, dict[str, Any]] | None = None):
        self.settings = settings
        self.prompts = prompts if prompts is not None else DEFAULT_PROMPTS
        self._semaphore: asyncio.Semaphore | None = None

    # ============== 并发控制 ==============

    @asynccontextmanager
    async def acquire_llm_slot(self) -> AsyncIterator[None]:
        """获取一个 LLM 调用槽位（信号量在首次使用时于当前事件循环中创建）。"""
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(max(1, int(self.settings.llm_max_concurrency)))
        async with self._semaphore:
            yield

    # ============== 构建接口 ==============

    def build_runnable(self, scope: str, *, json_mode: bool = False):
        """构建指定 scope 的 runnable（提示词 + 模型 + 字符串解析）。"""
        prompt_template = self._build_prompt(scope)
        llm = self.build_chat_model(json_mode=json_mode)
        return prompt_template | llm | StrOutputParser()

    async def ainvoke(self, scope: str, payload: dict[str, Any], *, json_mode: bool = False) -> str:
        runnable = self.build_runnable(scope, json_mode=json_mode)
        async with self.acquire_llm_slot():
            raw = await runnable.ainvoke(payload)
        return str(raw or "").strip()

    def build_chat_model(self, *, json_mode: bool = False) -> BaseChatModel:
        """构建对话模型。"""
        s = self.settings
        provider_type = (s.llm_provider or "").strip().lower()

        if provider_type == self.PROVIDER_OPENAI_COMPATIBLE:
            api_key = self._resolve_api_key()
            params: dict[str, Any] = {
                "model": s.llm_model,
                "api_key": api_key,
            }
            if s.openai_base_url:
                params["base_url"] = s.openai_base_url
            if s.llm_temperature is not None:
                params["temperature"] = s.llm_temperature
            if s.llm_timeout_seconds is not None:
                # langchain-openai: ChatOpenAI(timeout=...)
                params["timeout"] = s.llm_timeout_seconds
            if json_mode:
                params["model_kwargs"] = {"response_format": {"type": "json_object"}}
            return ChatOpenAI(**params)

        if provider_type == self.PROVIDER_OLLAMA:
            params = {"model": s.llm_model, "base_url": s.ollama_base_url}
            if s.llm_temperature is not None:
                params["temperature"] = s.llm_temperature
            if json_mode:
                # 官方 langchain-ollama ChatOllama 支持 format="json"
                params["format"] = "json"
            return ChatOllama(**params)

        raise ProviderNotSupportedError(s.llm_provider)

    def _build_prompt(self, scope: str) -> ChatPromptTemplate:
        data = self.prompts.get(scope)
        if not data or not data.get("messages"):
            raise PromptNotFoundError(scope)
        return ChatPromptTemplate.from_messages(
            [(msg["role"], msg["content"]) for msg in data["messages"]]
        )

    def _resolve_api_key(self) -> str:
        api_key = self.settings.resolve_openai_api_key()
        if not api_key:
            raise ConfigurationError(
                message="缺少 OpenAI API Key：请设置 PROWRITER_OPENAI_API_KEY 或 OPENAI_API_KEY",
                details={"env": ["PROWRITER_OPENAI_API_KEY", "OPENAI_API_KEY"]},
            )
        return api_key
