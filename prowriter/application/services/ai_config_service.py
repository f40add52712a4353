"""发布元数据 AI 配置服务（存储在 app_settings 表）。"""

from __future__ import annotations

from typing import Callable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from prowriter.application.repositories.app_setting_repository import AppSettingRepository
from prowriter.application.schemas.publish_metadata import AIConfig
from prowriter.shared.db import run_in_session
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)

SETTING_KEY_AI_CONFIG = "ai_config"


class AIConfigService:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    async def get(self) -> AIConfig:
        """读取配置；不存在或无法解析时返回默认值。"""
        value = await run_in_session(
            self._session_factory,
            lambda session: _setting_value(AppSettingRepository(session), SETTING_KEY_AI_CONFIG),
        )
        if not value:
            return AIConfig()
        try:
            return AIConfig.model_validate(value)
        except ValidationError as exc:
            log.warning(
                "ai_config.invalid_stored_value",
                extra=log_extra(error=str(exc)),
            )
            return AIConfig()

    async def save(self, config: AIConfig) -> AIConfig:
        data = config.model_dump()
        await run_in_session(
            self._session_factory,
            lambda session: AppSettingRepository(session).upsert(SETTING_KEY_AI_CONFIG, data),
        )
        log.info("ai_config.saved")
        return config


def _setting_value(repo: AppSettingRepository, key: str) -> dict | None:
    setting = repo.get(key)
    return setting.setting_value if setting is not None else None
