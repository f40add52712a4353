"""设置 API 路由。"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from prowriter.application.schemas.publish_metadata import AIConfig
from prowriter.application.services.ai_config_service import AIConfigService
from prowriter.interfaces.api.deps import get_ai_config_service

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get(
    "/ai-config",
    response_model=AIConfig,
    response_model_by_alias=False,
    summary="获取发布信息 AI 配置",
)
async def get_ai_config(service: AIConfigService = Depends(get_ai_config_service)):
    return await service.get()


@router.put(
    "/ai-config",
    response_model=AIConfig,
    response_model_by_alias=False,
    summary="保存发布信息 AI 配置",
)
async def save_ai_config(
    payload: AIConfig,
    service: AIConfigService = Depends(get_ai_config_service),
):
    return await service.save(payload)
