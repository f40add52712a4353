"""发布信息 API 路由。"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from prowriter.application.schemas.publish_metadata import (
    MetadataCopyResponse,
    MetadataItemUpdate,
    MetadataLinkUpdate,
    MetadataStateResponse,
)
from prowriter.application.services.wizard.errors import WizardValidationError
from prowriter.application.services.wizard.sessions import WizardSession
from prowriter.interfaces.api.deps import get_wizard_session

router = APIRouter(prefix="/wizard/sessions/{session_id}/metadata", tags=["metadata"])


def _flow(session: WizardSession):
    if session.wizard.metadata is None:
        raise WizardValidationError(
            code="metadata_unavailable",
            message="当前会话未启用发布信息生成",
            status_code=409,
        )
    return session.wizard.metadata


@router.get(
    "",
    response_model=MetadataStateResponse,
    response_model_by_alias=False,
    summary="获取发布信息",
)
async def get_metadata(session: WizardSession = Depends(get_wizard_session)):
    return _flow(session).to_dict()


@router.post(
    "/generate",
    response_model=MetadataStateResponse,
    response_model_by_alias=False,
    summary="生成发布信息",
)
async def generate_metadata(session: WizardSession = Depends(get_wizard_session)):
    return await session.wizard.generate_metadata()


@router.patch(
    "/items",
    response_model=MetadataStateResponse,
    response_model_by_alias=False,
    summary="编辑列表项",
)
async def update_item(
    payload: MetadataItemUpdate,
    session: WizardSession = Depends(get_wizard_session),
):
    return session.wizard.update_metadata_item(payload.field, payload.index, payload.value)


@router.patch(
    "/links",
    response_model=MetadataStateResponse,
    response_model_by_alias=False,
    summary="编辑内链建议",
)
async def update_link(
    payload: MetadataLinkUpdate,
    session: WizardSession = Depends(get_wizard_session),
):
    return session.wizard.update_metadata_link(payload.index, payload.key, payload.value)


@router.get("/copy", response_model=MetadataCopyResponse, summary="复制全部发布信息")
async def copy_all(session: WizardSession = Depends(get_wizard_session)):
    return MetadataCopyResponse(text=_flow(session).copy_text())
