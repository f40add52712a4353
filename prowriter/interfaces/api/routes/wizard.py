"""文章向导 API 路由。"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from prowriter.application.schemas.wizard import (
    ApplyMethodRequest,
    CreateSessionRequest,
    GenerateAllResponse,
    GoToRequest,
    PreviewResponse,
    SectionResponse,
    SectionUpdate,
    StartWizardRequest,
    StartWizardResponse,
    WizardStateResponse,
)
from prowriter.application.services.wizard.sessions import WizardSession, WizardSessionRegistry
from prowriter.interfaces.api.deps import get_wizard_session, get_wizard_sessions

router = APIRouter(prefix="/wizard/sessions", tags=["wizard"])


def to_state_response(session: WizardSession) -> WizardStateResponse:
    return WizardStateResponse(session_id=session.id, **session.wizard.snapshot())


@router.post(
    "",
    response_model=StartWizardResponse,
    status_code=201,
    summary="创建编辑会话",
    description="创建会话；提供 topic 时立即恢复已有草稿或生成大纲。",
)
async def create_session(
    payload: CreateSessionRequest,
    sessions: WizardSessionRegistry = Depends(get_wizard_sessions),
):
    session = sessions.create()
    from_cache = False
    if payload.topic is not None:
        try:
            result = await session.wizard.start(payload.topic)
        except Exception:
            # 启动失败的会话没有任何状态，直接丢弃
            sessions.discard(session.id)
            raise
        from_cache = result.from_cache
    return StartWizardResponse(
        session_id=session.id,
        from_cache=from_cache,
        state=to_state_response(session),
    )


@router.get("/{session_id}", response_model=WizardStateResponse, summary="获取会话状态")
async def get_session(session: WizardSession = Depends(get_wizard_session)):
    return to_state_response(session)


@router.delete("/{session_id}", status_code=204, summary="关闭会话")
async def delete_session(
    session: WizardSession = Depends(get_wizard_session),
    sessions: WizardSessionRegistry = Depends(get_wizard_sessions),
):
    await sessions.close(session.id)


@router.post("/{session_id}/start", response_model=StartWizardResponse, summary="提交主题")
async def start(
    payload: StartWizardRequest,
    session: WizardSession = Depends(get_wizard_session),
):
    result = await session.wizard.start(payload.topic)
    return StartWizardResponse(
        session_id=session.id,
        from_cache=result.from_cache,
        state=to_state_response(session),
    )


# ============== 步骤导航 ==============


@router.post("/{session_id}/reset", response_model=WizardStateResponse, summary="重置会话")
async def reset(session: WizardSession = Depends(get_wizard_session)):
    await session.wizard.reset()
    return to_state_response(session)


@router.post("/{session_id}/advance", response_model=WizardStateResponse, summary="下一步")
async def advance(session: WizardSession = Depends(get_wizard_session)):
    session.wizard.advance()
    return to_state_response(session)


@router.post("/{session_id}/back", response_model=WizardStateResponse, summary="上一步")
async def back(session: WizardSession = Depends(get_wizard_session)):
    session.wizard.back()
    return to_state_response(session)


@router.post("/{session_id}/goto", response_model=WizardStateResponse, summary="跳转到步骤")
async def go_to(payload: GoToRequest, session: WizardSession = Depends(get_wizard_session)):
    await session.wizard.go_to(payload.step)
    return to_state_response(session)


# ============== 章节 ==============


@router.patch(
    "/{session_id}/sections/{section_id}",
    response_model=WizardStateResponse,
    summary="编辑章节标题/指令",
)
async def update_section(
    section_id: str,
    payload: SectionUpdate,
    session: WizardSession = Depends(get_wizard_session),
):
    wizard = session.wizard
    if payload.title is not None:
        wizard.update_section_title(section_id, payload.title)
    if payload.instruction is not None:
        wizard.update_section_instruction(section_id, payload.instruction)
    return to_state_response(session)


@router.delete(
    "/{session_id}/sections/{section_id}",
    response_model=WizardStateResponse,
    summary="删除章节",
)
async def delete_section(section_id: str, session: WizardSession = Depends(get_wizard_session)):
    session.wizard.delete_section(section_id)
    return to_state_response(session)


@router.post(
    "/{session_id}/sections/{section_id}/generate",
    response_model=SectionResponse | None,
    summary="生成单个章节",
)
async def generate_section(section_id: str, session: WizardSession = Depends(get_wizard_session)):
    section = await session.wizard.generate_one_section(section_id)
    return SectionResponse(**section.to_dict()) if section is not None else None


@router.post(
    "/{session_id}/sections/{section_id}/apply-method",
    response_model=WizardStateResponse,
    summary="应用扩写方法",
)
async def apply_method(
    section_id: str,
    payload: ApplyMethodRequest,
    session: WizardSession = Depends(get_wizard_session),
):
    session.wizard.apply_method(section_id, payload.method_id)
    return to_state_response(session)


@router.post(
    "/{session_id}/generate-remaining",
    response_model=GenerateAllResponse,
    summary="依次生成所有剩余章节",
)
async def generate_remaining(session: WizardSession = Depends(get_wizard_session)):
    result = await session.wizard.generate_all_remaining()
    return GenerateAllResponse(**result.to_dict(), state=to_state_response(session))


@router.get("/{session_id}/preview", response_model=PreviewResponse, summary="预览全文")
async def preview(session: WizardSession = Depends(get_wizard_session)):
    wizard = session.wizard
    return PreviewResponse(
        topic=wizard.topic,
        markdown=wizard.render_article(),
        progress=wizard.progress(),
    )
