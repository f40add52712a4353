"""编辑会话注册表（进程内）。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from uuid import uuid4

from prowriter.application.services.wizard.errors import SessionNotFoundError
from prowriter.application.services.wizard.service import ArticleWizard
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)


@dataclass
class WizardSession:
    id: str
    wizard: ArticleWizard
    created_at: datetime = field(default_factory=datetime.utcnow)


class WizardSessionRegistry:
    def __init__(self, wizard_factory: Callable[[], ArticleWizard]):
        self._wizard_factory = wizard_factory
        self._sessions: dict[str, WizardSession] = {}

    def create(self) -> WizardSession:
        session = WizardSession(id=uuid4().hex, wizard=self._wizard_factory())
        self._sessions[session.id] = session
        log.info("wizard.session_created", extra=log_extra(session_id=session.id))
        return session

    def get(self, session_id: str) -> WizardSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def close(self, session_id: str) -> None:
        """写入挂起的自动保存后移除会话。"""
        session = self.get(session_id)
        await session.wizard.close()
        self._sessions.pop(session_id, None)
        log.info("wizard.session_closed", extra=log_extra(session_id=session_id))

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
