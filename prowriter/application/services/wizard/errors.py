"""文章向导错误定义。"""

from __future__ import annotations

from typing import Any

from prowriter.shared.errors import AppError


class WizardValidationError(AppError):
    """同步拒绝的操作（不产生任何状态变化）。"""

    def __init__(
        self,
        message: str,
        code: str = "wizard_validation_error",
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            code=code,
            details=details,
        )


class SectionNotFoundError(WizardValidationError):
    def __init__(self, section_id: str):
        super().__init__(
            message=f"章节不存在: {section_id}",
            code="section_not_found",
            status_code=404,
            details={"section_id": section_id},
        )


class SessionNotFoundError(AppError):
    def __init__(self, session_id: str):
        super().__init__(
            message=f"编辑会话不存在: {session_id}",
            code="session_not_found",
            status_code=404,
            details={"session_id": session_id},
        )
