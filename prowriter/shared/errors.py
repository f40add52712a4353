from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AppError(Exception):
    code: str
    message: str
    status_code: int = 400
    details: dict[str, Any] | None = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class ConfigurationError(AppError):
    """必需的凭据/配置缺失（不自动重试，单独提示给用户）。"""

    def __init__(
        self,
        message: str,
        code: str = "llm_api_key_missing",
        status_code: int = 503,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, status_code=status_code, details=details)


class GenerationFailedError(AppError):
    """LLM 网络/供应商错误（大纲或章节生成失败）。"""

    def __init__(
        self,
        message: str = "generation failed",
        code: str = "generation_failed",
        status_code: int = 502,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, status_code=status_code, details=details)


def error_response(
    *,
    code: str,
    message: str,
    request_id: str | None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "request_id": request_id,
        }
    }
    if details is not None:
        payload["error"]["details"] = details
    return payload


ERROR_INTERNAL = "internal_error"
ERROR_VALIDATION = "validation_error"
