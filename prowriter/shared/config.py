from __future__ import annotations

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PROWRITER_", extra="ignore")

    api_host: str = "127.0.0.1"
    api_port: int = 7801

    # 托管数据库（如 Postgres）；为空时回退到本地 SQLite 文件
    database_url: str = ""
    sqlite_path: Path = Path(".runtime/sqlite/prowriter.db")

    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # ============== LLM 配置 ==============
    llm_provider: str = "openai_compatible"  # openai_compatible / ollama
    openai_api_key: str = ""
    openai_base_url: str = ""
    llm_model: str = "gpt-4o"
    llm_temperature: float | None = None
    llm_timeout_seconds: float | None = 120.0
    llm_max_concurrency: int = 4
    ollama_base_url: str = "http://localhost:11434"

    # 生成文章使用的语言（写入提示词）
    content_language: str = "English"

    # ============== 向导业务参数 ==============
    outline_section_count: int = 10
    topic_case_insensitive: bool = True
    autosave_debounce_seconds: float = 2.0

    # 已发布文章/分类列表缓存
    catalog_cache_ttl_seconds: float = 60.0

    def resolve_openai_api_key(self) -> str:
        """优先使用 PROWRITER_OPENAI_API_KEY，其次回退到通用的 OPENAI_API_KEY。"""
        key = (self.openai_api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if key == "PLACEHOLDER_KEY":
            return ""
        return key

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Settings | None = None


def _load_dotenv_into_environ(dotenv_path: Path = Path(".env")) -> None:
    """轻量加载 `.env` 到 os.environ（不覆盖已存在的环境变量）。

    说明：
    - OpenAI 密钥允许使用通用变量名 `OPENAI_API_KEY`，
      仅靠 pydantic-settings 的 env_file 无法让 `os.getenv` 读到它。
    - 因此这里实现一个最小 `.env` 解析器。
    """

    # 允许测试或部署环境显式禁用
    if os.getenv("PROWRITER_DISABLE_DOTENV") == "1":
        return

    if not dotenv_path.exists():
        return

    try:
        raw = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return

    for line in raw.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if "=" not in s:
            continue

        key, value = s.split("=", 1)
        key = key.strip()
        value = value.strip()

        if not key:
            continue

        # 去掉两侧引号
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]

        os.environ.setdefault(key, value)


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _load_dotenv_into_environ()
        _settings = Settings()
    return _settings


def reset_settings_for_tests() -> None:
    """仅用于测试：清空配置缓存，便于使用 monkeypatch 设置环境变量。"""
    global _settings
    _settings = None
