#!/usr/bin/env python3
"""数据库初始化脚本。

用于创建所有数据表并写入默认的发布信息 AI 配置。适用于开发环境和首次部署。

使用方法：
    python scripts/init-db.py
"""

import sys
from pathlib import Path

# 允许从任意工作目录运行脚本：确保项目根目录在 sys.path 中
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from prowriter.application.repositories.app_setting_repository import AppSettingRepository
from prowriter.application.schemas.publish_metadata import AIConfig
from prowriter.application.services.ai_config_service import SETTING_KEY_AI_CONFIG
from prowriter.shared.config import get_settings
from prowriter.shared.db import Base, init_db, make_engine, make_session_factory


def seed_ai_config(engine) -> None:
    """写入默认 AI 配置（已存在时不覆盖）。"""
    session_factory = make_session_factory(engine)
    with session_factory() as session:
        repo = AppSettingRepository(session)
        if repo.get(SETTING_KEY_AI_CONFIG) is None:
            print(f"Seeding setting: {SETTING_KEY_AI_CONFIG}")
            repo.upsert(SETTING_KEY_AI_CONFIG, AIConfig().model_dump())


def main() -> None:
    """初始化数据库并创建所有表。"""
    settings = get_settings()

    engine = make_engine(Path(settings.sqlite_path), settings.database_url)
    init_db(engine)

    target = "hosted database" if settings.database_url else str(settings.sqlite_path)
    print(f"DB initialized: {target}")
    print("已创建的表:")
    for table in Base.metadata.tables.values():
        print(f"  - {table.name}")

    seed_ai_config(engine)


if __name__ == "__main__":
    main()
