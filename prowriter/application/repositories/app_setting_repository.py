"""应用设置仓储层。"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from prowriter.domain.entities.app_setting import AppSetting


class AppSettingRepository:
    """应用设置仓储类。"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> AppSetting | None:
        return self.db.get(AppSetting, key)

    def upsert(self, key: str, value: Any) -> AppSetting:
        """按 key 写入设置（存在则覆盖）。"""
        setting = self.get(key)
        if setting is None:
            setting = AppSetting(setting_key=key, setting_value=value)
            self.db.add(setting)
        else:
            setting.setting_value = value
            setting.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(setting)
        return setting
