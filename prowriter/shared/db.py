from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

T = TypeVar("T")


class Base(DeclarativeBase):
    """SQLAlchemy 声明式基类。"""


def make_engine(sqlite_path: Path, database_url: str = ""):
    """创建数据库引擎。

    配置了托管数据库 URL 时直接使用；否则回退到本地 SQLite 文件。
    """
    if database_url:
        return create_engine(database_url, future=True, pool_pre_ping=True)
    sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite+pysqlite:///{sqlite_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(engine) -> None:
    # 导入所有实体以注册到 Base.metadata
    import prowriter.domain.entities  # noqa: F401

    Base.metadata.create_all(engine)


async def run_in_session(session_factory: Callable[[], Session], fn: Callable[[Session], T]) -> T:
    """在线程池中用独立 Session 执行同步数据库操作。"""
    loop = asyncio.get_running_loop()

    def _do() -> T:
        with session_factory() as session:
            return fn(session)

    return await loop.run_in_executor(None, _do)
