from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from prowriter.interfaces.api.deps import get_db

router = APIRouter()


@router.get("/health")
def health(request: Request, db: Session = Depends(get_db)):
    settings = request.app.state.settings

    db_status = False
    try:
        db.execute(text("SELECT 1"))
        db_status = True
    except Exception:
        pass

    return {
        "status": "ok" if db_status else "error",
        "version": "0.1.0",
        "components": {
            "db": db_status,
            "llm_configured": bool(
                settings.llm_provider != "openai_compatible" or settings.resolve_openai_api_key()
            ),
        },
        "info": {
            "db": {
                "type": "hosted" if settings.database_url else "SQLite",
                "path": "" if settings.database_url else str(settings.sqlite_path),
                "description": "草稿、站点目录与设置存储",
            },
            "llm": {
                "provider": settings.llm_provider,
                "model": settings.llm_model,
            },
            "wizard_sessions": len(request.app.state.wizard_sessions),
        },
    }
