from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from prowriter.application.services.ai_config_service import AIConfigService
from prowriter.application.services.article_store import SqlArticleStore
from prowriter.application.services.catalog_service import CatalogService
from prowriter.application.services.expansion_methods import ExpansionMethodLibrary
from prowriter.application.services.wizard.sessions import WizardSession, WizardSessionRegistry


def get_db(request: Request) -> Iterator[Session]:
    session_factory = request.app.state.session_factory
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_wizard_sessions(request: Request) -> WizardSessionRegistry:
    return request.app.state.wizard_sessions


def get_wizard_session(session_id: str, request: Request) -> WizardSession:
    return request.app.state.wizard_sessions.get(session_id)


def get_article_store(request: Request) -> SqlArticleStore:
    return request.app.state.article_store


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_ai_config_service(request: Request) -> AIConfigService:
    return request.app.state.ai_config_service


def get_method_library(request: Request) -> ExpansionMethodLibrary:
    return request.app.state.method_library
