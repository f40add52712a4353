from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from prowriter.application.services.ai_config_service import AIConfigService
from prowriter.application.services.article_store import SqlArticleStore
from prowriter.application.services.catalog_service import CatalogService
from prowriter.application.services.expansion_methods import ExpansionMethodLibrary
from prowriter.application.services.generation.gateway import LLMGenerationGateway
from prowriter.application.services.llm_runtime_service import LLMRuntimeService
from prowriter.application.services.metadata.flow import PublishMetadataFlow
from prowriter.application.services.metadata.gateway import LLMMetadataGateway
from prowriter.application.services.wizard.service import ArticleWizard
from prowriter.application.services.wizard.sessions import WizardSessionRegistry
from prowriter.shared.config import get_settings
from prowriter.shared.db import init_db, make_engine, make_session_factory
from prowriter.shared.errors import (
    AppError,
    ERROR_INTERNAL,
    ERROR_VALIDATION,
    error_response,
)
from prowriter.shared.logging import configure_logging, get_logger
from prowriter.shared.request_id import get_request_id, new_request_id, set_request_id

log = get_logger(__name__)


def _build_wizard_factory(app: FastAPI):
    """向导工厂：每次创建时从 app.state 读取网关（测试可替换为假实现）。"""
    settings = app.state.settings

    def _factory() -> ArticleWizard:
        state = app.state
        return ArticleWizard(
            generation_gateway=state.generation_gateway,
            article_store=state.article_store,
            method_library=state.method_library,
            metadata_flow=PublishMetadataFlow(
                gateway=state.metadata_gateway,
                catalog_service=state.catalog_service,
                ai_config_service=state.ai_config_service,
            ),
            section_count=settings.outline_section_count,
            autosave_delay_seconds=settings.autosave_debounce_seconds,
        )

    return _factory


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    # 退出前写入所有会话挂起的自动保存
    await app.state.wizard_sessions.close_all()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="ProWriter API", version="0.1.0", lifespan=_lifespan)

    # `allow_credentials=True` 时浏览器不接受 `*`，默认仅放行本地开发前端
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    engine = make_engine(settings.sqlite_path, settings.database_url)
    init_db(engine)
    session_factory = make_session_factory(engine)

    runtime = LLMRuntimeService(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.llm_runtime = runtime
    app.state.generation_gateway = LLMGenerationGateway(
        llm_runtime_service=runtime,
        section_count=settings.outline_section_count,
    )
    app.state.metadata_gateway = LLMMetadataGateway(llm_runtime_service=runtime)
    app.state.article_store = SqlArticleStore(
        session_factory,
        case_insensitive=settings.topic_case_insensitive,
    )
    app.state.catalog_service = CatalogService(
        session_factory,
        cache_ttl_seconds=settings.catalog_cache_ttl_seconds,
    )
    app.state.ai_config_service = AIConfigService(session_factory)
    app.state.method_library = ExpansionMethodLibrary()
    app.state.wizard_sessions = WizardSessionRegistry(_build_wizard_factory(app))

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or new_request_id()
        set_request_id(rid)
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                code=exc.code,
                message=exc.message,
                request_id=get_request_id(),
                details=exc.details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                code=ERROR_VALIDATION,
                message="request validation failed",
                request_id=get_request_id(),
                details={"errors": exc.errors()},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                code=f"http_{exc.status_code}",
                message=exc.detail if isinstance(exc.detail, str) else "http error",
                request_id=get_request_id(),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("unhandled_error")
        return JSONResponse(
            status_code=500,
            content=error_response(
                code=ERROR_INTERNAL,
                message="internal server error",
                request_id=get_request_id(),
                details={"error": str(exc), "type": exc.__class__.__name__},
            ),
        )

    from prowriter.interfaces.api.routes.catalog import router as catalog_router
    from prowriter.interfaces.api.routes.drafts import router as drafts_router
    from prowriter.interfaces.api.routes.health import router as health_router
    from prowriter.interfaces.api.routes.methods import router as methods_router
    from prowriter.interfaces.api.routes.metadata import router as metadata_router
    from prowriter.interfaces.api.routes.settings import router as settings_router
    from prowriter.interfaces.api.routes.wizard import router as wizard_router

    app.include_router(health_router, prefix="/v1")
    app.include_router(wizard_router, prefix="/v1")
    app.include_router(metadata_router, prefix="/v1")
    app.include_router(drafts_router, prefix="/v1")
    app.include_router(methods_router, prefix="/v1")
    app.include_router(catalog_router, prefix="/v1")
    app.include_router(settings_router, prefix="/v1")

    return app

