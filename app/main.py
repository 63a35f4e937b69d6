import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from app.ai.adapter import AIAnalysisAdapter
from app.api.v1.ai import router as ai_router
from app.api.v1.analyze import router as analyze_router
from app.api.v1.auth import router as auth_router
from app.api.v1.chat import router as chat_router
from app.api.v1.health import router as health_router
from app.api.v1.resume import router as resume_router
from app.api.v1.upload import router as upload_router
from app.core.config import Settings, load_settings
from app.core.cors import cors_allowed_origins
from app.core.errors import register_error_handlers
from app.core.lifespan import lifespan
from app.core.rate_limit import configure_rate_limit, limiter
from app.storage.documents import DocumentStore


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    logging.basicConfig(level=settings.log_level, format="%(message)s")
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.app_env)

    app = FastAPI(title="Resume Optimizer API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = DocumentStore(settings.database_path)
    app.state.ai_adapter = AIAnalysisAdapter(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    configure_rate_limit(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    register_error_handlers(app, expose_details=not settings.is_production)

    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(auth_router, prefix="/api", tags=["Auth"])
    app.include_router(upload_router, prefix="/api", tags=["Upload"])
    app.include_router(analyze_router, prefix="/api", tags=["Analyze"])
    app.include_router(resume_router, prefix="/api", tags=["Resume"])
    app.include_router(chat_router, prefix="/api", tags=["Chat"])
    app.include_router(ai_router, prefix="/api", tags=["AI"])
    return app


app = create_app()
