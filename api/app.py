"""
FastAPI application for the quote service.
Main application entry point for the API server.
"""

import uvicorn
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from auth import FirebaseTokenVerifier, TokenVerifier
from database import MongoManager
from utils import api_logger, config_manager, utc_now, StoreError, __version__

from .dependencies import QuoteServices
from .middleware import setup_middleware
from .models import HealthResponse
from .routes import router

LIVENESS_MESSAGE = "Crud Server is Running !"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    api_logger.info("[API] Starting Quote Service API...")

    owns_mongo = app.state.mongo_manager is None
    if owns_mongo:
        mongo = MongoManager()
        mongo.initialize()
        try:
            await mongo.ping()
        except StoreError as e:
            # 不阻止应用启动，请求时由存储层报错
            api_logger.error(f"[API] Database ping failed at startup: {e}")
        app.state.mongo_manager = mongo
        app.state.services = QuoteServices.build(mongo, config_manager.get_auth_config())

    if app.state.token_verifier is None:
        verifier = FirebaseTokenVerifier()
        verifier.initialize()
        app.state.token_verifier = verifier

    yield

    api_logger.info("[API] Shutting down Quote Service API...")
    if owns_mongo:
        app.state.mongo_manager.close()
        app.state.mongo_manager = None
        app.state.services = None


def create_app(mongo_manager: Optional[MongoManager] = None,
               token_verifier: Optional[TokenVerifier] = None) -> FastAPI:
    """创建应用；未注入的依赖在启动时按配置创建"""
    app = FastAPI(
        title="Quote Service API",
        description="Quote submission and moderation API",
        version=__version__,
        lifespan=lifespan
    )

    app.state.mongo_manager = mongo_manager
    app.state.token_verifier = token_verifier
    app.state.services = (
        QuoteServices.build(mongo_manager, config_manager.get_auth_config())
        if mongo_manager is not None else None
    )

    setup_middleware(app)
    app.include_router(router)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root():
        """根路径"""
        return LIVENESS_MESSAGE

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check():
        """健康检查端点"""
        return {
            "status": "healthy",
            "timestamp": utc_now(),
            "version": __version__
        }

    return app


app = create_app()


if __name__ == "__main__":
    api_config = config_manager.get_api_config()
    api_logger.info(f"[API] Starting server on {api_config.host}:{api_config.port}")

    if api_config.reload:
        uvicorn.run("api.app:app", host=api_config.host, port=api_config.port, reload=True, log_level="info")
    else:
        uvicorn.run(app, host=api_config.host, port=api_config.port, log_level="info")
