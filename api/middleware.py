"""
Middleware for the quote service API.
Provides CORS, request logging and the uniform error boundary.
"""

import time
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from utils import (
    api_logger, config_manager, QuoteServiceError, StoreError, InvalidRequestBodyError, create_error_response,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        # 只记录路径，查询参数和请求头可能包含令牌
        api_logger.info(f"[API] {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            api_logger.error(f"[API] {request.method} {request.url.path} - ERROR - {process_time:.3f}s - {e}")
            raise

        process_time = time.time() - start_time
        api_logger.info(f"[API] {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """错误处理中间件：兜底所有未处理异常"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except QuoteServiceError as e:
            return service_error_response(e)
        except Exception as e:
            api_logger.error(f"[API] Unexpected error: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"message": StoreError.default_message})


def service_error_response(error: QuoteServiceError) -> JSONResponse:
    """按错误分类生成响应"""
    if error.status_code >= 500:
        api_logger.error(f"[API] {error}")
    else:
        api_logger.warning(f"[API] {error}")
    return JSONResponse(status_code=error.status_code, content=create_error_response(error))


async def quote_service_error_handler(request: Request, exc: QuoteServiceError) -> JSONResponse:
    return service_error_response(exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """框架产生的HTTP错误（未知路由、方法不允许等）"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    api_logger.warning(f"[API] Invalid request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": InvalidRequestBodyError.default_message})


def setup_cors(app: FastAPI):
    """设置CORS"""
    cors_origins = config_manager.get_api_config().cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        # 通配符来源不能与凭据一起使用
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_exception_handlers(app: FastAPI):
    """注册统一的错误边界"""
    app.add_exception_handler(QuoteServiceError, quote_service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


def setup_middleware(app: FastAPI):
    """设置所有中间件"""
    setup_exception_handlers(app)

    # 后添加的中间件在外层
    app.add_middleware(ErrorHandlingMiddleware)
    setup_cors(app)
    app.add_middleware(LoggingMiddleware)

    api_logger.info("[API] Middleware setup completed")
