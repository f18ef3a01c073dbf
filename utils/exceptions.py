"""
统一异常定义模块
提供服务特定的异常类和错误响应格式
"""

from typing import Optional, Dict, Any


class QuoteServiceError(Exception):
    """服务基础异常类"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(QuoteServiceError):
    """配置相关错误"""
    default_message = "Invalid configuration"


class UnauthorizedError(QuoteServiceError):
    """缺少或格式错误的认证头"""
    status_code = 401
    default_message = "Unauthorized access"


class ForbiddenError(QuoteServiceError):
    """令牌校验失败或身份不匹配"""
    status_code = 403
    default_message = "Forbidden access"


class NotFoundError(QuoteServiceError):
    """目标文档不存在"""
    status_code = 404
    default_message = "Quote not found"


class InvalidOperationError(QuoteServiceError):
    """违反业务规则"""
    status_code = 403
    default_message = "Operation not allowed"


class InvalidIdError(QuoteServiceError):
    """无法解析的文档ID"""
    status_code = 400
    default_message = "Invalid quote id"


class InvalidRequestBodyError(QuoteServiceError):
    """请求体不是合法的JSON对象"""
    status_code = 400
    default_message = "Invalid request body"


class StoreError(QuoteServiceError):
    """存储不可达或操作失败"""
    status_code = 500
    default_message = "Internal server error"


# 错误代码常量
class ErrorCodes:
    """错误代码常量"""

    # 配置错误
    CONFIG_NOT_FOUND = "CONFIG_001"
    CONFIG_INVALID_FORMAT = "CONFIG_002"
    CONFIG_MISSING_KEY = "CONFIG_003"

    # 认证错误
    AUTH_MISSING_HEADER = "AUTH_001"
    AUTH_MALFORMED_HEADER = "AUTH_002"
    AUTH_TOKEN_REJECTED = "AUTH_003"
    AUTH_OWNERSHIP_MISMATCH = "AUTH_004"
    AUTH_PROVIDER_NOT_READY = "AUTH_005"

    # 存储错误
    DB_CONNECTION_FAILED = "DB_001"
    DB_QUERY_FAILED = "DB_002"
    DB_WRITE_FAILED = "DB_003"
    DB_INVALID_ID = "DB_004"

    # 业务错误
    QUOTE_NOT_FOUND = "QUOTE_001"
    QUOTE_NOT_OWNED = "QUOTE_002"
    QUOTE_ALREADY_APPROVED = "QUOTE_003"

    # 请求错误
    REQUEST_INVALID_BODY = "REQ_001"


def create_error_response(error: QuoteServiceError) -> Dict[str, Any]:
    """创建对外的错误响应体"""
    if error.status_code >= 500:
        # 服务端错误细节只写日志，不返回给客户端
        return {"message": StoreError.default_message}
    return {"message": error.message}
