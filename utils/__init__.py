"""
工具模块包
提供项目所需的通用工具和功能
"""

# 导出核心工具
from .config_manager import (
    config_manager,
    UnifiedConfigManager,
    LoggingConfig,
    DatabaseConfig,
    AuthConfig,
    ApiConfig,
)
from .exceptions import (
    QuoteServiceError,
    ConfigurationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    InvalidOperationError,
    InvalidIdError,
    InvalidRequestBodyError,
    StoreError,
    ErrorCodes,
    create_error_response,
)
from .logging_manager import (
    LogContext,
    LogConfig,
    logging_manager,
    initialize_logging,
    ModuleLoggers,
    api_logger,
    auth_logger,
    db_logger,
    config_logger,
    main_logger,
)
from .date_utils import utc_now, to_iso
from .path_utils import BASE_DIR, CONFIG_DIR, LOG_DIR, ENV_FILE

# 版本信息
__version__ = "1.0.0"

__all__ = [
    # 配置管理
    "config_manager",
    "UnifiedConfigManager",
    "LoggingConfig",
    "DatabaseConfig",
    "AuthConfig",
    "ApiConfig",

    # 异常处理
    "QuoteServiceError",
    "ConfigurationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InvalidOperationError",
    "InvalidIdError",
    "InvalidRequestBodyError",
    "StoreError",
    "ErrorCodes",
    "create_error_response",

    # 日志工具
    "LogContext",
    "LogConfig",
    "logging_manager",
    "initialize_logging",
    "ModuleLoggers",
    "api_logger",
    "auth_logger",
    "db_logger",
    "config_logger",
    "main_logger",

    # 时间工具
    "utc_now",
    "to_iso",

    # 路径工具
    "BASE_DIR",
    "CONFIG_DIR",
    "LOG_DIR",
    "ENV_FILE",
]
