"""
日志管理模块
根日志器的处理器配置、模块日志器和操作耗时上下文
"""

import logging
import re
import sys
import time
import traceback
import threading
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Any, List
from dataclasses import dataclass
from collections import defaultdict

from .exceptions import ConfigurationError, ErrorCodes
from .config_manager import config_manager, LoggingModuleConfig
from .path_utils import LOG_DIR

logger = logging.getLogger("LoggingManager")

# Authorization 头的值不能进入日志
BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.=+/]+")


@dataclass
class LogConfig:
    """日志配置"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_max_bytes: int = 10 * 1024 * 1024
    file_backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = True
    log_directory: Optional[str] = None
    log_filename: str = "sys.log"

    @property
    def log_path(self) -> Path:
        return Path(self.log_directory or LOG_DIR) / self.log_filename


class TokenRedactingFilter(logging.Filter):
    """把消息中的 Bearer 令牌替换为 ***"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = BEARER_PATTERN.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class LoggingManager:
    """进程级日志管理器（单例）"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._setup()
        return cls._instance

    def _setup(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._config = LogConfig()
        self._metrics = defaultdict(int)
        self._handlers: List[logging.Handler] = []

    @property
    def config(self) -> LogConfig:
        return self._config

    def configure(self, config: Optional[LogConfig] = None):
        """按配置替换根日志器的处理器"""
        if config is not None:
            self._config = config

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self._config.level.upper(), logging.INFO))

        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = self._build_handlers()
        for handler in self._handlers:
            root_logger.addHandler(handler)

    def _build_handlers(self) -> List[logging.Handler]:
        formatter = logging.Formatter(self._config.format, datefmt=self._config.date_format)
        redactor = TokenRedactingFilter()
        handlers: List[logging.Handler] = []

        if self._config.enable_console:
            # 控制台日志走 stderr，stdout 留给命令输出
            handlers.append(logging.StreamHandler(sys.stderr))

        if self._config.enable_file:
            log_path = self._config.log_path
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(
                filename=log_path,
                maxBytes=self._config.file_max_bytes,
                backupCount=self._config.file_backup_count,
                encoding="utf-8"
            ))

        for handler in handlers:
            handler.setFormatter(formatter)
            handler.addFilter(redactor)
        return handlers

    def configure_from_config_file(self):
        """读取 logging_config 并应用"""
        logging_config = config_manager.get_logging_config()
        file_config = logging_config.file_config

        rotation = file_config.rotation or {}
        if not isinstance(rotation, dict):
            raise ConfigurationError(
                "logging_config.file_config.rotation must be an object",
                ErrorCodes.CONFIG_INVALID_FORMAT
            )

        # 相对目录以项目根目录为基准
        log_directory = Path(file_config.directory)
        if not log_directory.is_absolute():
            log_directory = LOG_DIR.parent / log_directory

        self.configure(LogConfig(
            level=logging_config.level,
            format=logging_config.format,
            date_format=logging_config.date_format,
            file_max_bytes=int(rotation.get('max_bytes_mb', 10)) * 1024 * 1024,
            file_backup_count=int(rotation.get('backup_count', 5)),
            enable_console=logging_config.console_config.enabled,
            enable_file=file_config.enabled,
            log_directory=str(log_directory),
            log_filename=file_config.filename
        ))
        self.apply_module_levels(logging_config.modules)
        return logging_config

    def apply_module_levels(self, modules: Dict[str, LoggingModuleConfig]):
        """设置模块日志级别，禁用的模块只保留 CRITICAL"""
        for name, module_config in modules.items():
            level = module_config.level.upper() if module_config.enabled else "CRITICAL"
            self.get_logger(name).setLevel(getattr(logging, level, logging.INFO))

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        name = name or "quoteservice"
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]

    def record(self, key: str):
        self._metrics[key] += 1

    def get_metrics(self) -> Dict[str, int]:
        """按 模块.操作_阶段 统计的计数"""
        return dict(self._metrics)

    def reset_metrics(self):
        self._metrics.clear()


class LogContext:
    """
    Time one operation and log its outcome on the module logger.

    Start and success go to DEBUG, failures to ERROR with the traceback at
    DEBUG. Exceptions are never suppressed. Context values that are None are
    left out of the log prefix.
    """

    def __init__(self, module: str, operation: Optional[str] = None, **context):
        self.module = module
        self.operation = operation
        self.extra_context = {k: v for k, v in context.items() if v is not None}
        self.logger = logging_manager.get_logger(module)
        self._started: Optional[float] = None

    @property
    def metric_key(self) -> str:
        return ".".join(p for p in (self.module, self.operation) if p)

    def _get_context_str(self) -> str:
        fields = [f"{key}:{value}" for key, value in self.extra_context.items()]
        return ".".join([self.metric_key] + fields)

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"[{self._get_context_str()}] Starting operation")
        logging_manager.record(f"{self.metric_key}_started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self._started
        prefix = self._get_context_str()

        if exc_type is None:
            self.logger.debug(f"[{prefix}] Operation completed in {elapsed:.3f}s")
            logging_manager.record(f"{self.metric_key}_completed")
            return False

        self.logger.error(f"[{prefix}] Operation failed in {elapsed:.3f}s: {exc_val}")
        self.logger.debug(f"[{prefix}] Traceback: {''.join(traceback.format_tb(exc_tb))}")
        logging_manager.record(f"{self.metric_key}_failed")
        return False


logging_manager = LoggingManager()


class ModuleLoggers:
    """服务各组件的日志器"""

    API = logging_manager.get_logger("API")
    Auth = logging_manager.get_logger("Auth")
    Database = logging_manager.get_logger("Database")
    Config = logging_manager.get_logger("Config")
    Main = logging_manager.get_logger("Main")

    @classmethod
    def get_logger(cls, module_name: str):
        return logging_manager.get_logger(module_name)


api_logger = ModuleLoggers.API
auth_logger = ModuleLoggers.Auth
db_logger = ModuleLoggers.Database
config_logger = ModuleLoggers.Config
main_logger = ModuleLoggers.Main


def initialize_logging(use_config_file: bool = True) -> bool:
    """初始化日志；配置文件不可用时退回到仅控制台输出"""
    if use_config_file:
        try:
            logging_manager.configure_from_config_file()
            logger.info("Logging system initialized from config file")
            return True
        except (ConfigurationError, OSError) as e:
            print(f"Failed to initialize logging from config file: {e}", file=sys.stderr)
            print("Falling back to console-only logging...", file=sys.stderr)

    logging_manager.configure(LogConfig(enable_file=False))
    logger.info("Logging system initialized with console output only")
    return True
