"""
配置管理模块
合并 config/*.json，应用环境变量覆盖，并提供类型化的配置段
"""

import json
import logging
import os
from typing import Any, Optional, Dict, List, Type, TypeVar
from dataclasses import dataclass, field, fields
from pathlib import Path
from urllib.parse import quote_plus

from dotenv import load_dotenv

from .exceptions import ConfigurationError, ErrorCodes
from .path_utils import CONFIG_DIR, ENV_FILE

config_logger = logging.getLogger("Config")

S = TypeVar('S')


# ============================================================================
# 配置段
# ============================================================================

@dataclass
class LoggingModuleConfig:
    level: str = "INFO"
    enabled: bool = True

@dataclass
class FileLoggingConfig:
    enabled: bool = True
    directory: str = "log"
    filename: str = "sys.log"
    rotation: Optional[Dict[str, Any]] = None

@dataclass
class ConsoleLoggingConfig:
    enabled: bool = True

@dataclass
class LoggingConfig:
    """logging_config 段"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_config: FileLoggingConfig = field(default_factory=FileLoggingConfig)
    console_config: ConsoleLoggingConfig = field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, LoggingModuleConfig] = field(default_factory=dict)

@dataclass
class DatabaseConfig:
    """database_config 段：连接信息和集合名"""
    uri: str = ""
    username: str = ""
    password: str = ""
    cluster_host: str = "cluster0.tz1fhvr.mongodb.net"
    app_name: str = "Cluster0"
    database_name: str = "ilmora"
    quotes_collection: str = "quotes"
    admins_collection: str = "admins"
    enroll_database: str = "eduflexDB"
    enroll_collection: str = "enrolled"
    server_selection_timeout_ms: int = 5000

    def build_uri(self) -> str:
        """生成连接字符串，显式配置的uri优先"""
        if self.uri:
            return self.uri
        if not (self.username and self.password):
            raise ConfigurationError(
                "Database credentials are not configured (set MONGODB_URI or DB_USER/DB_PASS)",
                ErrorCodes.CONFIG_MISSING_KEY
            )
        return (
            f"mongodb+srv://{quote_plus(self.username)}:{quote_plus(self.password)}"
            f"@{self.cluster_host}/?retryWrites=true&w=majority&appName={self.app_name}"
        )

@dataclass
class AuthConfig:
    """auth_config 段"""
    credentials_path: str = "firebaseAccessTokenKey.json"
    project_id: Optional[str] = None
    check_revoked: bool = False
    admin_email: str = "admin@ilmora.com"

@dataclass
class ApiConfig:
    """api_config 段"""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 1
    reload: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


# 环境变量 -> (配置路径, 类型)
ENV_OVERRIDES = {
    "PORT": ("api_config.port", int),
    "HOST": ("api_config.host", str),
    "MONGODB_URI": ("database_config.uri", str),
    "DB_USER": ("database_config.username", str),
    "DB_PASS": ("database_config.password", str),
    "FIREBASE_CREDENTIALS": ("auth_config.credentials_path", str),
    "ADMIN_EMAIL": ("auth_config.admin_email", str),
}

SECRET_KEYS = {"password", "uri"}

# 需要转换类型的整数字段（JSON 中可能写成字符串）
INT_FIELDS = {"port", "workers", "server_selection_timeout_ms"}


def build_section(section_cls: Type[S], data: Dict[str, Any]) -> S:
    """用配置字典填充数据类，未知键忽略，缺失键取默认值"""
    values = {}
    for f in fields(section_cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in INT_FIELDS and value is not None:
            try:
                value = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"{section_cls.__name__}.{f.name} must be an integer, got {value!r}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                ) from e
        values[f.name] = value
    return section_cls(**values)


class UnifiedConfigManager:
    """
    Merged view over every ``*.json`` file in the config directory.

    Files are merged in name order, later top-level keys replacing earlier
    ones, then environment overrides from ``ENV_OVERRIDES`` are applied
    (a ``.env`` file in the project root is loaded first when present).
    Typed sections are built lazily and cached until the next mutation.
    """

    def __init__(self, config_dir: Optional[str] = None, load_env: bool = True):
        self._config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self._load_env = load_env
        self._config_data: Dict[str, Any] = {}
        self._typed_cache: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        if not self._config_dir.is_dir():
            raise ConfigurationError(
                f"Configuration path is not a directory: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND
            )

        config_files = sorted(self._config_dir.glob('*.json'))
        if not config_files:
            raise ConfigurationError(
                f"No configuration files (.json) found in: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND
            )

        merged: Dict[str, Any] = {}
        for config_file in config_files:
            try:
                merged.update(json.loads(config_file.read_text(encoding='utf-8')))
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid JSON in configuration file {config_file.name}: {e}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                ) from e

        self._config_data = merged
        self._typed_cache.clear()
        if self._load_env:
            self._apply_env_overrides()

        config_logger.info(f"Loaded {len(config_files)} configuration files from {self._config_dir}")

    def _apply_env_overrides(self) -> None:
        if ENV_FILE.exists():
            load_dotenv(ENV_FILE)

        for env_name, (path, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if not raw:
                continue
            try:
                self.set_nested(path, cast(raw))
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for environment variable {env_name}: {raw!r}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                ) from e
            config_logger.debug(f"Environment override applied: {env_name} -> {path}")

    # ========================================================================
    # 原始数据访问
    # ========================================================================

    def get_nested(self, path: str, default: Any = None) -> Any:
        """点分隔路径取值，例如 'api_config.port'"""
        node: Any = self._config_data
        for key in path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def set_nested(self, path: str, value: Any) -> None:
        *parents, leaf = path.split('.')
        node = self._config_data
        for key in parents:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[leaf] = value
        self._typed_cache.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._config_data

    def __getitem__(self, key: str) -> Any:
        return self._config_data[key]

    # ========================================================================
    # 类型化配置段
    # ========================================================================

    def _section(self, name: str, section_cls: Type[S]) -> S:
        if name not in self._typed_cache:
            self._typed_cache[name] = build_section(section_cls, self.get_nested(name, {}) or {})
        return self._typed_cache[name]

    def get_api_config(self) -> ApiConfig:
        return self._section('api_config', ApiConfig)

    def get_database_config(self) -> DatabaseConfig:
        return self._section('database_config', DatabaseConfig)

    def get_auth_config(self) -> AuthConfig:
        return self._section('auth_config', AuthConfig)

    def get_logging_config(self) -> LoggingConfig:
        """日志配置包含嵌套段，单独解析"""
        if 'logging_config' not in self._typed_cache:
            data = self.get_nested('logging_config', {}) or {}
            config = build_section(LoggingConfig, {
                k: v for k, v in data.items()
                if k not in ('file_config', 'console_config', 'modules')
            })
            config.file_config = build_section(FileLoggingConfig, data.get('file_config') or {})
            config.console_config = build_section(ConsoleLoggingConfig, data.get('console_config') or {})
            config.modules = {
                name: build_section(LoggingModuleConfig, module_data or {})
                for name, module_data in (data.get('modules') or {}).items()
            }
            self._typed_cache['logging_config'] = config
        return self._typed_cache['logging_config']

    # ========================================================================
    # 导出与更新
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self._config_data))

    def to_masked_dict(self) -> Dict[str, Any]:
        """敏感字段（密码、连接串）替换为 ***"""
        def _mask(node: Any) -> Any:
            if not isinstance(node, dict):
                return node
            return {
                key: '***' if key in SECRET_KEYS and value else _mask(value)
                for key, value in node.items()
            }

        return _mask(self.to_dict())

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """按顶层键替换配置"""
        self._config_data.update(config_dict)
        self._typed_cache.clear()
        config_logger.info("Configuration updated from dict")


config_manager = UnifiedConfigManager()
