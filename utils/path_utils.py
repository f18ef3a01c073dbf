"""
项目路径常量
"""

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

# 配置目录、日志目录和可选的 .env 文件
CONFIG_DIR = BASE_DIR / 'config'
LOG_DIR = BASE_DIR / 'log'
ENV_FILE = BASE_DIR / '.env'
