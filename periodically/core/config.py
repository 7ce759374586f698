"""
配置管理模块

设置按以下优先级合并（后者覆盖前者）：默认值、.env文件、PERIODICALLY_前缀的环境变量、
配置文件（YAML或JSON）。
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from periodically.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseSettings")

CONFIG_FILE_NAMES = ("periodically.yaml", "periodically.yml", "periodically.json")


def find_config_file(explicit_path: Optional[str] = None) -> Optional[Path]:
    """
    查找配置文件

    显式指定的路径必须存在；否则依次在当前目录和~/.periodically下查找默认文件名。

    Args:
        explicit_path: 显式指定的配置文件路径

    Returns:
        Optional[Path]: 配置文件路径，未找到返回None

    Raises:
        ConfigError: 显式指定的文件不存在
    """
    if explicit_path:
        path = Path(explicit_path)
        if not path.is_file():
            raise ConfigError(f"配置文件不存在: {path}", details={"path": str(path)})
        return path

    for directory in (Path.cwd(), Path.home() / ".periodically"):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    按扩展名解析配置文件，.json按JSON解析，其余按YAML解析

    Raises:
        ConfigError: 解析失败或顶层不是映射
    """
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"解析配置文件失败: {path}: {e}", details={"path": str(path)}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"配置文件顶层必须是映射: {path}", details={"path": str(path)})
    return data


def load_config_from_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """从配置文件加载配置字典，没有配置文件时返回空字典"""
    path = find_config_file(config_path)
    if path is None:
        logger.debug("未找到配置文件，将使用环境变量和默认值")
        return {}

    logger.info(f"已从 {path} 加载配置")
    return read_config_file(path)


def _merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    settings_class: Type[T],
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> T:
    """
    加载设置

    Args:
        settings_class: 设置类型，必须继承自BaseSettings
        config_path: 配置文件路径，如果未指定则自动查找
        env_file: .env文件路径，如果未指定则使用当前目录下的.env

    Returns:
        T: 设置实例
    """
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_path.is_file():
        load_dotenv(env_path)
        logger.info(f"已加载环境变量文件: {env_path}")

    settings = settings_class()

    overrides = load_config_from_file(config_path)
    if not overrides:
        return settings

    # 未知的顶层键忽略，已知的按字段深度合并
    known = {key: value for key, value in overrides.items() if key in settings_class.model_fields}
    return settings_class.model_validate(_merge(settings.model_dump(), known))


class LogLevel(str, Enum):
    """日志级别枚举"""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogConfig(BaseModel):
    """日志配置"""

    level: LogLevel = LogLevel.INFO
    format: str = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    file_path: Optional[str] = None
    rotation: str = "20 MB"
    retention: str = "1 week"
    compression: str = "zip"
    serialize: bool = False


class SchedulerConfig(BaseModel):
    """调度器配置"""

    stop_timeout: float = Field(default=5.0, gt=0)
    thread_name_prefix: str = "periodically"


class Settings(BaseSettings):
    """应用设置"""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    model_config = SettingsConfigDict(
        env_prefix="PERIODICALLY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )
