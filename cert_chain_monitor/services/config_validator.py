"""
配置加载与验证服务
"""
import os
import re
from dataclasses import dataclass
from typing import Dict, Optional

from .error_handler import ConfigError

SNS_TOPIC_ARN_PATTERN = re.compile(r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$')

LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


@dataclass(frozen=True)
class MonitorConfig:
    """监控运行配置"""
    min_remaining_days: int = 10
    timeout_seconds: float = 10
    max_workers: int = 8
    max_retries: int = 0
    port: int = 443
    log_level: str = 'INFO'
    sns_topic_arn: Optional[str] = None
    region_name: str = 'us-east-1'


class ConfigValidator:
    """配置验证器"""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        """
        初始化配置验证器

        Args:
            environ: 环境变量字典，默认使用 os.environ
        """
        self.environ = os.environ if environ is None else environ

    def load(self) -> MonitorConfig:
        """
        从环境变量加载配置

        Raises:
            ConfigError: 任一配置值格式无效或超出范围
        """
        defaults = MonitorConfig()

        log_level = self.environ.get('LOG_LEVEL', defaults.log_level).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL 无效: {log_level}")

        sns_topic_arn = self.environ.get('SNS_TOPIC_ARN') or None
        if sns_topic_arn and not self.validate_sns_topic_arn(sns_topic_arn):
            raise ConfigError(f"SNS主题ARN格式无效: {sns_topic_arn}")

        return MonitorConfig(
            min_remaining_days=self._get_int('MIN_REMAINING_DAYS', defaults.min_remaining_days, minimum=0),
            timeout_seconds=self._get_float('CHECK_TIMEOUT_SECONDS', defaults.timeout_seconds),
            max_workers=self._get_int('CHECK_MAX_WORKERS', defaults.max_workers, minimum=1),
            max_retries=self._get_int('CHECK_MAX_RETRIES', defaults.max_retries, minimum=0),
            port=self._get_int('CHECK_PORT', defaults.port, minimum=1, maximum=65535),
            log_level=log_level,
            sns_topic_arn=sns_topic_arn,
            region_name=self.environ.get('AWS_REGION') or defaults.region_name,
        )

    def validate_sns_topic_arn(self, topic_arn: str) -> bool:
        """验证SNS主题ARN格式"""
        return bool(SNS_TOPIC_ARN_PATTERN.match(topic_arn))

    def _get_int(self, name: str, default: int, minimum: Optional[int] = None,
                 maximum: Optional[int] = None) -> int:
        raw = self.environ.get(name)
        if raw is None or not raw.strip():
            return default

        try:
            value = int(raw.strip())
        except ValueError:
            raise ConfigError(f"{name} 必须是整数: {raw}") from None

        if minimum is not None and value < minimum:
            raise ConfigError(f"{name} 不能小于 {minimum}: {value}")
        if maximum is not None and value > maximum:
            raise ConfigError(f"{name} 不能大于 {maximum}: {value}")
        return value

    def _get_float(self, name: str, default: float) -> float:
        raw = self.environ.get(name)
        if raw is None or not raw.strip():
            return default

        try:
            value = float(raw.strip())
        except ValueError:
            raise ConfigError(f"{name} 必须是数字: {raw}") from None

        if value <= 0:
            raise ConfigError(f"{name} 必须大于0: {value}")
        return value

    def get_configuration_summary(self, config: MonitorConfig) -> Dict[str, str]:
        """获取用于日志记录的配置摘要（隐藏敏感信息）"""
        return {
            'min_remaining_days': str(config.min_remaining_days),
            'timeout_seconds': f"{config.timeout_seconds:g}",
            'max_workers': str(config.max_workers),
            'max_retries': str(config.max_retries),
            'port': str(config.port),
            'log_level': config.log_level,
            'sns_topic_arn': self._sanitize_arn(config.sns_topic_arn),
            'region_name': config.region_name,
        }

    def _sanitize_arn(self, value: Optional[str]) -> str:
        if not value:
            return ''

        # ARN类型，隐藏账号ID
        parts = value.split(':')
        if len(parts) >= 6:
            return f"{':'.join(parts[:4])}:***:{parts[-1]}"
        return "***"
