"""
数据模型定义
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ValidityWindow:
    """证书有效期窗口（UTC）"""
    not_before: datetime
    not_after: datetime


@dataclass(frozen=True)
class Policy:
    """
    校验策略

    now 在一次运行中只采集一次，整条证书链（以及同批次所有域名）都使用同一个评估时间点。
    """
    min_remaining_days: int
    now: datetime

    def __post_init__(self):
        if self.min_remaining_days < 0:
            raise ValueError(f"min_remaining_days 不能为负数: {self.min_remaining_days}")
        if self.now.tzinfo is None:
            object.__setattr__(self, 'now', self.now.replace(tzinfo=timezone.utc))

    @classmethod
    def capture(cls, min_remaining_days: int, now: Optional[datetime] = None) -> 'Policy':
        """以当前时间（或指定时间）创建策略"""
        return cls(min_remaining_days=min_remaining_days, now=now or datetime.now(timezone.utc))


@dataclass
class DomainStatus:
    """单个域名的检查结果"""
    domain: str
    valid: bool
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DomainStatus':
        """
        从JSON字典解析

        Raises:
            ValueError: 字段缺失、类型错误，或 valid 为 true 时仍带有错误信息
        """
        if not isinstance(data, dict):
            raise ValueError(f"status entry must be an object, got {type(data).__name__}")

        domain = data.get('domain')
        valid = data.get('valid')
        error = data.get('error', "")

        if not isinstance(domain, str):
            raise ValueError(f"status entry has invalid 'domain': {domain!r}")
        if not isinstance(valid, bool):
            raise ValueError(f"status entry has invalid 'valid': {valid!r}")
        if error is None:
            error = ""
        if not isinstance(error, str):
            raise ValueError(f"status entry has invalid 'error': {error!r}")
        if valid and error:
            raise ValueError(f"status entry for {domain!r} is valid but has error: {error!r}")

        return cls(domain=domain, valid=valid, error=error)


class ReportStatus(Enum):
    """汇总报告状态"""
    VALID = "Valid"
    INVALID = "Invalid"


@dataclass(frozen=True)
class Report:
    """汇总报告：全部有效，或带多行说明的无效报告"""
    status: ReportStatus
    message: str = ""

    @classmethod
    def valid(cls) -> 'Report':
        return cls(status=ReportStatus.VALID)

    @classmethod
    def invalid(cls, message: str) -> 'Report':
        return cls(status=ReportStatus.INVALID, message=message)

    @property
    def is_valid(self) -> bool:
        return self.status is ReportStatus.VALID

    def to_dict(self) -> Dict[str, Optional[str]]:
        """序列化为外部标签形式: {"Valid": null} 或 {"Invalid": "..."}"""
        if self.is_valid:
            return {ReportStatus.VALID.value: None}
        return {ReportStatus.INVALID.value: self.message}
