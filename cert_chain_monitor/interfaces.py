"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import List
from .models import DomainStatus, Report


class DomainSourceInterface(ABC):
    """域名列表来源接口"""

    @abstractmethod
    def get_domains(self) -> List[str]:
        """获取域名列表（保持原有顺序）"""
        pass


class ChainFetcherInterface(ABC):
    """证书链获取器接口"""

    @abstractmethod
    def fetch_chain(self, domain: str) -> List[bytes]:
        """获取域名的DER证书链（叶子证书在前）"""
        pass


class ReportPublisherInterface(ABC):
    """报告发布接口"""

    @abstractmethod
    def publish_report(self, report: Report) -> bool:
        """发布汇总报告"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, domain_count: int):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_domain_status(self, status: DomainStatus):
        """记录单个域名结果"""
        pass

