"""
域名检查编排服务
"""
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence
import logging

from ..interfaces import ChainFetcherInterface
from ..models import DomainStatus, Policy
from .chain_validator import ChainValidator
from .error_handler import MonitorError, NetworkErrorHandler


class DomainChecker:
    """对单个或一批域名执行 获取证书链 -> 校验 的流程"""

    def __init__(self, fetcher: ChainFetcherInterface, policy: Policy,
                 max_workers: int = 8,
                 error_handler: Optional[NetworkErrorHandler] = None):
        """
        初始化域名检查器

        Args:
            fetcher: 证书链获取器
            policy: 校验策略，整批域名共用
            max_workers: 并发检查的线程数
            error_handler: 网络错误处理器（控制重试），默认不重试
        """
        self.fetcher = fetcher
        self.policy = policy
        self.validator = ChainValidator(policy)
        self.max_workers = max_workers
        self.error_handler = error_handler or NetworkErrorHandler()
        self.logger = logging.getLogger(__name__)

    def check_domain(self, domain: str) -> DomainStatus:
        """
        检查单个域名，任何错误都转换为无效状态

        Args:
            domain: 域名

        Returns:
            DomainStatus: 检查结果
        """
        try:
            chain = self.error_handler.with_retry(self.fetcher.fetch_chain, domain)
            result = self.validator.validate_chain(chain)
        except MonitorError as e:
            self.logger.info(f"域名 {domain} 检查失败: {e}")
            return DomainStatus(domain=domain, valid=False, error=str(e))
        except Exception as e:
            self.logger.exception(f"检查域名 {domain} 时发生未预期的错误")
            return DomainStatus(domain=domain, valid=False, error=f"unexpected error: {e}")

        return DomainStatus(domain=domain, valid=result, error="")

    def check_domains(self, domains: Sequence[str]) -> List[DomainStatus]:
        """
        并发检查一批域名

        结果按输入位置写回，返回顺序与输入一致。

        Args:
            domains: 域名列表

        Returns:
            List[DomainStatus]: 检查结果列表
        """
        if not domains:
            return []

        statuses: List[Optional[DomainStatus]] = [None] * len(domains)

        workers = max(1, min(self.max_workers, len(domains)))
        self.logger.info(f"使用 {workers} 个线程检查 {len(domains)} 个域名")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.check_domain, domain): index
                for index, domain in enumerate(domains)
            }
            for future, index in futures.items():
                statuses[index] = future.result()

        return statuses
