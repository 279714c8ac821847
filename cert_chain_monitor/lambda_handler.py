"""
AWS Lambda函数入口点

lambda_handler: 读取 S3 域名列表并检查每个域名的证书链
report_handler: 将检查结果汇总为一份报告
"""
from typing import Dict, Any, List, Optional

from .models import DomainStatus, Policy, Report
from .services.aggregator import aggregate
from .services.chain_fetcher import TLSChainFetcher
from .services.config_validator import ConfigValidator, MonitorConfig
from .services.domain_checker import DomainChecker
from .services.domain_config import S3DomainSource
from .services.error_handler import ConfigError, NetworkErrorHandler
from .services.logger import LoggerService
from .services.sns_notification import SNSReportPublisher


class CertChainMonitor:
    """证书链监控器主类"""

    def __init__(self, config: Optional[MonitorConfig] = None):
        """
        初始化监控器

        Args:
            config: 运行配置，默认从环境变量加载
        """
        self.config_validator = ConfigValidator()
        self.config = config or self.config_validator.load()
        self.logger_service = LoggerService(log_level=self.config.log_level)

        # 根证书上下文只构建一次，所有域名共享
        self.fetcher = TLSChainFetcher(timeout=self.config.timeout_seconds, port=self.config.port)
        self.error_handler = NetworkErrorHandler(
            max_retries=self.config.max_retries,
            timeout=self.config.timeout_seconds
        )

        self.logger_service.log_configuration_info(
            self.config_validator.get_configuration_summary(self.config)
        )

    def create_source(self, s3_config_location: str) -> S3DomainSource:
        return S3DomainSource(s3_config_location, region_name=self.config.region_name)

    def run(self, s3_config_location: str, min_remaining_days: Optional[int] = None) -> List[DomainStatus]:
        """
        执行证书链检查

        Args:
            s3_config_location: 域名列表所在的 s3:// 地址
            min_remaining_days: 覆盖配置中的最少剩余天数

        Returns:
            List[DomainStatus]: 按域名列表顺序排列的检查结果

        Raises:
            ConfigError: 域名列表无法读取或参数无效
        """
        days = self.config.min_remaining_days if min_remaining_days is None else min_remaining_days
        try:
            policy = Policy.capture(days)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        domains = self.create_source(s3_config_location).get_domains()
        if not domains:
            self.logger_service.logger.warning("没有找到要检查的域名")
            return []

        self.logger_service.reset_stats()
        self.logger_service.log_check_start(len(domains))
        self.logger_service.logger.info(f"使用最少剩余天数 {policy.min_remaining_days} 进行校验")

        checker = DomainChecker(
            self.fetcher,
            policy,
            max_workers=self.config.max_workers,
            error_handler=self.error_handler
        )
        statuses = checker.check_domains(domains)

        for status in statuses:
            self.logger_service.log_domain_status(status)
        self.logger_service.log_check_end()

        return statuses


def _request_id(context: Any) -> str:
    return getattr(context, 'aws_request_id', '') or ''


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    检查函数入口点

    Args:
        event: {"s3_config_location": "s3://bucket/key", "min_remaining_days": 可选}
        context: Lambda运行时上下文

    Returns:
        dict: {"req_id": ..., "statuses": [...]}

    Raises:
        ConfigError: 请求格式无效或域名列表无法读取
    """
    if not isinstance(event, dict):
        raise ConfigError("request must be a JSON object")

    s3_config_location = event.get('s3_config_location')
    if not isinstance(s3_config_location, str) or not s3_config_location:
        raise ConfigError("request is missing 's3_config_location'")

    min_remaining_days = event.get('min_remaining_days')
    if min_remaining_days is not None and (
            isinstance(min_remaining_days, bool) or not isinstance(min_remaining_days, int)):
        raise ConfigError(f"'min_remaining_days' must be an integer: {min_remaining_days!r}")

    monitor = CertChainMonitor()
    statuses = monitor.run(s3_config_location, min_remaining_days)

    return {
        'req_id': _request_id(context),
        'statuses': [status.to_dict() for status in statuses]
    }


def parse_statuses(event: Dict[str, Any]) -> List[DomainStatus]:
    """
    解析汇总请求中的检查结果

    Raises:
        ConfigError: statuses 缺失或格式无效
    """
    if not isinstance(event, dict):
        raise ConfigError("request must be a JSON object")

    raw_statuses = event.get('statuses')
    if not isinstance(raw_statuses, list):
        raise ConfigError("request is missing 'statuses'")

    try:
        return [DomainStatus.from_dict(entry) for entry in raw_statuses]
    except ValueError as e:
        raise ConfigError(str(e)) from e


def report_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    汇总函数入口点

    Args:
        event: {"req_id": ..., "statuses": [...]}
        context: Lambda运行时上下文

    Returns:
        dict: {"report": {"Valid": null}} 或 {"report": {"Invalid": "..."}}
    """
    config = ConfigValidator().load()
    logger_service = LoggerService(log_level=config.log_level)

    statuses = parse_statuses(event)
    report: Report = aggregate(statuses)
    logger_service.log_report(report)

    publisher = SNSReportPublisher(topic_arn=config.sns_topic_arn)
    publisher.publish_report(report)

    return {'report': report.to_dict()}
