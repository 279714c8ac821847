"""
日志服务
"""
import os
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from ..interfaces import LoggerServiceInterface
from ..models import DomainStatus, Report

LOGGER_NAME = "cert_chain_monitor"


def configure_logging(log_level: Optional[str] = None, logger_name: str = LOGGER_NAME) -> logging.Logger:
    """
    配置包级日志器

    各模块通过 logging.getLogger(__name__) 获取子日志器，统一由此处的处理器输出。
    """
    level_name = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    # 防止日志传播到根日志器
    logger.propagate = False
    return logger


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""

    def __init__(self, logger_name: str = LOGGER_NAME, log_level: Optional[str] = None):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
        self.logger = configure_logging(self.log_level, logger_name)
        self.reset_stats()

    def reset_stats(self):
        """重置执行统计"""
        self.execution_stats = {
            'start_time': None,
            'end_time': None,
            'total_domains': 0,
            'valid': 0,
            'expiring_soon': 0,
            'failed': 0,
            'errors': []
        }

    def log_check_start(self, domain_count: int):
        """
        记录检查开始

        Args:
            domain_count: 要检查的域名数量
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['total_domains'] = domain_count

        self.logger.info(f"开始证书链检查，共 {domain_count} 个域名")

    def log_domain_status(self, status: DomainStatus):
        """
        记录单个域名结果

        valid=False 且没有错误信息表示证书链仍有效但即将过期。
        """
        if status.valid:
            self.execution_stats['valid'] += 1
            self.logger.info(f"证书链正常 - 域名: {status.domain}")
        elif not status.error:
            self.execution_stats['expiring_soon'] += 1
            self.logger.warning(f"证书链即将过期 - 域名: {status.domain}")
        else:
            self.execution_stats['failed'] += 1
            self.execution_stats['errors'].append({
                'domain': status.domain,
                'error_message': status.error
            })
            self.logger.error(f"证书链检查失败 - 域名: {status.domain}, 错误: {status.error}")

    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)
        summary = self.get_execution_summary()

        self.logger.info(
            f"证书链检查完成，耗时 {summary['duration_seconds']:.2f} 秒: "
            f"总计 {summary['total_domains']} 个域名, "
            f"正常 {summary['valid']} 个, "
            f"即将过期 {summary['expiring_soon']} 个, "
            f"失败 {summary['failed']} 个"
        )

    def log_configuration_info(self, config: Dict[str, Any]):
        """记录配置信息"""
        self.logger.info("系统配置信息:")
        for key, value in config.items():
            self.logger.info(f"  {key}: {value}")

    def log_report(self, report: Report):
        """记录汇总报告"""
        if report.is_valid:
            self.logger.info("所有域名证书链均有效")
        else:
            self.logger.warning(f"汇总报告:\n{report.message}")

    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要

        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        stats = self.execution_stats
        duration = 0.0
        if stats['start_time'] and stats['end_time']:
            duration = (stats['end_time'] - stats['start_time']).total_seconds()

        return {
            'start_time': stats['start_time'].isoformat() if stats['start_time'] else None,
            'end_time': stats['end_time'].isoformat() if stats['end_time'] else None,
            'duration_seconds': duration,
            'total_domains': stats['total_domains'],
            'valid': stats['valid'],
            'expiring_soon': stats['expiring_soon'],
            'failed': stats['failed'],
            'error_count': len(stats['errors']),
            'errors': stats['errors']
        }
