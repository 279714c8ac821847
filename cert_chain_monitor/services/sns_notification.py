"""
SNS报告发布服务
"""
import os
from typing import Optional
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import ReportPublisherInterface
from ..models import Report

# SNS Subject 最长100个字符
MAX_SUBJECT_LENGTH = 100


class SNSReportPublisher(ReportPublisherInterface):
    """将无效报告发布到 SNS 主题"""

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None,
                 sns_client=None):
        """
        初始化SNS报告发布服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则从ARN或环境变量推断
            sns_client: boto3 SNS 客户端，默认自动创建
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')

        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.logger = logging.getLogger(__name__)
        self.sns_client = sns_client
        if self.sns_client is None and self.topic_arn:
            self.sns_client = boto3.client('sns', region_name=self.region_name)

    @property
    def enabled(self) -> bool:
        return bool(self.topic_arn)

    def publish_report(self, report: Report) -> bool:
        """
        发布汇总报告

        Valid 报告不发布；发布失败只记录日志。

        Returns:
            bool: 是否发布成功（无需发布时返回 True）
        """
        if report.is_valid:
            self.logger.info("所有证书链有效，跳过SNS发布")
            return True

        if not self.enabled:
            self.logger.info("未配置SNS_TOPIC_ARN，跳过SNS发布")
            return True

        subject = self._format_subject(report)

        try:
            response = self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=subject,
                Message=report.message
            )
        except ClientError as e:
            error = e.response.get('Error', {})
            self.logger.error(f"SNS发送失败 - {error.get('Code')}: {error.get('Message')}")
            return False
        except BotoCoreError as e:
            self.logger.error(f"发送SNS通知时发生错误: {e}")
            return False

        self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
        return True

    def _format_subject(self, report: Report) -> str:
        first_line = report.message.split('\n', 1)[0]
        return f"Certificate chain check: {first_line}"[:MAX_SUBJECT_LENGTH]
