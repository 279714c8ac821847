"""
域名列表来源服务（S3）
"""
import os
from typing import List, Optional, Tuple
from urllib.parse import urlparse
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import DomainSourceInterface
from .error_handler import ConfigError


def parse_s3_location(s3_config_location: str) -> Tuple[str, str]:
    """
    解析 s3://bucket/key 形式的地址

    Returns:
        Tuple[str, str]: (bucket, key)

    Raises:
        ConfigError: 地址格式无效
    """
    url = urlparse(s3_config_location or "")
    bucket = url.netloc
    key = url.path.lstrip('/')

    if url.scheme != 's3' or not bucket or not key:
        raise ConfigError(f"Cannot parse S3 url {s3_config_location}")

    return bucket, key


def parse_domain_list(content: str) -> List[str]:
    """
    解析域名列表，每行一个域名

    跳过空行和 # 开头的注释行，保留原有顺序与重复项。
    """
    domains = []
    for line in content.splitlines():
        domain = line.strip()
        if not domain or domain.startswith('#'):
            continue
        domains.append(domain)
    return domains


class S3DomainSource(DomainSourceInterface):
    """从 S3 对象读取域名列表"""

    def __init__(self, s3_config_location: str, s3_client=None, region_name: Optional[str] = None):
        """
        初始化域名来源

        Args:
            s3_config_location: 域名列表所在的 s3:// 地址
            s3_client: boto3 S3 客户端，默认自动创建
            region_name: AWS区域名称，默认读取 AWS_REGION
        """
        self.s3_config_location = s3_config_location
        self.bucket, self.key = parse_s3_location(s3_config_location)
        self.region_name = region_name or os.getenv('AWS_REGION', 'us-east-1')
        self.s3_client = s3_client or boto3.client('s3', region_name=self.region_name)
        self.logger = logging.getLogger(__name__)

        self.logger.info(
            f"解析S3地址 {s3_config_location} -> bucket: {self.bucket}, key: {self.key}"
        )

    def get_domains(self) -> List[str]:
        """
        读取并解析域名列表

        Raises:
            ConfigError: 对象读取失败或内容不是UTF-8文本
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=self.key)
            content = response['Body'].read()
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise ConfigError(f"Cannot read {self.s3_config_location}: {error_code}") from e
        except BotoCoreError as e:
            raise ConfigError(f"Cannot read {self.s3_config_location}: {e}") from e

        try:
            text = content.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ConfigError(f"Domain list {self.s3_config_location} is not valid UTF-8") from e

        domains = parse_domain_list(text)
        self.logger.info(f"成功加载 {len(domains)} 个域名")
        return domains
