"""
证书链有效期校验服务
"""
from datetime import datetime, timedelta, timezone
from typing import Sequence
import logging

from cryptography import x509

from ..models import Policy, ValidityWindow
from .error_handler import CertificateError

MIN_CHAIN_LENGTH = 2

# 超出 datetime 表示范围时的最晚时间点
LATEST_EXPIRY = datetime.max.replace(tzinfo=timezone.utc)


def required_expiry(policy: Policy) -> datetime:
    """
    证书至少需要有效到的时间点: now + 最少剩余天数

    天数过大导致溢出时取 LATEST_EXPIRY，此时任何证书都不满足窗口。
    """
    try:
        return policy.now + timedelta(days=policy.min_remaining_days)
    except OverflowError:
        return LATEST_EXPIRY


class ChainValidator:
    """证书链校验器"""

    def __init__(self, policy: Policy):
        """
        初始化证书链校验器

        Args:
            policy: 校验策略（最少剩余天数与评估时间点）
        """
        self.policy = policy
        self.required_expiry = required_expiry(policy)
        self.logger = logging.getLogger(__name__)

    def decode_certificate(self, certificate_blob: bytes) -> ValidityWindow:
        """
        解码DER证书并取出有效期

        Raises:
            CertificateError: 解码失败
        """
        try:
            cert = x509.load_der_x509_certificate(certificate_blob)
        except (ValueError, TypeError) as e:
            raise CertificateError(f"cannot decode certificate: {e}") from e

        return ValidityWindow(
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
        )

    def validate_certificate(self, certificate_blob: bytes) -> bool:
        """
        校验单张证书

        Returns:
            bool: True 表示满足策略窗口，False 表示仍有效但即将过期

        Raises:
            CertificateError: 证书尚未生效或已过期
        """
        window = self.decode_certificate(certificate_blob)
        now = self.policy.now

        self.logger.debug(
            f"证书有效期: {window.not_before.isoformat()} ~ {window.not_after.isoformat()}，"
            f"要求至少有效至 {self.required_expiry.isoformat()}"
        )

        if now < window.not_before:
            raise CertificateError(
                f"certificate is not yet valid (not before {window.not_before.isoformat()})"
            )
        if now > window.not_after:
            raise CertificateError(
                f"certificate has expired (not after {window.not_after.isoformat()})"
            )
        if self.required_expiry >= window.not_after:
            self.logger.warning(
                f"证书将在 {self.policy.min_remaining_days} 天内过期: {window.not_after.isoformat()}"
            )
            return False
        return True

    def validate_chain(self, certificate_blobs: Sequence[bytes]) -> bool:
        """
        校验整条证书链

        每张证书都会被校验；任一证书出错立即抛出，全部满足策略才返回 True。

        Raises:
            CertificateError: 链过短，或任一证书解码失败/超出有效期
        """
        if len(certificate_blobs) < MIN_CHAIN_LENGTH:
            raise CertificateError(
                f"chain too short: {len(certificate_blobs)} certificate(s), "
                f"at least {MIN_CHAIN_LENGTH} required"
            )

        result = True
        for certificate_blob in certificate_blobs:
            result = self.validate_certificate(certificate_blob) and result
        return result


def validate_chain(certificate_blobs: Sequence[bytes], policy: Policy) -> bool:
    """按给定策略校验证书链"""
    return ChainValidator(policy).validate_chain(certificate_blobs)
