"""
证书链校验器测试
"""
import pytest
from datetime import datetime, timedelta, timezone

from cert_chain_monitor.models import Policy, ValidityWindow
from cert_chain_monitor.services.chain_validator import (
    LATEST_EXPIRY,
    ChainValidator,
    required_expiry,
    validate_chain,
)
from cert_chain_monitor.services.error_handler import CertificateError


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


class TestValidateCertificate:
    """单张证书校验测试类"""

    def test_decode_certificate(self, cert_2031, make_policy):
        """测试解码证书有效期"""
        window = ChainValidator(make_policy()).decode_certificate(cert_2031)

        assert window == ValidityWindow(not_before=utc(2021, 1, 1), not_after=utc(2031, 1, 1))

    def test_decode_garbage(self, make_policy):
        """测试无法解码的证书"""
        with pytest.raises(CertificateError, match="cannot decode certificate"):
            ChainValidator(make_policy()).decode_certificate(b"not a certificate")

    def test_valid_date(self, cert_2031, make_policy):
        """测试远未过期的证书"""
        assert ChainValidator(make_policy(0)).validate_certificate(cert_2031) is True

    def test_validate_close_date(self, cert_2031, make_policy):
        """测试剩余时间不足最少剩余天数（约8年）"""
        assert ChainValidator(make_policy(3000)).validate_certificate(cert_2031) is False

    def test_expired_date(self, cert_expired, make_policy):
        """测试已过期证书"""
        with pytest.raises(CertificateError, match="expired") as exc_info:
            ChainValidator(make_policy(0)).validate_certificate(cert_expired)

        assert str(exc_info.value).startswith("certificate error: ")

    def test_not_yet_valid(self, cert_future, make_policy):
        """测试尚未生效的证书"""
        with pytest.raises(CertificateError, match="not yet valid"):
            ChainValidator(make_policy(0)).validate_certificate(cert_future)

    def test_boundary_exact_required_expiry(self, make_cert_der, make_policy, fake_now):
        """测试过期时间恰好等于 now + 最少剩余天数"""
        cert = make_cert_der(utc(2024, 1, 1), fake_now + timedelta(days=10))

        assert ChainValidator(make_policy(10)).validate_certificate(cert) is False
        assert ChainValidator(make_policy(9)).validate_certificate(cert) is True

    def test_boundary_expires_now(self, make_cert_der, make_policy, fake_now):
        """测试过期时间恰好等于 now，不算过期但不满足窗口"""
        cert = make_cert_der(utc(2024, 1, 1), fake_now)

        assert ChainValidator(make_policy(0)).validate_certificate(cert) is False

    def test_boundary_starts_now(self, make_cert_der, make_policy, fake_now):
        """测试生效时间恰好等于 now"""
        cert = make_cert_der(fake_now, utc(2026, 1, 1))

        assert ChainValidator(make_policy(0)).validate_certificate(cert) is True

    def test_naive_now_treated_as_utc(self, cert_2031, fake_now):
        """测试未带时区的评估时间按UTC处理"""
        naive = Policy(min_remaining_days=0, now=fake_now.replace(tzinfo=None))

        assert ChainValidator(naive).validate_certificate(cert_2031) is True


class TestRequiredExpiry:
    """最晚过期要求测试类"""

    def test_regular_days(self, make_policy, fake_now):
        """测试普通天数"""
        assert required_expiry(make_policy(10)) == fake_now + timedelta(days=10)

    @pytest.mark.parametrize("days", [3_000_000, 999_999_999, 10 ** 10])
    def test_out_of_range_days(self, make_policy, days):
        """测试超出日期范围的天数取最晚时间点"""
        assert required_expiry(make_policy(days)) == LATEST_EXPIRY

    @pytest.mark.parametrize("days", [3_000_000, 10 ** 10])
    def test_out_of_range_days_is_soft_miss(self, cert_2031, make_policy, days):
        """测试超出日期范围的天数使每张证书都判定为即将过期"""
        validator = ChainValidator(make_policy(days))

        assert validator.validate_certificate(cert_2031) is False
        assert validator.validate_chain([cert_2031, cert_2031]) is False

    def test_out_of_range_days_still_reports_expired(self, cert_2031, cert_expired, make_policy):
        """测试超大天数不会掩盖已过期证书"""
        with pytest.raises(CertificateError, match="expired"):
            ChainValidator(make_policy(10 ** 10)).validate_chain([cert_2031, cert_expired])


class TestValidateChain:
    """证书链校验测试类"""

    def test_empty_chain(self, make_policy):
        """测试空证书链"""
        with pytest.raises(CertificateError, match="chain too short"):
            ChainValidator(make_policy()).validate_chain([])

    def test_single_certificate_chain(self, cert_2031, make_policy):
        """测试只有叶子证书的链，与日期无关"""
        with pytest.raises(CertificateError, match="chain too short"):
            ChainValidator(make_policy()).validate_chain([cert_2031])

    def test_all_valid(self, cert_2031, make_cert_der, make_policy):
        """测试所有证书都满足策略"""
        issuer = make_cert_der(utc(2020, 1, 1), utc(2035, 1, 1), common_name="Test CA")

        assert ChainValidator(make_policy(0)).validate_chain([cert_2031, issuer]) is True

    def test_one_soft_miss(self, cert_2031, make_cert_der, make_policy, fake_now):
        """测试任一证书即将过期时整条链返回 False"""
        soon = make_cert_der(utc(2023, 1, 1), fake_now + timedelta(days=5))

        assert ChainValidator(make_policy(10)).validate_chain([cert_2031, soon]) is False
        assert ChainValidator(make_policy(10)).validate_chain([soon, cert_2031]) is False

    def test_expired_pair(self, cert_2031, cert_expired, make_policy):
        """测试链中包含已过期证书"""
        with pytest.raises(CertificateError, match="expired"):
            ChainValidator(make_policy(0)).validate_chain([cert_2031, cert_expired])

    def test_soft_miss_does_not_skip_later_certificates(self, make_cert_der, cert_expired,
                                                         make_policy, fake_now):
        """测试即将过期不会跳过后续证书的校验"""
        soon = make_cert_der(utc(2023, 1, 1), fake_now + timedelta(days=5))

        with pytest.raises(CertificateError, match="expired"):
            ChainValidator(make_policy(10)).validate_chain([soon, cert_expired])

    def test_undecodable_member(self, cert_2031, make_policy):
        """测试链中包含无法解码的证书"""
        with pytest.raises(CertificateError, match="cannot decode"):
            ChainValidator(make_policy(0)).validate_chain([cert_2031, b"\x30\x03\x02\x01\x01"])

    def test_module_level_helper(self, cert_2031, make_policy):
        """测试模块级辅助函数"""
        assert validate_chain([cert_2031, cert_2031], make_policy(0)) is True
        assert validate_chain([cert_2031, cert_2031], make_policy(3000)) is False
