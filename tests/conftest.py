"""
测试公共夹具
"""
import os
from datetime import datetime, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from cert_chain_monitor.models import Policy


def utc(year, month, day, hour=0, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


# 固定评估时间点
FAKE_NOW = utc(2024, 5, 1)


@pytest.fixture(scope="session")
def signing_key():
    """会话级签名密钥，所有测试证书共用"""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def make_cert_der(signing_key):
    """生成指定有效期的自签名DER证书"""
    def _make(not_before, not_after, common_name="example.com"):
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(signing_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .sign(signing_key, hashes.SHA256())
        )
        return cert.public_bytes(serialization.Encoding.DER)
    return _make


@pytest.fixture
def cert_2031(make_cert_der):
    """2021 至 2031 有效的证书"""
    return make_cert_der(utc(2021, 1, 1), utc(2031, 1, 1))


@pytest.fixture
def cert_expired(make_cert_der):
    """2024-05-01 时已过期的证书"""
    return make_cert_der(utc(2020, 1, 1), utc(2023, 1, 1))


@pytest.fixture
def cert_future(make_cert_der):
    """2024-05-01 时尚未生效的证书"""
    return make_cert_der(utc(2025, 1, 1), utc(2027, 1, 1))


@pytest.fixture
def fake_now():
    """固定评估时间点 2024-05-01 UTC"""
    return FAKE_NOW


@pytest.fixture
def make_policy(fake_now):
    """按最少剩余天数创建评估时间固定的策略"""
    def _make(min_remaining_days=0):
        return Policy(min_remaining_days=min_remaining_days, now=fake_now)
    return _make


@pytest.fixture
def aws_credentials():
    """moto 使用的伪造 AWS 凭证"""
    env = {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing',
        'AWS_DEFAULT_REGION': 'us-east-1',
        'AWS_REGION': 'us-east-1',
    }
    saved = {key: os.environ.get(key) for key in env}
    os.environ.update(env)
    yield
    for key, value in saved.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
