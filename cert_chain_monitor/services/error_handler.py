"""
错误类型与错误处理服务
"""
import socket
import ssl
import time
from typing import Callable, Any, Optional
import logging


class MonitorError(Exception):
    """监控错误基类，字符串形式为 "<类别> error: <详情>" """

    kind = "monitor"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind} error: {self.message}"


class NetworkError(MonitorError):
    """TCP连接、DNS、TLS握手、读写或超时错误"""
    kind = "network"


class CertificateError(MonitorError):
    """证书链过短、解码失败或超出有效期"""
    kind = "certificate"


class ConfigError(MonitorError):
    """配置、请求或域名列表错误"""
    kind = "config"


class NetworkErrorHandler:
    """网络错误处理器"""

    def __init__(self, max_retries: int = 0, base_delay: float = 1.0, timeout: Optional[float] = None):
        """
        初始化网络错误处理器

        Args:
            max_retries: 最大重试次数，默认不重试
            base_delay: 基础延迟时间（秒）
            timeout: 套接字超时时间（秒），仅用于错误描述
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        带重试机制执行函数

        只有 NetworkError 会被重试，其余异常直接抛出。

        Args:
            func: 要执行的函数
            *args: 函数参数
            **kwargs: 函数关键字参数

        Returns:
            Any: 函数执行结果

        Raises:
            Exception: 不可重试的异常，或重试次数用尽后的最后一个异常
        """
        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)

            except Exception as e:
                if not self._is_retryable_error(e):
                    raise

                if attempt == self.max_retries:
                    if self.max_retries:
                        self.logger.error(f"重试次数用尽，最终失败: {e}")
                    raise

                # 指数退避
                delay = self.base_delay * (2 ** attempt)

                self.logger.warning(
                    f"尝试 {attempt + 1}/{self.max_retries + 1} 失败: {e}，{delay:.1f}秒后重试"
                )

                time.sleep(delay)

    def _is_retryable_error(self, error: Exception) -> bool:
        """判断错误是否可重试"""
        return isinstance(error, NetworkError)

    def to_network_error(self, domain: str, error: Exception) -> MonitorError:
        """
        将底层 socket/ssl 异常转换为 NetworkError

        Args:
            domain: 域名
            error: 原始异常

        Returns:
            MonitorError: 转换后的错误（已是 MonitorError 的原样返回）
        """
        if isinstance(error, MonitorError):
            return error

        if isinstance(error, socket.timeout):
            if self.timeout is not None:
                detail = f"connection to {domain} timed out after {self.timeout:g}s"
            else:
                detail = f"connection to {domain} timed out"
        elif isinstance(error, socket.gaierror):
            detail = f"cannot resolve {domain}: {error}"
        elif isinstance(error, ssl.SSLCertVerificationError):
            detail = f"TLS handshake with {domain} failed: {getattr(error, 'verify_message', None) or error}"
        elif isinstance(error, ssl.SSLError):
            detail = f"TLS error with {domain}: {error}"
        elif isinstance(error, ConnectionRefusedError):
            detail = f"connection to {domain} refused"
        else:
            detail = f"{type(error).__name__} with {domain}: {error}"

        self.logger.debug(f"域名 {domain} 网络错误，建议: {self._get_suggested_action(error)}")

        return NetworkError(detail)

    def _get_suggested_action(self, error: Exception) -> str:
        """获取错误的建议处理方案"""
        error_message = str(error).lower()

        if isinstance(error, socket.timeout):
            return "检查网络连接，考虑增加超时时间"
        elif isinstance(error, socket.gaierror):
            return "检查域名是否正确，DNS服务器是否可用"
        elif isinstance(error, ConnectionRefusedError):
            return "检查目标服务器是否运行，端口是否正确"
        elif isinstance(error, ssl.SSLCertVerificationError):
            return "证书验证失败，可能是自签名证书、证书过期或证书链问题"
        elif isinstance(error, ssl.SSLError):
            if 'handshake failure' in error_message:
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            return "SSL连接问题，检查服务器SSL配置"
        elif 'network is unreachable' in error_message:
            return "网络不可达，检查网络连接和路由"
        return "检查网络连接和服务器状态"
