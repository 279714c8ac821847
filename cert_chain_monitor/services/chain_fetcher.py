"""
TLS证书链获取服务
"""
import ssl
import socket
import time
from typing import List, Optional
import logging

import certifi

from ..interfaces import ChainFetcherInterface
from .error_handler import CertificateError, NetworkError, NetworkErrorHandler

READ_CHUNK_SIZE = 16384


def create_trust_context() -> ssl.SSLContext:
    """使用 certifi 公共根证书创建客户端 SSL 上下文（无客户端证书）"""
    return ssl.create_default_context(cafile=certifi.where())


class TLSChainFetcher(ChainFetcherInterface):
    """通过 TLS 连接获取服务器下发的证书链"""

    def __init__(self, timeout: float = 10, port: int = 443,
                 context: Optional[ssl.SSLContext] = None):
        """
        初始化证书链获取器

        Args:
            timeout: 单个域名整体检查（连接、握手、读写）的时限（秒）
            port: SSL端口，默认443
            context: SSL上下文，默认使用 certifi 根证书；构建一次后只读共享
        """
        self.timeout = timeout
        self.port = port
        self.context = context or create_trust_context()
        self.logger = logging.getLogger(__name__)
        self.error_handler = NetworkErrorHandler(timeout=timeout)

    def fetch_chain(self, domain: str) -> List[bytes]:
        """
        获取域名的证书链

        Args:
            domain: 域名

        Returns:
            List[bytes]: DER编码的证书链，叶子证书在前

        Raises:
            NetworkError: 连接、握手或读写失败
            CertificateError: 服务器未提供证书链
        """
        try:
            chain = self._read_chain(domain)
        except (OSError, ValueError) as e:
            raise self.error_handler.to_network_error(domain, e) from e

        if not chain:
            raise CertificateError("No certificates")

        self.logger.debug(f"域名 {domain} 返回 {len(chain)} 张证书")
        return chain

    def _read_chain(self, domain: str) -> List[bytes]:
        """建立连接，完成一次HTTP往返后读取对端证书链"""
        deadline = time.monotonic() + self.timeout
        with socket.create_connection((domain, self.port), timeout=self.timeout) as sock:
            sock.settimeout(self._remaining(domain, deadline))
            with self.context.wrap_socket(sock, server_hostname=domain) as tls:
                tls.settimeout(self._remaining(domain, deadline))
                tls.sendall(self._build_request(domain))
                self._drain(tls, domain, deadline)
                return [bytes(cert) for cert in tls.get_unverified_chain() or []]

    def _build_request(self, domain: str) -> bytes:
        return (
            f"GET / HTTP/1.1\r\n"
            f"Host: {domain}\r\n"
            f"Connection: close\r\n"
            f"Accept: */*\r\n"
            f"\r\n"
        ).encode('ascii')

    def _remaining(self, domain: str, deadline: float) -> float:
        """距截止时间的剩余秒数，已到期时抛出 NetworkError"""
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise NetworkError(f"connection to {domain} timed out after {self.timeout:g}s")
        return remaining

    def _drain(self, tls: ssl.SSLSocket, domain: str, deadline: float) -> int:
        """
        读取响应直到连接关闭

        对端未发送 close_notify 直接断开视为正常结束，只需要证书链，不需要完整响应。
        每次读取前按剩余时间重设超时，缓慢发送的对端也不会超过截止时间。

        Returns:
            int: 读取的字节数

        Raises:
            NetworkError: 超过截止时间
        """
        total = 0
        while True:
            tls.settimeout(self._remaining(domain, deadline))
            try:
                data = tls.recv(READ_CHUNK_SIZE)
            except (ssl.SSLEOFError, ssl.SSLZeroReturnError):
                break
            if not data:
                break
            total += len(data)
        return total
