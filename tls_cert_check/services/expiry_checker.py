"""
TLS证书过期检查服务
"""
import socket
import logging
from datetime import datetime
from typing import Optional

from cryptography import x509

from ..interfaces import ExpiryCheckerInterface
from ..models import CertificateFact, CheckResult, Severity, TLSTrustPolicy
from .error_handler import NetworkErrorHandler
from .expiry_calculator import ExpiryCalculator


class ExpiryChecker(ExpiryCheckerInterface):
    """证书过期检查器实现"""
    
    def __init__(self, timeout: int = 10):
        """
        初始化证书过期检查器
        
        Args:
            timeout: 连接超时时间（秒）
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self.error_handler = NetworkErrorHandler()
    
    def check(self, hostname: str, port: int, trust_policy: TLSTrustPolicy,
              warning_days: int, critical_days: int,
              now: Optional[datetime] = None) -> CheckResult:
        """
        连接目标主机，读取叶子证书并判定严重级别
        
        连接或握手失败时返回 CRITICAL 结果，不抛出异常。
        
        Args:
            hostname: 主机名
            port: 端口
            trust_policy: 参数校验阶段生成的信任策略
            warning_days: 警告阈值（天）
            critical_days: 严重阈值（天）
            now: 当前时间，测试时可注入
        
        Returns:
            CheckResult: 检查结果
        """
        address = f"{hostname}:{port}"
        
        try:
            fact = self.fetch_certificate(hostname, port, trust_policy)
        except (OSError, ValueError) as e:
            error_info = self.error_handler.handle_ssl_connection_error(address, e)
            return CheckResult(
                severity=Severity.CRITICAL,
                message=self.error_handler.format_error_message(error_info)
            )
        
        self.logger.debug(f"{address} 证书过期时间: {fact.not_after.isoformat()}")
        
        # 按阈值判定严重级别
        calculator = ExpiryCalculator(warning_days=warning_days, critical_days=critical_days)
        return calculator.classify(fact, hostname, port, now=now)
    
    def fetch_certificate(self, hostname: str, port: int,
                          trust_policy: TLSTrustPolicy) -> CertificateFact:
        """
        建立TLS连接并读取服务端叶子证书
        
        Args:
            hostname: 主机名
            port: 端口
            trust_policy: 信任策略
        
        Returns:
            CertificateFact: 叶子证书信息
        
        Raises:
            OSError: 连接失败、超时或握手失败（包括证书验证失败）
            ValueError: 端口无效，或无法获取、解析证书
        """
        # socket 会把超出范围的端口按 65536 取模
        if not 0 < port <= 65535:
            raise ValueError(f"invalid port {port}")
        
        context = trust_policy.create_ssl_context()
        
        # SNI和证书名称匹配不使用末尾的根点
        server_hostname = hostname.rstrip('.')
        
        with socket.create_connection((hostname, port), timeout=self.timeout) as sock:
            with context.wrap_socket(sock, server_hostname=server_hostname) as ssock:
                # getpeercert 只返回对端的终端实体证书，即证书链中的第一张；
                # binary_form 在关闭验证时同样可用
                der = ssock.getpeercert(binary_form=True)
        
        if not der:
            raise ValueError(f"无法获取 {hostname}:{port} 的SSL证书")
        
        return self._parse_certificate(der)
    
    def _parse_certificate(self, der: bytes) -> CertificateFact:
        """
        解析DER格式证书
        
        Args:
            der: DER编码的证书
        
        Returns:
            CertificateFact: 证书信息
        """
        cert = x509.load_der_x509_certificate(der)
        return CertificateFact(
            not_after=cert.not_valid_after_utc,
            subject=cert.subject.rfc4514_string(),
            issuer=cert.issuer.rfc4514_string()
        )
