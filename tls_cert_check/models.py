"""
数据模型定义
"""
import ssl
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Optional, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import serialization


class Severity(IntEnum):
    """检查结果严重级别，数值即进程退出码"""
    OK = 0
    WARNING = 1
    CRITICAL = 2


@dataclass(frozen=True)
class CheckConfiguration:
    """单次检查的配置"""
    hostname: str
    port: int = 443
    warning_days: int = 0
    critical_days: int = 0
    trusted_ca_file: str = ""
    insecure_skip_verify: bool = False
    timeout: int = 10

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"


@dataclass(frozen=True)
class TLSTrustPolicy:
    """
    TLS信任策略

    root_certificates 为 None 时使用系统默认信任库，否则只信任给定的证书集合。
    """
    root_certificates: Optional[Tuple[x509.Certificate, ...]] = None
    insecure_skip_verify: bool = False

    def ca_data(self) -> Optional[str]:
        """
        将信任锚导出为PEM文本

        Returns:
            Optional[str]: PEM格式的证书集合，未配置时为None
        """
        if self.root_certificates is None:
            return None
        return "".join(
            cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
            for cert in self.root_certificates
        )

    def create_ssl_context(self) -> ssl.SSLContext:
        """
        根据信任策略构建SSL上下文

        Returns:
            ssl.SSLContext: 用于握手的SSL上下文
        """
        # 指定cadata时不会再加载系统默认证书
        context = ssl.create_default_context(cadata=self.ca_data())

        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        return context


@dataclass
class CertificateFact:
    """服务端叶子证书信息"""
    not_after: datetime
    subject: str = ""
    issuer: str = ""


@dataclass
class CheckResult:
    """检查结果"""
    severity: Severity
    message: str
    days_remaining: Optional[int] = None
    certificate: Optional[CertificateFact] = None

    @property
    def is_ok(self) -> bool:
        return self.severity == Severity.OK
