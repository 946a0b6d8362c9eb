"""
参数校验服务
"""
import re
import logging
from typing import Tuple

from cryptography import x509

from ..exceptions import (
    CAFileLoadError,
    InvalidHostname,
    InvertedThresholds,
    MissingCritical,
    MissingHostname,
    MissingWarning,
)
from ..interfaces import ArgumentValidatorInterface
from ..models import CheckConfiguration, TLSTrustPolicy


class ArgumentValidator(ArgumentValidatorInterface):
    """参数校验器实现"""
    
    def __init__(self):
        """初始化参数校验器"""
        self.logger = logging.getLogger(__name__)
        
        # FQDN格式验证正则表达式：至少两个标签，顶级标签以字母开头，允许末尾的根点
        self.fqdn_pattern = re.compile(
            r'^[a-zA-Z0-9][a-zA-Z0-9-]{0,62}(?:\.[a-zA-Z0-9][a-zA-Z0-9-]{0,62})*'
            r'\.[a-zA-Z][a-zA-Z0-9]{0,62}\.?$'
        )
    
    def validate(self, config: CheckConfiguration) -> TLSTrustPolicy:
        """
        校验检查配置并生成TLS信任策略
        
        依次校验主机名、阈值和CA文件，遇到第一个错误即停止。
        
        Args:
            config: 检查配置
        
        Returns:
            TLSTrustPolicy: 本次检查使用的信任策略
        
        Raises:
            ValidationError: 配置无效
        """
        if not config.hostname:
            raise MissingHostname()
        
        if not self.validate_hostname(config.hostname):
            raise InvalidHostname()
        
        if config.critical_days <= 0:
            raise MissingCritical()
        
        if config.warning_days <= 0:
            raise MissingWarning()
        
        if config.warning_days <= config.critical_days:
            raise InvertedThresholds()
        
        root_certificates = None
        if config.trusted_ca_file:
            root_certificates = self.load_ca_file(config.trusted_ca_file)
            self.logger.debug(
                f"从 {config.trusted_ca_file} 加载了 {len(root_certificates)} 个CA证书"
            )
        
        return TLSTrustPolicy(
            root_certificates=root_certificates,
            insecure_skip_verify=config.insecure_skip_verify
        )
    
    def validate_hostname(self, hostname: str) -> bool:
        """
        验证主机名是否为合法的FQDN（仅做语法检查，不做DNS解析）
        
        Args:
            hostname: 主机名
        
        Returns:
            bool: 是否有效
        """
        if not hostname or not isinstance(hostname, str):
            return False
        
        if len(hostname.rstrip('.')) > 253:
            return False
        
        return bool(self.fqdn_pattern.fullmatch(hostname))
    
    def load_ca_file(self, path: str) -> Tuple[x509.Certificate, ...]:
        """
        加载PEM格式的CA证书包
        
        Args:
            path: 证书包路径
        
        Returns:
            Tuple[x509.Certificate, ...]: 证书列表
        
        Raises:
            CAFileLoadError: 文件不存在、不可读或不包含有效证书
        """
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            self.logger.error(f"读取CA文件 {path} 失败: {str(e)}")
            raise CAFileLoadError() from e
        
        try:
            certificates = x509.load_pem_x509_certificates(data)
        except ValueError as e:
            self.logger.error(f"解析CA文件 {path} 失败: {str(e)}")
            raise CAFileLoadError() from e
        
        if not certificates:
            raise CAFileLoadError()
        
        return tuple(certificates)
