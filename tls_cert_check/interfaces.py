"""
服务接口定义
"""
from abc import ABC, abstractmethod

from .models import (
    CheckConfiguration,
    CheckResult,
    CertificateFact,
    TLSTrustPolicy,
)


class ArgumentValidatorInterface(ABC):
    """参数校验器接口"""

    @abstractmethod
    def validate(self, config: CheckConfiguration) -> TLSTrustPolicy:
        """校验配置并生成TLS信任策略"""
        pass


class ExpiryCheckerInterface(ABC):
    """证书过期检查器接口"""

    @abstractmethod
    def check(self, hostname: str, port: int, trust_policy: TLSTrustPolicy,
              warning_days: int, critical_days: int) -> CheckResult:
        """检查证书剩余天数并给出严重级别"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def send_check_result(self, config: CheckConfiguration, result: CheckResult) -> bool:
        """发送检查结果通知"""
        pass

    @abstractmethod
    def format_notification_content(self, config: CheckConfiguration, result: CheckResult) -> str:
        """格式化通知内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, config: CheckConfiguration):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_certificate_info(self, address: str, fact: CertificateFact):
        """记录证书信息"""
        pass

    @abstractmethod
    def log_error(self, address: str, error: Exception):
        """记录错误信息"""
        pass
