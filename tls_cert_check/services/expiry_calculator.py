"""
证书过期计算服务
"""
from datetime import datetime, timezone, timedelta
from typing import Optional

from ..models import CertificateFact, CheckResult, Severity


class ExpiryCalculator:
    """证书过期计算器"""
    
    def __init__(self, warning_days: int, critical_days: int):
        """
        初始化过期计算器
        
        Args:
            warning_days: 警告阈值（天）
            critical_days: 严重阈值（天），应小于警告阈值
        """
        self.warning_days = warning_days
        self.critical_days = critical_days
    
    def calculate_days_until_expiry(self, not_after: datetime,
                                    now: Optional[datetime] = None) -> int:
        """
        计算距离过期的天数
        
        先按小时取整再除以24，均向零截断，47小时剩余记为1天。
        
        Args:
            not_after: 证书过期时间
            now: 当前时间，默认为UTC当前时间
        
        Returns:
            int: 剩余天数（负数表示已过期）
        """
        now = now or datetime.now(timezone.utc)
        hours = int((not_after - now).total_seconds() / 3600)
        return int(hours / 24)
    
    def classify(self, fact: CertificateFact, hostname: str, port: int,
                 now: Optional[datetime] = None) -> CheckResult:
        """
        根据剩余时间判定严重级别，严重阈值优先于警告阈值
        
        Args:
            fact: 叶子证书信息
            hostname: 主机名
            port: 端口
        
        Returns:
            CheckResult: 检查结果
        """
        now = now or datetime.now(timezone.utc)
        days = self.calculate_days_until_expiry(fact.not_after, now)
        
        if now + timedelta(days=self.critical_days) >= fact.not_after:
            return CheckResult(
                severity=Severity.CRITICAL,
                message=f"critical: cert expires in {days} days",
                days_remaining=days,
                certificate=fact
            )
        
        if now + timedelta(days=self.warning_days) >= fact.not_after:
            return CheckResult(
                severity=Severity.WARNING,
                message=f"warning: cert expires in {days} days",
                days_remaining=days,
                certificate=fact
            )
        
        return CheckResult(
            severity=Severity.OK,
            message=f"certificate for {hostname}:{port} expires in {days} days",
            days_remaining=days,
            certificate=fact
        )
