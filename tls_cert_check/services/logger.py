"""
日志服务
"""
import os
import sys
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..exceptions import ValidationError
from ..interfaces import LoggerServiceInterface
from ..models import CheckConfiguration, CheckResult, CertificateFact, Severity


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""
    
    def __init__(self, logger_name: str = "tls_cert_check", log_level: Optional[str] = None):
        """
        初始化日志服务
        
        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
        
        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()
        
        # 执行统计
        self.execution_stats = {
            'start_time': None,
            'end_time': None,
            'address': None,
            'severity': None
        }
    
    def _configure_logger(self):
        """配置日志器"""
        # 设置日志级别
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        self.logger.setLevel(level)
        
        # 避免重复添加处理器
        if not self.logger.handlers:
            # 标准输出留给检查结果，日志写到标准错误
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(level)
            
            # 创建格式化器
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)
            
            self.logger.addHandler(handler)
        
        # 防止日志传播到根日志器
        self.logger.propagate = False
    
    def log_check_start(self, config: CheckConfiguration):
        """
        记录检查开始
        
        Args:
            config: 检查配置
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['address'] = config.address
        
        self.logger.info(
            f"开始TLS证书检查 - 目标: {config.address}, "
            f"警告阈值: {config.warning_days} 天, 严重阈值: {config.critical_days} 天"
        )
        if config.trusted_ca_file:
            self.logger.info(f"使用CA文件: {config.trusted_ca_file}")
        if config.insecure_skip_verify:
            self.logger.warning("已关闭证书验证（insecure-skip-verify）")
    
    def log_validation_failure(self, error: ValidationError):
        """
        记录配置校验失败
        
        Args:
            error: 校验异常
        """
        self.logger.warning(f"配置校验失败: {type(error).__name__}: {str(error)}")
    
    def log_certificate_info(self, address: str, fact: CertificateFact):
        """
        记录证书信息
        
        Args:
            address: 目标地址
            fact: 证书信息
        """
        self.logger.info(
            f"证书信息 - 目标: {address}, "
            f"主题: {fact.subject}, "
            f"颁发者: {fact.issuer}, "
            f"过期时间: {fact.not_after.isoformat()}"
        )
    
    def log_result(self, address: str, result: CheckResult):
        """
        记录检查结果
        
        Args:
            address: 目标地址
            result: 检查结果
        """
        self.execution_stats['severity'] = result.severity
        
        if result.certificate:
            self.log_certificate_info(address, result.certificate)
        
        if result.severity == Severity.OK:
            self.logger.info(f"证书正常 - {address}: {result.message}")
        elif result.severity == Severity.WARNING:
            self.logger.warning(f"证书即将过期 - {address}: {result.message}")
        else:
            self.logger.error(f"检查结果严重 - {address}: {result.message}")
    
    def log_error(self, address: str, error: Exception):
        """
        记录错误信息
        
        Args:
            address: 目标地址
            error: 异常对象
        """
        self.logger.error(
            f"{address} 检查时发生错误: {type(error).__name__}: {str(error)}"
        )
        
        # 记录详细的堆栈跟踪（调试级别）
        self.logger.debug(f"{address} 错误堆栈跟踪:\n{traceback.format_exc()}")
    
    def log_notification_sent(self, notification_type: str, success: bool):
        """
        记录通知发送状态
        
        Args:
            notification_type: 通知类型（如 "SNS"）
            success: 是否发送成功
        """
        if success:
            self.logger.info(f"{notification_type} 通知发送成功")
        else:
            self.logger.error(f"{notification_type} 通知发送失败")
    
    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)
        
        summary = self.get_execution_summary()
        severity = summary['severity'] or 'UNKNOWN'
        self.logger.info(
            f"TLS证书检查完成 - 目标: {summary['address']}, "
            f"结果: {severity}, 耗时: {summary['duration_seconds']:.2f} 秒"
        )
    
    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要
        
        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        duration = 0
        if self.execution_stats['start_time'] and self.execution_stats['end_time']:
            duration = (self.execution_stats['end_time'] - self.execution_stats['start_time']).total_seconds()
        
        severity = self.execution_stats['severity']
        return {
            'start_time': self.execution_stats['start_time'].isoformat() if self.execution_stats['start_time'] else None,
            'end_time': self.execution_stats['end_time'].isoformat() if self.execution_stats['end_time'] else None,
            'duration_seconds': duration,
            'address': self.execution_stats['address'],
            'severity': severity.name if severity is not None else None
        }
    
    def reset_stats(self):
        """重置执行统计"""
        self.execution_stats = {
            'start_time': None,
            'end_time': None,
            'address': None,
            'severity': None
        }
