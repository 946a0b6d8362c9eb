"""
SNS通知服务
"""
import os
import logging
from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import NotificationServiceInterface
from ..models import CheckConfiguration, CheckResult, Severity


class SNSNotificationService(NotificationServiceInterface):
    """SNS通知服务实现，只发布非OK的检查结果"""
    
    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None):
        """
        初始化SNS通知服务
        
        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则自动检测
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        
        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')
        
        self.logger = logging.getLogger(__name__)
        self.sns_client = None
    
    @property
    def is_configured(self) -> bool:
        return bool(self.topic_arn)
    
    def _get_client(self):
        if self.sns_client is None:
            self.sns_client = boto3.client('sns', region_name=self.region_name)
            self.logger.debug(f"SNS客户端初始化成功，区域: {self.region_name}")
        return self.sns_client
    
    def send_check_result(self, config: CheckConfiguration, result: CheckResult) -> bool:
        """
        发送检查结果通知
        
        Args:
            config: 检查配置
            result: 检查结果
        
        Returns:
            bool: 发送是否成功，无需发送时返回True
        """
        if result.severity == Severity.OK:
            self.logger.info("证书状态正常，跳过通知发送")
            return True
        
        if not self.is_configured:
            self.logger.error("SNS主题ARN未配置")
            return False
        
        # 构建通知内容
        subject = self._format_subject(config, result)
        message = self.format_notification_content(config, result)
        
        # 发布到SNS主题
        try:
            response = self._get_client().publish(
                TopicArn=self.topic_arn,
                Subject=subject,
                Message=message
            )
        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
            return False
        except BotoCoreError as e:
            self.logger.error(f"发送SNS通知时发生错误: {str(e)}")
            return False
        
        self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
        return True
    
    def _format_subject(self, config: CheckConfiguration, result: CheckResult) -> str:
        """
        格式化通知主题
        
        Args:
            config: 检查配置
            result: 检查结果
        
        Returns:
            str: 通知主题
        """
        # SNS主题只能是ASCII文本且不超过100个字符
        return f"TLS certificate check {result.severity.name}: {config.address}"[:100]
    
    def format_notification_content(self, config: CheckConfiguration, result: CheckResult) -> str:
        """
        格式化通知内容
        
        Args:
            config: 检查配置
            result: 检查结果
        
        Returns:
            str: 格式化的通知内容
        """
        lines = [
            "TLS证书过期检查报告",
            "=" * 30,
            f"检查时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC",
            f"目标: {config.address}",
            f"级别: {result.severity.name}",
            f"结果: {result.message}",
        ]
        
        if result.days_remaining is not None:
            lines.append(f"剩余天数: {result.days_remaining} 天")
        
        if result.certificate:
            lines.append(f"过期时间: {result.certificate.not_after.strftime('%Y-%m-%d %H:%M:%S')} UTC")
            lines.append(f"主题: {result.certificate.subject}")
            lines.append(f"颁发者: {result.certificate.issuer}")
        
        lines.append(f"阈值: 警告 {config.warning_days} 天, 严重 {config.critical_days} 天")
        
        return "\n".join(lines)
