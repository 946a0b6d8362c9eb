"""
命令行入口：TLS证书过期检查
"""
import argparse
import os
import sys
from typing import List, Optional

from .exceptions import ValidationError
from .models import CheckConfiguration, CheckResult, Severity, TLSTrustPolicy
from .services.argument_validator import ArgumentValidator
from .services.expiry_checker import ExpiryChecker
from .services.logger import LoggerService
from .services.sns_notification import SNSNotificationService

PLUGIN_NAME = "check-tls-cert"


class ArgumentParserError(ValidationError):
    """命令行参数无法解析"""


class CheckArgumentParser(argparse.ArgumentParser):
    """参数错误时抛出异常而不是直接退出，保证按WARNING级别上报"""
    
    def error(self, message):
        raise ArgumentParserError(message)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """构建命令行参数解析器"""
    parser = CheckArgumentParser(
        prog=PLUGIN_NAME,
        description="TLS expiry check"
    )
    parser.add_argument("--hostname", default="", help="hostname to check")
    parser.add_argument("-p", "--port", type=int, default=443,
                        help="TCP port to connect to, default 443")
    parser.add_argument("-w", "--warning", type=int, default=0,
                        help="Number of days left")
    parser.add_argument("-c", "--critical", type=int, default=0,
                        help="Number of days left")
    parser.add_argument("-t", "--trusted-ca-file", default="",
                        help="TLS CA certificate bundle in PEM format")
    parser.add_argument("-i", "--insecure-skip-verify", action="store_true",
                        help="Skip TLS certificate verification (not recommended!)")
    parser.add_argument("--timeout", type=_positive_int, default=10,
                        help="Connection timeout in seconds, default 10")
    parser.add_argument("--sns-topic-arn", default=os.getenv("SNS_TOPIC_ARN", ""),
                        help="Publish non-OK results to this SNS topic")
    return parser


def parse_config(argv: Optional[List[str]] = None) -> CheckConfiguration:
    """
    解析命令行参数
    
    Args:
        argv: 参数列表，默认为 sys.argv[1:]
    
    Returns:
        CheckConfiguration: 检查配置
    
    Raises:
        ArgumentParserError: 参数无法解析
    """
    return config_from_args(build_parser().parse_args(argv))


def config_from_args(args: argparse.Namespace) -> CheckConfiguration:
    """由解析结果构建检查配置"""
    return CheckConfiguration(
        hostname=args.hostname,
        port=args.port,
        warning_days=args.warning,
        critical_days=args.critical,
        trusted_ca_file=args.trusted_ca_file,
        insecure_skip_verify=args.insecure_skip_verify,
        timeout=args.timeout
    )


class CertificateExpiryCheck:
    """TLS证书过期检查主类"""
    
    def __init__(self, validator: Optional[ArgumentValidator] = None,
                 expiry_checker: Optional[ExpiryChecker] = None,
                 notification_service: Optional[SNSNotificationService] = None,
                 logger_service: Optional[LoggerService] = None):
        """
        初始化检查
        
        Args:
            validator: 参数校验器
            expiry_checker: 过期检查器，为None时按配置的超时时间创建
            notification_service: 通知服务，为None时不发送通知
            logger_service: 日志服务
        """
        self.logger_service = logger_service or LoggerService()
        self.validator = validator or ArgumentValidator()
        self.expiry_checker = expiry_checker
        self.notification_service = notification_service
    
    def run(self, config: CheckConfiguration) -> CheckResult:
        """
        执行检查：先校验参数，校验通过后再连接目标主机
        
        Args:
            config: 检查配置
        
        Returns:
            CheckResult: 检查结果
        """
        self.logger_service.log_check_start(config)
        
        try:
            trust_policy = self.validator.validate(config)
        except ValidationError as e:
            self.logger_service.log_validation_failure(e)
            result = CheckResult(
                severity=Severity.WARNING,
                message=f"error validating input: {str(e)}"
            )
        else:
            result = self._execute(config, trust_policy)
        
        self.logger_service.log_result(config.address, result)
        self._notify(config, result)
        self.logger_service.log_check_end()
        
        return result
    
    def _execute(self, config: CheckConfiguration, trust_policy: TLSTrustPolicy) -> CheckResult:
        checker = self.expiry_checker or ExpiryChecker(timeout=config.timeout)
        
        try:
            return checker.check(
                config.hostname,
                config.port,
                trust_policy,
                config.warning_days,
                config.critical_days
            )
        except Exception as e:
            self.logger_service.log_error(config.address, e)
            return CheckResult(
                severity=Severity.CRITICAL,
                message=f"error executing check: {str(e)}"
            )
    
    def _notify(self, config: CheckConfiguration, result: CheckResult):
        if self.notification_service is None or result.severity == Severity.OK:
            return
        
        success = self.notification_service.send_check_result(config, result)
        self.logger_service.log_notification_sent("SNS", success)


def main(argv: Optional[List[str]] = None) -> int:
    """
    命令行入口
    
    Args:
        argv: 参数列表
    
    Returns:
        int: 退出码（OK=0, WARNING=1, CRITICAL=2）
    """
    try:
        args = build_parser().parse_args(argv)
    except ArgumentParserError as e:
        print(f"error validating input: {str(e)}")
        return int(Severity.WARNING)
    
    config = config_from_args(args)
    
    notification_service = None
    if args.sns_topic_arn:
        notification_service = SNSNotificationService(topic_arn=args.sns_topic_arn)
    
    check = CertificateExpiryCheck(notification_service=notification_service)
    result = check.run(config)
    
    print(result.message)
    return int(result.severity)


if __name__ == "__main__":
    sys.exit(main())
