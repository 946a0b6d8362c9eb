"""
配置校验异常定义
"""


class ValidationError(Exception):
    """配置校验失败的基类，消息即面向用户的原因"""

    default_message = "invalid configuration"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class MissingHostname(ValidationError):
    default_message = "--hostname is required"


class InvalidHostname(ValidationError):
    default_message = "hostname is not a valid FQDN"


class MissingCritical(ValidationError):
    default_message = "--critical is required"


class MissingWarning(ValidationError):
    default_message = "--warning is required"


class InvertedThresholds(ValidationError):
    default_message = "warning cannot be lower than Critical value"


class CAFileLoadError(ValidationError):
    default_message = "error loading specified CA file"
