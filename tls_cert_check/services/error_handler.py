"""
错误处理服务
"""
import socket
import ssl
from datetime import datetime, timezone
from typing import Any, Dict
import logging


class NetworkErrorHandler:
    """
    网络错误处理器
    
    单次检查只尝试一次连接，失败即为最终结果，由调度方决定何时重新执行。
    """
    
    def __init__(self):
        """初始化网络错误处理器"""
        self.logger = logging.getLogger(__name__)
    
    def handle_ssl_connection_error(self, address: str, error: Exception) -> Dict[str, Any]:
        """
        处理SSL连接错误
        
        Args:
            address: 目标地址（host:port）
            error: 异常对象
        
        Returns:
            Dict[str, Any]: 错误处理结果
        """
        error_info = {
            'address': address,
            'error_type': type(error).__name__,
            'error_message': self._describe(error),
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(error)
        }
        
        self.logger.error(
            f"{address} SSL连接错误: {error_info['error_type']}: {error_info['error_message']}，"
            f"建议: {error_info['suggested_action']}"
        )
        
        return error_info
    
    def format_error_message(self, error_info: Dict[str, Any]) -> str:
        """
        生成面向监控系统的单行错误消息
        
        Args:
            error_info: handle_ssl_connection_error 的返回值
        
        Returns:
            str: 错误消息
        """
        return f"{error_info['error_type']}: {error_info['error_message']}"
    
    def _describe(self, error: Exception) -> str:
        message = str(error)
        if message:
            return message
        # socket.timeout 等异常可能没有消息文本
        if isinstance(error, socket.timeout):
            return "connection timed out"
        return repr(error)
    
    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案
        
        Args:
            error: 异常对象
        
        Returns:
            str: 建议的处理方案
        """
        error_message = str(error).lower()
        
        if isinstance(error, socket.timeout):
            return "检查网络连接，考虑增加超时时间"
        elif isinstance(error, socket.gaierror):
            return "检查主机名是否正确，DNS服务器是否可用"
        elif isinstance(error, ConnectionRefusedError):
            return "检查目标服务器是否运行，端口是否正确"
        elif isinstance(error, ssl.SSLCertVerificationError):
            return "证书验证失败，检查信任的CA文件或证书链"
        elif isinstance(error, ssl.SSLError):
            if 'handshake failure' in error_message:
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            return "SSL连接问题，检查服务器SSL配置"
        elif isinstance(error, ValueError):
            if 'invalid port' in error_message:
                return "端口必须在1到65535之间"
            return "无法解析服务器证书"
        elif 'network is unreachable' in error_message:
            return "网络不可达，检查网络连接和路由"
        elif 'no route to host' in error_message:
            return "无法路由到主机，检查防火墙和网络配置"
        else:
            return "检查网络连接和服务器状态"
