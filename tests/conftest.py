"""
测试公共配置：证书生成与本地TLS服务
"""
import logging
import socket
import ssl
import threading
from datetime import datetime, timezone, timedelta
from unittest.mock import patch

import pytest
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

TEST_HOSTNAME = "tls-check.example.test"


def generate_certificate(common_name, not_after, issuer_cert=None, issuer_key=None,
                         is_ca=False, dns_names=()):
    """
    生成测试证书

    Args:
        common_name: 主题CN
        not_after: 过期时间
        issuer_cert: 签发者证书，为None时自签名
        issuer_key: 签发者私钥
        is_ca: 是否为CA证书
        dns_names: SAN中的DNS名称

    Returns:
        tuple: (证书, 私钥)
    """
    key = ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer = issuer_cert.subject if issuer_cert is not None else subject
    signing_key = issuer_key if issuer_key is not None else key

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.now(timezone.utc) - timedelta(days=1))
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(signing_key.public_key()),
            critical=False
        )
    )

    if is_ca:
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=True, content_commitment=False, key_encipherment=False,
                data_encipherment=False, key_agreement=False, key_cert_sign=True,
                crl_sign=True, encipher_only=False, decipher_only=False
            ),
            critical=True
        )
    else:
        builder = builder.add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False
        )

    if dns_names:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(name) for name in dns_names]),
            critical=False
        )

    return builder.sign(signing_key, hashes.SHA256()), key


def write_pem(path, cert=None, key=None):
    """将证书或私钥写入PEM文件"""
    data = b""
    if cert is not None:
        data += cert.public_bytes(serialization.Encoding.PEM)
    if key is not None:
        data += key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption()
        )
    path.write_bytes(data)
    return str(path)


class LocalTLSServer:
    """在127.0.0.1上监听的简单TLS服务，每个连接完成握手后等待客户端关闭"""

    def __init__(self, cert_file, key_file):
        self.context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        self.context.load_cert_chain(cert_file, key_file)

        self.sock = socket.create_server(("127.0.0.1", 0))
        self.sock.settimeout(0.2)
        self.port = self.sock.getsockname()[1]

        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self._stopped.set()
        self._thread.join(timeout=5)
        self.sock.close()

    def _serve(self):
        while not self._stopped.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break

            conn.settimeout(5)
            try:
                with self.context.wrap_socket(conn, server_side=True) as tls_conn:
                    tls_conn.recv(1)
            except (ssl.SSLError, OSError):
                # 客户端验证失败或直接断开
                pass
            finally:
                conn.close()


def redirect_connections(port):
    """
    将 socket.create_connection 重定向到本地端口，主机名仍用于SNI和证书校验

    Args:
        port: 本地TLS服务端口
    """
    real_create_connection = socket.create_connection

    def _connect(address, timeout=None, *args, **kwargs):
        return real_create_connection(("127.0.0.1", port), timeout=timeout)

    return patch(
        'tls_cert_check.services.expiry_checker.socket.create_connection',
        side_effect=_connect
    )


@pytest.fixture(autouse=True)
def reset_check_logger():
    """每个测试后移除检查日志器的处理器，避免持有已关闭的捕获流"""
    yield
    logging.getLogger("tls_cert_check").handlers.clear()


@pytest.fixture
def certificate_authority():
    """测试用CA证书和私钥"""
    return generate_certificate(
        "Test CA",
        datetime.now(timezone.utc) + timedelta(days=3650),
        is_ca=True
    )


@pytest.fixture
def ca_file(tmp_path, certificate_authority):
    """CA证书PEM文件路径"""
    ca_cert, _ = certificate_authority
    return write_pem(tmp_path / "ca.pem", cert=ca_cert)


@pytest.fixture
def tls_server_factory(tmp_path, certificate_authority):
    """
    按需启动本地TLS服务

    调用方式: tls_server_factory(days_valid, self_signed=False)
    """
    servers = []

    def _start(days_valid, self_signed=False):
        not_after = datetime.now(timezone.utc) + timedelta(days=days_valid)

        if self_signed:
            cert, key = generate_certificate(TEST_HOSTNAME, not_after, dns_names=[TEST_HOSTNAME])
        else:
            ca_cert, ca_key = certificate_authority
            cert, key = generate_certificate(
                TEST_HOSTNAME, not_after,
                issuer_cert=ca_cert, issuer_key=ca_key,
                dns_names=[TEST_HOSTNAME]
            )

        index = len(servers)
        cert_file = write_pem(tmp_path / f"server-{index}.pem", cert=cert)
        key_file = write_pem(tmp_path / f"server-{index}.key", key=key)

        server = LocalTLSServer(cert_file, key_file).start()
        server.certificate = cert
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.stop()


@pytest.fixture
def unused_port():
    """获取一个当前没有监听的本地端口"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
