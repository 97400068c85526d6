"""Network and privilege helpers."""

from .main import pathcrypt


def test_port(host: str, port: int, timeout: float = 2.0):
    return pathcrypt.test_port(host, port, timeout=timeout)


def tcp_request(host: str, port: int, payload=b"", timeout: float = 5.0, max_bytes: int = 65536):
    return pathcrypt.tcp_request(host, port, payload, timeout=timeout, max_bytes=max_bytes)


def is_admin() -> bool:
    return pathcrypt.is_admin()


__all__ = ["is_admin", "tcp_request", "test_port"]
