"""
HTTP API for KeyProxy.
"""

from .server import ProxyServer, create_app

__all__ = ["ProxyServer", "create_app"]
