"""Upstream forwarding for the gateway."""

from app.gateway.proxy.client import UpstreamClient, create_upstream_client
from app.gateway.proxy.service import GatewayService

__all__ = [
    "GatewayService",
    "UpstreamClient",
    "create_upstream_client",
]
