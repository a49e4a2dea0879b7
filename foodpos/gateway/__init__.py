"""Data gateway to the hosted backend"""

from foodpos.gateway.base import NO_ROWS, BaseGateway, GatewayError, GatewayResult
from foodpos.gateway.rest import RestGateway
from foodpos.gateway.sql import SQLGateway

__all__ = [
    "NO_ROWS",
    "BaseGateway",
    "GatewayError",
    "GatewayResult",
    "RestGateway",
    "SQLGateway",
    "get_gateway",
]


def get_gateway(backend: str, **kwargs) -> BaseGateway:
    """Factory function to create the configured gateway"""
    gateways = {
        "sql": SQLGateway,
        "rest": RestGateway,
    }

    gateway_class = gateways.get(backend)
    if not gateway_class:
        raise ValueError(f"Unknown gateway backend: {backend}")

    return gateway_class(**kwargs)
