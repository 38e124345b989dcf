"""
Utility modules for the payment gateway
"""
from .config_loader import GatewaySettings, load_gateway_settings

__all__ = [
    'GatewaySettings',
    'load_gateway_settings',
]
