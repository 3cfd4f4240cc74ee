"""Consensus-layer pieces needed to check deposits and voluntary exits."""

from .network_config import NetworkConfig, get_network_config, load_network_config

__all__ = [
    "NetworkConfig",
    "get_network_config",
    "load_network_config",
]
