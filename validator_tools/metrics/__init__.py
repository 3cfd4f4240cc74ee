"""Prometheus metrics."""

from .metrics import (
    DEFAULT_METRICS_PORT,
    deposits_verified,
    exits_generated,
    exits_verified,
    generation_queue_size,
    keystores_processed,
    set_tool_info,
    signer_duration,
    signer_failures,
    start_metrics_server,
)

__all__ = [
    "DEFAULT_METRICS_PORT",
    "deposits_verified",
    "exits_generated",
    "exits_verified",
    "generation_queue_size",
    "keystores_processed",
    "set_tool_info",
    "signer_duration",
    "signer_failures",
    "start_metrics_server",
]
