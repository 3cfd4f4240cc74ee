"""Prometheus metrics for validator-tools."""

import logging
import threading

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PORT = 8008

tool_info = Info(
    "validator_tools",
    "validator-tools build information",
)

# Exit generation
exits_generated = Counter(
    "validator_tools_exits_generated_total",
    "Signed voluntary exits written to the output directory",
)

signer_failures = Counter(
    "validator_tools_signer_failures_total",
    "External signer invocations that failed",
)

signer_duration = Histogram(
    "validator_tools_signer_duration_seconds",
    "Wall time of one external signer invocation",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

keystores_processed = Counter(
    "validator_tools_keystores_processed_total",
    "Keystores whose exits were fully generated",
)

generation_queue_size = Gauge(
    "validator_tools_generation_queue_size",
    "Exit tasks waiting for a worker",
)

# Verification
exits_verified = Counter(
    "validator_tools_exits_verified_total",
    "Voluntary exits whose signature verified",
)

deposits_verified = Counter(
    "validator_tools_deposits_verified_total",
    "Deposit records whose signature verified",
)


_server_started = False
_server_lock = threading.Lock()


def start_metrics_server(port: int = DEFAULT_METRICS_PORT) -> bool:
    """Start the Prometheus metrics HTTP server.

    Args:
        port: Port to listen on (default 8008)

    Returns:
        True if server started successfully, False if already running
    """
    global _server_started

    with _server_lock:
        if _server_started:
            logger.warning("Metrics server already running")
            return False

        try:
            start_http_server(port)
        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False

        _server_started = True
        logger.info(f"Prometheus metrics server started on port {port}")
        return True


def set_tool_info(version: str, commit: str) -> None:
    """Set build information metric."""
    tool_info.info({
        "version": version,
        "commit": commit,
    })
