"""Logging helpers: per-component context and secret redaction."""

import logging
from typing import Any, Iterable, Optional

REDACTED = "<redacted>"


class ContextAdapter(logging.LoggerAdapter):
    """Prefix every message with ``key=value`` pairs bound at creation.

    ``adapter.bind(worker=3)`` returns a new adapter carrying the combined
    context, so callers can narrow context without touching shared state.
    """

    def process(self, msg, kwargs):
        if self.extra:
            context = " ".join(f"{k}={v}" for k, v in self.extra.items())
            msg = f"[{context}] {msg}"
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**(self.extra or {}), **context})


def get_logger(
    name: str,
    base: Optional[logging.Logger | logging.LoggerAdapter] = None,
    **context: Any,
) -> ContextAdapter:
    """Build a context logger, extending ``base`` if one was handed in."""
    if isinstance(base, ContextAdapter):
        return base.bind(**context)
    if isinstance(base, logging.LoggerAdapter):
        return ContextAdapter(base.logger, {**(base.extra or {}), **context})
    return ContextAdapter(base or logging.getLogger(name), context)


def redact(args: Iterable[str], secrets: Iterable[str]) -> list[str]:
    """Copy of ``args`` with every non-empty secret replaced."""
    secrets = [s for s in secrets if s]
    redacted = []
    for arg in args:
        for secret in secrets:
            arg = arg.replace(secret, REDACTED)
        redacted.append(arg)
    return redacted
