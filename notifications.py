"""
notifications.py — Send user-facing progress notices from anywhere in the pipeline.

Delivery (toasts, chat messages, …) belongs to whoever embeds the pipeline.

Usage:
    import notifications
    notifications.init(sink)                      # called once by the embedding app
    await notifications.send(title, description)  # called from the orchestrator
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: str = DEFAULT          # default | destructive


Sink = Callable[[Notice], Awaitable[None]]

_sink: Optional[Sink] = None


def init(sink: Optional[Sink]) -> None:
    """Register the delivery callback (None switches back to log-only)."""
    global _sink
    _sink = sink


async def send(title: str, description: str, variant: str = DEFAULT) -> None:
    """Deliver a notice. Failures are logged, not raised."""
    notice = Notice(title=title, description=description, variant=variant)
    if _sink is None:
        logger.info("notice [%s] %s: %s", variant, title, description)
        return
    try:
        await _sink(notice)
    except Exception as exc:
        logger.warning("Failed to deliver notice %r: %s", title, exc)
