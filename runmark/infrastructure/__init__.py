"""
===============================================================================
TARJETA CRC — infrastructure/__init__.py
===============================================================================

Adaptadores concretos de los puertos del dominio:
    - cache.InMemorySignatureStore   (SignatureStorePort)
    - clock.ManualFrameClock / AsyncioFrameClock (FrameClockPort)
    - text.segmenters                (TextSegmenterPort)
    - host_feed.DocumentChangeFeed   (mutaciones del host -> ChangeBatch)
===============================================================================
"""

from .cache import InMemorySignatureStore
from .clock import AsyncioFrameClock, ManualFrameClock
from .host_feed import DocumentChangeFeed

__all__ = [
    "InMemorySignatureStore",
    "ManualFrameClock",
    "AsyncioFrameClock",
    "DocumentChangeFeed",
]
