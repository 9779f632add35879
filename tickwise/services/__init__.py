# TICKWISE Services
"""
Services injected into plugins by the orchestrator.

Modules:
    broker: Market limits providers
    storage: Candle persistence and date range lookup
"""

from .broker import Broker, SimulatedBroker, create_broker
from .storage import MemoryStorage, SQLStorage, Storage

__all__ = [
    "Broker",
    "SimulatedBroker",
    "create_broker",
    "Storage",
    "SQLStorage",
    "MemoryStorage",
]
