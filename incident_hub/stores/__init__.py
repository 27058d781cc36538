"""
Incident store adapters.

The external store owns the authoritative incident data; these adapters
only read, write and relay change notifications.
"""

from incident_hub.stores.base import IncidentStore
from incident_hub.stores.memory_store import MemoryIncidentStore

__all__ = [
    "IncidentStore",
    "MemoryIncidentStore",
]
