"""
In-memory incident store for local development and tests.

Mirrors the Firestore collections (incidents, municipalities,
incident_updates) and notifies subscribers synchronously after every write.
"""

import json
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

from incident_hub.stores.base import ChangeCallback, IncidentStore, Unsubscribe, join_jurisdiction
from incident_hub.utils.timestamps import sort_key_newest_first

logger = logging.getLogger(__name__)


class MemoryIncidentStore(IncidentStore):

    def __init__(
        self,
        incidents: Optional[Dict[str, Dict[str, Any]]] = None,
        jurisdictions: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self._lock = threading.Lock()
        self._incidents: Dict[str, Dict[str, Any]] = {}
        self._jurisdictions: Dict[str, Dict[str, Any]] = dict(jurisdictions or {})
        self._updates: List[Dict[str, Any]] = []
        self._subscribers: List[ChangeCallback] = []
        for incident_id, data in (incidents or {}).items():
            self._incidents[incident_id] = {**data, "id": incident_id}

    @classmethod
    def from_json(cls, path: str) -> "MemoryIncidentStore":
        """
        Load a seed file shaped like the Firestore export:
        {"municipalities": {id: {...}}, "incidents": {id: {...}}}
        """
        with open(path, "r", encoding="utf-8") as f:
            seed = json.load(f)
        store = cls(
            incidents=seed.get("incidents") or {},
            jurisdictions=seed.get("municipalities") or {},
        )
        logger.info(
            f"[MOCK DB] Loaded {len(store._incidents)} incidents and "
            f"{len(store._jurisdictions)} municipalities from {path}"
        )
        return store

    def fetch_incidents(self) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [join_jurisdiction(row, self._jurisdictions) for row in self._incidents.values()]
        rows.sort(key=lambda row: sort_key_newest_first(row.get("created_at")))
        return rows

    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def get_incident(self, incident_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._incidents.get(incident_id)
            return join_jurisdiction(row, self._jurisdictions) if row else None

    def insert_incident(self, data: Dict[str, Any]) -> Dict[str, Any]:
        incident_id = data.get("id") or uuid.uuid4().hex
        row = {**data, "id": incident_id}
        with self._lock:
            self._incidents[incident_id] = row
        self._notify()
        return dict(row)

    def update_incident(self, incident_id: str, updates: Dict[str, Any]) -> None:
        with self._lock:
            if incident_id not in self._incidents:
                raise KeyError(incident_id)
            self._incidents[incident_id].update(updates)
        self._notify()

    def delete_incident(self, incident_id: str) -> None:
        with self._lock:
            self._incidents.pop(incident_id, None)
        self._notify()

    def add_incident_update(self, data: Dict[str, Any]) -> Dict[str, Any]:
        record = {**data, "id": uuid.uuid4().hex}
        with self._lock:
            self._updates.append(record)
        return dict(record)

    def incident_updates(self, incident_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(u) for u in self._updates if u.get("incident_id") == incident_id]

    def add_jurisdiction(self, jurisdiction_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._jurisdictions[jurisdiction_id] = dict(data)

    def find_jurisdiction_id(self, name: str) -> Optional[str]:
        with self._lock:
            for jurisdiction_id, data in self._jurisdictions.items():
                if data.get("name") == name:
                    return jurisdiction_id
        return None

    def _notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception as e:
                logger.error(f"[MOCK DB] Change subscriber failed: {e}", exc_info=True)
