"""
Firestore-backed incident store.

Collections:
- incidents: one document per incident, jurisdiction_id referencing
  municipalities
- municipalities: {name, province, type}
- incident_updates: staff updates appended per incident

The change stream is a Firestore watch (on_snapshot) on the incidents
collection. Watch callbacks run on the SDK's own thread.
"""

import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from incident_hub.stores.base import ChangeCallback, IncidentStore, Unsubscribe, join_jurisdiction
from incident_hub.utils.firestore_helpers import documents_by_id, split_server_fields, where_filter

logger = logging.getLogger(__name__)


class FirestoreIncidentStore(IncidentStore):

    INCIDENTS = "incidents"
    JURISDICTIONS = "municipalities"
    UPDATES = "incident_updates"

    def __init__(self, db: firestore.Client):
        self.db = db

    def _jurisdictions(self) -> Dict[str, Dict[str, Any]]:
        return documents_by_id(self.db.collection(self.JURISDICTIONS).stream())

    def _row(self, doc, jurisdictions: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return join_jurisdiction(data, jurisdictions)

    def fetch_incidents(self) -> List[Dict[str, Any]]:
        jurisdictions = self._jurisdictions()
        query = self.db.collection(self.INCIDENTS).order_by(
            "created_at", direction=firestore.Query.DESCENDING
        )
        rows = [self._row(doc, jurisdictions) for doc in query.stream()]
        logger.debug(f"[FIRESTORE] Fetched {len(rows)} incidents")
        return rows

    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        # The watch also fires once with the initial snapshot, which costs one
        # extra refetch right after subscribing.
        def on_snapshot(docs, changes, read_time):
            callback()

        watch = self.db.collection(self.INCIDENTS).on_snapshot(on_snapshot)
        logger.info("[FIRESTORE] Subscribed to incident changes")
        return watch.unsubscribe

    def get_incident(self, incident_id: str) -> Optional[Dict[str, Any]]:
        doc = self.db.collection(self.INCIDENTS).document(incident_id).get()
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        jurisdictions = {}
        jurisdiction_id = data.get("jurisdiction_id")
        if jurisdiction_id:
            jurisdiction_doc = self.db.collection(self.JURISDICTIONS).document(jurisdiction_id).get()
            if jurisdiction_doc.exists:
                jurisdictions[jurisdiction_id] = jurisdiction_doc.to_dict() or {}
        return self._row(doc, jurisdictions)

    def insert_incident(self, data: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self.db.collection(self.INCIDENTS).document()  # Auto-generate unique ID
        doc_ref.set(split_server_fields(data, ("id",)))
        logger.info(f"[FIRESTORE] Created incident {doc_ref.id}")
        return {**data, "id": doc_ref.id}

    def update_incident(self, incident_id: str, updates: Dict[str, Any]) -> None:
        self.db.collection(self.INCIDENTS).document(incident_id).update(updates)

    def add_incident_update(self, data: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self.db.collection(self.UPDATES).document()
        doc_ref.set(data)
        return {**data, "id": doc_ref.id}

    def find_jurisdiction_id(self, name: str) -> Optional[str]:
        query = where_filter(self.db.collection(self.JURISDICTIONS), "name", "==", name).limit(1)
        for doc in query.stream():
            return doc.id
        return None
