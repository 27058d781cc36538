from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]
Unsubscribe = Callable[[], None]


class IncidentStore(ABC):
    """
    Consumption contract with the external incident store.

    Rows use the store's column names:
      id, incident_type, priority, status, title, description,
      location_lat, location_lng, location_address, images, reporter_id,
      jurisdiction_id, estimated_resolution_time, resolved_at,
      created_at, updated_at
    and fetch/get results are joined with the jurisdiction's
      jurisdiction_name, province

    Contract:
    - fetch_incidents returns every row, newest first
    - subscribe calls back on any row-level change to incidents, with no
      detail about which rows or how; callbacks may run on any thread
    - Read and write failures propagate as exceptions; callers decide
      whether to absorb them
    """

    @abstractmethod
    def fetch_incidents(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        raise NotImplementedError

    @abstractmethod
    def get_incident(self, incident_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def insert_incident(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new incident and return it with its generated id."""
        raise NotImplementedError

    @abstractmethod
    def update_incident(self, incident_id: str, updates: Dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_incident_update(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Append a staff update record (message, status, ETA) for an incident."""
        raise NotImplementedError

    @abstractmethod
    def find_jurisdiction_id(self, name: str) -> Optional[str]:
        raise NotImplementedError


def join_jurisdiction(row: Dict[str, Any], jurisdictions: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Attach jurisdiction_name/province from the jurisdiction table.
    Denormalized values already on the row are kept when the id is unknown.
    """
    joined = dict(row)
    jurisdiction = jurisdictions.get(row.get("jurisdiction_id") or "")
    if jurisdiction:
        joined["jurisdiction_name"] = jurisdiction.get("name")
        joined["province"] = jurisdiction.get("province")
    else:
        joined.setdefault("jurisdiction_name", None)
        joined.setdefault("province", None)
    return joined
