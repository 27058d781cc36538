"""
Voice Report Classifier Base Interface.

Turns a speech transcript into a structured incident draft.
All classifiers must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from pydantic import BaseModel, Field

from incident_hub.models.incident import IncidentPriority, IncidentType

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "type", "priority")


class VoiceReportError(Exception):
    """The classifier could not produce a usable draft."""


class VoiceReportRequest(BaseModel):
    transcript: str = Field(..., description="Speech-to-text output to classify")


class VoiceReportDraft(BaseModel):
    title: str = Field(..., max_length=100)
    description: str
    type: IncidentType
    priority: IncidentPriority


def draft_from_fields(parsed: Dict[str, Any]) -> VoiceReportDraft:
    """
    Validate classifier output.

    Missing or empty required fields are errors. Unknown type falls back
    to 'other' and unknown priority to 'medium'.

    Raises:
        VoiceReportError: If a required field is missing
    """
    if not isinstance(parsed, dict):
        raise VoiceReportError("Invalid response format from AI")

    for field in REQUIRED_FIELDS:
        if not parsed.get(field):
            raise VoiceReportError(f"Missing required field: {field}")

    incident_type = str(parsed["type"]).strip().lower()
    if incident_type not in {t.value for t in IncidentType}:
        logger.info(f"Classifier returned unknown type '{parsed['type']}', using 'other'")
        incident_type = IncidentType.OTHER.value

    priority = str(parsed["priority"]).strip().lower()
    if priority not in {p.value for p in IncidentPriority}:
        logger.info(f"Classifier returned unknown priority '{parsed['priority']}', using 'medium'")
        priority = IncidentPriority.MEDIUM.value

    return VoiceReportDraft(
        title=str(parsed["title"]).strip()[:100],
        description=str(parsed["description"]).strip(),
        type=IncidentType(incident_type),
        priority=IncidentPriority(priority),
    )


class VoiceReportClassifier(ABC):
    """Abstract base class for transcript classifiers."""

    @abstractmethod
    def is_enabled(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        raise NotImplementedError

    @abstractmethod
    def classify(self, transcript: str) -> VoiceReportDraft:
        """
        Raises:
            VoiceReportError: If the transcript cannot be classified
        """
        raise NotImplementedError
