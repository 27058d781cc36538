"""
Keyword Voice Classifier - rule-based fallback when AI is disabled.

Deterministic, instant, no network call.
"""

from incident_hub.services.voice.base import VoiceReportClassifier, VoiceReportDraft, VoiceReportError
from incident_hub.models.incident import IncidentPriority, IncidentType
from typing import Dict, List, Tuple
import logging

logger = logging.getLogger(__name__)


TYPE_KEYWORDS: List[Tuple[IncidentType, Tuple[str, ...]]] = [
    (IncidentType.WATER, ("water", "leak", "pipe", "burst", "tap", "sewage", "drain", "flood")),
    (IncidentType.ELECTRICITY, ("electricity", "power", "outage", "loadshedding", "load shedding",
                                "transformer", "streetlight", "street light", "cable")),
    (IncidentType.ROADS, ("road", "pothole", "traffic", "robot", "intersection", "bridge", "pavement")),
    (IncidentType.WASTE, ("garbage", "waste", "trash", "rubbish", "refuse", "bin", "dumping")),
]

PRIORITY_KEYWORDS: List[Tuple[IncidentPriority, Tuple[str, ...]]] = [
    (IncidentPriority.CRITICAL, ("emergency", "danger", "dangerous", "fire", "injured", "live wire", "explosion")),
    (IncidentPriority.HIGH, ("whole street", "entire", "many", "days", "no water", "no power", "blocked")),
    (IncidentPriority.LOW, ("minor", "small", "cosmetic", "slight")),
]


class KeywordVoiceClassifier(VoiceReportClassifier):

    MODEL_NAME = "keyword-rules-v1"
    MODEL_VERSION = "1.0.0"

    def is_enabled(self) -> bool:
        """Keyword classifier is always enabled (fallback)."""
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.MODEL_NAME, "version": self.MODEL_VERSION}

    def classify(self, transcript: str) -> VoiceReportDraft:
        text = transcript.strip()
        if not text:
            raise VoiceReportError("No transcript provided")
        lowered = text.lower()

        incident_type = IncidentType.OTHER
        for candidate, words in TYPE_KEYWORDS:
            if any(word in lowered for word in words):
                incident_type = candidate
                break

        priority = IncidentPriority.MEDIUM
        for candidate, words in PRIORITY_KEYWORDS:
            if any(word in lowered for word in words):
                priority = candidate
                break

        # First sentence as the title
        title = text.split(".")[0].strip()
        if len(title) > 100:
            title = title[:97] + "..."

        return VoiceReportDraft(
            title=title or f"{incident_type.value.capitalize()} issue",
            description=text,
            type=incident_type,
            priority=priority,
        )
