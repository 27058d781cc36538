"""
Voice Classifier Registry.

Selects the classifier once per process:
- AI_ENABLED and an OpenAI key configured -> OpenAI
- Otherwise -> keyword rules

A failing OpenAI call is reported to the caller, not retried against the
keyword rules.
"""

from incident_hub.services.voice.base import VoiceReportClassifier
from incident_hub.services.voice.keyword_provider import KeywordVoiceClassifier
from incident_hub.services.voice.openai_provider import OpenAIVoiceClassifier
from incident_hub.core.settings import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_classifier: Optional[VoiceReportClassifier] = None


def select_classifier() -> VoiceReportClassifier:
    if not settings.AI_ENABLED:
        logger.info("⚠️ AI is disabled globally (AI_ENABLED=false), using keyword classifier")
        return KeywordVoiceClassifier()

    openai_classifier = OpenAIVoiceClassifier()
    if openai_classifier.is_enabled():
        return openai_classifier

    logger.info("Using keyword classifier (no OpenAI key)")
    return KeywordVoiceClassifier()


def get_voice_classifier() -> VoiceReportClassifier:
    """Get the process-wide transcript classifier."""
    global _classifier
    if _classifier is None:
        _classifier = select_classifier()
    return _classifier
