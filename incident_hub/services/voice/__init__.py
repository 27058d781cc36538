"""
Voice reporting - classify a speech transcript into an incident draft.

Speech-to-text happens on the client; only the transcript arrives here.
"""

from incident_hub.services.voice.base import VoiceReportClassifier, VoiceReportDraft, VoiceReportError
from incident_hub.services.voice.keyword_provider import KeywordVoiceClassifier
from incident_hub.services.voice.openai_provider import OpenAIVoiceClassifier
from incident_hub.services.voice.registry import get_voice_classifier

__all__ = [
    "VoiceReportClassifier",
    "VoiceReportDraft",
    "VoiceReportError",
    "KeywordVoiceClassifier",
    "OpenAIVoiceClassifier",
    "get_voice_classifier",
]
