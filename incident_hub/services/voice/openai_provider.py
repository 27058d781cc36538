"""
OpenAI transcript classifier.

Sends the transcript to the chat completions API and expects a single JSON
object back. No retries: a failed call surfaces as VoiceReportError.
"""

from incident_hub.services.voice.base import VoiceReportClassifier, VoiceReportDraft, VoiceReportError, draft_from_fields
from incident_hub.core.settings import settings
from typing import Dict, Optional
import logging
import json
import requests

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an AI assistant that analyzes citizen incident reports for South African municipalities.

Extract and classify the following from the speech transcript:
1. Title: A clear, concise title (max 100 chars)
2. Description: A detailed description of the incident
3. Type: Classify as one of: water, electricity, roads, waste, other
4. Priority: Classify as: low, medium, high, critical

Consider these factors for priority:
- Critical: Safety hazards, major infrastructure failures, emergencies
- High: Service disruptions affecting many people
- Medium: Standard maintenance issues
- Low: Minor cosmetic or non-urgent issues

Respond ONLY with a valid JSON object in this exact format:
{
  "title": "Brief incident title",
  "description": "Detailed description of the incident",
  "type": "water|electricity|roads|waste|other",
  "priority": "low|medium|high|critical"
}"""


class OpenAIVoiceClassifier(VoiceReportClassifier):

    API_URL = "https://api.openai.com/v1/chat/completions"
    MODEL_VERSION = "1.0"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self.enabled = bool(self.api_key and self.api_key.strip())

        if self.enabled:
            logger.info(f"✅ OpenAI voice classifier initialized: {self.model}")
        else:
            logger.info("⚠️ OpenAI voice classifier disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {"name": f"openai-{self.model}", "version": self.MODEL_VERSION}

    def classify(self, transcript: str) -> VoiceReportDraft:
        if not self.enabled:
            raise VoiceReportError("OpenAI API key not configured")

        logger.info(f"Processing transcript ({len(transcript)} chars)")
        content = self._call_api(transcript)
        return draft_from_fields(self._parse_content(content))

    def _call_api(self, transcript: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f'Please analyze this incident report: "{transcript}"'},
            ],
            "temperature": 0.3,
            "max_tokens": 500,
        }

        try:
            response = requests.post(self.API_URL, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise VoiceReportError(f"OpenAI API request failed: {e}")

        if response.status_code != 200:
            raise VoiceReportError(f"OpenAI API error: {response.status_code}")

        try:
            data = response.json()
            choices = data.get("choices") or [{}]
            content = (choices[0].get("message") or {}).get("content")
        except (ValueError, AttributeError, TypeError, IndexError, KeyError):
            logger.error(f"Unexpected OpenAI response body (status {response.status_code})")
            raise VoiceReportError("Invalid response format from AI")
        if not content:
            raise VoiceReportError("No response from OpenAI")
        return content

    def _parse_content(self, content: str) -> Dict:
        text = content.strip()
        # The model sometimes wraps JSON in markdown code fences
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0].strip()
        elif "```" in text:
            text = text.split("```")[1].split("```")[0].strip()

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.error(f"Failed to parse OpenAI response: {content}")
            raise VoiceReportError("Invalid response format from AI")
