"""
Voice report endpoint - classify a transcript into an incident draft.

The draft is returned to the client for review; nothing is stored here.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from incident_hub.services.voice import VoiceReportClassifier, VoiceReportDraft, VoiceReportError, get_voice_classifier
from incident_hub.services.voice.base import VoiceReportRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/voice-reports", tags=["Voice Reports"])


@router.post("/process", response_model=VoiceReportDraft)
async def process_voice_report(
    request: VoiceReportRequest,
    classifier: VoiceReportClassifier = Depends(get_voice_classifier),
):
    if not request.transcript or not request.transcript.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No transcript provided")

    try:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, classifier.classify, request.transcript)
    except VoiceReportError as e:
        logger.error(f"Error processing voice report: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to process voice report: {e}",
        )
