# =============================================================================
# Speech Synthesis — Google Cloud Text-to-Speech (REST)
# =============================================================================
#
# Sends plain text (not SSML) to `text:synthesize` and returns the base64
# audio the service produces. Independent of the document pipeline.
#
# Input text is cut to settings.tts_max_chars; an empty request speaks
# "Hello." instead. Failures raise UpstreamServiceError without retry.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.config import settings
from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "speech"
DEFAULT_LANGUAGE_CODE = "en-US"
EMPTY_TEXT_FALLBACK = "Hello."


@dataclass
class SpeechResult:
    """Synthesized audio as returned by the service."""

    audio_content: str  # base64-encoded audio
    audio_encoding: str


def language_code_for(voice_name: str) -> str:
    """'en-US-Standard-C' → 'en-US'."""
    return "-".join(voice_name.split("-")[:2]) or DEFAULT_LANGUAGE_CODE


class GoogleSpeechSynthesizer:
    """Text-to-speech client for Google Cloud TTS."""

    def __init__(
        self,
        api_key: str | None = None,
        voice_name: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key or settings.google_tts_api_key
        if not self._api_key:
            raise ValueError(
                "No Google TTS API key configured. Set GOOGLE_TTS_API_KEY in .env"
            )
        self._voice_name = voice_name or settings.tts_voice_name
        self._client = client or httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_payload(self, text: str) -> dict:
        return {
            "input": {"text": text},
            "voice": {
                "languageCode": language_code_for(self._voice_name),
                "name": self._voice_name,
                "ssmlGender": "NEUTRAL",
            },
            "audioConfig": {
                "audioEncoding": settings.tts_audio_encoding,
                "speakingRate": settings.tts_speaking_rate,
                "pitch": settings.tts_pitch,
            },
        }

    async def synthesize(self, text: str) -> SpeechResult:
        """
        Convert text to speech.

        Raises:
            UpstreamServiceError: Transport failure, non-2xx status, or no
                audio in the response.
        """
        text = (text or "")[: settings.tts_max_chars] or EMPTY_TEXT_FALLBACK
        url = f"{settings.tts_base_url.rstrip('/')}/text:synthesize"

        try:
            response = await self._client.post(
                url, params={"key": self._api_key}, json=self.build_payload(text),
            )
        except httpx.HTTPError as exc:
            raise UpstreamServiceError(
                f"TTS request failed: {exc}", service=SERVICE_NAME,
            ) from exc

        if not response.is_success:
            logger.error(
                "TTS returned %d: %s", response.status_code, response.text[:500],
            )
            raise UpstreamServiceError(
                f"TTS returned HTTP {response.status_code}",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )

        try:
            audio = response.json().get("audioContent")
        except (ValueError, AttributeError) as exc:
            raise UpstreamServiceError(
                "TTS returned a malformed body", service=SERVICE_NAME,
            ) from exc
        if not audio:
            raise UpstreamServiceError(
                "TTS response contained no audioContent",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )

        logger.info("Synthesized %d chars with voice %s", len(text), self._voice_name)
        return SpeechResult(
            audio_content=audio, audio_encoding=settings.tts_audio_encoding,
        )


_synthesizer: GoogleSpeechSynthesizer | None = None


def get_speech_synthesizer() -> GoogleSpeechSynthesizer:
    """Lazily create and cache the speech synthesizer."""
    global _synthesizer
    if _synthesizer is None:
        _synthesizer = GoogleSpeechSynthesizer()
    return _synthesizer


async def close_speech_synthesizer() -> None:
    """Close and forget the cached synthesizer, if one was created."""
    global _synthesizer
    if _synthesizer is not None:
        synthesizer, _synthesizer = _synthesizer, None
        await synthesizer.aclose()
