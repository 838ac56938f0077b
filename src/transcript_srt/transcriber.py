"""Upload, wait, generate: the full transcription flow for one file."""

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator

from transcript_srt.config import Settings
from transcript_srt.poller import RemoteJobPoller, Sleep
from transcript_srt.prompts import transcript_prompt
from transcript_srt.providers.base import TranscriptionProvider
from transcript_srt.relay import relay_chunks

logger = logging.getLogger(__name__)


async def transcribe(
    provider: TranscriptionProvider,
    settings: Settings,
    chunks: AsyncIterable[bytes],
    filename: str,
    mime_type: str,
    language: str | None = None,
    sleep: Sleep = asyncio.sleep,
) -> AsyncIterator[str]:
    """Run the upload and polling steps, then return the live transcript stream.

    Errors before generation starts (UploadError, ProcessingFailed,
    ServiceUnavailable, provider errors) are raised from this call, so the
    caller can still answer with a proper status code.
    """
    poller = RemoteJobPoller(
        provider,
        poll_interval=settings.poll_interval_seconds,
        max_retries=settings.max_retries,
        initial_delay=settings.initial_retry_delay_seconds,
        sleep=sleep,
    )
    uploaded = await poller.upload(chunks, filename, mime_type)
    ready = await poller.await_ready(uploaded)

    language = language or settings.default_language
    logger.info(f"Generating {language} transcript for {ready.name}")
    stream = await provider.generate_stream(ready, transcript_prompt(language))
    return relay_chunks(stream)
