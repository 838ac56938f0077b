"""Transcript SRT MCP Server."""

import asyncio
import logging
import mimetypes
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from pydantic import Field
from mcp.server.fastmcp import FastMCP

from transcript_srt.config import Settings, Transport
from transcript_srt.errors import TranscriptSrtError
from transcript_srt.models import TranscriptEntry
from transcript_srt.providers.gemini import GeminiProvider
from transcript_srt.subtitles import render_plain_text, transcript_to_srt as render_transcript_srt
from transcript_srt.transcriber import transcribe

# Logging to stderr (MCP convention)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("transcript-srt")

# Module-level state
_provider = None
_settings = None

# Pure conversions, no outside calls
CONVERT_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "openWorldHint": False,
}

TRANSCRIBE_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "openWorldHint": True,
}


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    global _provider, _settings
    _settings = Settings()
    _provider = GeminiProvider(
        api_key=_settings.google_api_key,
        model=_settings.model,
        base_url=_settings.api_base_url,
        timeout=_settings.request_timeout,
        chunk_size=_settings.upload_chunk_size,
    )
    logger.info(f"Gemini provider: {_settings.model}")

    logger.info("Server started")
    yield

    if _provider:
        await _provider.close()
    logger.info("Server stopped")


mcp = FastMCP(
    "Transcript SRT",
    instructions="Transcribe media files and turn transcripts into subtitles",
    lifespan=app_lifespan,
)


async def _read_file(path: Path, chunk_size: int) -> AsyncIterator[bytes]:
    with open(path, "rb") as f:
        while chunk := await asyncio.to_thread(f.read, chunk_size):
            yield chunk


@mcp.tool(annotations=TRANSCRIBE_ANNOTATIONS)
async def transcribe_file(
    path: Annotated[str, Field(description="Path to a local audio or video file")],
    language: Annotated[str, Field(default="English", description="Language to write the transcript in (e.g. English, German, Japanese)")] = "English",
) -> str:
    """Transcribe a local media file. Returns a JSON array of {timestamp, speaker, text} entries."""
    media = Path(path)
    if not media.is_file():
        return f"Error: File not found: {path}"

    mime_type = mimetypes.guess_type(media.name)[0] or "application/octet-stream"
    try:
        stream = await transcribe(
            _provider,
            _settings,
            _read_file(media, _settings.upload_chunk_size),
            filename=media.name,
            mime_type=mime_type,
            language=language,
        )
        return "".join([chunk async for chunk in stream])
    except TranscriptSrtError as e:
        return f"Error: {e.user_message}"
    except Exception as e:
        logger.exception(f"Transcription of {path} failed")
        return f"Error transcribing {media.name}: {e}"


@mcp.tool(annotations=CONVERT_ANNOTATIONS)
def transcript_to_srt(
    transcript: Annotated[list[dict], Field(description="Transcript entries, each with timestamp (mm:ss or hh:mm:ss), speaker and text")],
) -> str:
    """Convert a transcript into SRT subtitles. Malformed entries are skipped."""
    return render_transcript_srt(transcript)


@mcp.tool(annotations=CONVERT_ANNOTATIONS)
def transcript_to_text(
    transcript: Annotated[list[TranscriptEntry], Field(description="Transcript entries, each with timestamp, speaker and text")],
    timestamps: Annotated[bool, Field(default=False, description="Prefix each entry with its [timestamp] line")] = False,
) -> str:
    """Format a transcript as plain text, one paragraph per entry."""
    return render_plain_text(transcript, timestamps=timestamps)


# -- MCP Prompts --


@mcp.prompt()
def subtitle_media(
    path: Annotated[str, Field(description="Path to the local audio or video file")],
    language: Annotated[str, Field(description="Language for the subtitles")] = "English",
) -> str:
    """Produce an SRT subtitle file for a local media file."""
    return f"""Please use the transcribe_file tool to transcribe this file in {language}: {path}

Then pass the resulting JSON array to the transcript_to_srt tool and return the SRT content unchanged."""


# -- MCP Resources --


@mcp.resource("transcript-srt://help")
def help_resource() -> str:
    """Usage guide for the Transcript SRT MCP server."""
    return """# Transcript SRT MCP Server - Help Guide

## Available Tools

### transcribe_file
Upload a local audio/video file and transcribe it.
- Returns a JSON array: [{"timestamp": "00:00", "speaker": "Speaker 1", "text": "..."}]
- Timestamps use mm:ss
- Example: transcribe_file(path="/media/talk.mp3", language="English")

### transcript_to_srt
Turn transcript entries into SRT subtitles.
- Each cue ends where the next one starts, or after 3 seconds
- Entries with missing fields or unreadable timestamps are skipped
- Example: transcript_to_srt(transcript=[{"timestamp": "00:00", "speaker": "A", "text": "Hi"}])

### transcript_to_text
Format transcript entries as plain text.
- Example: transcript_to_text(transcript=[...], timestamps=true)

## Tips
- Large files take a while: the service processes uploads before transcription starts
"""


def main():
    settings = Settings()
    if settings.transport == Transport.STREAMABLE_HTTP:
        mcp.run(transport="streamable-http")
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
