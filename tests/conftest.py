"""Shared test fixtures."""

from unittest.mock import AsyncMock

import httpx
import pytest

from transcript_srt.models import GenerationChunk, JobState, RemoteFile


def make_status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://generativelanguage.googleapis.com/v1beta/files/abc")
    response = httpx.Response(code, request=request)
    return httpx.HTTPStatusError(f"Server error '{code}'", request=request, response=response)


def remote_file(state: JobState) -> RemoteFile:
    return RemoteFile(
        name="files/abc",
        uri="https://generativelanguage.googleapis.com/v1beta/files/abc",
        mime_type="audio/mpeg",
        state=state,
    )


def text_chunk(text: str) -> GenerationChunk:
    return GenerationChunk(candidates=[{"content": {"parts": [{"text": text}]}}])


async def chunks_of(*items):
    for item in items:
        yield item


@pytest.fixture
def sample_entries():
    return [
        {"timestamp": "00:00", "speaker": "Speaker 1", "text": "Hello world"},
        {"timestamp": "01:00", "speaker": "Speaker 1", "text": "this is a test"},
        {"timestamp": "01:30", "speaker": "Speaker 2", "text": "of the subtitles"},
    ]


@pytest.fixture
def mock_provider():
    """Provider whose file is ready on the first poll and streams two chunks."""
    provider = AsyncMock()
    provider.upload_file = AsyncMock(return_value=remote_file(JobState.PROCESSING))
    provider.get_file = AsyncMock(return_value=remote_file(JobState.ACTIVE))
    provider.generate_stream = AsyncMock(
        side_effect=lambda *args, **kwargs: chunks_of(
            text_chunk('[{"timestamp": "00:00", '), text_chunk('"speaker": "A", "text": "Hi"}]')
        )
    )
    return provider
