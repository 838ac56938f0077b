"""Abstract base for transcription providers."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from pathlib import Path

from transcript_srt.models import GenerationChunk, RemoteFile


class TranscriptionProvider(ABC):
    @abstractmethod
    async def upload_file(
        self, path: Path, mime_type: str, display_name: str = ""
    ) -> RemoteFile:
        """Upload a local file and return the service's handle for it."""
        ...

    @abstractmethod
    async def get_file(self, name: str) -> RemoteFile:
        """Re-fetch a previously uploaded file, including its processing state."""
        ...

    @abstractmethod
    async def generate_stream(
        self, file: RemoteFile, prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        """Start generation over an uploaded file.

        Returns once the service has accepted the request; the returned
        iterator yields chunks as they arrive.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        ...
