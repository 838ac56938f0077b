"""Provider backed by the Gemini Files and generateContent REST API."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path

import httpx

from transcript_srt.models import GenerationChunk, RemoteFile
from .base import TranscriptionProvider

logger = logging.getLogger(__name__)

HARM_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_NONE"} for category in HARM_CATEGORIES
]


class GeminiProvider(TranscriptionProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 60.0,
        chunk_size: int = 1024 * 1024,
    ):
        self._model = model
        self._chunk_size = chunk_size
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"x-goog-api-key": api_key},
            timeout=timeout,
        )

    async def upload_file(
        self, path: Path, mime_type: str, display_name: str = ""
    ) -> RemoteFile:
        path = Path(path)
        size = path.stat().st_size

        start = await self._client.post(
            "/upload/v1beta/files",
            headers={
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": "start",
                "X-Goog-Upload-Header-Content-Length": str(size),
                "X-Goog-Upload-Header-Content-Type": mime_type,
            },
            json={"file": {"display_name": display_name or path.name}},
        )
        start.raise_for_status()
        upload_url = start.headers["x-goog-upload-url"]

        resp = await self._client.post(
            upload_url,
            headers={
                "Content-Length": str(size),
                "X-Goog-Upload-Offset": "0",
                "X-Goog-Upload-Command": "upload, finalize",
            },
            content=self._read_chunks(path),
        )
        resp.raise_for_status()
        uploaded = RemoteFile.model_validate(resp.json()["file"])
        logger.info(f"Uploaded {path.name} as {uploaded.name} ({uploaded.state.value})")
        return uploaded

    async def _read_chunks(self, path: Path) -> AsyncIterator[bytes]:
        with open(path, "rb") as f:
            while chunk := await asyncio.to_thread(f.read, self._chunk_size):
                yield chunk

    async def get_file(self, name: str) -> RemoteFile:
        resp = await self._client.get(f"/v1beta/{name}")
        resp.raise_for_status()
        return RemoteFile.model_validate(resp.json())

    async def generate_stream(
        self, file: RemoteFile, prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        body = {
            "contents": [
                {
                    "parts": [
                        {"file_data": {"mime_type": file.mime_type, "file_uri": file.uri}},
                        {"text": prompt},
                    ]
                }
            ],
            "safetySettings": SAFETY_SETTINGS,
            "generationConfig": {"responseMimeType": "application/json"},
        }
        request = self._client.build_request(
            "POST",
            f"/v1beta/models/{self._model}:streamGenerateContent",
            params={"alt": "sse"},
            json=body,
        )
        resp = await self._client.send(request, stream=True)
        if resp.is_error:
            await resp.aread()
            await resp.aclose()
            resp.raise_for_status()
        return self._iter_chunks(resp)

    async def _iter_chunks(self, resp: httpx.Response) -> AsyncIterator[GenerationChunk]:
        try:
            async for line in resp.aiter_lines():
                if not line.startswith("data:"):
                    continue
                payload = line[len("data:"):].strip()
                if payload:
                    yield GenerationChunk.model_validate(json.loads(payload))
        finally:
            await resp.aclose()

    async def close(self) -> None:
        await self._client.aclose()
