"""FastAPI application: upload for transcription, convert transcripts for download."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import json_repair
import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from pydantic import ValidationError

from transcript_srt.config import Settings
from transcript_srt.errors import MalformedRequestBody, TranscriptSrtError
from transcript_srt.models import TranscriptEntry
from transcript_srt.providers.base import TranscriptionProvider
from transcript_srt.providers.gemini import GeminiProvider
from transcript_srt.subtitles import render_plain_text, transcript_to_srt
from transcript_srt.transcriber import transcribe

logger = logging.getLogger(__name__)

GENERIC_TRANSCRIPTION_ERROR = (
    "Sorry, something went wrong generating the transcript. Please try again later."
)
INTERNAL_ERROR = "An internal server error occurred."


async def _read_upload(upload: UploadFile, chunk_size: int) -> AsyncIterator[bytes]:
    while chunk := await upload.read(chunk_size):
        yield chunk


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError as e:
        raise MalformedRequestBody(str(e)) from e


def _error_response(error: TranscriptSrtError) -> PlainTextResponse:
    return PlainTextResponse(error.user_message, status_code=error.status_code)


def create_app(
    settings: Settings | None = None,
    provider: TranscriptionProvider | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: configuration; read from the environment when omitted
        provider: transcription backend; a GeminiProvider is created on
            startup (and closed on shutdown) when omitted
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.provider is None
        if owned:
            app.state.provider = GeminiProvider(
                api_key=settings.google_api_key,
                model=settings.model,
                base_url=settings.api_base_url,
                timeout=settings.request_timeout,
                chunk_size=settings.upload_chunk_size,
            )
            logger.info(f"Gemini provider: {settings.model}")
        yield
        if owned:
            await app.state.provider.close()
            app.state.provider = None

    app = FastAPI(title="Transcript SRT", lifespan=lifespan)
    app.state.settings = settings
    app.state.provider = provider

    @app.post("/api/upload")
    async def upload(
        request: Request,
        file: UploadFile = File(...),
        language: str = Form(""),
    ):
        try:
            stream = await transcribe(
                request.app.state.provider,
                settings,
                _read_upload(file, settings.upload_chunk_size),
                filename=file.filename or "upload",
                mime_type=file.content_type or "application/octet-stream",
                language=language or settings.default_language,
            )
        except TranscriptSrtError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Error during transcription process")
            return PlainTextResponse(GENERIC_TRANSCRIPTION_ERROR, status_code=500)

        return StreamingResponse(
            stream,
            media_type="text/plain",
            headers={"X-Content-Type-Options": "nosniff"},
        )

    @app.post("/api/srt")
    async def srt(request: Request):
        try:
            body = await _read_json(request)
            content = transcript_to_srt(body["transcript"])
        except TranscriptSrtError as e:
            logger.warning(f"Rejected SRT request: {e}")
            return _error_response(e)
        except Exception:
            logger.exception("Error processing SRT request")
            return PlainTextResponse(INTERNAL_ERROR, status_code=500)

        return Response(
            content,
            media_type="text/srt; charset=utf-8",
            headers={"Content-Disposition": 'attachment; filename="transcript.srt"'},
        )

    @app.post("/api/download")
    async def download(request: Request):
        """Plain-text transcript. Entries must carry string timestamp, speaker and text; anything else is a 400."""
        try:
            body = await _read_json(request)
            entries = [TranscriptEntry.model_validate(e) for e in body["transcript"]]
            content = render_plain_text(entries, timestamps=bool(body.get("timestamps")))
        except TranscriptSrtError as e:
            return _error_response(e)
        except (KeyError, TypeError, ValidationError) as e:
            logger.warning(f"Rejected download request: {e}")
            return PlainTextResponse("Invalid transcript.", status_code=400)

        return PlainTextResponse(
            content,
            headers={"Content-Disposition": 'attachment; filename="transcript.txt"'},
        )

    @app.post("/api/fix-json")
    async def fix_json(request: Request):
        buffer = (await request.body()).decode("utf-8", errors="replace")
        return JSONResponse({"formattedJSON": json_repair.loads(buffer)})

    return app


def main():
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
