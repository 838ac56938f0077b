"""Upload a file to the transcription service and wait for it to become usable."""

import asyncio
import logging
import os
import tempfile
from collections.abc import AsyncIterable, Awaitable, Callable
from enum import Enum
from pathlib import Path

import httpx

from transcript_srt.errors import ProcessingFailed, ServiceUnavailable, UploadError
from transcript_srt.models import JobState, RemoteFile
from transcript_srt.providers.base import TranscriptionProvider

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PollState(Enum):
    POLLING = "polling"
    BACKOFF = "backoff"
    DONE = "done"
    FAILED = "failed"


def is_transient_error(exc: BaseException) -> bool:
    """True for server-side (5xx) failures worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    # Errors without a structured status only qualify by their message.
    return "500 Internal Server Error" in str(exc)


class RemoteJobPoller:
    """Drives one uploaded file from submission to a terminal state.

    A poller serves a single request. There is no cancellation hook and
    no overall deadline: a file that stays PROCESSING without errors is
    polled until the service changes its state.
    """

    def __init__(
        self,
        provider: TranscriptionProvider,
        poll_interval: float = 5.0,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self._provider = provider
        self._poll_interval = poll_interval
        self._max_retries = max_retries
        self._initial_delay = initial_delay
        self._sleep = sleep

    async def upload(
        self, chunks: AsyncIterable[bytes], filename: str, mime_type: str
    ) -> RemoteFile:
        """Spool ``chunks`` to a temporary file and submit it.

        The temporary file is removed whatever the outcome.
        """
        tmp_path = None
        try:
            fd, name = tempfile.mkstemp(suffix=Path(filename).suffix)
            tmp_path = Path(name)
            with os.fdopen(fd, "wb") as f:
                async for chunk in chunks:
                    await asyncio.to_thread(f.write, chunk)
            return await self._provider.upload_file(tmp_path, mime_type, display_name=filename)
        except Exception as e:
            logger.exception(f"Upload of {filename} failed")
            raise UploadError(str(e)) from e
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

    async def await_ready(self, file: RemoteFile) -> RemoteFile:
        """Poll until ``file`` leaves PROCESSING and return the refreshed handle.

        Raises ProcessingFailed if the service rejects the file and
        ServiceUnavailable once transient errors exceed the retry ceiling.
        Non-transient errors propagate unchanged.
        """
        state = PollState.POLLING
        retries = 0
        current = file

        while True:
            if state is PollState.POLLING:
                try:
                    current = await self._provider.get_file(file.name)
                except Exception as e:
                    if not is_transient_error(e):
                        logger.error(f"Unhandled error while polling {file.name}: {e}")
                        raise
                    retries += 1
                    if retries > self._max_retries:
                        logger.error(
                            f"Transcription API failed after {self._max_retries} retries: {e}"
                        )
                        raise ServiceUnavailable(str(e)) from e
                    state = PollState.BACKOFF
                    continue

                retries = 0
                if current.state is JobState.PROCESSING:
                    logger.info(
                        f"{file.name} is processing, next poll in {self._poll_interval}s"
                    )
                    await self._sleep(self._poll_interval)
                elif current.state is JobState.FAILED:
                    state = PollState.FAILED
                else:
                    state = PollState.DONE

            elif state is PollState.BACKOFF:
                delay = self._initial_delay * 2 ** (retries - 1)
                logger.warning(
                    f"Transcription API error during polling, retrying in {delay}s "
                    f"(attempt {retries}/{self._max_retries})"
                )
                await self._sleep(delay)
                state = PollState.POLLING

            elif state is PollState.DONE:
                return current

            else:
                logger.error(f"File processing failed for {current.name}")
                raise ProcessingFailed(current.name)
