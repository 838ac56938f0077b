"""Forward a streamed generation to the client chunk by chunk."""

import logging
from collections.abc import AsyncIterator

from transcript_srt.models import GenerationChunk

logger = logging.getLogger(__name__)


async def relay_chunks(stream: AsyncIterator[GenerationChunk]) -> AsyncIterator[str]:
    """Yield the text of each chunk as soon as it arrives.

    Single pass: nothing is buffered beyond the current chunk. A failure
    in the underlying stream is logged and re-raised, which aborts the
    response after whatever was already sent.
    """
    try:
        async for chunk in stream:
            yield chunk.text
    except Exception:
        logger.exception("Transcript stream failed mid-flight")
        raise
