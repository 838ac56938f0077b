"""Data models for transcripts, subtitles and remote jobs."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TranscriptEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    speaker: str
    text: str


class SubtitleBlock(BaseModel):
    index: int
    start: float
    end: float
    text: str


class JobState(str, Enum):
    STATE_UNSPECIFIED = "STATE_UNSPECIFIED"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class RemoteFile(BaseModel):
    """Handle to a file uploaded to the transcription service."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    uri: str = ""
    mime_type: str = Field(default="", alias="mimeType")
    state: JobState = JobState.STATE_UNSPECIFIED


class GenerationChunk(BaseModel):
    """One streamed generateContent response."""

    candidates: list[dict] = []

    @property
    def text(self) -> str:
        if not self.candidates:
            return ""
        parts = self.candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts)
