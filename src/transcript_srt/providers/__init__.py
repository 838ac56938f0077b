"""Transcription providers."""

from .base import TranscriptionProvider
from .gemini import GeminiProvider

__all__ = ["TranscriptionProvider", "GeminiProvider"]
